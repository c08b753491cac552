from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from ..core.constants import DEFAULT_PAY_RATE, DEFAULT_POSITION
from ..core.enums import Rank, Role
from ..shifts.model import MonthlyTotal, Shift


@dataclass
class Worker:
    """Thực thể miền (domain): nhân sự trong roster.

    Lưu ý: Ca trực và tổng theo tháng thuộc sở hữu của nhân sự, không tồn
    tại độc lập.
    """

    worker_id: int
    username: str
    password_hash: str
    display_name: str
    role: Role = Role.USER
    rank: Optional[Rank] = None
    position: str = DEFAULT_POSITION
    pay_rate: Decimal = DEFAULT_PAY_RATE
    career_total: Decimal = Decimal("0")
    shifts: List[Shift] = field(default_factory=list)
    monthly_totals: List[MonthlyTotal] = field(default_factory=list)
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def title(self) -> str:
        """Chức danh hiển thị: quân hàm + chức vụ."""
        rank = self.rank.value if self.rank else ""
        return f"{self.position or 'Cảnh sát viên'} {rank}".strip()

    def open_shift(self) -> Optional[Shift]:
        for s in reversed(self.shifts):
            if s.is_open:
                return s
        return None

    def open_shift_on(self, work_date: date) -> Optional[Shift]:
        for s in self.shifts:
            if s.is_open and s.work_date == work_date:
                return s
        return None

    def shifts_on(self, work_date: date) -> List[Shift]:
        return [s for s in self.shifts if s.work_date == work_date]

    def find_shift(self, shift_id: str) -> Optional[Shift]:
        for s in self.shifts:
            if s.shift_id == shift_id:
                return s
        return None

    def monthly_total_for(self, year: int, month: int) -> Optional[MonthlyTotal]:
        for m in self.monthly_totals:
            if m.year == year and m.month == month:
                return m
        return None
