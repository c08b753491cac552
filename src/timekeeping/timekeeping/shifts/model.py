from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import ShiftStatus


def new_shift_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Shift:
    """Thực thể miền (domain): Ca trực (một lần vào ca / tan ca).

    ``work_date`` là ngày của thời điểm vào ca theo múi giờ tổ chức.
    ``clock_in`` là None khi giá trị lưu trữ bị hỏng.
    """

    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime] = None
    hours: Decimal = Decimal("0")
    wage: Decimal = Decimal("0")
    status: ShiftStatus = ShiftStatus.ON_DUTY
    shift_id: str = field(default_factory=new_shift_id)

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    def close(self, *, clock_out: datetime, hours: Decimal, wage: Decimal, status: ShiftStatus) -> None:
        self.clock_out = clock_out
        self.hours = hours
        self.wage = wage
        self.status = status


@dataclass
class MonthlyTotal:
    """Tổng giờ/lương của một nhân sự trong một tháng (cập nhật tăng dần)."""

    year: int
    month: int
    hours: Decimal = Decimal("0")
    wage: Decimal = Decimal("0")

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return f"{self.month:02d}/{self.year}"
