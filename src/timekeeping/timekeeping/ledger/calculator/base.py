from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ...core.enums import UNPAID_SHIFT_STATUSES, ShiftStatus


@dataclass(frozen=True)
class Accrual:
    """Result of closing one shift: what gets written to the shift and totals."""

    hours: Decimal
    wage: Decimal
    status: ShiftStatus

    @property
    def affects_totals(self) -> bool:
        """Short and errored shifts never touch career or monthly totals."""
        return self.status not in UNPAID_SHIFT_STATUSES


class AccrualCalculator(ABC):
    """Calculator interface (Strategy Pattern for shift pay)."""

    @abstractmethod
    def allows_clock_in(self, *, closed_hours_today: Decimal) -> bool:
        raise NotImplementedError

    @abstractmethod
    def remaining_today(self, closed_hours_that_day: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def clock_out(
        self,
        *,
        clock_in: datetime,
        clock_out: datetime,
        closed_hours_that_day: Decimal,
        pay_rate: Decimal,
        closed_by_admin: bool = False,
    ) -> Accrual:
        raise NotImplementedError

    @abstractmethod
    def force_close(self, *, clock_in: datetime, boundary: datetime, pay_rate: Decimal) -> Accrual:
        raise NotImplementedError
