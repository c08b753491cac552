from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ...common.datetime_utils import elapsed_hours, round2
from ...core.constants import DAILY_CAP_HOURS, MIN_PAYABLE_HOURS
from ...core.enums import ShiftStatus
from .base import Accrual, AccrualCalculator

_ZERO = Decimal("0")


class DailyCapAccrualCalculator(AccrualCalculator):
    """Standard rule: hourly pay, nothing under 1 hour, at most 4 paid hours a day.

    Hours are rounded first; the wage is computed from the rounded hours.
    """

    def __init__(self, *, daily_cap: Decimal = DAILY_CAP_HOURS, min_hours: Decimal = MIN_PAYABLE_HOURS):
        self.daily_cap = Decimal(daily_cap)
        self.min_hours = Decimal(min_hours)

    def allows_clock_in(self, *, closed_hours_today: Decimal) -> bool:
        return closed_hours_today < self.daily_cap

    def remaining_today(self, closed_hours_that_day: Decimal) -> Decimal:
        return max(_ZERO, self.daily_cap - closed_hours_that_day)

    def clock_out(
        self,
        *,
        clock_in: datetime,
        clock_out: datetime,
        closed_hours_that_day: Decimal,
        pay_rate: Decimal,
        closed_by_admin: bool = False,
    ) -> Accrual:
        elapsed = elapsed_hours(clock_in, clock_out)
        if elapsed < self.min_hours:
            status = ShiftStatus.SHORT_UNPAID_ADMIN if closed_by_admin else ShiftStatus.SHORT_UNPAID
            return Accrual(hours=round2(_ZERO), wage=round2(_ZERO), status=status)

        remaining = self.remaining_today(closed_hours_that_day)
        hours = round2(min(elapsed, remaining))
        wage = round2(hours * pay_rate)

        if closed_by_admin:
            status = ShiftStatus.CLOSED_BY_ADMIN
        elif closed_hours_that_day + hours >= self.daily_cap:
            status = ShiftStatus.DAILY_CAP_REACHED
        else:
            status = ShiftStatus.COMPLETED
        return Accrual(hours=hours, wage=wage, status=status)

    def force_close(self, *, clock_in: datetime, boundary: datetime, pay_rate: Decimal) -> Accrual:
        # Other shifts closed that day are not taken into account here, and
        # the 1 hour minimum does not apply.
        elapsed = max(_ZERO, elapsed_hours(clock_in, boundary))
        payable = min(elapsed, self.daily_cap)
        if payable <= 0:
            return Accrual(hours=round2(_ZERO), wage=round2(_ZERO), status=ShiftStatus.AUTO_CLOSED_ERROR)
        return Accrual(
            hours=round2(payable),
            wage=round2(payable * pay_rate),
            status=ShiftStatus.AUTO_CLOSED,
        )
