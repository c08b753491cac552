from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import List, Optional

from ..audit.service import record
from ..common.datetime_utils import date_key, end_of_day, now_local, round2
from ..common.logging_config import get_logger
from ..core.enums import UNPAID_SHIFT_STATUSES, AuditAction, ShiftStatus
from ..core.exceptions import DailyCapReached, NoActiveShift, ValidationError, WorkerNotFound
from ..shifts.model import MonthlyTotal, Shift
from ..storage.document import RosterDocument
from ..storage.repository import RosterRepository
from ..workers.model import Worker
from .calculator.base import Accrual, AccrualCalculator
from .calculator.daily_cap_calculator import DailyCapAccrualCalculator

log = get_logger("ledger")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class ClockInResult:
    shift: Shift
    created: bool


@dataclass(frozen=True)
class DutyToggleResult:
    """Outcome of the single on/off duty button."""

    clocked_in: bool
    shift: Shift


@dataclass(frozen=True)
class SweptShift:
    worker_id: int
    display_name: str
    shift: Shift


def closed_hours_on(worker: Worker, work_date: date, *, exclude: Optional[Shift] = None) -> Decimal:
    return sum(
        (s.hours for s in worker.shifts if s.work_date == work_date and not s.is_open and s is not exclude),
        _ZERO,
    )


def apply_to_totals(worker: Worker, work_date: date, hours: Decimal, wage: Decimal) -> None:
    """Incremental update of career and monthly totals after one sanctioned close."""

    worker.career_total = round2(worker.career_total + wage)

    monthly = worker.monthly_total_for(work_date.year, work_date.month)
    if monthly is None:
        monthly = MonthlyTotal(year=work_date.year, month=work_date.month)
        worker.monthly_totals.insert(0, monthly)
    monthly.hours = round2(monthly.hours + hours)
    monthly.wage = round2(monthly.wage + wage)


def recompute_totals(worker: Worker) -> None:
    """Rebuild career and monthly totals from the remaining closed shifts.

    Used after ad-hoc edits (deleting a day or a single shift), which bypass
    the incremental path.
    """

    worker.career_total = round2(_ZERO)
    worker.monthly_totals = []
    paid = [s for s in worker.shifts if not s.is_open and s.status not in UNPAID_SHIFT_STATUSES]
    for s in sorted(paid, key=lambda s: s.work_date):
        apply_to_totals(worker, s.work_date, s.hours, s.wage)


class ShiftLedgerService:
    """Use case: on/off duty, pay accrual and the abandoned-shift sweep."""

    def __init__(
        self,
        roster: RosterRepository,
        *,
        tz: tzinfo,
        calculator: Optional[AccrualCalculator] = None,
    ):
        self._roster = roster
        self._tz = tz
        self._calculator = calculator or DailyCapAccrualCalculator()

    @property
    def calculator(self) -> AccrualCalculator:
        return self._calculator

    def _now(self, now: Optional[datetime]) -> datetime:
        return (now or now_local(self._tz)).astimezone(self._tz)

    def _require_worker(self, doc: RosterDocument, worker_id: int) -> Worker:
        worker = doc.find_worker(int(worker_id))
        if not worker:
            raise WorkerNotFound()
        return worker

    # ---- state transitions (in-memory, inside a transaction) -------------

    def open_shift(self, worker: Worker, now: datetime, *, status: ShiftStatus = ShiftStatus.ON_DUTY) -> ClockInResult:
        today = now.date()
        existing = worker.open_shift_on(today)
        if existing:
            return ClockInResult(shift=existing, created=False)

        if not self._calculator.allows_clock_in(closed_hours_today=closed_hours_on(worker, today)):
            raise DailyCapReached()

        shift = Shift(work_date=today, clock_in=now, status=status)
        worker.shifts.append(shift)
        return ClockInResult(shift=shift, created=True)

    def close_shift(self, worker: Worker, shift: Shift, now: datetime, *, closed_by_admin: bool = False) -> Shift:
        if shift.clock_in is None:
            log.warning(
                "worker %s shift %s on %s has no readable clock-in, closing without pay",
                worker.worker_id, shift.shift_id, date_key(shift.work_date),
            )
            shift.close(clock_out=now, hours=round2(_ZERO), wage=round2(_ZERO), status=ShiftStatus.AUTO_CLOSED_ERROR)
            return shift

        accrual = self._calculator.clock_out(
            clock_in=shift.clock_in,
            clock_out=now,
            closed_hours_that_day=closed_hours_on(worker, shift.work_date, exclude=shift),
            pay_rate=worker.pay_rate,
            closed_by_admin=closed_by_admin,
        )
        self._apply(worker, shift, now, accrual)
        return shift

    def _apply(self, worker: Worker, shift: Shift, clock_out: datetime, accrual: Accrual) -> None:
        shift.close(clock_out=clock_out, hours=accrual.hours, wage=accrual.wage, status=accrual.status)
        if accrual.affects_totals:
            apply_to_totals(worker, shift.work_date, accrual.hours, accrual.wage)

    def sweep_worker(self, worker: Worker, now: datetime) -> List[Shift]:
        """Force-close every open shift whose day is already over."""

        today = now.date()
        closed: List[Shift] = []
        for shift in worker.shifts:
            if not shift.is_open or shift.work_date >= today:
                continue

            boundary = end_of_day(shift.work_date, self._tz)
            if shift.clock_in is None:
                log.warning(
                    "auto-close: worker %s shift on %s has no readable clock-in",
                    worker.display_name, date_key(shift.work_date),
                )
                accrual = Accrual(hours=round2(_ZERO), wage=round2(_ZERO), status=ShiftStatus.AUTO_CLOSED_ERROR)
            else:
                accrual = self._calculator.force_close(
                    clock_in=shift.clock_in, boundary=boundary, pay_rate=worker.pay_rate
                )

            self._apply(worker, shift, boundary, accrual)
            closed.append(shift)
            log.info(
                "auto-close: %s +%s for %s (%s)",
                worker.display_name, accrual.wage, date_key(shift.work_date), accrual.status.value,
            )
        return closed

    # ---- use cases ---------------------------------------------------------

    def clock_in(self, worker_id: int, *, now: Optional[datetime] = None) -> ClockInResult:
        now = self._now(now)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            self.sweep_worker(worker, now)
            return self.open_shift(worker, now)

    def clock_out(self, worker_id: int, *, now: Optional[datetime] = None) -> Shift:
        now = self._now(now)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            shift = worker.open_shift()
            if not shift:
                raise NoActiveShift()
            return self.close_shift(worker, shift, now)

    def toggle_duty(self, worker_id: int, *, now: Optional[datetime] = None) -> DutyToggleResult:
        now = self._now(now)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            shift = worker.open_shift()
            if shift:
                return DutyToggleResult(clocked_in=False, shift=self.close_shift(worker, shift, now))
            result = self.open_shift(worker, now)
            return DutyToggleResult(clocked_in=True, shift=result.shift)

    def admin_clock_in(self, worker_id: int, *, actor: str, now: Optional[datetime] = None) -> Shift:
        now = self._now(now)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            self.sweep_worker(worker, now)
            if worker.open_shift_on(now.date()):
                raise ValidationError("Nhân sự đang trong ca trực")
            shift = self.open_shift(worker, now, status=ShiftStatus.ON_DUTY_ADMIN).shift
            record(doc, actor=actor, action=AuditAction.ADMIN_CLOCK_IN, target=worker.display_name, now=now)
            return shift

    def admin_clock_out(self, worker_id: int, *, actor: str, now: Optional[datetime] = None) -> Shift:
        now = self._now(now)
        # committed on its own so a stale shift is closed even when nothing is open today
        self.sweep_for_worker(worker_id, now=now)
        with self._roster.transaction() as doc:
            worker = self._require_worker(doc, worker_id)
            shift = worker.open_shift_on(now.date())
            if not shift:
                raise NoActiveShift("Nhân sự không có ca trực đang mở")
            self.close_shift(worker, shift, now, closed_by_admin=True)
            record(
                doc,
                actor=actor,
                action=AuditAction.ADMIN_CLOCK_OUT,
                target=worker.display_name,
                detail=f"{shift.hours}h / {shift.wage}$",
                now=now,
            )
            return shift

    def sweep_abandoned(self, *, now: Optional[datetime] = None) -> List[SweptShift]:
        now = self._now(now)
        swept: List[SweptShift] = []
        with self._roster.transaction() as doc:
            for worker in doc.workers:
                for shift in self.sweep_worker(worker, now):
                    swept.append(SweptShift(worker_id=worker.worker_id, display_name=worker.display_name, shift=shift))
        return swept

    def sweep_for_worker(self, worker_id: int, *, now: Optional[datetime] = None) -> List[Shift]:
        """Per-request sweep: only writes when the worker has a stale open shift."""

        now = self._now(now)
        snapshot = self._roster.load().find_worker(int(worker_id))
        if not snapshot or not any(s.is_open and s.work_date < now.date() for s in snapshot.shifts):
            return []

        with self._roster.transaction() as doc:
            worker = doc.find_worker(int(worker_id))
            if not worker:
                return []
            return self.sweep_worker(worker, now)
