from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ..common.datetime_utils import date_key, display_date, round2
from ..core.constants import DISPLAY_TIME_FORMAT
from ..core.enums import DutyStatus
from ..ledger.calculator.base import AccrualCalculator
from ..ledger.calculator.daily_cap_calculator import DailyCapAccrualCalculator
from ..ledger.service import closed_hours_on
from ..shifts.model import MonthlyTotal, Shift
from ..storage.document import RosterDocument
from ..workers.model import Worker

_ZERO = Decimal("0")


@dataclass(frozen=True)
class DailyTotal:
    work_date: date
    hours: Decimal
    wage: Decimal
    shifts: List[Shift]


@dataclass(frozen=True)
class DutyStats:
    on_duty: int = 0
    off_duty: int = 0
    not_started: int = 0


@dataclass(frozen=True)
class AttendanceSummary:
    """Số liệu cho thẻ tóm tắt trên trang chấm công."""

    today_hours: Decimal
    remaining_hours: Decimal
    on_duty: bool
    can_clock_in: bool
    month_hours: Decimal
    month_wage: Decimal
    pay_rate: Decimal
    career_total: Decimal


@dataclass(frozen=True)
class ExportRow:
    worker_id: int
    display_name: str
    title: str
    total_hours: Decimal
    total_wage: Decimal
    today_hours: Decimal
    today_wage: Decimal
    today_status: DutyStatus


class PayrollReportService:
    """Derived views over the roster (no state of its own)."""

    def __init__(self, *, calculator: Optional[AccrualCalculator] = None):
        self._calculator = calculator or DailyCapAccrualCalculator()

    # ---- per worker ----------------------------------------------------------

    @staticmethod
    def career_wage(worker: Worker) -> Decimal:
        """Sum of the wages of every closed shift."""
        return round2(sum((s.wage for s in worker.shifts if not s.is_open), _ZERO))

    @staticmethod
    def career_hours(worker: Worker) -> Decimal:
        return round2(sum((s.hours for s in worker.shifts if not s.is_open), _ZERO))

    @staticmethod
    def daily_history(worker: Worker) -> List[DailyTotal]:
        """Shifts grouped by work date, newest day first."""

        by_day: Dict[date, List[Shift]] = {}
        for s in worker.shifts:
            by_day.setdefault(s.work_date, []).append(s)

        out: List[DailyTotal] = []
        for d in sorted(by_day, reverse=True):
            shifts = by_day[d]
            out.append(
                DailyTotal(
                    work_date=d,
                    hours=round2(sum((s.hours for s in shifts), _ZERO)),
                    wage=round2(sum((s.wage for s in shifts), _ZERO)),
                    shifts=shifts,
                )
            )
        return out

    @staticmethod
    def monthly_totals(worker: Worker) -> List[MonthlyTotal]:
        return sorted(worker.monthly_totals, key=lambda m: (m.year, m.month), reverse=True)

    @staticmethod
    def duty_status(worker: Worker, today: date) -> DutyStatus:
        todays = worker.shifts_on(today)
        if any(s.is_open for s in todays):
            return DutyStatus.ON_DUTY
        if todays:
            return DutyStatus.OFF_DUTY
        return DutyStatus.NOT_STARTED

    def attendance_summary(self, worker: Worker, today: date) -> AttendanceSummary:
        closed_today = closed_hours_on(worker, today)
        month = worker.monthly_total_for(today.year, today.month)
        on_duty = worker.open_shift_on(today) is not None
        return AttendanceSummary(
            today_hours=round2(closed_today),
            remaining_hours=round2(self._calculator.remaining_today(closed_today)),
            on_duty=on_duty,
            can_clock_in=not on_duty and self._calculator.allows_clock_in(closed_hours_today=closed_today),
            month_hours=month.hours if month else round2(_ZERO),
            month_wage=month.wage if month else round2(_ZERO),
            pay_rate=worker.pay_rate,
            career_total=worker.career_total,
        )

    # ---- whole roster --------------------------------------------------------

    def organization_totals(self, doc: RosterDocument) -> Dict[str, Decimal]:
        return {
            "hours": round2(sum((self.career_hours(w) for w in doc.workers), _ZERO)),
            "wage": round2(sum((self.career_wage(w) for w in doc.workers), _ZERO)),
        }

    @staticmethod
    def on_duty(doc: RosterDocument, today: date) -> List[Worker]:
        return [w for w in doc.workers if w.open_shift_on(today) is not None]

    def duty_stats(self, doc: RosterDocument, today: date) -> DutyStats:
        counts = {status: 0 for status in DutyStatus}
        for w in doc.workers:
            counts[self.duty_status(w, today)] += 1
        return DutyStats(
            on_duty=counts[DutyStatus.ON_DUTY],
            off_duty=counts[DutyStatus.OFF_DUTY],
            not_started=counts[DutyStatus.NOT_STARTED],
        )

    def export_rows(self, doc: RosterDocument, today: date) -> List[ExportRow]:
        rows: List[ExportRow] = []
        for w in doc.workers:
            todays = w.shifts_on(today)
            rows.append(
                ExportRow(
                    worker_id=w.worker_id,
                    display_name=w.display_name or "Chưa đặt tên",
                    title=w.title,
                    total_hours=self.career_hours(w),
                    total_wage=self.career_wage(w),
                    today_hours=round2(sum((s.hours for s in todays), _ZERO)),
                    today_wage=round2(sum((s.wage for s in todays), _ZERO)),
                    today_status=self.duty_status(w, today),
                )
            )
        return rows

    # ---- UI mapping ----------------------------------------------------------

    @staticmethod
    def shift_to_ui(s: Shift) -> dict:
        return {
            "id": s.shift_id,
            "date": display_date(s.work_date),
            "on_time": s.clock_in.strftime(DISPLAY_TIME_FORMAT) if s.clock_in else "--:--",
            "off_time": s.clock_out.strftime(DISPLAY_TIME_FORMAT) if s.clock_out else None,
            "hours": float(s.hours),
            "salary": float(s.wage),
            "status": s.status.value,
            "status_label": s.status.label,
        }

    def history_to_ui(self, worker: Worker) -> List[dict]:
        return [
            {
                "date": display_date(d.work_date),
                "date_key": date_key(d.work_date),
                "hours": float(d.hours),
                "salary": float(d.wage),
                "shifts": [self.shift_to_ui(s) for s in d.shifts],
            }
            for d in self.daily_history(worker)
        ]

    @staticmethod
    def monthly_to_ui(totals: Iterable[MonthlyTotal]) -> List[dict]:
        return [{"month": m.label, "key": m.key, "hours": float(m.hours), "salary": float(m.wage)} for m in totals]

    def worker_to_ui(self, w: Worker, today: date) -> dict:
        status = self.duty_status(w, today)
        return {
            "id": w.worker_id,
            "username": w.username,
            "display_name": w.display_name,
            "role": w.role.value,
            "rank": w.rank.value if w.rank else None,
            "position": w.position,
            "title": w.title,
            "pay_rate": float(w.pay_rate),
            "career_total": float(w.career_total),
            "status": status.value,
            "status_label": status.label,
        }
