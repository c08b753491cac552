from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional

from .audit.service import AuditLogService
from .common.datetime_utils import org_timezone
from .core.constants import DAILY_CAP_HOURS, MIN_PAYABLE_HOURS
from .ledger.calculator.daily_cap_calculator import DailyCapAccrualCalculator
from .ledger.service import ShiftLedgerService
from .ledger.sweeper import AbandonedShiftSweeper
from .payroll.service import PayrollReportService
from .storage.json_roster_repository import JsonRosterRepository
from .storage.repository import RosterRepository
from .workers.service import AuthService, RosterService


@dataclass(frozen=True)
class Container:
    tz: tzinfo
    roster_repo: RosterRepository

    auth_service: AuthService
    roster_service: RosterService
    ledger_service: ShiftLedgerService
    payroll_report_service: PayrollReportService
    audit_log_service: AuditLogService

    sweeper: Optional[AbandonedShiftSweeper] = None


def build_container(
    *,
    roster_path: str,
    timezone: str,
    sweep_interval_seconds: float = 0,
    roster_repo: Optional[RosterRepository] = None,
) -> Container:
    tz = org_timezone(timezone)
    roster_repo = roster_repo or JsonRosterRepository(roster_path, tz=tz)

    calculator = DailyCapAccrualCalculator(daily_cap=DAILY_CAP_HOURS, min_hours=MIN_PAYABLE_HOURS)

    auth_service = AuthService(roster_repo)
    roster_service = RosterService(roster_repo, tz=tz)
    ledger_service = ShiftLedgerService(roster_repo, tz=tz, calculator=calculator)
    payroll_report_service = PayrollReportService(calculator=calculator)
    audit_log_service = AuditLogService(roster_repo)

    sweeper = None
    if sweep_interval_seconds and sweep_interval_seconds > 0:
        sweeper = AbandonedShiftSweeper(ledger_service, interval_seconds=sweep_interval_seconds)

    return Container(
        tz=tz,
        roster_repo=roster_repo,
        auth_service=auth_service,
        roster_service=roster_service,
        ledger_service=ledger_service,
        payroll_report_service=payroll_report_service,
        audit_log_service=audit_log_service,
        sweeper=sweeper,
    )
