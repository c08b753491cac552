from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

import pytest

from src.timekeeping.timekeeping.core.enums import AuditAction, ShiftStatus
from src.timekeeping.timekeeping.core.exceptions import DailyCapReached, NoActiveShift, ValidationError, WorkerNotFound
from src.timekeeping.timekeeping.ledger.service import ShiftLedgerService
from src.timekeeping.timekeeping.shifts.model import Shift
from tests.helpers import add_worker, at


@pytest.fixture
def ledger(roster, tz):
    return ShiftLedgerService(roster, tz=tz)


@pytest.fixture
def officer(roster):
    return add_worker(roster, username="officer", pay_rate=Decimal("10714"))


def test_completed_shift_pays_rounded_hours(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 9, 0))
    shift = ledger.clock_out(officer.worker_id, now=at(10, 11, 30))

    assert shift.hours == Decimal("2.50")
    assert shift.wage == Decimal("26785.00")
    assert shift.status == ShiftStatus.COMPLETED

    w = roster.worker(officer.worker_id)
    assert w.career_total == Decimal("26785.00")
    month = w.monthly_total_for(2024, 3)
    assert month.key == "2024-03"
    assert month.hours == Decimal("2.50")
    assert month.wage == Decimal("26785.00")


def test_shift_under_one_hour_is_unpaid(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 9, 0))
    shift = ledger.clock_out(officer.worker_id, now=at(10, 9, 45))

    assert shift.hours == Decimal("0")
    assert shift.wage == Decimal("0")
    assert shift.status == ShiftStatus.SHORT_UNPAID

    w = roster.worker(officer.worker_id)
    assert w.career_total == Decimal("0")
    assert w.monthly_totals == []


def test_second_shift_is_truncated_to_the_daily_cap(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 8, 0))
    first = ledger.clock_out(officer.worker_id, now=at(10, 11, 0))
    assert first.hours == Decimal("3.00")
    assert first.status == ShiftStatus.COMPLETED

    ledger.clock_in(officer.worker_id, now=at(10, 13, 0))
    second = ledger.clock_out(officer.worker_id, now=at(10, 15, 0))

    assert second.hours == Decimal("1.00")
    assert second.wage == Decimal("10714.00")
    assert second.status == ShiftStatus.DAILY_CAP_REACHED
    assert roster.worker(officer.worker_id).career_total == Decimal("42856.00")

    with pytest.raises(DailyCapReached):
        ledger.clock_in(officer.worker_id, now=at(10, 16, 0))


def test_paid_hours_never_exceed_cap_in_one_day(roster, ledger, officer):
    for start in (8, 10, 12):
        ledger.clock_in(officer.worker_id, now=at(10, start, 0))
        ledger.clock_out(officer.worker_id, now=at(10, start + 1, 30))

    w = roster.worker(officer.worker_id)
    hours = [s.hours for s in w.shifts_on(date(2024, 3, 10))]
    assert hours == [Decimal("1.50"), Decimal("1.50"), Decimal("1.00")]
    assert sum(hours) == Decimal("4.00")
    assert w.career_total == sum(s.wage for s in w.shifts)


def test_clock_in_twice_returns_existing_shift(roster, ledger, officer):
    first = ledger.clock_in(officer.worker_id, now=at(10, 9, 0))
    again = ledger.clock_in(officer.worker_id, now=at(10, 9, 5))

    assert first.created is True
    assert again.created is False
    assert again.shift.shift_id == first.shift.shift_id
    assert len(roster.worker(officer.worker_id).shifts) == 1


def test_clock_out_without_open_shift_changes_nothing(roster, ledger, officer):
    saves = roster.saves
    with pytest.raises(NoActiveShift):
        ledger.clock_out(officer.worker_id, now=at(10, 12, 0))

    assert roster.saves == saves
    assert roster.worker(officer.worker_id).shifts == []


def test_unknown_worker(ledger):
    with pytest.raises(WorkerNotFound):
        ledger.clock_in(999, now=at(10, 9, 0))


def test_toggle_duty_alternates(ledger, officer):
    on = ledger.toggle_duty(officer.worker_id, now=at(10, 9, 0))
    off = ledger.toggle_duty(officer.worker_id, now=at(10, 11, 0))

    assert on.clocked_in is True
    assert off.clocked_in is False
    assert off.shift.hours == Decimal("2.00")


def test_shift_spanning_midnight_belongs_to_clock_in_day(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 22, 0))
    shift = ledger.clock_out(officer.worker_id, now=at(11, 1, 0))

    assert shift.work_date == date(2024, 3, 10)
    assert shift.hours == Decimal("3.00")


# ---- abandoned-shift sweep --------------------------------------------------


def test_sweep_closes_yesterdays_shift_at_end_of_day(roster, ledger, officer, tz):
    ledger.clock_in(officer.worker_id, now=at(10, 19, 0))

    swept = ledger.sweep_abandoned(now=at(11, 8, 0))

    assert len(swept) == 1
    shift = swept[0].shift
    assert shift.clock_out == at(10, 23, 59, 59)
    assert shift.hours == Decimal("4.00")
    assert shift.wage == Decimal("42856.00")
    assert shift.status == ShiftStatus.AUTO_CLOSED

    w = roster.worker(officer.worker_id)
    assert w.career_total == Decimal("42856.00")
    assert w.monthly_total_for(2024, 3).hours == Decimal("4.00")


def test_sweep_pays_from_unrounded_hours(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 23, 0))

    shift = ledger.sweep_abandoned(now=at(11, 8, 0))[0].shift

    # 3599 seconds: no one-hour minimum for the sweep
    assert shift.hours == Decimal("1.00")
    assert shift.wage == Decimal("10711.02")
    assert shift.status == ShiftStatus.AUTO_CLOSED


def test_sweep_is_idempotent(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 19, 0))
    ledger.sweep_abandoned(now=at(11, 8, 0))
    total = roster.worker(officer.worker_id).career_total

    assert ledger.sweep_abandoned(now=at(11, 9, 0)) == []
    assert roster.worker(officer.worker_id).career_total == total


def test_sweep_leaves_todays_open_shift_alone(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 9, 0))

    assert ledger.sweep_abandoned(now=at(10, 23, 0)) == []
    assert roster.worker(officer.worker_id).open_shift() is not None


def test_sweep_ignores_hours_already_closed_that_day(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 8, 0))
    ledger.clock_out(officer.worker_id, now=at(10, 11, 0))
    ledger.clock_in(officer.worker_id, now=at(10, 19, 0))

    shift = ledger.sweep_abandoned(now=at(11, 8, 0))[0].shift

    assert shift.hours == Decimal("4.00")
    day = roster.worker(officer.worker_id).shifts_on(date(2024, 3, 10))
    assert sum(s.hours for s in day) == Decimal("7.00")


def test_sweep_closes_unreadable_clock_in_without_pay(roster, ledger, officer, caplog):
    officer_doc = roster.worker(officer.worker_id)
    officer_doc.shifts.append(Shift(work_date=date(2024, 3, 9), clock_in=None))

    caplog.set_level(logging.WARNING, logger="timekeeping")
    swept = ledger.sweep_abandoned(now=at(10, 8, 0))

    shift = swept[0].shift
    assert shift.status == ShiftStatus.AUTO_CLOSED_ERROR
    assert shift.hours == Decimal("0")
    assert shift.wage == Decimal("0")
    assert roster.worker(officer.worker_id).career_total == Decimal("0")
    assert "no readable clock-in" in caplog.text


def test_clock_in_sweeps_stale_shift_first(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(9, 20, 0))

    result = ledger.clock_in(officer.worker_id, now=at(10, 9, 0))

    w = roster.worker(officer.worker_id)
    assert result.created is True
    assert [s.status for s in w.shifts] == [ShiftStatus.AUTO_CLOSED, ShiftStatus.ON_DUTY]
    assert w.open_shift().work_date == date(2024, 3, 10)


def test_per_request_sweep_skips_write_when_nothing_is_stale(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 9, 0))
    saves = roster.saves

    assert ledger.sweep_for_worker(officer.worker_id, now=at(10, 10, 0)) == []
    assert roster.saves == saves

    closed = ledger.sweep_for_worker(officer.worker_id, now=at(11, 10, 0))
    assert [s.status for s in closed] == [ShiftStatus.AUTO_CLOSED]


def test_sweep_logs_auto_close(ledger, officer, caplog):
    ledger.clock_in(officer.worker_id, now=at(10, 19, 0))

    caplog.set_level(logging.INFO, logger="timekeeping")
    ledger.sweep_abandoned(now=at(11, 8, 0))

    assert any(r.name == "timekeeping.ledger" and "auto-close" in r.getMessage() for r in caplog.records)


# ---- admin on/off duty --------------------------------------------------------


def test_admin_toggles_are_audited(roster, ledger, officer):
    ledger.admin_clock_in(officer.worker_id, actor="admin", now=at(10, 9, 0))
    shift = ledger.admin_clock_out(officer.worker_id, actor="admin", now=at(10, 11, 0))

    assert shift.status == ShiftStatus.CLOSED_BY_ADMIN
    assert shift.hours == Decimal("2.00")

    logs = roster.doc.logs
    assert [e.action for e in logs] == [AuditAction.ADMIN_CLOCK_OUT, AuditAction.ADMIN_CLOCK_IN]
    assert logs[0].target == "officer"


def test_admin_clock_in_refuses_when_already_on_duty(ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(10, 9, 0))

    with pytest.raises(ValidationError):
        ledger.admin_clock_in(officer.worker_id, actor="admin", now=at(10, 9, 30))


def test_admin_clock_out_short_shift_is_unpaid(ledger, officer):
    ledger.admin_clock_in(officer.worker_id, actor="admin", now=at(10, 9, 0))
    shift = ledger.admin_clock_out(officer.worker_id, actor="admin", now=at(10, 9, 20))

    assert shift.status == ShiftStatus.SHORT_UNPAID_ADMIN
    assert shift.wage == Decimal("0")


def test_admin_clock_out_without_open_shift(ledger, officer):
    with pytest.raises(NoActiveShift):
        ledger.admin_clock_out(officer.worker_id, actor="admin", now=at(10, 9, 0))


def test_admin_clock_out_sweeps_stale_shift_instead_of_paying_it(roster, ledger):
    officer = add_worker(roster, username="late", pay_rate=Decimal("10"))
    ledger.clock_in(officer.worker_id, now=at(10, 23, 0))

    with pytest.raises(NoActiveShift):
        ledger.admin_clock_out(officer.worker_id, actor="admin", now=at(12, 10, 0))

    w = roster.worker(officer.worker_id)
    [shift] = w.shifts
    assert shift.status == ShiftStatus.AUTO_CLOSED
    assert shift.clock_out == at(10, 23, 59, 59)
    assert shift.hours == Decimal("1.00")
    assert shift.wage == Decimal("10.00")
    assert w.career_total == Decimal("10.00")
    assert [e.action for e in roster.doc.logs] == []


def test_admin_clock_out_closes_todays_shift_after_sweeping(roster, ledger, officer):
    ledger.clock_in(officer.worker_id, now=at(9, 20, 0))
    roster.worker(officer.worker_id).shifts.append(Shift(work_date=date(2024, 3, 10), clock_in=at(10, 8, 0)))

    shift = ledger.admin_clock_out(officer.worker_id, actor="admin", now=at(10, 10, 0))

    assert shift.work_date == date(2024, 3, 10)
    assert shift.status == ShiftStatus.CLOSED_BY_ADMIN
    statuses = [s.status for s in roster.worker(officer.worker_id).shifts]
    assert statuses == [ShiftStatus.AUTO_CLOSED, ShiftStatus.CLOSED_BY_ADMIN]
