"""Roster document: the whole persisted state, plus its JSON mapping.

The document is read and written wholesale; these helpers convert between
the JSON structure on disk and the domain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..audit.model import AuditEntry
from ..common.datetime_utils import date_key, end_of_day, parse_iso_date, parse_timestamp, to_decimal
from ..common.logging_config import get_logger
from ..core.constants import DEFAULT_PAY_RATE, DEFAULT_POSITION
from ..core.enums import AuditAction, Rank, Role, ShiftStatus
from ..core.exceptions import MalformedTimestamp
from ..shifts.model import MonthlyTotal, Shift, new_shift_id
from ..workers.model import Worker

log = get_logger("storage")


@dataclass
class RosterDocument:
    workers: List[Worker] = field(default_factory=list)
    trash: List[Worker] = field(default_factory=list)
    logs: List[AuditEntry] = field(default_factory=list)
    next_worker_id: int = 1

    def find_worker(self, worker_id: int) -> Optional[Worker]:
        for w in self.workers:
            if w.worker_id == worker_id:
                return w
        return None

    def find_trashed(self, worker_id: int) -> Optional[Worker]:
        for w in self.trash:
            if w.worker_id == worker_id:
                return w
        return None

    def find_by_username(self, username: str) -> Optional[Worker]:
        for w in self.workers + self.trash:
            if w.username == username:
                return w
        return None

    def allocate_worker_id(self) -> int:
        existing = [w.worker_id for w in self.workers + self.trash]
        worker_id = max([self.next_worker_id] + [i + 1 for i in existing])
        self.next_worker_id = worker_id + 1
        return worker_id


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _money(value: Decimal) -> float:
    return float(value)


def _optional_ts(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return parse_timestamp(value)
    except MalformedTimestamp:
        log.warning("ignoring malformed timestamp %r", value)
        return None


# ---- Shift / MonthlyTotal -------------------------------------------------


def shift_to_dict(s: Shift) -> Dict[str, Any]:
    return {
        "id": s.shift_id,
        "date": date_key(s.work_date),
        "clock_in": _ts(s.clock_in),
        "clock_out": _ts(s.clock_out),
        "hours": _money(s.hours),
        "wage": _money(s.wage),
        "status": s.status.value,
    }


def shift_from_dict(r: Dict[str, Any], *, tz: tzinfo) -> Optional[Shift]:
    clock_in = None
    try:
        clock_in = parse_timestamp(r.get("clock_in"))
    except MalformedTimestamp:
        log.warning("shift %s on %s has malformed clock_in %r", r.get("id"), r.get("date"), r.get("clock_in"))

    try:
        work_date = parse_iso_date(r.get("date"))
    except MalformedTimestamp:
        if clock_in is None:
            log.warning("dropping shift %s: neither date %r nor clock_in is readable", r.get("id"), r.get("date"))
            return None
        work_date = clock_in.astimezone(tz).date()
        log.warning("shift %s has malformed date %r, using clock-in day %s", r.get("id"), r.get("date"), work_date)

    clock_out = None
    if r.get("clock_out") is not None:
        try:
            clock_out = parse_timestamp(r["clock_out"])
        except MalformedTimestamp:
            # Keep it closed so it is never swept (and paid) a second time.
            log.warning("shift %s has malformed clock_out %r", r.get("id"), r["clock_out"])
            clock_out = end_of_day(work_date, tz)

    try:
        status = ShiftStatus(r.get("status"))
    except ValueError:
        status = ShiftStatus.ON_DUTY if clock_out is None else ShiftStatus.COMPLETED

    return Shift(
        shift_id=str(r.get("id") or new_shift_id()),
        work_date=work_date,
        clock_in=clock_in,
        clock_out=clock_out,
        hours=to_decimal(r.get("hours")),
        wage=to_decimal(r.get("wage")),
        status=status,
    )


def monthly_to_dict(m: MonthlyTotal) -> Dict[str, Any]:
    return {"month": m.key, "hours": _money(m.hours), "wage": _money(m.wage)}


def monthly_from_dict(r: Dict[str, Any]) -> Optional[MonthlyTotal]:
    try:
        year_s, month_s = str(r["month"]).split("-", 1)
        year, month = int(year_s), int(month_s)
        if not 1 <= month <= 12:
            raise ValueError(month)
    except (KeyError, ValueError):
        log.warning("dropping unreadable monthly total %r", r)
        return None
    return MonthlyTotal(
        year=year,
        month=month,
        hours=to_decimal(r.get("hours")),
        wage=to_decimal(r.get("wage")),
    )


# ---- Worker ---------------------------------------------------------------


def worker_to_dict(w: Worker) -> Dict[str, Any]:
    return {
        "id": w.worker_id,
        "username": w.username,
        "password_hash": w.password_hash,
        "display_name": w.display_name,
        "role": w.role.value,
        "rank": w.rank.value if w.rank else None,
        "position": w.position,
        "pay_rate": _money(w.pay_rate),
        "career_total": _money(w.career_total),
        "shifts": [shift_to_dict(s) for s in w.shifts],
        "monthly_totals": [monthly_to_dict(m) for m in w.monthly_totals],
        "created_at": _ts(w.created_at),
        "deleted_at": _ts(w.deleted_at),
    }


def worker_from_dict(r: Dict[str, Any], *, tz: tzinfo) -> Worker:
    try:
        rank = Rank.parse(r.get("rank"))
    except ValueError:
        log.warning("worker %s has unknown rank %r", r.get("id"), r.get("rank"))
        rank = None

    try:
        role = Role(r.get("role") or Role.USER.value)
    except ValueError:
        role = Role.USER

    shifts = [shift_from_dict(s, tz=tz) for s in r.get("shifts") or []]
    monthly = [monthly_from_dict(m) for m in r.get("monthly_totals") or []]

    return Worker(
        worker_id=int(r["id"]),
        username=str(r["username"]),
        password_hash=str(r.get("password_hash") or ""),
        display_name=str(r.get("display_name") or r["username"]),
        role=role,
        rank=rank,
        position=r.get("position") or DEFAULT_POSITION,
        pay_rate=to_decimal(r.get("pay_rate"), default=str(DEFAULT_PAY_RATE)),
        career_total=to_decimal(r.get("career_total")),
        shifts=[s for s in shifts if s is not None],
        monthly_totals=[m for m in monthly if m is not None],
        created_at=_optional_ts(r.get("created_at")),
        deleted_at=_optional_ts(r.get("deleted_at")),
    )


# ---- Audit ----------------------------------------------------------------


def audit_to_dict(e: AuditEntry) -> Dict[str, Any]:
    return {
        "time": e.time.isoformat(),
        "actor": e.actor,
        "action": e.action.value,
        "target": e.target,
        "detail": e.detail,
    }


def audit_from_dict(r: Dict[str, Any]) -> Optional[AuditEntry]:
    try:
        return AuditEntry(
            time=parse_timestamp(r.get("time")),
            actor=str(r.get("actor") or ""),
            action=AuditAction(r.get("action")),
            target=str(r.get("target") or ""),
            detail=str(r.get("detail") or ""),
        )
    except (MalformedTimestamp, ValueError):
        log.warning("dropping unreadable audit entry %r", r)
        return None


# ---- Document -------------------------------------------------------------


def document_to_dict(doc: RosterDocument) -> Dict[str, Any]:
    return {
        "next_worker_id": doc.next_worker_id,
        "users": [worker_to_dict(w) for w in doc.workers],
        "trash": [worker_to_dict(w) for w in doc.trash],
        "logs": [audit_to_dict(e) for e in doc.logs],
    }


def document_from_dict(data: Dict[str, Any], *, tz: tzinfo) -> RosterDocument:
    logs = [audit_from_dict(e) for e in data.get("logs") or []]
    return RosterDocument(
        workers=[worker_from_dict(w, tz=tz) for w in data.get("users") or []],
        trash=[worker_from_dict(w, tz=tz) for w in data.get("trash") or []],
        logs=[e for e in logs if e is not None],
        next_worker_id=int(data.get("next_worker_id") or 1),
    )
