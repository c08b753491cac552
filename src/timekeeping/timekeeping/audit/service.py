from __future__ import annotations

from datetime import datetime
from typing import List

from ..common.logging_config import get_logger
from ..core.constants import AUDIT_LOG_LIMIT
from ..core.enums import AuditAction
from ..storage.document import RosterDocument
from ..storage.repository import RosterRepository
from .model import AuditEntry

log = get_logger("audit")


def record(
    doc: RosterDocument,
    *,
    actor: str,
    action: AuditAction,
    target: str,
    detail: str = "",
    now: datetime,
    limit: int = AUDIT_LOG_LIMIT,
) -> AuditEntry:
    """Prepend an entry to the document's log, keeping only the newest ``limit``."""

    entry = AuditEntry(time=now, actor=actor, action=action, target=target, detail=detail)
    doc.logs.insert(0, entry)
    del doc.logs[limit:]
    log.info("%s: %s -> %s (%s)", actor, action.value, target, detail)
    return entry


class AuditLogService:
    def __init__(self, roster: RosterRepository):
        self._roster = roster

    def list_recent(self) -> List[AuditEntry]:
        return list(self._roster.load().logs)

    def to_ui(self, e: AuditEntry) -> dict:
        return {
            "time": e.time.strftime("%H:%M %d/%m/%Y"),
            "actor": e.actor,
            "action": e.action.value,
            "target": e.target,
            "detail": e.detail,
        }
