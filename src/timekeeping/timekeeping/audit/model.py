from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import AuditAction


@dataclass(frozen=True)
class AuditEntry:
    """Một dòng nhật ký thao tác quản trị."""

    time: datetime
    actor: str
    action: AuditAction
    target: str
    detail: str = ""
