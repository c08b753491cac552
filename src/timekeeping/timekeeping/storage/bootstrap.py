from __future__ import annotations

from datetime import datetime

from werkzeug.security import generate_password_hash

from ..common.logging_config import get_logger
from ..core.enums import Rank, Role, pay_rate_for
from ..workers.model import Worker
from .repository import RosterRepository

log = get_logger("storage")


def ensure_admin(repo: RosterRepository, *, username: str, password: str, now: datetime) -> bool:
    """Create the first administrator account when the roster has none.

    Returns True when an account was created.
    """

    with repo.transaction() as doc:
        if any(w.is_admin for w in doc.workers):
            return False
        if doc.find_by_username(username):
            return False

        doc.workers.append(
            Worker(
                worker_id=doc.allocate_worker_id(),
                username=username,
                password_hash=generate_password_hash(password),
                display_name="Quản trị viên",
                role=Role.ADMIN,
                rank=Rank.DIRECTOR,
                pay_rate=pay_rate_for(Rank.DIRECTOR),
                created_at=now,
            )
        )

    log.info("created bootstrap admin account %r", username)
    return True
