"""Seed demo data: the admin account plus a few workers, one per rank."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timekeeping.timekeeping.common.datetime_utils import now_local, org_timezone
from src.timekeeping.timekeeping.core.enums import Rank, Role
from src.timekeeping.timekeeping.core.exceptions import ValidationError
from src.timekeeping.timekeeping.storage.bootstrap import ensure_admin
from src.timekeeping.timekeeping.storage.json_roster_repository import JsonRosterRepository
from src.timekeeping.timekeeping.workers.service import RosterService, SessionWorker

DEMO_WORKERS = [
    ("officer1", "Nguyễn Văn An", Rank.OFFICER, "Hạ sĩ"),
    ("officer2", "Trần Thị Bình", Rank.OFFICER, "Trung sĩ"),
    ("head1", "Lê Hoàng Cường", Rank.DEPARTMENT_HEAD, "Đại úy"),
    ("reserve1", "Phạm Minh Dũng", Rank.RESERVE_OFFICER, "Hạ sĩ"),
]


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    tz = org_timezone(settings.ORG_TIMEZONE)
    repo = JsonRosterRepository(settings.ROSTER_PATH, tz=tz)

    admin_username = settings.ADMIN_USERNAME
    ensure_admin(repo, username=admin_username, password=settings.ADMIN_PASSWORD or "admin123", now=now_local(tz))
    admin = next(w for w in repo.load().workers if w.role == Role.ADMIN)

    roster = RosterService(repo, tz=tz)
    actor = SessionWorker.from_worker(admin)
    created = 0
    for username, name, rank, position in DEMO_WORKERS:
        try:
            roster.create_worker(
                actor,
                username=username,
                password="123456",
                display_name=name,
                rank=rank.value,
                position=position,
            )
            created += 1
        except ValidationError as e:
            print(f"skip {username}: {e}")

    print(f"OK: Seeded roster -> {repo.path} (new workers={created})")


if __name__ == "__main__":
    main()
