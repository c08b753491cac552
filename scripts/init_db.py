from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timekeeping.timekeeping.common.datetime_utils import org_timezone
from src.timekeeping.timekeeping.storage.json_roster_repository import JsonRosterRepository


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    repo = JsonRosterRepository(settings.ROSTER_PATH, tz=org_timezone(settings.ORG_TIMEZONE))

    if repo.path.exists():
        doc = repo.load()
        print(f"OK: Roster already exists -> {repo.path} (users={len(doc.workers)}, trash={len(doc.trash)})")
        return

    repo.load()
    print(f"OK: Created empty roster -> {repo.path}")


if __name__ == "__main__":
    main()
