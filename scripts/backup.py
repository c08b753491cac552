"""Backup the roster JSON file.

Note: Copy nguyên file roster vào thư mục backups/ kèm timestamp.
"""

from __future__ import annotations

import importlib
import shutil
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    src = Path(settings.ROSTER_PATH)
    if not src.exists():
        raise SystemExit(f"Không tìm thấy file roster: {src}")

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"roster_{ts}.json"
    shutil.copy2(src, out_file)
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
