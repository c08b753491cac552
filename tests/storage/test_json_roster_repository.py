from __future__ import annotations

import json
from datetime import date
from decimal import Decimal

import pytest

from src.timekeeping.timekeeping.audit.service import record
from src.timekeeping.timekeeping.core.enums import AuditAction, Rank, ShiftStatus
from src.timekeeping.timekeeping.core.exceptions import PersistenceWriteFailure, StorageError
from src.timekeeping.timekeeping.ledger.service import ShiftLedgerService
from src.timekeeping.timekeeping.storage.bootstrap import ensure_admin
from src.timekeeping.timekeeping.storage.document import RosterDocument
from src.timekeeping.timekeeping.storage.json_roster_repository import JsonRosterRepository
from tests.helpers import at


@pytest.fixture
def repo(tmp_path, tz):
    return JsonRosterRepository(tmp_path / "data" / "roster.json", tz=tz)


def test_missing_file_is_created_empty(repo):
    doc = repo.load()

    assert doc.workers == []
    assert repo.path.exists()
    assert json.loads(repo.path.read_text(encoding="utf-8"))["users"] == []


def test_document_survives_reload(repo, tz):
    assert ensure_admin(repo, username="admin", password="admin123", now=at(10, 8, 0)) is True
    assert ensure_admin(repo, username="admin", password="admin123", now=at(10, 8, 0)) is False

    ledger = ShiftLedgerService(repo, tz=tz)
    ledger.clock_in(1, now=at(10, 9, 0))
    ledger.clock_out(1, now=at(10, 10, 30))
    with repo.transaction() as doc:
        record(doc, actor="admin", action=AuditAction.RESET_PASSWORD, target="x", now=at(10, 11, 0))

    doc = JsonRosterRepository(repo.path, tz=tz).load()
    w = doc.find_worker(1)
    assert w.rank == Rank.DIRECTOR
    assert w.shifts[0].work_date == date(2024, 3, 10)
    assert w.shifts[0].clock_in == at(10, 9, 0)
    assert w.shifts[0].hours == Decimal("1.5")
    assert w.career_total == Decimal("75000")
    assert w.monthly_total_for(2024, 3).wage == Decimal("75000")
    assert doc.logs[0].action == AuditAction.RESET_PASSWORD


def test_unicode_is_written_as_is(repo):
    ensure_admin(repo, username="admin", password="admin123", now=at(10, 8, 0))
    assert "Quản trị viên" in repo.path.read_text(encoding="utf-8")


def test_malformed_timestamps(repo, tz, caplog):
    repo.path.parent.mkdir(parents=True)
    repo.path.write_text(
        json.dumps(
            {
                "users": [
                    {
                        "id": 7,
                        "username": "u",
                        "rank": "Không rõ",
                        "shifts": [
                            {"id": "a", "date": "2024-03-09", "clock_in": "not-a-time", "clock_out": None},
                            {"id": "b", "date": "2024-03-08", "clock_in": "2024-03-08T09:00:00+07:00", "clock_out": "??"},
                        ],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    w = repo.load().find_worker(7)

    assert w.rank is None
    assert w.shifts[0].clock_in is None
    assert w.shifts[0].is_open
    assert not w.shifts[1].is_open
    assert w.shifts[1].status == ShiftStatus.COMPLETED
    assert "malformed clock_in" in caplog.text


def test_invalid_json_raises_storage_error(repo):
    repo.path.parent.mkdir(parents=True)
    repo.path.write_text("{ nope", encoding="utf-8")

    with pytest.raises(StorageError):
        repo.load()


def test_failed_transaction_saves_nothing(repo):
    ensure_admin(repo, username="admin", password="admin123", now=at(10, 8, 0))
    before = repo.path.read_text(encoding="utf-8")

    with pytest.raises(RuntimeError):
        with repo.transaction() as doc:
            doc.workers.clear()
            raise RuntimeError("boom")

    assert repo.path.read_text(encoding="utf-8") == before


def test_write_failure(tmp_path, tz):
    repo = JsonRosterRepository(tmp_path, tz=tz)

    with pytest.raises(PersistenceWriteFailure):
        repo.save(RosterDocument())


def test_unreadable_shift_date_falls_back_or_is_dropped(repo, caplog):
    repo.path.parent.mkdir(parents=True)
    repo.path.write_text(
        json.dumps(
            {
                "users": [
                    {
                        "id": 3,
                        "username": "u",
                        "shifts": [
                            {"id": "a", "date": "03/10/2024", "clock_in": "2024-03-10T22:30:00+07:00", "clock_out": None},
                            {"id": "b", "date": None, "clock_in": "garbage", "clock_out": None},
                        ],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    w = repo.load().find_worker(3)

    assert [s.shift_id for s in w.shifts] == ["a"]
    assert w.shifts[0].work_date == date(2024, 3, 10)
    assert "using clock-in day" in caplog.text
    assert "dropping shift b" in caplog.text


def test_unreadable_monthly_rows_are_skipped(repo, caplog):
    repo.path.parent.mkdir(parents=True)
    repo.path.write_text(
        json.dumps(
            {
                "users": [
                    {
                        "id": 4,
                        "username": "u",
                        "monthly_totals": [
                            {"month": "2024-03", "hours": 2.5, "wage": 100},
                            {"month": "March", "hours": 1, "wage": 1},
                            {"month": "2024-13", "hours": 1, "wage": 1},
                            {"hours": 1, "wage": 1},
                        ],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    w = repo.load().find_worker(4)

    assert [m.key for m in w.monthly_totals] == ["2024-03"]
    assert w.monthly_totals[0].wage == Decimal("100")
    assert caplog.text.count("dropping unreadable monthly total") == 3
