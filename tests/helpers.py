from __future__ import annotations

import copy
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Iterator, Optional
from zoneinfo import ZoneInfo

from werkzeug.security import generate_password_hash

from src.timekeeping.timekeeping.core.enums import Rank, Role, pay_rate_for
from src.timekeeping.timekeeping.storage.document import RosterDocument
from src.timekeeping.timekeeping.workers.model import Worker

TZ = ZoneInfo("Asia/Ho_Chi_Minh")


def at(day: int, hour: int, minute: int = 0, second: int = 0, *, month: int = 3, year: int = 2024) -> datetime:
    return datetime(year, month, day, hour, minute, second, tzinfo=TZ)


class InMemoryRoster:
    """Roster fake: every load hands out a fresh copy, like re-reading the file."""

    def __init__(self, doc: Optional[RosterDocument] = None):
        self.doc = doc or RosterDocument()
        self.saves = 0

    def load(self) -> RosterDocument:
        return copy.deepcopy(self.doc)

    def save(self, doc: RosterDocument) -> None:
        self.saves += 1
        self.doc = copy.deepcopy(doc)

    @contextmanager
    def transaction(self) -> Iterator[RosterDocument]:
        doc = self.load()
        yield doc
        self.save(doc)

    def worker(self, worker_id: int) -> Worker:
        return self.doc.find_worker(worker_id)


def add_worker(
    roster: InMemoryRoster,
    *,
    username: str,
    display_name: Optional[str] = None,
    role: Role = Role.USER,
    rank: Optional[Rank] = Rank.OFFICER,
    pay_rate: Optional[Decimal] = None,
    password: str = "secret1",
) -> Worker:
    worker = Worker(
        worker_id=roster.doc.allocate_worker_id(),
        username=username,
        password_hash=generate_password_hash(password),
        display_name=display_name or username,
        role=role,
        rank=rank,
        pay_rate=pay_rate if pay_rate is not None else pay_rate_for(rank),
    )
    roster.doc.workers.append(worker)
    return worker
