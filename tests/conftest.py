from __future__ import annotations

import pytest

from src.timekeeping.timekeeping.core.enums import Rank, Role
from src.timekeeping.timekeeping.workers.service import SessionWorker
from tests.helpers import TZ, InMemoryRoster, add_worker, at


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def fixed_now():
    return at(10, 9, 0)


@pytest.fixture
def roster():
    return InMemoryRoster()


@pytest.fixture
def admin(roster) -> SessionWorker:
    w = add_worker(roster, username="admin", display_name="Quản trị viên", role=Role.ADMIN, rank=Rank.DIRECTOR)
    return SessionWorker.from_worker(w)
