from __future__ import annotations

import json
import threading
from contextlib import contextmanager
from datetime import tzinfo
from pathlib import Path
from typing import Iterator

from ..common.logging_config import get_logger
from ..core.exceptions import PersistenceWriteFailure, StorageError
from .document import RosterDocument, document_from_dict, document_to_dict
from .repository import RosterRepository

log = get_logger("storage")


class JsonRosterRepository(RosterRepository):
    """Roster stored as one JSON file, re-read and re-written per operation.

    Note: the lock only serialises callers inside this process (request
    handling and the background sweeper). Two processes sharing the same
    file can still lose updates; last writer wins.
    """

    def __init__(self, path: str | Path, *, tz: tzinfo):
        self._path = Path(path)
        self._tz = tz
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> RosterDocument:
        with self._lock:
            if not self._path.exists():
                doc = RosterDocument()
                self.save(doc)
                return doc

            try:
                raw = self._path.read_text(encoding="utf-8")
            except OSError as e:
                raise StorageError(f"Cannot read roster file {self._path}: {e}") from e

            if not raw.strip():
                return RosterDocument()

            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                raise StorageError(f"Roster file {self._path} is not valid JSON: {e}") from e
            return document_from_dict(data, tz=self._tz)

    def save(self, doc: RosterDocument) -> None:
        payload = json.dumps(document_to_dict(doc), ensure_ascii=False, indent=2)
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.write_text(payload, encoding="utf-8")
            except OSError as e:
                log.error("failed to write roster file %s: %s", self._path, e)
                raise PersistenceWriteFailure(f"Cannot write roster file {self._path}: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[RosterDocument]:
        with self._lock:
            doc = self.load()
            yield doc
            self.save(doc)
