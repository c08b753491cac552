from __future__ import annotations

from typing import ContextManager, Protocol

from .document import RosterDocument


class RosterRepository(Protocol):
    """Giao diện lưu trữ roster (toàn bộ tài liệu).

    Lưu ý (DIP): tầng service phụ thuộc vào interface này, không phụ thuộc trực
    tiếp vào file JSON cụ thể.
    """

    def load(self) -> RosterDocument:
        """Read the whole document (an empty one when nothing is stored yet)."""
        raise NotImplementedError

    def save(self, doc: RosterDocument) -> None:
        """Overwrite the stored document; raises PersistenceWriteFailure."""
        raise NotImplementedError

    def transaction(self) -> ContextManager[RosterDocument]:
        """Load, yield for mutation, save on success; nothing saved on error."""
        raise NotImplementedError
