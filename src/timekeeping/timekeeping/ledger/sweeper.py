from __future__ import annotations

import threading
from typing import Callable, Optional

from ..common.logging_config import get_logger
from .service import ShiftLedgerService

log = get_logger("sweeper")


class AbandonedShiftSweeper:
    """Background task that periodically force-closes shifts left open overnight.

    ``stop()`` cancels the loop; an exception in one run is logged and the
    next run still happens.
    """

    def __init__(
        self,
        ledger: ShiftLedgerService,
        *,
        interval_seconds: float,
        on_error: Optional[Callable[[BaseException], None]] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._ledger = ledger
        self._interval = float(interval_seconds)
        self._on_error = on_error
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        """Run one sweep; returns how many shifts were closed (0 on error)."""
        try:
            swept = self._ledger.sweep_abandoned()
        except Exception as e:
            log.exception("abandoned-shift sweep failed")
            if self._on_error:
                self._on_error(e)
            return 0

        if swept:
            log.info("abandoned-shift sweep closed %d shift(s)", len(swept))
        return len(swept)

    def _loop(self) -> None:
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self._interval)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="abandoned-shift-sweeper", daemon=True)
        self._thread.start()
        log.info("abandoned-shift sweeper started (every %ss)", self._interval)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
