"""Logging setup for the timekeeping app.

Feature modules log through ``get_logger("<feature>")``; handlers are attached
once on the package root logger by ``configure_logging``.
"""

from __future__ import annotations

import logging
import sys

ROOT_LOGGER_NAME = "timekeeping"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def get_logger(name: str) -> logging.Logger:
    """Child of the package logger, e.g. ``get_logger("ledger")``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a stream handler to the package logger (idempotent)."""
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)

    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        _configured = True

    return root

