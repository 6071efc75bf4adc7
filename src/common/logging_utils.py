"""Centralized logging helpers.

Configures the root logger from the environment, exposes helpers for
structured DEBUG records and keeps a process-wide registry of messages that
must be printed once and once only, no matter how many projects trigger them.
"""
from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any, Dict, Optional, Set

from constants import Constants

_logged_messages: Set[str] = set()
_logged_messages_lock = threading.Lock()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single stream handler on the root logger.

    The level comes from ``level`` or the GITVERSIONING_LOG_LEVEL environment
    variable, defaulting to INFO. Calling this repeatedly does not stack
    handlers.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_gitversioning", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler._gitversioning = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records of ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records, dropping None values."""
    return {k: v for k, v in kwargs.items() if v is not None}


def log_once(logger: logging.Logger, level: int, message: str) -> bool:
    """Log ``message`` unless the exact same text was logged before in this process.

    With DEBUG enabled every message is printed. Returns True when a record
    was emitted.
    """
    if is_debug_enabled(logger):
        logger.log(level, message)
        return True
    with _logged_messages_lock:
        if message in _logged_messages:
            return False
        _logged_messages.add(message)
    logger.log(level, message)
    return True


def reset_logged_messages() -> None:
    """Forget every message recorded by log_once."""
    with _logged_messages_lock:
        _logged_messages.clear()


class Timer:
    """Context manager measuring elapsed wall time in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000.0, 3)
