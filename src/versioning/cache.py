"""Per-run cache of resolved project versions."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")


class ProjectVersionCache(Generic[T]):
    """Lookup-or-compute cache keyed by artifact.

    Each key is computed at most once per run. Threads asking for a key that
    is being computed wait for that computation instead of starting their
    own. A computation that raises is forgotten so a later call can retry,
    and the exception reaches every waiter.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[Hashable, Future] = {}

    def get_or_compute(self, key: Hashable, factory: Callable[[], T]) -> T:
        """Return the cached value for ``key``, computing it with ``factory`` if absent."""
        with self._lock:
            entry = self._entries.get(key)
            owner = entry is None
            if owner:
                entry = Future()
                self._entries[key] = entry

        if not owner:
            return entry.result()

        try:
            value = factory()
        except BaseException as e:
            with self._lock:
                self._entries.pop(key, None)
            entry.set_exception(e)
            raise
        entry.set_result(value)
        return value

    def get(self, key: Hashable) -> Optional[T]:
        """Return the finished value for ``key`` or None."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or not entry.done() or entry.exception() is not None:
            return None
        return entry.result()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
