"""In-memory expiring cache for geocoding results."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Map keys to values that expire ``ttl_seconds`` after being stored.

    One instance is shared by every request in the process; the lock only
    matters if callers use it from worker threads.  Entries are kept in
    insertion order, which is also expiry order, so expired entries are
    swept from the front on every write and the oldest entry is evicted
    once ``max_entries`` is reached.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 10_000,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, tuple[float, V]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> V | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: V) -> None:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._entries.pop(key, None)
            while len(self._entries) >= self._max_entries:
                del self._entries[next(iter(self._entries))]
            self._entries[key] = (now + self._ttl, value)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sweep(self, now: float) -> None:
        for key, (expires_at, _) in list(self._entries.items()):
            if expires_at > now:
                break
            del self._entries[key]

    def __len__(self) -> int:
        with self._lock:
            self._sweep(self._clock())
            return len(self._entries)
