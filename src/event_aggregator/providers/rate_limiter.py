"""Rolling-window request quotas, one window per named API."""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass
class _Window:
    max_requests: int
    window_seconds: float
    calls: deque[float] = field(default_factory=deque)


class RateLimiter:
    """Track request timestamps per API and refuse calls over quota.

    Construct one per process and inject it into every adapter and
    geocoder.  Names that were never configured are unlimited.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def configure(self, name: str, max_requests: int, window_seconds: float) -> None:
        with self._lock:
            self._windows[name] = _Window(max_requests, window_seconds)

    def try_acquire(self, name: str) -> bool:
        """Record a call and return True if ``name`` is under its quota."""
        with self._lock:
            window = self._windows.get(name)
            if window is None:
                return True
            now = self._clock()
            self._prune(window, now)
            if len(window.calls) >= window.max_requests:
                return False
            window.calls.append(now)
            return True

    def remaining(self, name: str) -> int | None:
        """Calls left in the current window, or None when unlimited."""
        with self._lock:
            window = self._windows.get(name)
            if window is None:
                return None
            self._prune(window, self._clock())
            return window.max_requests - len(window.calls)

    @staticmethod
    def _prune(window: _Window, now: float) -> None:
        cutoff = now - window.window_seconds
        while window.calls and window.calls[0] <= cutoff:
            window.calls.popleft()
