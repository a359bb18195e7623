"""Sliding-window rate limiter keyed by subject and action."""

import threading
import time
from collections import deque
from collections.abc import Callable

from replayer.ports.rate_limit import RateLimiterPort

__all__ = ["SlidingWindowRateLimiter"]


class SlidingWindowRateLimiter(RateLimiterPort):
    """Allow at most ``max_requests`` hits per key within ``window_sec``.

    Hits older than the window expire on every check, and keys with no
    hits left are evicted so the map stays bounded by active keys.
    Thread-safe (internal lock).
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_sec: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_sec <= 0:
            raise ValueError("window_sec must be positive")
        self.max_requests = max_requests
        self.window_sec = window_sec
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            hits = self._hits.setdefault(key, deque())
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def retry_after(self, key: str) -> float:
        """Seconds until ``key`` regains one slot (0 if it has one now)."""
        now = self._clock()
        with self._lock:
            hits = self._hits.get(key)
            if not hits or len(hits) < self.max_requests:
                return 0.0
            return max(0.0, hits[0] + self.window_sec - now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def _evict_expired(self, now: float) -> None:
        cutoff = now - self.window_sec
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]
