"""Rate limiter port definition (interface)."""

from typing import Protocol

__all__ = ["RateLimiterPort"]


class RateLimiterPort(Protocol):
    """Bounded-window counter keyed by (subject, action)."""

    def allow(self, key: str) -> bool:
        """Record a hit for ``key`` and return False when over the limit."""
        ...

    def retry_after(self, key: str) -> float:
        """Seconds until ``key`` may be allowed again (0 when it already may)."""
        ...
