"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

__all__ = ["RequestAttemptDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class RequestAttemptDto:
    """Immutable snapshot of a single scheduled request attempt.

    Attributes:
        configuration_id: Configuration the attempt belongs to.
        elapsed_ms: Wall-clock time spent on the attempt.
        is_failed: True on transport failure or non-2xx response.
        status_code: HTTP status code, 0 when no response was obtained.
    """

    configuration_id: int
    elapsed_ms: int
    is_failed: bool = False
    status_code: int = 0


class MetricsPort(Protocol):
    """Interface for recording request attempt metrics.

    Implementations must be async-safe and non-blocking.
    Core calls update() after each attempt; presentation layers call
    __str__() or as_dict() to render summaries.
    """

    def update(self, attempt: RequestAttemptDto, /) -> None:
        """Record a finished attempt.

        Args:
            attempt: The attempt to record.
        """
        ...

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable summary."""
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
