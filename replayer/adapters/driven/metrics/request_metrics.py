"""In-memory sliding-window metrics for replayed requests."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass
from typing import Any

from replayer.ports.metrics import MetricsPort, RequestAttemptDto

__all__ = ["RequestMetrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one request attempt."""

    elapsed_ms: int
    failed: bool
    status_code: int


class RequestMetrics(MetricsPort):
    """Fast, lock-free metrics for async context.

    Tracks:
    - Average elapsed time of recent attempts.
    - Failure rate (transport errors or non-2xx responses).
    - Last status code.
    - Total and failed attempts seen.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent attempts to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0
        self._total_failed: int = 0

    def update(self, attempt: RequestAttemptDto) -> None:
        """Record a finished attempt.

        Args:
            attempt: Attempt with timing and outcome.
        """
        self._window.append(
            _Sample(
                elapsed_ms=attempt.elapsed_ms,
                failed=attempt.is_failed,
                status_code=attempt.status_code,
            )
        )
        self._total_seen += 1
        if attempt.is_failed:
            self._total_failed += 1

    def as_dict(self) -> dict[str, Any]:
        """Return window statistics for the status endpoint."""
        n_window = len(self._window)
        failures = sum(1 for s in self._window if s.failed)
        return {
            "window": n_window,
            "windowSize": self._window.maxlen,
            "averageElapsedMs": (
                round(statistics.fmean(s.elapsed_ms for s in self._window), 1) if n_window else 0.0
            ),
            "failureRate": round(failures / n_window * 100, 1) if n_window else 0.0,
            "lastStatusCode": self._window[-1].status_code if n_window else None,
            "totalRequests": self._total_seen,
            "totalFailures": self._total_failed,
        }

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging.

        Returns:
            Formatted metrics string.
        """
        if not self._window:
            return "Metrics: waiting for data …"

        summary = self.as_dict()
        return (
            f"elapsed={summary['averageElapsedMs']:7.1f} ms | "
            f"status={summary['lastStatusCode']:3d} | "
            f"fail={summary['failureRate']:5.1f}% | "
            f"win={summary['window']}/{summary['windowSize']} | "
            f"total={self._total_seen}"
        )
