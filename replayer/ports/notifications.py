"""Notification port definition (interface and DTO)."""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Protocol

__all__ = [
    "DASHBOARD_GROUP",
    "NEW_RESULT",
    "STATUS_CHANGED",
    "NotifierPort",
    "ResultSummaryDto",
]

DASHBOARD_GROUP = "Dashboard"
STATUS_CHANGED = "SystemStatusChanged"
NEW_RESULT = "NewResult"


@dataclass(slots=True, frozen=True)
class ResultSummaryDto:
    """Summary of a recorded result pushed to observers."""

    id: int | None
    name: str
    configuration_id: int
    iteration_number: int
    request_timestamp: datetime.datetime
    response_time_ms: int
    is_successful: bool
    status_code: int
    error_message: str | None = None

    def to_json(self) -> dict[str, Any]:
        """Return the camelCase event body sent to subscribers."""
        return {
            "id": self.id,
            "name": self.name,
            "configurationId": self.configuration_id,
            "iterationNumber": self.iteration_number,
            "requestTimestamp": self.request_timestamp.isoformat(),
            "responseTimeMs": self.response_time_ms,
            "isSuccessful": self.is_successful,
            "statusCode": self.status_code,
            "errorMessage": self.error_message,
        }


class NotifierPort(Protocol):
    """Publish-only, best-effort channel towards connected observers.

    Implementations may raise; callers log and swallow failures.
    """

    async def publish_status_changed(self, running: bool) -> None:
        """Broadcast a scheduler on/off change."""
        ...

    async def publish_new_result(self, summary: ResultSummaryDto) -> None:
        """Broadcast a freshly recorded result."""
        ...
