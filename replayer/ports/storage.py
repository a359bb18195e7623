"""Storage port definitions (interfaces and DTOs).

The configuration store and the result sink are external collaborators:
the core only lists active configurations, counts results, flips the
active flag and appends result rows.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Protocol

__all__ = [
    "RequestConfiguration",
    "RequestResult",
    "ConfigurationStorePort",
    "ResultSinkPort",
]


@dataclass(slots=True)
class RequestConfiguration:
    """One external endpoint to replay scenarios against.

    Attributes:
        id: Stable configuration identifier.
        name: Human-readable name used in logs and notifications.
        api_endpoint: URL receiving the POST requests.
        request_template: Body template with ``{{token}}`` placeholders.
        bearer_token: Optional bearer credential.
        delay_between_requests_ms: Pause after this configuration within a pass.
        max_iterations: Cap on result rows; 0 means unbounded.
        is_active: Whether the scheduler includes it in a pass.
        trust_ssl_certificate: Opt-in bypass of TLS certificate validation.
    """

    id: int
    name: str
    api_endpoint: str
    request_template: str
    bearer_token: str | None = None
    delay_between_requests_ms: int = 5000
    max_iterations: int = 10
    is_active: bool = False
    trust_ssl_certificate: bool = False


@dataclass(slots=True, frozen=True)
class RequestResult:
    """Append-only record of a single request attempt.

    Attributes:
        configuration_id: Owning configuration.
        request_payload: Exact payload that was sent.
        iteration_number: 1-based attempt number within the configuration.
        request_timestamp: UTC time the attempt started.
        response_time_ms: Elapsed time until response or failure.
        status_code: HTTP status, 0 if no response was obtained.
        is_successful: True for 2xx responses.
        response_content: Response body on success.
        error_message: Failure description, None on success.
        id: Row identifier, assigned by the result sink.
    """

    configuration_id: int
    request_payload: str
    iteration_number: int
    request_timestamp: datetime.datetime
    response_time_ms: int
    status_code: int
    is_successful: bool
    response_content: str | None = None
    error_message: str | None = None
    id: int | None = None


class ConfigurationStorePort(Protocol):
    """Durable store of request configurations."""

    async def list_active_configurations(self) -> list[RequestConfiguration]:
        """Return configurations whose active flag is set, in store order."""
        ...

    async def count_results(self, configuration_id: int) -> int:
        """Return the number of result rows recorded for a configuration."""
        ...

    async def set_active(self, configuration_id: int, active: bool) -> None:
        """Persist the active flag of a configuration immediately."""
        ...


class ResultSinkPort(Protocol):
    """Append-only log of request attempts."""

    async def append_result(self, result: RequestResult) -> int:
        """Persist a result row and return its identifier."""
        ...
