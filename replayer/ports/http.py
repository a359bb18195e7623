"""HTTP port definition (DTOs)."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

__all__ = ["HttpRequestDto", "HttpReplyDto", "SendFn"]


@dataclass(slots=True, frozen=True)
class HttpRequestDto:
    """Outbound request against a fraud-detection endpoint.

    Decouples core request execution from HTTP implementation details.

    Attributes:
        url: Target HTTP endpoint URL.
        body: Rendered JSON payload, sent verbatim.
        bearer_token: Optional token sent as ``Authorization: Bearer``.
        trust_ssl_certificate: Accept any server certificate when True.
    """

    url: str
    body: str
    bearer_token: str | None = None
    trust_ssl_certificate: bool = False


@dataclass(slots=True, frozen=True)
class HttpReplyDto:
    """HTTP response as seen by the core.

    Attributes:
        status: HTTP status code.
        reason: Reason phrase returned by the server, if any.
        body: Response body text.
    """

    status: int
    reason: str | None
    body: str

    @property
    def is_success(self) -> bool:
        """Return True for 2xx status codes."""
        return 200 <= self.status < 300


SendFn = Callable[[HttpRequestDto], Awaitable[HttpReplyDto]]
