"""HTTP client adapter sending rendered scenarios to fraud-detection endpoints."""

import logging
from types import TracebackType
from typing import Any

import aiohttp
from aiohttp import ClientTimeout

from replayer.ports.http import HttpReplyDto, HttpRequestDto

__all__ = ["HttpClient", "DEFAULT_TIMEOUT_SEC"]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 30.0


class HttpClient:
    """HTTP client for scenario replay.

    Features:
    - One shared session with a total request timeout.
    - Optional bearer authentication per request.
    - Opt-in, logged TLS certificate bypass per request.
    - Context manager for proper resource cleanup.

    No retry: a failed attempt is recorded once and the next pass retries.
    """

    def __init__(self, timeout_sec: float = DEFAULT_TIMEOUT_SEC) -> None:
        """Initialize HTTP client.

        Args:
            timeout_sec: Total timeout of one request in seconds.
        """
        self.timeout_sec = timeout_sec
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession(timeout=ClientTimeout(total=self.timeout_sec))
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session)."""
        if self.session:
            await self.session.close()

    async def send(self, req: HttpRequestDto) -> HttpReplyDto:
        """POST the rendered payload as JSON and read the response.

        Args:
            req: Request description.

        Returns:
            Status, reason and body of the response, whatever the status code.

        Raises:
            RuntimeError: If session not initialized.
            aiohttp exceptions: Connection, TLS or timeout errors.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        headers = {"Content-Type": "application/json"}
        if req.bearer_token:
            headers["Authorization"] = f"Bearer {req.bearer_token}"

        kwargs: dict[str, Any] = {}
        if req.trust_ssl_certificate:
            logger.info(f"Using SSL certificate bypass for {req.url}")
            kwargs["ssl"] = False

        async with self.session.post(
            req.url, data=req.body.encode("utf-8"), headers=headers, **kwargs
        ) as resp:
            # a reply that arrived is recorded even if its body is not valid text
            body = await resp.text(errors="replace")
            return HttpReplyDto(status=resp.status, reason=resp.reason, body=body)
