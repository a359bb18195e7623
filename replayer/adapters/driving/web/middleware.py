"""aiohttp middleware for the control surface."""

import logging
import math
from collections.abc import Awaitable, Callable

from aiohttp import web

from replayer.ports.rate_limit import RateLimiterPort

__all__ = ["rate_limit_key", "rate_limit_middleware"]

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def rate_limit_key(request: web.Request) -> str:
    """Build the ``subject:action`` key of a request."""
    resource = request.match_info.route.resource
    action = resource.canonical if resource is not None else request.path
    return f"{request.remote or 'unknown'}:{request.method} {action}"


def rate_limit_middleware(limiter: RateLimiterPort) -> Callable[..., Awaitable[web.StreamResponse]]:
    """Reject state-changing requests over the limiter's budget with 429.

    Args:
        limiter: Injected rate limiter; one key per client and route.

    Returns:
        aiohttp middleware.
    """

    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        if request.method in SAFE_METHODS:
            return await handler(request)

        key = rate_limit_key(request)
        if not limiter.allow(key):
            retry_after = math.ceil(limiter.retry_after(key))
            logger.warning(f"Rate limit exceeded for {key}, retry after {retry_after}s")
            return web.json_response(
                {"error": "Rate limit exceeded"},
                status=429,
                headers={"Retry-After": str(retry_after)},
            )
        return await handler(request)

    return middleware
