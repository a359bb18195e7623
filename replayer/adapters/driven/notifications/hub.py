"""WebSocket notification hub with named subscriber groups."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any

from aiohttp import web

from replayer.ports.notifications import (
    DASHBOARD_GROUP,
    NEW_RESULT,
    STATUS_CHANGED,
    NotifierPort,
    ResultSummaryDto,
)

__all__ = ["WebSocketHub"]

logger = logging.getLogger(__name__)

SEND_TIMEOUT_SEC = 5.0


class WebSocketHub(NotifierPort):
    """Fan out events to WebSocket connections grouped by name.

    Every event is sent as ``{"type": topic, "data": event}``. Connections
    that fail to receive, or take longer than ``send_timeout_sec``, are
    dropped from all groups. Subscribers are sent to concurrently.

    Not thread-safe; use from the event loop only.
    """

    def __init__(self, send_timeout_sec: float = SEND_TIMEOUT_SEC) -> None:
        self.send_timeout_sec = send_timeout_sec
        self._groups: defaultdict[str, set[web.WebSocketResponse]] = defaultdict(set)

    def join(self, ws: web.WebSocketResponse, group: str = DASHBOARD_GROUP) -> None:
        self._groups[group].add(ws)

    def leave(self, ws: web.WebSocketResponse, group: str = DASHBOARD_GROUP) -> None:
        members = self._groups.get(group)
        if members is None:
            return
        members.discard(ws)
        if not members:
            del self._groups[group]

    def leave_all(self, ws: web.WebSocketResponse) -> None:
        for group in list(self._groups):
            self.leave(ws, group)

    def subscribers(self, group: str = DASHBOARD_GROUP) -> int:
        return len(self._groups.get(group, ()))

    async def publish(self, topic: str, event: dict[str, Any], group: str = DASHBOARD_GROUP) -> int:
        """Send an event to every connection of ``group``.

        Returns:
            Number of connections that received the event.
        """
        message = {"type": topic, "data": event}
        targets = []
        for ws in list(self._groups.get(group, ())):
            if ws.closed:
                self.leave_all(ws)
            else:
                targets.append(ws)

        sent = await asyncio.gather(*(self._send(ws, message) for ws in targets))
        return sum(sent)

    async def _send(self, ws: web.WebSocketResponse, message: dict[str, Any]) -> bool:
        try:
            await asyncio.wait_for(ws.send_json(message), timeout=self.send_timeout_sec)
        except TimeoutError:
            logger.warning(
                f"Dropping subscriber that did not accept an event within {self.send_timeout_sec}s"
            )
        except (ConnectionError, RuntimeError) as e:
            logger.debug(f"Dropping subscriber after failed send: {e}")
        else:
            return True
        self.leave_all(ws)
        return False

    async def publish_status_changed(self, running: bool) -> None:
        await self.publish(STATUS_CHANGED, {"isRunning": running})

    async def publish_new_result(self, summary: ResultSummaryDto) -> None:
        await self.publish(NEW_RESULT, summary.to_json())

    async def close(self) -> None:
        """Close every subscriber connection."""
        connections = {ws for members in self._groups.values() for ws in members}
        self._groups.clear()
        for ws in connections:
            try:
                await ws.close()
            except Exception as e:
                logger.warning(f"Error closing subscriber connection: {e}")
