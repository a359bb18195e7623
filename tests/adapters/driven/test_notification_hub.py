"""Tests for the WebSocket notification hub."""

import asyncio
import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web

from replayer.adapters.driven.notifications.hub import WebSocketHub
from replayer.ports.notifications import ResultSummaryDto

__all__ = []


def make_socket(*, closed: bool = False, send_error: Exception | None = None) -> MagicMock:
    ws = MagicMock(spec=web.WebSocketResponse)
    ws.closed = closed
    ws.send_json = AsyncMock(side_effect=send_error)
    ws.close = AsyncMock()
    return ws


@pytest.mark.asyncio
async def test_status_change_reaches_dashboard_group() -> None:
    """Status events go to every Dashboard subscriber."""
    hub = WebSocketHub()
    first, second = make_socket(), make_socket()
    hub.join(first)
    hub.join(second)

    await hub.publish_status_changed(True)

    expected = {"type": "SystemStatusChanged", "data": {"isRunning": True}}
    first.send_json.assert_awaited_once_with(expected)
    second.send_json.assert_awaited_once_with(expected)


@pytest.mark.asyncio
async def test_new_result_is_sent_as_camel_case_summary() -> None:
    hub = WebSocketHub()
    ws = make_socket()
    hub.join(ws)
    summary = ResultSummaryDto(
        id=7,
        name="alpha",
        configuration_id=3,
        iteration_number=2,
        request_timestamp=datetime.datetime(2025, 3, 7, 12, 0, tzinfo=datetime.UTC),
        response_time_ms=120,
        is_successful=False,
        status_code=500,
        error_message="HTTP 500: Internal Server Error",
    )

    await hub.publish_new_result(summary)

    ws.send_json.assert_awaited_once_with(
        {
            "type": "NewResult",
            "data": {
                "id": 7,
                "name": "alpha",
                "configurationId": 3,
                "iterationNumber": 2,
                "requestTimestamp": "2025-03-07T12:00:00+00:00",
                "responseTimeMs": 120,
                "isSuccessful": False,
                "statusCode": 500,
                "errorMessage": "HTTP 500: Internal Server Error",
            },
        }
    )


@pytest.mark.asyncio
async def test_publish_only_targets_requested_group() -> None:
    hub = WebSocketHub()
    dashboard, other = make_socket(), make_socket()
    hub.join(dashboard)
    hub.join(other, "Auditors")

    delivered = await hub.publish("Custom", {"x": 1}, group="Auditors")

    assert delivered == 1
    other.send_json.assert_awaited_once_with({"type": "Custom", "data": {"x": 1}})
    dashboard.send_json.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_and_closed_sockets_are_dropped() -> None:
    """Broken subscribers are removed; healthy ones still get the event."""
    hub = WebSocketHub()
    healthy = make_socket()
    broken = make_socket(send_error=ConnectionResetError("gone"))
    closed = make_socket(closed=True)
    for ws in (healthy, broken, closed):
        hub.join(ws)
    hub.join(broken, "Auditors")

    delivered = await hub.publish("Ping", {})

    assert delivered == 1
    assert hub.subscribers() == 1
    assert hub.subscribers("Auditors") == 0
    closed.send_json.assert_not_awaited()


@pytest.mark.asyncio
async def test_slow_subscriber_does_not_hold_up_the_others() -> None:
    """A send that exceeds the timeout drops that subscriber only."""

    async def stall(message):
        await asyncio.sleep(60)

    hub = WebSocketHub(send_timeout_sec=0.05)
    slow = make_socket()
    slow.send_json.side_effect = stall
    healthy = make_socket()
    hub.join(slow)
    hub.join(healthy)

    async with asyncio.timeout(2):
        delivered = await hub.publish("Ping", {})

    assert delivered == 1
    assert hub.subscribers() == 1
    healthy.send_json.assert_awaited_once_with({"type": "Ping", "data": {}})


@pytest.mark.asyncio
async def test_publish_without_subscribers_is_noop() -> None:
    hub = WebSocketHub()

    assert await hub.publish("Ping", {}) == 0


def test_join_and_leave_groups() -> None:
    hub = WebSocketHub()
    ws = make_socket()
    hub.join(ws)
    hub.join(ws, "Auditors")

    hub.leave(ws, "Auditors")
    assert hub.subscribers("Auditors") == 0
    assert hub.subscribers() == 1

    hub.leave(ws, "Unknown")
    hub.leave_all(ws)
    assert hub.subscribers() == 0


@pytest.mark.asyncio
async def test_close_closes_every_connection_once() -> None:
    hub = WebSocketHub()
    ws = make_socket()
    failing = make_socket()
    failing.close.side_effect = RuntimeError("already closing")
    hub.join(ws)
    hub.join(ws, "Auditors")
    hub.join(failing)

    await hub.close()

    ws.close.assert_awaited_once()
    failing.close.assert_awaited_once()
    assert hub.subscribers() == 0
