"""Tests for the operator control surface."""

import asyncio
from types import SimpleNamespace

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestClient, TestServer

from replayer.adapters.driven.metrics.request_metrics import RequestMetrics
from replayer.adapters.driven.notifications.hub import WebSocketHub
from replayer.adapters.driven.rate_limit.sliding_window import SlidingWindowRateLimiter
from replayer.adapters.driven.storage.sql_store import SqlStore, create_store_engine
from replayer.adapters.driving.web.app import create_app
from replayer.core.request_executor import RequestExecutor
from replayer.core.scheduler import RequestScheduler
from replayer.ports.storage import RequestConfiguration

__all__ = []


async def wait_until(predicate, timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


@pytest_asyncio.fixture
async def control(tmp_path, fast_settings, fake_sender):
    """Running control surface over a real SQLite store."""
    engine = create_store_engine(f"sqlite:///{tmp_path / 'control.db'}")
    store = SqlStore(engine)
    await store.create_schema()
    hub = WebSocketHub()
    metrics = RequestMetrics()
    executor = RequestExecutor(store, store, hub, fake_sender, metrics=metrics)
    scheduler = RequestScheduler(fast_settings, store, executor, hub)
    limiter = SlidingWindowRateLimiter(max_requests=3, window_sec=60)
    app = create_app(scheduler, store, hub, limiter, metrics)

    async with TestClient(TestServer(app)) as client:
        yield SimpleNamespace(client=client, store=store, scheduler=scheduler, hub=hub)

    await scheduler.aclose()
    engine.dispose()


async def add_configuration(store: SqlStore, name: str, **overrides) -> int:
    values = {
        "id": 0,
        "name": name,
        "api_endpoint": f"https://fraud.test/{name}",
        "request_template": '{"n": {{iteration}}}',
        "delay_between_requests_ms": 0,
        "max_iterations": 5,
        "is_active": False,
    }
    values.update(overrides)
    return await store.add_configuration(RequestConfiguration(**values))


@pytest.mark.asyncio
async def test_list_configurations_hides_bearer_token(control) -> None:
    await add_configuration(control.store, "alpha", bearer_token="secret", is_active=True)
    await add_configuration(control.store, "beta")

    resp = await control.client.get("/api/configuration")

    assert resp.status == 200
    body = await resp.json()
    assert [c["name"] for c in body] == ["alpha", "beta"]
    assert body[0]["hasBearerToken"] is True
    assert body[0]["isActive"] is True
    assert body[1]["hasBearerToken"] is False
    assert "secret" not in await resp.text()


@pytest.mark.asyncio
async def test_status_reports_run_state_and_metrics(control) -> None:
    resp = await control.client.get("/api/configuration/status")

    body = await resp.json()
    assert body["isRunning"] is False
    assert body["metrics"]["totalRequests"] == 0


@pytest.mark.asyncio
async def test_start_all_and_stop_all(control) -> None:
    """Stop-all halts the scheduler and clears every active flag."""
    await add_configuration(control.store, "alpha", is_active=True)
    await add_configuration(control.store, "beta", is_active=True)

    resp = await control.client.post("/api/configuration/start-all")
    assert resp.status == 200
    assert (await resp.json())["isRunning"] is True
    assert control.scheduler.is_running is True

    resp = await control.client.post("/api/configuration/stop-all")
    body = await resp.json()
    assert body == {
        "message": "All configurations stopped successfully",
        "isRunning": False,
        "deactivated": 2,
    }
    assert control.scheduler.is_running is False
    assert await control.store.list_active_configurations() == []


@pytest.mark.asyncio
async def test_start_configuration_activates_and_starts_scheduler(control) -> None:
    config_id = await add_configuration(control.store, "alpha")

    resp = await control.client.post(f"/api/configuration/{config_id}/start")

    assert resp.status == 200
    assert (await control.store.get_configuration(config_id)).is_active is True
    assert control.scheduler.is_running is True


@pytest.mark.asyncio
async def test_stop_configuration_leaves_scheduler_running(control) -> None:
    config_id = await add_configuration(control.store, "alpha", is_active=True)
    await control.scheduler.start()

    resp = await control.client.post(f"/api/configuration/{config_id}/stop")

    assert resp.status == 200
    assert (await control.store.get_configuration(config_id)).is_active is False
    assert control.scheduler.is_running is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("POST", "/api/configuration/999/start"),
        ("POST", "/api/configuration/999/stop"),
        ("GET", "/api/results/statistics/configuration/999"),
        ("DELETE", "/api/results/configuration/999"),
        ("GET", "/api/results/configuration/999"),
    ],
)
async def test_unknown_configuration_is_404(control, method, path) -> None:
    resp = await control.client.request(method, path)

    assert resp.status == 404
    assert await resp.json() == {"error": "Configuration not found"}


@pytest.mark.asyncio
async def test_statistics_and_result_reset(control, fake_sender, n_shot_stop) -> None:
    """Results recorded by a pass show up in statistics and can be cleared."""
    config_id = await add_configuration(control.store, "alpha", is_active=True)
    await control.scheduler.start()
    await control.scheduler.run(stop_fn=n_shot_stop(2))

    resp = await control.client.get("/api/results/statistics")
    stats = await resp.json()
    assert stats["totalRequests"] == 2
    assert stats["successfulRequests"] == 2
    assert stats["recentResults"][0]["name"] == "alpha"

    resp = await control.client.get(f"/api/results/statistics/configuration/{config_id}")
    stats = await resp.json()
    assert stats["configurationName"] == "alpha"
    assert stats["currentIteration"] == 2

    resp = await control.client.get("/api/configuration/status")
    assert (await resp.json())["metrics"]["totalRequests"] == 2

    resp = await control.client.delete(f"/api/results/configuration/{config_id}")
    assert (await resp.json()) == {"message": "Deleted 2 request logs for configuration alpha"}
    assert await control.store.count_results(config_id) == 0
    assert len(fake_sender.requests) == 2


@pytest.mark.asyncio
async def test_configuration_results_are_paged_newest_first(control, n_shot_stop) -> None:
    config_id = await add_configuration(control.store, "alpha", is_active=True)
    await control.scheduler.start()
    await control.scheduler.run(stop_fn=n_shot_stop(3))

    resp = await control.client.get(f"/api/results/configuration/{config_id}?pageSize=2")
    assert resp.status == 200
    assert resp.headers["X-Total-Count"] == "3"
    assert resp.headers["X-Page"] == "1"
    assert resp.headers["X-Page-Size"] == "2"
    first_page = await resp.json()
    assert [r["iterationNumber"] for r in first_page] == [3, 2]
    assert first_page[0]["apiConfigurationId"] == config_id
    assert first_page[0]["statusCode"] == 200
    assert first_page[0]["isSuccessful"] is True
    assert first_page[0]["requestPayload"] == '{"n": 3}'
    assert first_page[0]["responseContent"] == '{"ok":true}'
    assert first_page[0]["errorMessage"] is None

    resp = await control.client.get(
        f"/api/results/configuration/{config_id}", params={"page": 2, "pageSize": 2}
    )
    assert [r["iterationNumber"] for r in await resp.json()] == [1]


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["page=0", "pageSize=0", "pageSize=501", "page=first"])
async def test_configuration_results_reject_bad_paging(control, query) -> None:
    config_id = await add_configuration(control.store, "alpha")

    resp = await control.client.get(f"/api/results/configuration/{config_id}?{query}")

    assert resp.status == 400
    assert "error" in await resp.json()


@pytest.mark.asyncio
async def test_get_single_result(control, n_shot_stop) -> None:
    """A result is looked up by id and carries its configuration name."""
    config_id = await add_configuration(control.store, "alpha", is_active=True)
    await control.scheduler.start()
    await control.scheduler.run(stop_fn=n_shot_stop(1))
    [row] = await control.store.list_results(config_id)

    resp = await control.client.get(f"/api/results/{row.id}")

    assert resp.status == 200
    body = await resp.json()
    assert body["id"] == row.id
    assert body["apiConfigurationName"] == "alpha"
    assert body["iterationNumber"] == 1
    assert body["requestTimestamp"] == row.request_timestamp.isoformat()

    resp = await control.client.get(f"/api/results/{row.id + 1}")
    assert resp.status == 404
    assert await resp.json() == {"error": "Result not found"}


@pytest.mark.asyncio
async def test_writes_are_rate_limited(control) -> None:
    """State-changing routes are capped per client and route; reads are not."""
    statuses = [
        (await control.client.post("/api/configuration/start-all")).status for _ in range(4)
    ]

    assert statuses == [200, 200, 200, 429]
    resp = await control.client.post("/api/configuration/start-all")
    assert await resp.json() == {"error": "Rate limit exceeded"}
    assert 0 < int(resp.headers["Retry-After"]) <= 60
    assert (await control.client.post("/api/configuration/stop-all")).status == 200
    for _ in range(5):
        assert (await control.client.get("/api/configuration/status")).status == 200


@pytest.mark.asyncio
async def test_dashboard_receives_status_changes(control) -> None:
    ws = await control.client.ws_connect("/hubs/dashboard")
    await wait_until(lambda: control.hub.subscribers() == 1)

    await control.client.post("/api/configuration/start-all")
    message = await asyncio.wait_for(ws.receive_json(), timeout=2)

    assert message == {"type": "SystemStatusChanged", "data": {"isRunning": True}}

    await ws.close()
    await wait_until(lambda: control.hub.subscribers() == 0)


@pytest.mark.asyncio
async def test_dashboard_receives_new_results(control, n_shot_stop) -> None:
    await add_configuration(control.store, "alpha", is_active=True)
    ws = await control.client.ws_connect("/hubs/dashboard")
    await wait_until(lambda: control.hub.subscribers() == 1)
    await control.scheduler.start()
    status = await asyncio.wait_for(ws.receive_json(), timeout=2)

    await control.scheduler.run(stop_fn=n_shot_stop(1))
    message = await asyncio.wait_for(ws.receive_json(), timeout=2)

    assert status["type"] == "SystemStatusChanged"
    assert message["type"] == "NewResult"
    assert message["data"]["name"] == "alpha"
    assert message["data"]["iterationNumber"] == 1
    assert message["data"]["isSuccessful"] is True
    await ws.close()


@pytest.mark.asyncio
async def test_dashboard_group_commands(control) -> None:
    """Clients can join and leave extra groups; bad commands get an error event."""
    ws = await control.client.ws_connect("/hubs/dashboard")

    await ws.send_json({"action": "join", "group": "Auditors"})
    await wait_until(lambda: control.hub.subscribers("Auditors") == 1)

    await ws.send_json({"action": "leave", "group": "Auditors"})
    await wait_until(lambda: control.hub.subscribers("Auditors") == 0)

    await ws.send_str("not json")
    error = await asyncio.wait_for(ws.receive_json(), timeout=2)
    assert error == {"type": "Error", "data": {"message": "Malformed hub command"}}

    await ws.send_json({"action": "fly", "group": "Auditors"})
    error = await asyncio.wait_for(ws.receive_json(), timeout=2)
    assert error == {"type": "Error", "data": {"message": "Unknown action: fly"}}
    await ws.close()
