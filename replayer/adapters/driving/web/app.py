"""Operator control surface: scheduler control, statistics and live updates."""

import json
import logging
from typing import Any

from aiohttp import WSMsgType, web

from replayer.adapters.driven.notifications.hub import WebSocketHub
from replayer.adapters.driven.storage.sql_store import SqlStore
from replayer.adapters.driving.web.middleware import rate_limit_middleware
from replayer.core.scheduler import RequestScheduler
from replayer.ports.metrics import MetricsPort
from replayer.ports.rate_limit import RateLimiterPort
from replayer.ports.storage import RequestConfiguration, RequestResult

__all__ = ["HUB_KEY", "METRICS_KEY", "SCHEDULER_KEY", "STORE_KEY", "create_app"]

logger = logging.getLogger(__name__)

SCHEDULER_KEY = web.AppKey("scheduler", RequestScheduler)
STORE_KEY = web.AppKey("store", SqlStore)
HUB_KEY = web.AppKey("hub", WebSocketHub)
METRICS_KEY = web.AppKey("metrics", MetricsPort)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500

routes = web.RouteTableDef()


def _configuration_json(config: RequestConfiguration) -> dict[str, Any]:
    return {
        "id": config.id,
        "name": config.name,
        "apiEndpoint": config.api_endpoint,
        "hasBearerToken": bool(config.bearer_token),
        "delayBetweenRequests": config.delay_between_requests_ms,
        "maxIterations": config.max_iterations,
        "isActive": config.is_active,
        "trustSslCertificate": config.trust_ssl_certificate,
    }


def _result_json(result: RequestResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "apiConfigurationId": result.configuration_id,
        "requestPayload": result.request_payload,
        "responseContent": result.response_content,
        "responseTimeMs": result.response_time_ms,
        "isSuccessful": result.is_successful,
        "statusCode": result.status_code,
        "errorMessage": result.error_message,
        "requestTimestamp": result.request_timestamp.isoformat(),
        "iterationNumber": result.iteration_number,
    }


def _error(status: type[web.HTTPException], message: str) -> web.HTTPException:
    return status(text=json.dumps({"error": message}), content_type="application/json")


def _query_int(request: web.Request, name: str, default: int, low: int, high: int) -> int:
    raw = request.query.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise _error(web.HTTPBadRequest, f"{name} must be an integer") from None
    if not low <= value <= high:
        raise _error(web.HTTPBadRequest, f"{name} must be between {low} and {high}")
    return value


async def _configuration_or_404(request: web.Request) -> RequestConfiguration:
    configuration_id = int(request.match_info["id"])
    config = await request.app[STORE_KEY].get_configuration(configuration_id)
    if config is None:
        raise _error(web.HTTPNotFound, "Configuration not found")
    return config


# --- configurations / scheduler control ---


@routes.get("/api/configuration")
async def list_configurations(request: web.Request) -> web.Response:
    configs = await request.app[STORE_KEY].list_configurations()
    return web.json_response([_configuration_json(c) for c in configs])


@routes.get("/api/configuration/status")
async def get_status(request: web.Request) -> web.Response:
    body: dict[str, Any] = {"isRunning": request.app[SCHEDULER_KEY].is_running}
    metrics = request.app.get(METRICS_KEY)
    if metrics is not None:
        body["metrics"] = metrics.as_dict()
    return web.json_response(body)


@routes.post("/api/configuration/start-all")
async def start_all(request: web.Request) -> web.Response:
    await request.app[SCHEDULER_KEY].start()
    return web.json_response(
        {"message": "All active configurations started successfully", "isRunning": True}
    )


@routes.post("/api/configuration/stop-all")
async def stop_all(request: web.Request) -> web.Response:
    await request.app[SCHEDULER_KEY].stop()
    deactivated = await request.app[STORE_KEY].deactivate_all()
    return web.json_response(
        {
            "message": "All configurations stopped successfully",
            "isRunning": False,
            "deactivated": deactivated,
        }
    )


@routes.post(r"/api/configuration/{id:\d+}/start")
async def start_configuration(request: web.Request) -> web.Response:
    config = await _configuration_or_404(request)
    await request.app[STORE_KEY].set_active(config.id, True)

    scheduler = request.app[SCHEDULER_KEY]
    if not scheduler.is_running:
        await scheduler.start()

    return web.json_response({"message": "Configuration started successfully"})


@routes.post(r"/api/configuration/{id:\d+}/stop")
async def stop_configuration(request: web.Request) -> web.Response:
    config = await _configuration_or_404(request)
    await request.app[STORE_KEY].set_active(config.id, False)
    return web.json_response({"message": "Configuration stopped successfully"})


# --- results ---


@routes.get("/api/results/statistics")
async def get_statistics(request: web.Request) -> web.Response:
    return web.json_response(await request.app[STORE_KEY].statistics())


@routes.get(r"/api/results/statistics/configuration/{id:\d+}")
async def get_configuration_statistics(request: web.Request) -> web.Response:
    config = await _configuration_or_404(request)
    stats = await request.app[STORE_KEY].configuration_statistics(config.id)
    return web.json_response(stats)


@routes.get(r"/api/results/configuration/{id:\d+}")
async def list_configuration_results(request: web.Request) -> web.Response:
    """Page through a configuration's results, newest first.

    Query parameters ``page`` (1-based) and ``pageSize`` select the page;
    the total row count comes back in ``X-Total-Count``.
    """
    config = await _configuration_or_404(request)
    page = _query_int(request, "page", 1, 1, 1_000_000)
    page_size = _query_int(request, "pageSize", DEFAULT_PAGE_SIZE, 1, MAX_PAGE_SIZE)

    store = request.app[STORE_KEY]
    total = await store.count_results(config.id)
    results = await store.page_results(
        config.id, offset=(page - 1) * page_size, limit=page_size
    )
    return web.json_response(
        [_result_json(r) for r in results],
        headers={
            "X-Total-Count": str(total),
            "X-Page": str(page),
            "X-Page-Size": str(page_size),
        },
    )


@routes.get(r"/api/results/{id:\d+}")
async def get_result(request: web.Request) -> web.Response:
    found = await request.app[STORE_KEY].get_result(int(request.match_info["id"]))
    if found is None:
        raise _error(web.HTTPNotFound, "Result not found")
    result, configuration_name = found
    return web.json_response({**_result_json(result), "apiConfigurationName": configuration_name})


@routes.delete(r"/api/results/configuration/{id:\d+}")
async def delete_configuration_results(request: web.Request) -> web.Response:
    config = await _configuration_or_404(request)
    deleted = await request.app[STORE_KEY].clear_results(config.id)
    logger.info(f"Deleted {deleted} request logs for configuration {config.name}")
    return web.json_response(
        {"message": f"Deleted {deleted} request logs for configuration {config.name}"}
    )


# --- live updates ---


async def _handle_hub_command(hub: WebSocketHub, ws: web.WebSocketResponse, data: str) -> None:
    """Apply a ``{"action": "join"|"leave", "group": name}`` command."""
    try:
        command = json.loads(data)
        action = command["action"]
        group = str(command["group"])
    except (ValueError, KeyError, TypeError):
        await ws.send_json({"type": "Error", "data": {"message": "Malformed hub command"}})
        return

    if action == "join":
        hub.join(ws, group)
    elif action == "leave":
        hub.leave(ws, group)
    else:
        await ws.send_json({"type": "Error", "data": {"message": f"Unknown action: {action}"}})


@routes.get("/hubs/dashboard")
async def dashboard_hub(request: web.Request) -> web.WebSocketResponse:
    hub = request.app[HUB_KEY]
    ws = web.WebSocketResponse(heartbeat=30)
    await ws.prepare(request)

    hub.join(ws)
    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                await _handle_hub_command(hub, ws, msg.data)
            elif msg.type == WSMsgType.ERROR:
                logger.warning(f"Dashboard connection closed with error: {ws.exception()}")
    finally:
        hub.leave_all(ws)

    return ws


def create_app(
    scheduler: RequestScheduler,
    store: SqlStore,
    hub: WebSocketHub,
    rate_limiter: RateLimiterPort,
    metrics: MetricsPort | None = None,
) -> web.Application:
    """Build the control surface application.

    Args:
        scheduler: Scheduler exposed through start/stop/status routes.
        store: Configuration store and result sink.
        hub: Notification hub serving ``/hubs/dashboard``.
        rate_limiter: Limiter applied to state-changing routes.
        metrics: Optional request metrics reported by the status route.

    Returns:
        Configured aiohttp application.
    """
    app = web.Application(middlewares=[rate_limit_middleware(rate_limiter)])
    app[SCHEDULER_KEY] = scheduler
    app[STORE_KEY] = store
    app[HUB_KEY] = hub
    if metrics is not None:
        app[METRICS_KEY] = metrics
    app.add_routes(routes)
    return app
