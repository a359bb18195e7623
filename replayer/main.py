"""Application entrypoint."""

import asyncio
import logging

from aiohttp import web

from replayer.adapters.driven.config.settings import Settings, load_settings
from replayer.adapters.driven.http.client import HttpClient
from replayer.adapters.driven.logging.logging_config import configure_logs
from replayer.adapters.driven.metrics.request_metrics import RequestMetrics
from replayer.adapters.driven.notifications.hub import WebSocketHub
from replayer.adapters.driven.rate_limit.sliding_window import SlidingWindowRateLimiter
from replayer.adapters.driven.storage.sql_store import SqlStore, create_store_engine
from replayer.adapters.driving.signals import make_stop_on_sigterm
from replayer.adapters.driving.web.app import create_app
from replayer.core.request_executor import RequestExecutor
from replayer.core.scheduler import RequestScheduler
from replayer.ports.settings import SettingsPort

__all__ = ["main", "run"]

logger = logging.getLogger(__name__)


async def main() -> None:
    """Start the fraud scenario replayer service.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Prepare the database and seed configurations.
    4. Serve the control surface and run the scheduler's supervisory loop.
    5. Gracefully shutdown on SIGTERM/SIGINT.
    """
    configure_logs()
    logger.info("Starting fraud scenario replayer...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check DATABASE_URL, LISTEN_PORT, the *_SECONDS variables "
            "and that CONFIGURATION_SEED_FILE (if set) exists and is a valid JSON array.",
            exc,
        )
        return

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = SettingsPort(
        poll_interval_sec=config.poll_interval_sec,
        error_backoff_sec=config.error_backoff_sec,
        request_timeout_sec=config.request_timeout_sec,
    )

    store = SqlStore(create_store_engine(config.database_url))
    try:
        if not await prepare_store(store, config):
            return

        stop_event = make_stop_on_sigterm()
        hub = WebSocketHub()
        metrics = RequestMetrics()
        limiter = SlidingWindowRateLimiter(
            max_requests=config.rate_limit_max_requests,
            window_sec=config.rate_limit_window_sec,
        )

        async with HttpClient(timeout_sec=settings_port.request_timeout_sec) as http:
            executor = RequestExecutor(
                store=store,
                sink=store,
                notifier=hub,
                send_fn=http.send,
                metrics=metrics,
            )
            scheduler = RequestScheduler(
                settings=settings_port,
                store=store,
                executor=executor,
                notifier=hub,
            )
            runner = web.AppRunner(create_app(scheduler, store, hub, limiter, metrics))

            try:
                await runner.setup()
                await web.TCPSite(runner, config.listen_host, config.listen_port).start()
                logger.info(f"Control surface listening on {config.listen_host}:{config.listen_port}")

                scheduler.launch(stop_fn=stop_event.is_set)
                await stop_event.wait()
            except Exception as e:
                logger.error(f"Unhandled exception in service: {e}", exc_info=True)
            finally:
                await shutdown(scheduler, hub, runner)
    finally:
        await store.close()

    logger.info("Fraud scenario replayer stopped.")


async def prepare_store(store: SqlStore, config: Settings) -> bool:
    """Create the schema, check connectivity and seed configurations.

    Args:
        store: Store to prepare.
        config: Loaded settings with seed configurations.

    Returns:
        True if the store is usable, False if startup must abort.
    """
    try:
        await store.create_schema()
        await store.ping()
        if config.configurations:
            await store.seed_configurations([c.to_configuration() for c in config.configurations])
    except Exception as e:
        logger.error(f"Database unavailable at {config.database_url}, aborting startup: {e}")
        return False
    return True


async def shutdown(scheduler: RequestScheduler, hub: WebSocketHub, runner: web.AppRunner) -> None:
    """Release resources scheduler first, then its dependents.

    Each step runs even if an earlier one failed.
    """
    steps = (
        ("scheduler", scheduler.aclose),
        ("notification hub", hub.close),
        ("control surface", runner.cleanup),
    )
    for name, step in steps:
        try:
            await step()
        except Exception as e:
            logger.warning(f"Error shutting down {name}: {e}")


def run() -> None:
    """Console script entrypoint."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")


if __name__ == "__main__":
    run()
