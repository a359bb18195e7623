"""Background scheduler replaying requests for active configurations."""

import asyncio
import logging
import threading
from collections.abc import Callable

from replayer.core.cancellation import CancellationToken
from replayer.core.request_executor import RequestExecutor
from replayer.ports.notifications import NotifierPort
from replayer.ports.settings import SettingsPort
from replayer.ports.storage import ConfigurationStorePort

__all__ = ["RequestScheduler"]

logger = logging.getLogger(__name__)


def _never_stop() -> bool:
    return False


class RequestScheduler:
    """Start/stop controlled, pass-based request scheduler.

    A supervisory loop runs for the whole process lifetime. Once per
    poll interval it checks the run-state and, only while running,
    executes one pass over the active configurations:

    1. Fetch active configurations from the store.
    2. For each one, stop early if the run was cancelled, process it,
       then wait its inter-request delay (cancellable).

    The run-state (``running`` flag plus current cancellation token) is
    guarded by one lock. ``start()`` and ``stop()`` are idempotent and
    never raise; status notifications are best-effort.
    """

    def __init__(
        self,
        settings: SettingsPort,
        store: ConfigurationStorePort,
        executor: RequestExecutor,
        notifier: NotifierPort,
    ) -> None:
        self._settings = settings
        self._store = store
        self._executor = executor
        self._notifier = notifier
        self._lock = threading.Lock()
        self._running = False
        self._closed = False
        self._token: CancellationToken | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """Current run-state; plain read."""
        return self._running

    async def start(self) -> bool:
        """Transition from stopped to running.

        Returns:
            True if the scheduler was started, False if it already ran or is closed.
        """
        with self._lock:
            if self._closed:
                logger.warning("Cannot start request loop - scheduler is closed")
                return False
            if self._running:
                return False
            self._token = CancellationToken()
            self._running = True

        logger.info("API request loop started")
        await self._publish_status(True)
        return True

    async def stop(self) -> bool:
        """Transition from running to stopped and cancel the current run.

        Does not wait for an in-flight request; the request observes the
        cancellation and no further configuration is processed.

        Returns:
            True if the scheduler was stopped, False if it was not running.
        """
        with self._lock:
            if not self._running:
                return False
            token, self._token = self._token, None
            self._running = False

        self._cancel_quietly(token)
        logger.info("API request loop stopped")
        await self._publish_status(False)
        return True

    def launch(self, stop_fn: Callable[[], bool] = _never_stop) -> asyncio.Task[None]:
        """Spawn the supervisory loop as a background task owned by the scheduler."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run(stop_fn))
        return self._task

    async def run(self, stop_fn: Callable[[], bool] = _never_stop) -> None:
        """Run the supervisory loop until stop_fn() returns True or the scheduler closes.

        Args:
            stop_fn: Callable that returns True when the process shuts down.

        Notes:
            - Errors in a pass are logged and followed by the error backoff;
              they never end the loop.
            - Task cancellation propagates (process shutdown).
        """
        logger.info("Request scheduler supervisory loop started")
        try:
            while not stop_fn() and not self._closed:
                try:
                    token = self._current_token()
                    if token is not None and not token.is_cancelled:
                        await self.run_pass(token)
                    await asyncio.sleep(self._settings.poll_interval_sec)
                except Exception as e:
                    logger.error(f"Error in request scheduler execution: {e}", exc_info=True)
                    await asyncio.sleep(self._settings.error_backoff_sec)
        finally:
            logger.info("Request scheduler supervisory loop exited")

    async def run_pass(self, token: CancellationToken) -> int:
        """Execute one pass over the currently active configurations.

        Args:
            token: Cancellation token of the run this pass belongs to.

        Returns:
            Number of configurations processed before the pass ended.
        """
        configurations = await self._store.list_active_configurations()
        processed = 0

        for config in configurations:
            if token.is_cancelled:
                logger.debug("Pass abandoned - request loop cancelled")
                break

            await self._executor.process(config, token)
            processed += 1

            if config.delay_between_requests_ms > 0 and not token.is_cancelled:
                await token.sleep(config.delay_between_requests_ms / 1000)

        return processed

    async def aclose(self) -> None:
        """Tear the scheduler down.

        Order: mark stopped and closed, cancel the token, release the
        token, then stop the supervisory task. Each step is attempted
        even if a previous one failed.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._running = False
            token, self._token = self._token, None

        if token is not None:
            self._cancel_quietly(token)
            try:
                token.close()
            except Exception as e:
                logger.warning(f"Error releasing cancellation token: {e}")

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await asyncio.gather(task, return_exceptions=True)
            except Exception as e:
                logger.warning(f"Error stopping supervisory loop: {e}")

        logger.info("Request scheduler closed")

    def _current_token(self) -> CancellationToken | None:
        with self._lock:
            if not self._running or self._closed:
                return None
            return self._token

    @staticmethod
    def _cancel_quietly(token: CancellationToken | None) -> None:
        """Cancel a swapped-out token; an already released token counts as cancelled."""
        if token is None or token.is_closed:
            return
        try:
            token.cancel()
        except Exception as e:
            logger.warning(f"Error cancelling request loop token: {e}")

    async def _publish_status(self, running: bool) -> None:
        try:
            await self._notifier.publish_status_changed(running)
        except Exception as e:
            logger.warning(f"Error notifying clients about system status change: {e}")
