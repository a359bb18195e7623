"""Execute one scheduled request for a single configuration."""

import asyncio
import datetime
import logging
from collections.abc import Callable
from dataclasses import replace

from replayer.core.cancellation import CancellationToken
from replayer.core.templating import render
from replayer.ports.http import HttpRequestDto, SendFn
from replayer.ports.metrics import MetricsPort, RequestAttemptDto
from replayer.ports.notifications import NotifierPort, ResultSummaryDto
from replayer.ports.storage import (
    ConfigurationStorePort,
    RequestConfiguration,
    RequestResult,
    ResultSinkPort,
)

__all__ = ["RequestExecutor", "get_now_time"]

logger = logging.getLogger(__name__)


def get_now_time() -> float:
    """Get current monotonic time in seconds.

    Returns:
        Current time in seconds (monotonic).
    """
    return asyncio.get_running_loop().time()


class RequestExecutor:
    """Turn one active configuration into exactly one recorded attempt.

    Steps per call:
    1. Derive the iteration number from the stored result count.
    2. Deactivate the configuration instead of sending once the cap is exceeded.
    3. Render the payload and POST it, honouring the run's cancellation token.
    4. Append the result row, deactivate once the cap is reached, update
       metrics and notify observers.

    Transport errors and non-2xx responses become failed result rows; any
    other error is logged and never escapes process().
    """

    def __init__(
        self,
        store: ConfigurationStorePort,
        sink: ResultSinkPort,
        notifier: NotifierPort,
        send_fn: SendFn,
        metrics: MetricsPort | None = None,
        render_fn: Callable[[str, int], str] = render,
    ) -> None:
        self._store = store
        self._sink = sink
        self._notifier = notifier
        self._send = send_fn
        self._metrics = metrics
        self._render = render_fn

    async def process(
        self, config: RequestConfiguration, token: CancellationToken
    ) -> RequestResult | None:
        """Process one configuration.

        Args:
            config: Active configuration to send a request for.
            token: Cancellation token of the current run.

        Returns:
            The stored result, or None when no row was written.
        """
        try:
            return await self._process(config, token)
        except Exception as e:
            logger.error(f"Error processing configuration {config.name}: {e}", exc_info=True)
            return None

    async def _process(
        self, config: RequestConfiguration, token: CancellationToken
    ) -> RequestResult | None:
        iteration = await self._store.count_results(config.id) + 1

        if config.max_iterations > 0 and iteration > config.max_iterations:
            await self._deactivate(config)
            return None

        payload = self._render(config.request_template, iteration)
        result = await self._send_request(config, payload, iteration, token)

        result_id = await self._sink.append_result(result)
        result = replace(result, id=result_id)

        if self._metrics:
            self._metrics.update(
                RequestAttemptDto(
                    configuration_id=config.id,
                    elapsed_ms=result.response_time_ms,
                    is_failed=not result.is_successful,
                    status_code=result.status_code,
                )
            )
            logger.debug(f"Request metrics: {self._metrics}")

        await self._notify(config, result)

        # The capped iteration is the last one; don't wait for the next pass.
        if config.max_iterations > 0 and iteration >= config.max_iterations:
            try:
                await self._deactivate(config)
            except Exception as e:
                logger.error(f"Error deactivating configuration {config.name}: {e}", exc_info=True)
        return result

    async def _deactivate(self, config: RequestConfiguration) -> None:
        await self._store.set_active(config.id, False)
        config.is_active = False
        logger.info(
            f"Configuration {config.name} reached max iterations "
            f"({config.max_iterations}) and was deactivated"
        )

    async def _send_request(
        self,
        config: RequestConfiguration,
        payload: str,
        iteration: int,
        token: CancellationToken,
    ) -> RequestResult:
        """Send the request and describe the outcome as a result row."""
        request = HttpRequestDto(
            url=config.api_endpoint,
            body=payload,
            bearer_token=config.bearer_token or None,
            trust_ssl_certificate=config.trust_ssl_certificate,
        )
        timestamp = datetime.datetime.now(datetime.UTC)
        started = get_now_time()

        try:
            reply = await token.guard(self._send(request))
        except Exception as e:
            elapsed_ms = int((get_now_time() - started) * 1000)
            logger.error(
                f"Exception during request {iteration} for {config.name}: {e!r}",
                exc_info=True,
            )
            return RequestResult(
                configuration_id=config.id,
                request_payload=payload,
                iteration_number=iteration,
                request_timestamp=timestamp,
                response_time_ms=elapsed_ms,
                status_code=0,
                is_successful=False,
                error_message=str(e) or type(e).__name__,
            )

        elapsed_ms = int((get_now_time() - started) * 1000)
        if reply.is_success:
            logger.info(
                f"Request {iteration} for {config.name} completed successfully in {elapsed_ms}ms"
            )
            return RequestResult(
                configuration_id=config.id,
                request_payload=payload,
                iteration_number=iteration,
                request_timestamp=timestamp,
                response_time_ms=elapsed_ms,
                status_code=reply.status,
                is_successful=True,
                response_content=reply.body,
            )

        error = f"HTTP {reply.status}: {reply.reason}"
        logger.warning(f"Request {iteration} for {config.name} failed: {error}")
        return RequestResult(
            configuration_id=config.id,
            request_payload=payload,
            iteration_number=iteration,
            request_timestamp=timestamp,
            response_time_ms=elapsed_ms,
            status_code=reply.status,
            is_successful=False,
            error_message=error,
        )

    async def _notify(self, config: RequestConfiguration, result: RequestResult) -> None:
        """Publish the new result; failures are logged only."""
        summary = ResultSummaryDto(
            id=result.id,
            name=config.name,
            configuration_id=config.id,
            iteration_number=result.iteration_number,
            request_timestamp=result.request_timestamp,
            response_time_ms=result.response_time_ms,
            is_successful=result.is_successful,
            status_code=result.status_code,
            error_message=result.error_message,
        )
        try:
            await self._notifier.publish_new_result(summary)
        except Exception as e:
            logger.error(f"Error sending notification for new result: {e}", exc_info=True)
