"""In-memory port fakes shared by the test suite."""

from collections.abc import Callable
from dataclasses import replace

import pytest

from replayer.ports.http import HttpReplyDto, HttpRequestDto
from replayer.ports.notifications import ResultSummaryDto
from replayer.ports.settings import SettingsPort
from replayer.ports.storage import RequestConfiguration, RequestResult


class FakeStore:
    """Configuration store and result sink kept in dictionaries."""

    def __init__(self) -> None:
        self.configurations: dict[int, RequestConfiguration] = {}
        self.results: list[RequestResult] = []
        self.list_calls = 0
        self.list_error: Exception | None = None

    def add(self, config: RequestConfiguration) -> RequestConfiguration:
        self.configurations[config.id] = config
        return config

    def results_for(self, configuration_id: int) -> list[RequestResult]:
        return [r for r in self.results if r.configuration_id == configuration_id]

    async def list_active_configurations(self) -> list[RequestConfiguration]:
        self.list_calls += 1
        if self.list_error is not None:
            error, self.list_error = self.list_error, None
            raise error
        return [replace(c) for c in self.configurations.values() if c.is_active]

    async def count_results(self, configuration_id: int) -> int:
        return len(self.results_for(configuration_id))

    async def set_active(self, configuration_id: int, active: bool) -> None:
        self.configurations[configuration_id].is_active = active

    async def append_result(self, result: RequestResult) -> int:
        result_id = len(self.results) + 1
        self.results.append(replace(result, id=result_id))
        return result_id


class FakeNotifier:
    """Notifier recording every published event."""

    def __init__(self) -> None:
        self.statuses: list[bool] = []
        self.results: list[ResultSummaryDto] = []
        self.error: Exception | None = None

    async def publish_status_changed(self, running: bool) -> None:
        if self.error is not None:
            raise self.error
        self.statuses.append(running)

    async def publish_new_result(self, summary: ResultSummaryDto) -> None:
        if self.error is not None:
            raise self.error
        self.results.append(summary)


class FakeSender:
    """Send function replaying queued replies or exceptions, then 200 OK."""

    def __init__(self) -> None:
        self.outcomes: list[HttpReplyDto | Exception] = []
        self.requests: list[HttpRequestDto] = []

    async def __call__(self, req: HttpRequestDto) -> HttpReplyDto:
        self.requests.append(req)
        outcome = self.outcomes.pop(0) if self.outcomes else HttpReplyDto(200, "OK", '{"ok":true}')
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def fake_sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def fast_settings() -> SettingsPort:
    """Scheduler settings without real waiting."""
    return SettingsPort(poll_interval_sec=0, error_backoff_sec=0, request_timeout_sec=5)


@pytest.fixture
def make_configuration() -> Callable[..., RequestConfiguration]:
    """Factory for active configurations with no delay and no cap."""

    def factory(config_id: int = 1, **overrides: object) -> RequestConfiguration:
        values: dict[str, object] = {
            "id": config_id,
            "name": f"config-{config_id}",
            "api_endpoint": f"http://fraud.test/api/{config_id}",
            "request_template": '{"iteration": {{iteration}}}',
            "delay_between_requests_ms": 0,
            "max_iterations": 0,
            "is_active": True,
        }
        values.update(overrides)
        return RequestConfiguration(**values)  # type: ignore[arg-type]

    return factory


def make_n_shot_stop(n: int) -> Callable[[], bool]:
    """Create stop function that returns True after N calls."""
    counter = 0

    def stop() -> bool:
        nonlocal counter
        counter += 1
        return counter > n

    return stop


@pytest.fixture
def n_shot_stop() -> Callable[[int], Callable[[], bool]]:
    return make_n_shot_stop
