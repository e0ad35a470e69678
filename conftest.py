"""Shared test fixtures for the pantera-gps project."""

from typing import Callable, Iterator

import pytest

from pantera_gps.config import DashboardConfig
from pantera_gps.mock_server import MockLocationServer, MockResponse, ScriptedSource

CONFIG_ENV_VARS = (
    "API_BASE_URL",
    "POLLING_INTERVAL",
    "REQUEST_TIMEOUT",
    "DISPLAY_TZ",
    "APP_NAME",
    "APP_SUBTITLE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of config-dependent tests."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def scripted_server() -> Iterator[Callable[..., tuple[MockLocationServer, ScriptedSource]]]:
    """Start a local backend replaying the given responses."""
    servers: list[MockLocationServer] = []

    def factory(*responses: MockResponse) -> tuple[MockLocationServer, ScriptedSource]:
        source = ScriptedSource(responses)
        server = MockLocationServer(source)
        server.start()
        servers.append(server)
        return server, source

    yield factory
    for server in servers:
        server.stop()


@pytest.fixture
def config_for() -> Callable[[str], DashboardConfig]:
    """Config pointing at a test server, with a short interval and UTC display."""

    def factory(base_url: str) -> DashboardConfig:
        return DashboardConfig(
            api_base_url=base_url,
            polling_interval_ms=50,
            request_timeout_seconds=2.0,
            display_tz="UTC",
        ).validated()

    return factory
