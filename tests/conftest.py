from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from teamscli.config import (
    DEVPORTAL_SCOPE,
    GRAPH_SCOPE,
    DevPortalConfig,
    GraphConfig,
    ResilienceConfig,
)
from tests.support.http import FakeTokenProvider

if TYPE_CHECKING:
    from collections.abc import Iterator

GRAPH_TEST_URL = "https://graph.test/v1.0"
DEVPORTAL_TEST_URL = "https://devportal.test/api"


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "TEAMS_GRAPH_BASE_URL",
        "TEAMS_DEVPORTAL_BASE_URL",
        "TEAMS_HTTP_TIMEOUT",
        "TEAMS_TENANT_ID",
        "TEAMS_CLIENT_ID",
        "TEAMS_GRAPH_TOKEN",
        "TEAMS_DEVPORTAL_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def token_provider() -> FakeTokenProvider:
    return FakeTokenProvider()


@pytest.fixture
def graph_config() -> GraphConfig:
    return GraphConfig(
        scope=GRAPH_SCOPE,
        resilience=ResilienceConfig(name="graph", base_url=GRAPH_TEST_URL),
    )


@pytest.fixture
def devportal_config() -> DevPortalConfig:
    return DevPortalConfig(
        scope=DEVPORTAL_SCOPE,
        resilience=ResilienceConfig(name="devportal", base_url=DEVPORTAL_TEST_URL),
    )
