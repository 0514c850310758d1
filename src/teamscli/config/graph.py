"""Identity service (Microsoft Graph) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var
from .http_resilience import RateLimit, ResilienceConfig

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPE = "https://graph.microsoft.com/Application.ReadWrite.All"
GRAPH_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class GraphConfig:
    scope: str
    resilience: ResilienceConfig


def get_graph_config(*, resilience: ResilienceConfig | None = None) -> GraphConfig:
    return GraphConfig(
        scope=GRAPH_SCOPE,
        resilience=resilience
        or ResilienceConfig(
            name="graph",
            base_url=optional_env_var("TEAMS_GRAPH_BASE_URL") or GRAPH_BASE_URL,
            timeout_seconds=env_float("TEAMS_HTTP_TIMEOUT", GRAPH_TIMEOUT_SECONDS),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={"Accept": "application/json"},
        ),
    )
