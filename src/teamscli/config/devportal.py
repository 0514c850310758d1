"""Teams Developer Portal configuration values.

One base URL serves three registries: app definitions, bot framework
registrations and OAuth configurations.
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var
from .http_resilience import RateLimit, ResilienceConfig

DEVPORTAL_BASE_URL = "https://dev.teams.microsoft.com/api"
DEVPORTAL_SCOPE = "https://dev.teams.microsoft.com/AppDefinitions.ReadWrite"
DEVPORTAL_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class DevPortalConfig:
    scope: str
    resilience: ResilienceConfig


def get_devportal_config(*, resilience: ResilienceConfig | None = None) -> DevPortalConfig:
    return DevPortalConfig(
        scope=DEVPORTAL_SCOPE,
        resilience=resilience
        or ResilienceConfig(
            name="devportal",
            base_url=optional_env_var("TEAMS_DEVPORTAL_BASE_URL") or DEVPORTAL_BASE_URL,
            timeout_seconds=env_float("TEAMS_HTTP_TIMEOUT", DEVPORTAL_TIMEOUT_SECONDS),
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            default_headers={"Accept": "application/json"},
        ),
    )
