"""Application configuration helpers."""

from __future__ import annotations

from teamscli.common.logging import configure_logging

from .auth import (
    DEVPORTAL_TOKEN_VAR,
    GRAPH_TOKEN_VAR,
    AuthConfig,
    get_auth_config,
)
from .devportal import DEVPORTAL_SCOPE, DevPortalConfig, get_devportal_config
from .env import optional_env_var
from .errors import ConfigurationError
from .graph import GRAPH_SCOPE, GraphConfig, get_graph_config
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

__all__ = [
    "DEVPORTAL_SCOPE",
    "DEVPORTAL_TOKEN_VAR",
    "GRAPH_SCOPE",
    "GRAPH_TOKEN_VAR",
    "AuthConfig",
    "ConfigurationError",
    "DevPortalConfig",
    "GraphConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "configure_logging",
    "get_auth_config",
    "get_devportal_config",
    "get_graph_config",
    "optional_env_var",
]
