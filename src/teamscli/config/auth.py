"""Token acquisition configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .env import optional_env_var

# Public client of the Microsoft 365 Agents Toolkit, shared by CLI tooling for
# delegated sign-in.
DEFAULT_PUBLIC_CLIENT_ID = "7ea7c24c-b1f6-4a20-9d11-9ae12e9e7ac0"
DEFAULT_TENANT_ID = "organizations"
TOKEN_CACHE_NAME = "teams-cli"

APP_DIR_NAME: Final[str] = "teams-cli"
AUTH_RECORD_FILENAME: Final[str] = "auth_record.json"

GRAPH_TOKEN_VAR = "TEAMS_GRAPH_TOKEN"
DEVPORTAL_TOKEN_VAR = "TEAMS_DEVPORTAL_TOKEN"


def _default_config_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("APPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Roaming")
    else:
        base = os.getenv("XDG_CONFIG_HOME")
        base_path = Path(base) if base else (Path.home() / ".config")
    return base_path / APP_DIR_NAME


@dataclass(frozen=True, slots=True)
class AuthConfig:
    client_id: str = DEFAULT_PUBLIC_CLIENT_ID
    tenant_id: str = DEFAULT_TENANT_ID
    cache_name: str = TOKEN_CACHE_NAME
    static_tokens: dict[str, str] = field(default_factory=dict)
    config_dir: Path = field(default_factory=_default_config_dir)

    def record_path(self) -> Path:
        """Where the signed-in account's authentication record is kept."""
        return self.config_dir.expanduser() / AUTH_RECORD_FILENAME

    def token_scopes_from_env(self) -> tuple[str, ...]:
        return tuple(self.static_tokens)


def get_auth_config(*, scope_env_vars: dict[str, str] | None = None) -> AuthConfig:
    """Build the auth config, collecting pre-acquired tokens keyed by scope.

    ``scope_env_vars`` maps an OAuth scope to the environment variable that may hold
    an access token for it.
    """

    static_tokens: dict[str, str] = {}
    for scope, var in (scope_env_vars or {}).items():
        token = optional_env_var(var)
        if token is not None:
            static_tokens[scope] = token
    config_dir = optional_env_var("TEAMS_CLI_CONFIG_DIR")
    return AuthConfig(
        client_id=optional_env_var("TEAMS_CLIENT_ID") or DEFAULT_PUBLIC_CLIENT_ID,
        tenant_id=optional_env_var("TEAMS_TENANT_ID") or DEFAULT_TENANT_ID,
        static_tokens=static_tokens,
        config_dir=Path(config_dir) if config_dir else _default_config_dir(),
    )
