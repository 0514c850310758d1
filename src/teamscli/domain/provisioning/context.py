"""Inputs, intermediate state and results of one provisioning run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

from teamscli.domain.errors import ValidationError
from teamscli.domain.validation import validate_https_url, validate_required

if TYPE_CHECKING:
    from teamscli.domain.model import (
        ChannelRegistration,
        ClientSecret,
        IdentityRegistration,
        ManifestOptions,
    )

BOT_ID_KEY: Final[str] = "BOT_ID"
BOT_PASSWORD_KEY: Final[str] = "BOT_PASSWORD"  # noqa: S105
TEAMS_APP_ID_KEY: Final[str] = "TEAMS_APP_ID"
BOT_ENDPOINT_KEY: Final[str] = "BOT_ENDPOINT"


@dataclass(frozen=True, slots=True)
class PrebuiltPackage:
    """A package archive supplied by the caller."""

    content: bytes = field(repr=False)


@dataclass(frozen=True, slots=True)
class ManifestDocument:
    """A raw manifest supplied by the caller, packed with placeholder icons."""

    document: dict[str, Any]


@dataclass(frozen=True, slots=True)
class GeneratedManifest:
    """No manifest supplied; one is generated from the collected options."""

    options: ManifestOptions


type PackageSource = PrebuiltPackage | ManifestDocument | GeneratedManifest


@dataclass(frozen=True, slots=True)
class ProvisioningRequest:
    name: str
    endpoint: str
    source: PackageSource

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", validate_required(self.name, label="App name"))
        object.__setattr__(
            self, "endpoint", validate_https_url(self.endpoint, label="Bot messaging endpoint")
        )


@dataclass(frozen=True, slots=True)
class ProvisioningState:
    """Values produced so far; each step returns a copy with its own output filled in."""

    request: ProvisioningRequest
    identity: IdentityRegistration | None = None
    package: bytes | None = field(default=None, repr=False)
    secret: ClientSecret | None = None
    teams_app_id: str | None = None
    channel: ChannelRegistration | None = None
    persisted: bool = False

    def require_identity(self) -> IdentityRegistration:
        if self.identity is None:
            raise ValidationError("Identity has not been created yet")
        return self.identity

    def require_package(self) -> bytes:
        if self.package is None:
            raise ValidationError("App package has not been built yet")
        return self.package

    def require_secret(self) -> ClientSecret:
        if self.secret is None:
            raise ValidationError("Client secret has not been created yet")
        return self.secret

    def require_teams_app_id(self) -> str:
        if self.teams_app_id is None:
            raise ValidationError("App package has not been imported yet")
        return self.teams_app_id

    def created_resources(self) -> list[str]:
        """Describe the upstream resources this run has created so far."""

        created: list[str] = []
        if self.identity is not None:
            created.append(
                f"identity registration {self.identity.registration_id} "
                f"(client id {self.identity.client_id})"
            )
        if self.secret is not None:
            created.append(f"client secret '{self.secret.display_name}'")
        if self.teams_app_id is not None:
            created.append(f"Teams app {self.teams_app_id}")
        if self.channel is not None:
            created.append(f"bot registration {self.channel.bot_id}")
        return created

    def credentials(self) -> dict[str, str]:
        identity = self.require_identity()
        return {
            BOT_ID_KEY: identity.client_id,
            BOT_PASSWORD_KEY: self.require_secret().text,
            TEAMS_APP_ID_KEY: self.require_teams_app_id(),
            BOT_ENDPOINT_KEY: self.request.endpoint,
        }


@dataclass(frozen=True, slots=True)
class ProvisioningResult:
    client_id: str
    registration_id: str
    secret: ClientSecret
    teams_app_id: str
    endpoint: str
    channel: ChannelRegistration | None
    persisted: bool

    @classmethod
    def from_state(cls, state: ProvisioningState) -> ProvisioningResult:
        identity = state.require_identity()
        return cls(
            client_id=identity.client_id,
            registration_id=identity.registration_id,
            secret=state.require_secret(),
            teams_app_id=state.require_teams_app_id(),
            endpoint=state.request.endpoint,
            channel=state.channel,
            persisted=state.persisted,
        )

    def credentials(self) -> dict[str, str]:
        return {
            BOT_ID_KEY: self.client_id,
            BOT_PASSWORD_KEY: self.secret.text,
            TEAMS_APP_ID_KEY: self.teams_app_id,
            BOT_ENDPOINT_KEY: self.endpoint,
        }
