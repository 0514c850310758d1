"""In-memory implementations of the provisioning and update ports."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from azure.core.credentials import AccessToken
from azure.identity import AuthenticationRecord

from teamscli.domain.errors import UpstreamError
from teamscli.domain.model import ChannelRegistration, ClientSecret, IdentityRegistration

if TYPE_CHECKING:
    from collections.abc import Mapping

    from teamscli.domain.model import ChannelOptions


@dataclass(slots=True)
class FakeIdentities:
    calls: list[str] = field(default_factory=list)
    fail_secret: bool = False

    def create_identity(self, display_name: str) -> IdentityRegistration:
        self.calls.append(f"identity:{display_name}")
        return IdentityRegistration(
            registration_id="reg-1", client_id="client-1", display_name=display_name
        )

    def create_secret(self, registration_id: str) -> ClientSecret:
        self.calls.append(f"secret:{registration_id}")
        if self.fail_secret:
            raise UpstreamError("create client secret", status=403, body="Forbidden")
        return ClientSecret(
            text="s3cr3t-value",
            display_name="default",
            expires_at=datetime(2028, 1, 1, tzinfo=UTC),
        )


@dataclass(slots=True)
class FakeImporter:
    packages: list[bytes] = field(default_factory=list)
    error: Exception | None = None

    def import_package(self, package: bytes) -> str:
        if self.error is not None:
            raise self.error
        self.packages.append(package)
        return "teams-app-1"


@dataclass(slots=True)
class FakeRegistrar:
    registrations: dict[str, ChannelRegistration] = field(default_factory=dict)
    replaced: list[ChannelRegistration] = field(default_factory=list)

    def register_bot(self, options: ChannelOptions) -> ChannelRegistration:
        registration = ChannelRegistration.for_new_bot(options)
        self.registrations[registration.bot_id] = registration
        return registration

    def fetch_bot(self, bot_id: str) -> ChannelRegistration:
        return copy.deepcopy(self.registrations[bot_id])

    def replace_bot(self, registration: ChannelRegistration) -> None:
        self.replaced.append(registration)
        self.registrations[registration.bot_id] = registration


@dataclass(slots=True)
class MemorySink:
    values: dict[str, str | None] = field(default_factory=dict)

    def write(self, values: Mapping[str, str | None]) -> None:
        self.values.update(values)


@dataclass(slots=True)
class MemoryResourceStore:
    """Whole-object store; ``replace`` echoes the submitted object back."""

    resources: dict[str, dict[str, Any]] = field(default_factory=dict)
    submitted: list[dict[str, Any]] = field(default_factory=list)

    def fetch(self, resource_id: str) -> dict[str, Any]:
        return copy.deepcopy(self.resources[resource_id])

    def replace(self, resource_id: str, resource: dict[str, Any]) -> dict[str, Any]:
        self.submitted.append(resource)
        self.resources[resource_id] = copy.deepcopy(resource)
        return copy.deepcopy(resource)


@dataclass(slots=True)
class FakeCredential:
    requested: list[str] = field(default_factory=list)
    interrupt: bool = False
    authenticated: list[list[str]] = field(default_factory=list)

    def get_token(self, *scopes: str, **_: object) -> AccessToken:
        if self.interrupt:
            raise KeyboardInterrupt
        self.requested.extend(scopes)
        return AccessToken(f"token-{len(self.requested)}", 0)

    def authenticate(self, *, scopes: list[str], **_: object) -> AuthenticationRecord:
        if self.interrupt:
            raise KeyboardInterrupt
        self.authenticated.append(scopes)
        return AuthenticationRecord(
            tenant_id="tenant-1",
            client_id="client-1",
            authority="login.microsoftonline.com",
            home_account_id="home-1",
            username="ada@contoso.example.com",
        )
