"""Ports used by the provisioning pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from teamscli.domain.model import (
        ChannelOptions,
        ChannelRegistration,
        ClientSecret,
        IdentityRegistration,
    )


@runtime_checkable
class IdentityProvisioner(Protocol):
    """Creates identity registrations and their secrets; neither call is idempotent."""

    def create_identity(self, display_name: str) -> IdentityRegistration: ...

    def create_secret(self, registration_id: str) -> ClientSecret: ...


@runtime_checkable
class PackageImporter(Protocol):
    def import_package(self, package: bytes) -> str:
        """Import ``package`` and return the registry's id for the new app."""
        ...


@runtime_checkable
class ChannelRegistrar(Protocol):
    def register_bot(self, options: ChannelOptions) -> ChannelRegistration: ...

    def fetch_bot(self, bot_id: str) -> ChannelRegistration: ...

    def replace_bot(self, registration: ChannelRegistration) -> None: ...


@runtime_checkable
class CredentialSink(Protocol):
    """Key-value destination for provisioning results."""

    def write(self, values: Mapping[str, str | None]) -> None: ...
