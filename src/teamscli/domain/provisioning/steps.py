"""The individual steps of the provisioning pipeline."""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from teamscli.domain.model import ChannelOptions, PackageSpec
from teamscli.domain.packaging import (
    build_package,
    pack_manifest,
    rebind_manifest,
    rebind_package,
)

from .context import GeneratedManifest, ManifestDocument, PrebuiltPackage

if TYPE_CHECKING:
    from teamscli.domain.ports import (
        ChannelRegistrar,
        CredentialSink,
        IdentityProvisioner,
        PackageImporter,
    )

    from .context import ProvisioningState

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StepSucceeded:
    state: ProvisioningState


@dataclass(frozen=True, slots=True)
class StepFailed:
    step: str
    error: Exception


type StepOutcome = StepSucceeded | StepFailed


class ProvisioningStep(Protocol):
    """Contract implemented by each provisioning step."""

    name: str

    def run(self, state: ProvisioningState) -> ProvisioningState: ...


def execute_step(step: ProvisioningStep, state: ProvisioningState) -> StepOutcome:
    """Run ``step`` and capture its result or the error it raised."""

    try:
        return StepSucceeded(step.run(state))
    except Exception as exc:  # noqa: BLE001
        return StepFailed(step.name, exc)


@dataclass(slots=True)
class CreateIdentityStep:
    identities: IdentityProvisioner
    name: str = "create-identity"

    def run(self, state: ProvisioningState) -> ProvisioningState:
        identity = self.identities.create_identity(state.request.name)
        log.info("Created identity registration (client id %s)", identity.client_id)
        return replace(state, identity=identity)


@dataclass(slots=True)
class BuildPackageStep:
    """Produce the package to import, bound to the new identity's client id."""

    name: str = "build-package"

    def run(self, state: ProvisioningState) -> ProvisioningState:
        client_id = state.require_identity().client_id
        source = state.request.source
        match source:
            case PrebuiltPackage(content=content):
                package = rebind_package(content, client_id)
                log.info("Rebound supplied package to %s", client_id)
            case ManifestDocument(document=document):
                package = pack_manifest(rebind_manifest(document, client_id))
                log.info("Packed supplied manifest for %s", client_id)
            case GeneratedManifest(options=options):
                package = build_package(PackageSpec.from_options(options, app_id=client_id))
                log.info("Generated manifest for %s", client_id)
        return replace(state, package=package)


@dataclass(slots=True)
class CreateSecretStep:
    identities: IdentityProvisioner
    name: str = "create-secret"

    def run(self, state: ProvisioningState) -> ProvisioningState:
        secret = self.identities.create_secret(state.require_identity().registration_id)
        log.info("Generated client secret (expires %s)", secret.expires_at)
        return replace(state, secret=secret)


@dataclass(slots=True)
class ImportPackageStep:
    importer: PackageImporter
    name: str = "import-package"

    def run(self, state: ProvisioningState) -> ProvisioningState:
        teams_app_id = self.importer.import_package(state.require_package())
        log.info("Imported Teams app %s", teams_app_id)
        return replace(state, teams_app_id=teams_app_id)


@dataclass(slots=True)
class RegisterChannelStep:
    registrar: ChannelRegistrar
    name: str = "register-channel"

    def run(self, state: ProvisioningState) -> ProvisioningState:
        options = ChannelOptions(
            bot_id=state.require_identity().client_id,
            name=state.request.name,
            endpoint=state.request.endpoint,
        )
        channel = self.registrar.register_bot(options)
        log.info("Registered bot %s at %s", channel.bot_id, channel.messaging_endpoint)
        return replace(state, channel=channel)


@dataclass(slots=True)
class PersistCredentialsStep:
    """Write the credentials to the sink, or leave them for the caller to surface."""

    sink: CredentialSink | None = None
    name: str = "persist-credentials"

    def run(self, state: ProvisioningState) -> ProvisioningState:
        if self.sink is None:
            return state
        self.sink.write(state.credentials())
        log.info("Credentials written")
        return replace(state, persisted=True)
