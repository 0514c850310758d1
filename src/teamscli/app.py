"""Application orchestration entry points."""

from __future__ import annotations

import json
from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Any

import pydantic

from teamscli.adapters.auth import AzureIdentityTokenProvider
from teamscli.adapters.devportal import (
    DevPortalClient,
    OAuthConfigurationChanges,
    OAuthConfigurationDraft,
    manifest_to_app_record,
)
from teamscli.adapters.devportal.translator import app_overview
from teamscli.adapters.env_file import EnvFileSink
from teamscli.adapters.graph import GraphClient
from teamscli.config import (
    DEVPORTAL_SCOPE,
    DEVPORTAL_TOKEN_VAR,
    GRAPH_SCOPE,
    GRAPH_TOKEN_VAR,
    get_auth_config,
    get_devportal_config,
    get_graph_config,
)
from teamscli.domain.entity_updates import update_resource
from teamscli.domain.errors import NotFoundError, UpstreamError, ValidationError
from teamscli.domain.model import (
    ManifestOptions,
    PackageSpec,
    SignInStatus,
    first_bot_binding,
)
from teamscli.domain.packaging import (
    MANIFEST_ENTRY,
    PLACEHOLDER_BOT_ID,
    build_manifest,
    read_manifest,
)
from teamscli.domain.provisioning import (
    GeneratedManifest,
    ManifestDocument,
    PrebuiltPackage,
    ProvisioningRequest,
    build_provisioning_pipeline,
)
from teamscli.domain.validation import validate_https_url

if TYPE_CHECKING:
    from pathlib import Path

    from teamscli.adapters.devportal import AppSummary, OAuthConfiguration
    from teamscli.domain.entity_updates import AppDetailsUpdate
    from teamscli.domain.model import (
        AppOverview,
        ApplicationRecord,
        ChannelRegistration,
        Description,
        Developer,
        IdentityProvider,
        JsonObject,
        SignedInAccount,
    )
    from teamscli.domain.ports import (
        ChannelRegistrar,
        CredentialSink,
        IdentityProvisioner,
        PackageImporter,
        TokenProvider,
    )
    from teamscli.domain.provisioning import PackageSource, ProvisioningResult

log = getLogger(__name__)

DEFAULT_BOT_NAME = "Bot"


def build_token_provider() -> AzureIdentityTokenProvider:
    config = get_auth_config(
        scope_env_vars={GRAPH_SCOPE: GRAPH_TOKEN_VAR, DEVPORTAL_SCOPE: DEVPORTAL_TOKEN_VAR}
    )
    return AzureIdentityTokenProvider(config)


def build_graph_client(token_provider: TokenProvider | None = None) -> GraphClient:
    return GraphClient(
        config=get_graph_config(), token_provider=token_provider or build_token_provider()
    )


def build_devportal_client(token_provider: TokenProvider | None = None) -> DevPortalClient:
    return DevPortalClient(
        config=get_devportal_config(), token_provider=token_provider or build_token_provider()
    )


# Sign-in -------------------------------------------------------------------------------

SIGN_IN_SCOPES: tuple[str, ...] = (GRAPH_SCOPE, DEVPORTAL_SCOPE)


def sign_in(*, provider: AzureIdentityTokenProvider | None = None) -> SignedInAccount:
    """Sign in with the device-code flow unless an account is already remembered."""

    provider = provider or build_token_provider()
    existing = provider.account()
    if existing is not None:
        log.info("Already signed in as %s; sign out first to switch accounts", existing.username)
        return existing
    account = provider.login(SIGN_IN_SCOPES)
    log.info("Signed in as %s", account.username)
    return account


def sign_out(*, provider: AzureIdentityTokenProvider | None = None) -> SignedInAccount | None:
    account = (provider or build_token_provider()).logout()
    if account is None:
        log.info("Not signed in")
    else:
        log.info("Signed out of %s", account.username)
    return account


def sign_in_status(*, provider: AzureIdentityTokenProvider | None = None) -> SignInStatus:
    provider = provider or build_token_provider()
    return SignInStatus(
        account=provider.account(),
        env_token_scopes=provider.config.token_scopes_from_env(),
    )


# Files ---------------------------------------------------------------------------------


def read_manifest_file(path: Path) -> JsonObject:
    try:
        document = json.loads(path.read_text(encoding="utf-8-sig"))
    except FileNotFoundError as exc:
        raise ValidationError(f"File not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise ValidationError(f"{path} must contain a JSON object")
    return document


def load_package_source(
    *,
    manifest_path: Path | None = None,
    package_path: Path | None = None,
) -> PackageSource | None:
    """Return the caller-supplied package source, or ``None`` to generate one."""

    if manifest_path is not None and package_path is not None:
        raise ValidationError("Supply either a manifest or a package, not both")
    if package_path is not None:
        try:
            return PrebuiltPackage(package_path.read_bytes())
        except FileNotFoundError as exc:
            raise ValidationError(f"File not found: {package_path}") from exc
    if manifest_path is not None:
        return ManifestDocument(read_manifest_file(manifest_path))
    return None


def _manifest_short_name(source: PackageSource | None) -> str | None:
    match source:
        case PrebuiltPackage(content=content):
            document = read_manifest(content)
        case ManifestDocument(document=document):
            pass
        case _:
            return None
    name = document.get("name")
    if isinstance(name, Mapping) and isinstance(name.get("short"), str):
        return name["short"].strip() or None
    return None


# Provisioning --------------------------------------------------------------------------


def create_app(
    *,
    endpoint: str,
    name: str | None = None,
    source: PackageSource | None = None,
    description: Description | None = None,
    scopes: tuple[str, ...] | None = None,
    developer: Developer | None = None,
    env_file: Path | None = None,
    identities: IdentityProvisioner | None = None,
    importer: PackageImporter | None = None,
    registrar: ChannelRegistrar | None = None,
    sink: CredentialSink | None = None,
) -> ProvisioningResult:
    """Provision a bot-backed Teams app end to end.

    Without ``source`` a manifest is generated from the remaining options. The
    display name is ``name``, else the supplied manifest's short name, else "Bot".
    Resources created before a failing step are left in place and logged.
    """

    display_name = (name or "").strip() or _manifest_short_name(source) or DEFAULT_BOT_NAME
    if source is None:
        source = GeneratedManifest(
            ManifestOptions(
                name=display_name,
                endpoint=endpoint,
                description=description,
                scopes=scopes,
                developer=developer,
            )
        )
    request = ProvisioningRequest(name=display_name, endpoint=endpoint, source=source)

    if identities is None or importer is None or registrar is None:
        token_provider = build_token_provider()
        identities = identities or build_graph_client(token_provider)
        devportal = build_devportal_client(token_provider)
        importer = importer or devportal
        registrar = registrar or devportal
    if sink is None and env_file is not None:
        sink = EnvFileSink(env_file)

    pipeline = build_provisioning_pipeline(
        identities=identities, importer=importer, registrar=registrar, sink=sink
    )
    log.info("Creating Teams app %r with endpoint %s", display_name, request.endpoint)
    outcome = pipeline.run(request)
    result = outcome.unwrap()
    log.info("Created Teams app %s (bot %s)", result.teams_app_id, result.client_id)
    return result


# App definitions -----------------------------------------------------------------------


def list_apps(*, devportal: DevPortalClient | None = None) -> list[AppSummary]:
    return (devportal or build_devportal_client()).list_apps()


def describe_app(teams_app_id: str, *, devportal: DevPortalClient | None = None) -> AppOverview:
    """Return the app summary enriched with its full definition when that read succeeds."""

    client = devportal or build_devportal_client()
    summary = client.fetch_app(teams_app_id)
    try:
        details = client.fetch_app_details(teams_app_id)
    except UpstreamError as exc:
        log.warning("Showing summary only; app details unavailable: %s", exc)
        details = None
    return app_overview(summary, details)


def update_app_details(
    teams_app_id: str,
    update: AppDetailsUpdate,
    *,
    devportal: DevPortalClient | None = None,
) -> ApplicationRecord:
    if update.is_empty:
        raise ValidationError("No changes supplied")
    client = devportal or build_devportal_client()
    result = update_resource(client, teams_app_id, update.to_changes())
    log.info("Updated %s", ", ".join(update.to_changes()))
    return result


def upload_manifest(
    teams_app_id: str,
    document: Mapping[str, Any],
    *,
    devportal: DevPortalClient | None = None,
) -> ApplicationRecord:
    """Apply a manifest to an existing app, keeping every field the manifest does not map."""

    if not document.get("version"):
        raise ValidationError("Invalid manifest: missing version")
    changes = manifest_to_app_record(document)
    client = devportal or build_devportal_client()
    return update_resource(client, teams_app_id, changes)


def download_package(teams_app_id: str, *, devportal: DevPortalClient | None = None) -> bytes:
    return (devportal or build_devportal_client()).download_package(teams_app_id)


def download_manifest(
    teams_app_id: str, *, devportal: DevPortalClient | None = None
) -> JsonObject:
    return read_manifest(download_package(teams_app_id, devportal=devportal))


def create_manifest_file(
    options: ManifestOptions,
    output_dir: Path,
    *,
    bot_id: str | None = None,
) -> Path:
    """Write a generated ``manifest.json`` into ``output_dir`` and return its path."""

    if options.endpoint:
        validate_https_url(options.endpoint, label="Bot messaging endpoint")
    spec = PackageSpec.from_options(options, app_id=bot_id or PLACEHOLDER_BOT_ID)
    output_dir.mkdir(parents=True, exist_ok=True)
    target = output_dir / MANIFEST_ENTRY
    target.write_text(json.dumps(build_manifest(spec), indent=2) + "\n", encoding="utf-8")
    log.info("Manifest written to %s", target)
    return target


# Bot endpoint --------------------------------------------------------------------------


def _resolve_bot_id(client: DevPortalClient, teams_app_id: str) -> str:
    binding = first_bot_binding(client.fetch_app_details(teams_app_id))
    if binding is None:
        raise NotFoundError(f"App {teams_app_id} has no bot")
    return binding.bot_id


def get_bot_endpoint(teams_app_id: str, *, devportal: DevPortalClient | None = None) -> str:
    client = devportal or build_devportal_client()
    return client.fetch_bot(_resolve_bot_id(client, teams_app_id)).messaging_endpoint


def set_bot_endpoint(
    teams_app_id: str,
    endpoint: str,
    *,
    devportal: DevPortalClient | None = None,
) -> ChannelRegistration:
    """Point the app's first bot at ``endpoint``, keeping the rest of its registration."""

    endpoint = validate_https_url(endpoint, label="Bot messaging endpoint")
    client = devportal or build_devportal_client()
    registration = client.fetch_bot(_resolve_bot_id(client, teams_app_id))
    registration.messaging_endpoint = endpoint
    client.replace_bot(registration)
    log.info("Bot %s now receives messages at %s", registration.bot_id, endpoint)
    return registration


# OAuth configurations ------------------------------------------------------------------


def _validated[M: pydantic.BaseModel](model: type[M], values: Mapping[str, Any]) -> M:
    try:
        return model.model_validate(dict(values))
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'input'}: {error['msg']}"
            for error in exc.errors()
        )
        raise ValidationError(f"Invalid OAuth configuration: {problems}") from exc


def list_oauth_configurations(
    identity_provider: IdentityProvider | None = None,
    *,
    devportal: DevPortalClient | None = None,
) -> list[OAuthConfiguration]:
    return (devportal or build_devportal_client()).list_oauth_configurations(identity_provider)


def get_oauth_configuration(
    config_id: str, *, devportal: DevPortalClient | None = None
) -> OAuthConfiguration:
    return (devportal or build_devportal_client()).fetch_oauth_configuration(config_id)


def create_oauth_configuration(
    values: Mapping[str, Any], *, devportal: DevPortalClient | None = None
) -> OAuthConfiguration:
    draft = _validated(OAuthConfigurationDraft, values)
    return (devportal or build_devportal_client()).create_oauth_configuration(draft)


def update_oauth_configuration(
    config_id: str,
    values: Mapping[str, Any],
    *,
    devportal: DevPortalClient | None = None,
) -> OAuthConfiguration:
    changes = _validated(OAuthConfigurationChanges, values)
    if changes.is_empty:
        raise ValidationError("No changes supplied")
    return (devportal or build_devportal_client()).update_oauth_configuration(config_id, changes)


def delete_oauth_configuration(config_id: str, *, devportal: DevPortalClient | None = None) -> None:
    (devportal or build_devportal_client()).delete_oauth_configuration(config_id)
    log.info("Deleted OAuth configuration %s", config_id)
