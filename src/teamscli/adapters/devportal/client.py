"""Teams Developer Portal client: app definitions, bot registrations and OAuth configurations."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from teamscli.adapters.http_resilience import ResilientClient, ensure_success, run_sync
from teamscli.domain.errors import TeamsCliError
from teamscli.domain.model import ChannelRegistration

from .schema import (
    OAUTH_CONFIGURATION_ADAPTER,
    OAUTH_CONFIGURATION_LIST_ADAPTER,
    AppSummary,
    BotRegistrationPayload,
    ImportedApp,
    OAuthConfigurationCreated,
)
from .translator import channel_registration_payload, decode_package, parse_channel_registration

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from teamscli.config.devportal import DevPortalConfig
    from teamscli.config.http_resilience import ResilienceConfig
    from teamscli.domain.model import ApplicationRecord, ChannelOptions, IdentityProvider
    from teamscli.domain.ports import TokenProvider

    from .schema import OAuthConfiguration, OAuthConfigurationChanges, OAuthConfigurationDraft

log = getLogger(__name__)

OAUTH_PATH = "/v1.0/oauthConfigurations"


class DevPortalAPIError(TeamsCliError):
    """Raised when the Developer Portal answers with an unexpected payload."""


class DevPortalClient:
    """Synchronous facade over the Developer Portal REST API.

    Every public method opens a short-lived ``ResilientClient`` and runs one
    request (or one request plus a re-read) to completion.
    """

    def __init__(
        self,
        *,
        config: DevPortalConfig,
        token_provider: TokenProvider,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._token_provider = token_provider
        self._client_factory = client_factory or ResilientClient

    # App definitions -----------------------------------------------------------------

    def list_apps(self) -> list[AppSummary]:
        payload = run_sync(
            self._json_async(
                "GET", "/appdefinitions/my", action="fetch apps", params={"pageNumber": 1}
            )
        )
        if not isinstance(payload, list):
            raise DevPortalAPIError("Unexpected app list payload")
        return [AppSummary.model_validate(item) for item in payload]

    def fetch_app(self, teams_app_id: str) -> AppSummary:
        payload = run_sync(
            self._json_async("GET", f"/appdefinitions/{teams_app_id}", action="fetch app")
        )
        return AppSummary.model_validate(payload)

    def fetch_app_details(self, teams_app_id: str) -> ApplicationRecord:
        payload = run_sync(
            self._json_async(
                "GET", f"/appdefinitions/v2/{teams_app_id}", action="fetch app details"
            )
        )
        return _expect_object(payload, "app details")

    def replace_app_details(
        self, teams_app_id: str, record: ApplicationRecord
    ) -> ApplicationRecord:
        payload = run_sync(
            self._json_async(
                "POST",
                f"/appdefinitions/v2/{teams_app_id}",
                action="update app details",
                json=record,
            )
        )
        return _expect_object(payload, "app details")

    def fetch(self, resource_id: str) -> ApplicationRecord:
        return self.fetch_app_details(resource_id)

    def replace(self, resource_id: str, resource: ApplicationRecord) -> ApplicationRecord:
        return self.replace_app_details(resource_id, resource)

    def download_package(self, teams_app_id: str) -> bytes:
        response = run_sync(
            self._request_async(
                "GET", f"/appdefinitions/{teams_app_id}/manifest", action="download app package"
            )
        )
        return decode_package(response.text)

    def import_package(self, package: bytes) -> str:
        payload = run_sync(
            self._json_async(
                "POST",
                "/appdefinitions/v2/import",
                action="import app package",
                content=package,
                headers={"Content-Type": "application/zip"},
            )
        )
        return ImportedApp.model_validate(payload).teams_app_id

    # Bot registrations ---------------------------------------------------------------

    def register_bot(self, options: ChannelOptions) -> ChannelRegistration:
        registration = ChannelRegistration.for_new_bot(options)
        response = run_sync(
            self._request_async(
                "POST",
                "/botframework",
                action="register bot",
                json=channel_registration_payload(registration),
            )
        )
        payload = response.json() if response.content else None
        if isinstance(payload, dict) and payload.get("botId"):
            return parse_channel_registration(BotRegistrationPayload.model_validate(payload))
        return registration

    def fetch_bot(self, bot_id: str) -> ChannelRegistration:
        payload = run_sync(self._json_async("GET", f"/botframework/{bot_id}", action="fetch bot"))
        return parse_channel_registration(BotRegistrationPayload.model_validate(payload))

    def replace_bot(self, registration: ChannelRegistration) -> None:
        run_sync(
            self._request_async(
                "POST",
                f"/botframework/{registration.bot_id}",
                action="update bot",
                json=channel_registration_payload(registration),
            )
        )

    # OAuth configurations ------------------------------------------------------------

    def list_oauth_configurations(
        self, identity_provider: IdentityProvider | None = None
    ) -> list[OAuthConfiguration]:
        params = {"identityProvider": str(identity_provider)} if identity_provider else None
        payload = run_sync(
            self._json_async(
                "GET", OAUTH_PATH, action="fetch OAuth configurations", params=params
            )
        )
        return OAUTH_CONFIGURATION_LIST_ADAPTER.validate_python(payload)

    def fetch_oauth_configuration(self, config_id: str) -> OAuthConfiguration:
        return run_sync(self._fetch_oauth_async(config_id))

    def create_oauth_configuration(self, draft: OAuthConfigurationDraft) -> OAuthConfiguration:
        return run_sync(self._create_oauth_async(draft))

    def update_oauth_configuration(
        self, config_id: str, changes: OAuthConfigurationChanges
    ) -> OAuthConfiguration:
        return run_sync(self._update_oauth_async(config_id, changes))

    def delete_oauth_configuration(self, config_id: str) -> None:
        run_sync(
            self._request_async(
                "DELETE", f"{OAUTH_PATH}/{config_id}", action="delete OAuth configuration"
            )
        )

    async def _fetch_oauth_async(self, config_id: str) -> OAuthConfiguration:
        payload = await self._json_async(
            "GET", f"{OAUTH_PATH}/{config_id}", action="fetch OAuth configuration"
        )
        return OAUTH_CONFIGURATION_ADAPTER.validate_python(payload)

    async def _create_oauth_async(self, draft: OAuthConfigurationDraft) -> OAuthConfiguration:
        payload = await self._json_async(
            "POST", OAUTH_PATH, action="create OAuth configuration", json=draft.to_payload()
        )
        created = OAuthConfigurationCreated.model_validate(payload)
        config_id = created.configuration_registration_id.o_auth_config_id
        log.debug("Created OAuth configuration %s", config_id)
        return await self._fetch_oauth_async(config_id)

    async def _update_oauth_async(
        self, config_id: str, changes: OAuthConfigurationChanges
    ) -> OAuthConfiguration:
        await self._request_async(
            "PATCH",
            f"{OAUTH_PATH}/{config_id}",
            action="update OAuth configuration",
            json=changes.to_payload(),
        )
        return await self._fetch_oauth_async(config_id)

    # Transport -----------------------------------------------------------------------

    async def _json_async(self, method: str, path: str, *, action: str, **kwargs: Any) -> Any:
        response = await self._request_async(method, path, action=action, **kwargs)
        return response.json()

    async def _request_async(
        self,
        method: str,
        path: str,
        *,
        action: str,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        token = self._token_provider.get_token(self._config.scope)
        request_headers = {"Authorization": f"Bearer {token}", **(headers or {})}
        async with self._client_factory(self._resilience) as client:
            response = await client.request(method, path, headers=request_headers, **kwargs)
        log.debug("%s %s -> %s", method, path, response.status_code)
        return ensure_success(response, action)


def _expect_object(payload: object, what: str) -> ApplicationRecord:
    if not isinstance(payload, dict):
        raise DevPortalAPIError(f"Unexpected {what} payload")
    return payload
