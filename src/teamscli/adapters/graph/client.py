"""Microsoft Graph client for identity registrations and client secrets."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from teamscli.adapters.http_resilience import ResilientClient, ensure_success, run_sync

from .schema import ApplicationPayload, PasswordCredentialPayload
from .translator import application_request, parse_identity, parse_secret, password_request

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from teamscli.config.graph import GraphConfig
    from teamscli.config.http_resilience import ResilienceConfig
    from teamscli.domain.model import ClientSecret, IdentityRegistration
    from teamscli.domain.ports import TokenProvider

log = getLogger(__name__)

DEFAULT_SECRET_NAME = "default"


class GraphClient:
    """Create identity registrations and secrets.

    Neither call is idempotent and neither is retried: a lost response can leave
    a registration or secret behind upstream.
    """

    def __init__(
        self,
        *,
        config: GraphConfig,
        token_provider: TokenProvider,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._token_provider = token_provider
        self._client_factory = client_factory or ResilientClient

    def create_identity(self, display_name: str) -> IdentityRegistration:
        return run_sync(self._create_identity_async(display_name))

    def create_secret(
        self,
        registration_id: str,
        *,
        display_name: str = DEFAULT_SECRET_NAME,
        now: datetime | None = None,
    ) -> ClientSecret:
        return run_sync(
            self._create_secret_async(registration_id, display_name=display_name, now=now)
        )

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token_provider.get_token(self._config.scope)}"}

    async def _create_identity_async(self, display_name: str) -> IdentityRegistration:
        headers = self._headers()
        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                "/applications",
                json=application_request(display_name),
                headers=headers,
            )
        ensure_success(response, "create app registration")
        payload = ApplicationPayload.model_validate(response.json())
        log.debug("Created application object %s", payload.id)
        return parse_identity(payload, fallback_name=display_name)

    async def _create_secret_async(
        self,
        registration_id: str,
        *,
        display_name: str,
        now: datetime | None,
    ) -> ClientSecret:
        headers = self._headers()
        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                f"/applications/{registration_id}/addPassword",
                json=password_request(display_name, now=now),
                headers=headers,
            )
        ensure_success(response, "create client secret")
        payload = PasswordCredentialPayload.model_validate(response.json())
        return parse_secret(payload, fallback_name=display_name)

