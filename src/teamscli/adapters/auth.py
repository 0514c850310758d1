"""Bearer token provider for the Graph and Developer Portal clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Protocol

from azure.identity import AuthenticationRecord, DeviceCodeCredential, TokenCachePersistenceOptions

from teamscli.domain.errors import Cancelled
from teamscli.domain.model import SignedInAccount

if TYPE_CHECKING:
    from collections.abc import Sequence

    from azure.core.credentials import AccessToken

    from teamscli.config.auth import AuthConfig

log = getLogger(__name__)


class InteractiveCredential(Protocol):
    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken: ...

    def authenticate(self, **kwargs: Any) -> AuthenticationRecord: ...


def _account(record: AuthenticationRecord) -> SignedInAccount:
    return SignedInAccount(
        username=record.username,
        tenant_id=record.tenant_id,
        home_account_id=record.home_account_id,
    )


@dataclass(slots=True)
class AzureIdentityTokenProvider:
    """Serve tokens for each scope, signing in with the device-code flow when needed.

    Tokens pre-acquired through the environment (see ``AuthConfig.static_tokens``)
    take precedence. Otherwise the first request for a scope prompts a device-code
    sign-in whose refresh token is kept in the persistent ``azure-identity`` cache.

    The cached tokens are only used silently while an authentication record exists
    at ``AuthConfig.record_path()``. ``login`` writes it and ``logout`` removes it.
    """

    config: AuthConfig
    credential: InteractiveCredential | None = None
    _tokens: dict[str, str] = field(default_factory=dict, init=False, repr=False)

    def get_token(self, scope: str) -> str:
        static = self.config.static_tokens.get(scope)
        if static is not None:
            return static
        cached = self._tokens.get(scope)
        if cached is not None:
            return cached
        credential = self.credential or self._build_credential()
        try:
            token = credential.get_token(scope).token
        except KeyboardInterrupt as exc:
            raise Cancelled("Sign-in interrupted by user") from exc
        self._tokens[scope] = token
        return token

    def account(self) -> SignedInAccount | None:
        record = self._load_record()
        return _account(record) if record is not None else None

    def login(self, scopes: Sequence[str]) -> SignedInAccount:
        """Run the device-code sign-in, remember the account and warm every scope."""

        credential = self.credential or self._build_credential()
        try:
            record = credential.authenticate(scopes=list(scopes[:1]))
        except KeyboardInterrupt as exc:
            raise Cancelled("Sign-in interrupted by user") from exc
        path = self.config.record_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(record.serialize(), encoding="utf-8")
        log.debug("Saved authentication record to %s", path)
        for scope in scopes:
            self.get_token(scope)
        return _account(record)

    def logout(self) -> SignedInAccount | None:
        account = self.account()
        self.config.record_path().unlink(missing_ok=True)
        self._tokens.clear()
        self.credential = None
        return account

    def _load_record(self) -> AuthenticationRecord | None:
        path = self.config.record_path()
        try:
            data = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return AuthenticationRecord.deserialize(data)
        except (ValueError, KeyError):
            log.warning("Ignoring unreadable authentication record %s", path)
            return None

    def _build_credential(self) -> InteractiveCredential:
        log.debug(
            "Signing in with client id %s (tenant %s)",
            self.config.client_id,
            self.config.tenant_id,
        )
        self.credential = DeviceCodeCredential(
            client_id=self.config.client_id,
            tenant_id=self.config.tenant_id,
            authentication_record=self._load_record(),
            cache_persistence_options=TokenCachePersistenceOptions(name=self.config.cache_name),
        )
        return self.credential
