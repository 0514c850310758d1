"""Identity registrations and their client secrets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(frozen=True, slots=True)
class IdentityRegistration:
    registration_id: str
    client_id: str
    display_name: str


@dataclass(frozen=True, slots=True)
class ClientSecret:
    """A password credential; ``text`` is only ever returned by the creating call."""

    text: str = field(repr=False)
    display_name: str
    expires_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class SignedInAccount:
    username: str
    tenant_id: str
    home_account_id: str


@dataclass(frozen=True, slots=True)
class SignInStatus:
    account: SignedInAccount | None
    env_token_scopes: tuple[str, ...] = ()

    @property
    def signed_in(self) -> bool:
        return self.account is not None or bool(self.env_token_scopes)
