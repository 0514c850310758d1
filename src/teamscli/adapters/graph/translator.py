"""Translate Graph payloads into identity and credential values."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Final

from teamscli.domain.model import ClientSecret, IdentityRegistration

if TYPE_CHECKING:
    from .schema import ApplicationPayload, PasswordCredentialPayload

MULTI_TENANT_AUDIENCE: Final[str] = "AzureADMultipleOrgs"
SECRET_VALIDITY_YEARS: Final[int] = 2


def application_request(display_name: str) -> dict[str, Any]:
    return {"displayName": display_name, "signInAudience": MULTI_TENANT_AUDIENCE}


def secret_expiry(now: datetime) -> datetime:
    """Return ``now`` moved forward by the secret validity window."""

    try:
        return now.replace(year=now.year + SECRET_VALIDITY_YEARS)
    except ValueError:
        # Feb 29 has no counterpart two years on.
        return now.replace(year=now.year + SECRET_VALIDITY_YEARS, day=28)


def password_request(display_name: str, *, now: datetime | None = None) -> dict[str, Any]:
    start = now or datetime.now(UTC)
    end = secret_expiry(start)
    return {
        "passwordCredential": {
            "displayName": display_name,
            "endDateTime": end.isoformat().replace("+00:00", "Z"),
        }
    }


def parse_identity(payload: ApplicationPayload, *, fallback_name: str) -> IdentityRegistration:
    return IdentityRegistration(
        registration_id=payload.id,
        client_id=payload.app_id,
        display_name=payload.display_name or fallback_name,
    )


def parse_secret(payload: PasswordCredentialPayload, *, fallback_name: str) -> ClientSecret:
    return ClientSecret(
        text=payload.secret_text,
        display_name=payload.display_name or fallback_name,
        expires_at=payload.end_date_time,
    )
