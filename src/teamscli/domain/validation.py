"""Field validators shared by update requests, manifests and OAuth drafts."""

from __future__ import annotations

from urllib.parse import urlsplit

from .errors import ValidationError

HTTPS_PREFIX = "https://"


def validate_https_url(value: str, *, label: str) -> str:
    """Return ``value`` stripped, or raise unless it is an https URL with a host."""

    candidate = value.strip()
    if not candidate.lower().startswith(HTTPS_PREFIX):
        raise ValidationError(f"{label} must start with https://")
    try:
        host = urlsplit(candidate).hostname
    except ValueError as exc:
        raise ValidationError(f"{label} is not a valid URL: {candidate}") from exc
    if not host:
        raise ValidationError(f"{label} must include a domain")
    return candidate


def validate_length(
    value: str,
    *,
    label: str,
    max_length: int | None = None,
    min_length: int = 0,
) -> str:
    if len(value) < min_length:
        if min_length <= 1:
            raise ValidationError(f"{label} is required")
        raise ValidationError(f"{label} must be at least {min_length} characters")
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            f"{label} must be {max_length} characters or less (currently {len(value)})"
        )
    return value


def validate_required(value: str | None, *, label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()
