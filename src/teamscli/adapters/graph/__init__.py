"""Public interface for the Microsoft Graph adapter."""

from __future__ import annotations

from .client import GraphClient
from .schema import ApplicationPayload, PasswordCredentialPayload
from .translator import parse_identity, parse_secret

__all__ = [
    "ApplicationPayload",
    "GraphClient",
    "PasswordCredentialPayload",
    "parse_identity",
    "parse_secret",
]
