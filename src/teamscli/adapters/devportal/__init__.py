"""Public interface for the Teams Developer Portal adapter."""

from __future__ import annotations

from .client import DevPortalAPIError, DevPortalClient
from .schema import (
    AppSummary,
    CustomOAuthConfiguration,
    EntraOAuthConfiguration,
    OAuthConfiguration,
    OAuthConfigurationChanges,
    OAuthConfigurationDraft,
)
from .translator import decode_package, manifest_to_app_record

__all__ = [
    "AppSummary",
    "CustomOAuthConfiguration",
    "DevPortalAPIError",
    "DevPortalClient",
    "EntraOAuthConfiguration",
    "OAuthConfiguration",
    "OAuthConfigurationChanges",
    "OAuthConfigurationDraft",
    "decode_package",
    "manifest_to_app_record",
]
