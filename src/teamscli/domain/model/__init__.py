"""Domain model for Teams apps, identities and channel registrations."""

from __future__ import annotations

from .apps import (
    DEFAULT_BOT_SCOPES,
    DEFAULT_DEVELOPER,
    AppOverview,
    ApplicationRecord,
    BotBinding,
    Description,
    Developer,
    JsonObject,
    ManifestOptions,
    PackageSpec,
    first_bot_binding,
)
from .channels import TEAMS_CHANNEL, ChannelOptions, ChannelRegistration
from .credentials import ClientSecret, IdentityRegistration, SignedInAccount, SignInStatus
from .enums import (
    ApplicableToApps,
    AppRecordField,
    BotScope,
    IdentityProvider,
    TargetAudience,
    TokenExchangeMethod,
)

__all__ = [
    "DEFAULT_BOT_SCOPES",
    "DEFAULT_DEVELOPER",
    "TEAMS_CHANNEL",
    "AppOverview",
    "AppRecordField",
    "ApplicableToApps",
    "ApplicationRecord",
    "BotBinding",
    "BotScope",
    "ChannelOptions",
    "ChannelRegistration",
    "ClientSecret",
    "Description",
    "Developer",
    "IdentityProvider",
    "IdentityRegistration",
    "JsonObject",
    "ManifestOptions",
    "PackageSpec",
    "SignInStatus",
    "SignedInAccount",
    "TargetAudience",
    "TokenExchangeMethod",
    "first_bot_binding",
]
