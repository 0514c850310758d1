"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class BotScope(StrEnum):
    PERSONAL = "personal"
    TEAM = "team"
    GROUP_CHAT = "groupchat"


class AppRecordField(StrEnum):
    """Mutable fields of an application record, named as the registry names them."""

    SHORT_NAME = "shortName"
    LONG_NAME = "longName"
    SHORT_DESCRIPTION = "shortDescription"
    LONG_DESCRIPTION = "longDescription"
    VERSION = "version"
    DEVELOPER_NAME = "developerName"
    WEBSITE_URL = "websiteUrl"
    PRIVACY_URL = "privacyUrl"
    TERMS_OF_USE_URL = "termsOfUseUrl"


class IdentityProvider(StrEnum):
    CUSTOM = "Custom"
    MICROSOFT_ENTRA = "MicrosoftEntra"


class ApplicableToApps(StrEnum):
    SPECIFIC_APP = "SpecificApp"
    ANY_APP = "AnyApp"


class TargetAudience(StrEnum):
    HOME_TENANT = "HomeTenant"
    ANY_TENANT = "AnyTenant"


class TokenExchangeMethod(StrEnum):
    POST_REQUEST_BODY = "PostRequestBody"
    BASIC_AUTHORIZATION_HEADER = "BasicAuthorizationHeader"
