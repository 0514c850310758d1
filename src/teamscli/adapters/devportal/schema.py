"""Pydantic models describing the Teams Developer Portal payloads."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationInfo,
    field_validator,
    model_validator,
)

from teamscli.domain.model import ApplicableToApps, TargetAudience, TokenExchangeMethod
from teamscli.domain.validation import validate_https_url

OAUTH_DESCRIPTION_MAX = 126
OAUTH_CLIENT_ID_MAX = 126
OAUTH_CLIENT_SECRET_MIN = 10
OAUTH_CLIENT_SECRET_MAX = 2048

_OAUTH_ENDPOINT_LABELS = {
    "authorization_endpoint": "Authorization endpoint",
    "token_exchange_endpoint": "Token exchange endpoint",
    "token_refresh_endpoint": "Token refresh endpoint",
}


class DevPortalBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AppBotPayload(DevPortalBaseModel):
    bot_id: str = Field(alias="botId")
    scopes: list[str] = Field(default_factory=list)


class AppSummary(DevPortalBaseModel):
    app_id: str = Field(alias="appId")
    app_name: str | None = Field(default=None, alias="appName")
    version: str | None = None
    updated_at: str | None = Field(default=None, alias="updatedAt")
    teams_app_id: str = Field(alias="teamsAppId")
    bots: list[AppBotPayload] = Field(default_factory=list)

    @field_validator("bots", mode="before")
    @classmethod
    def _null_bots(cls, value: object) -> object:
        return [] if value is None else value


class ImportedApp(DevPortalBaseModel):
    teams_app_id: str = Field(alias="teamsAppId")


class BotRegistrationPayload(BaseModel):
    """A bot registration; keys not modelled here are kept in ``model_extra``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    bot_id: str = Field(alias="botId")
    name: str = ""
    description: str | None = ""
    messaging_endpoint: str = Field(default="", alias="messagingEndpoint")
    calling_endpoint: str | None = Field(default="", alias="callingEndpoint")
    configured_channels: list[str] = Field(default_factory=list, alias="configuredChannels")
    is_single_tenant: bool = Field(default=True, alias="isSingleTenant")


class OAuthConfigurationBase(DevPortalBaseModel):
    o_auth_config_id: str = Field(alias="oAuthConfigId")
    description: str = ""
    applicable_to_apps: ApplicableToApps | None = Field(default=None, alias="applicableToApps")
    m365_app_id: str | None = Field(default=None, alias="m365AppId")
    target_audience: TargetAudience | None = Field(default=None, alias="targetAudience")
    tenant_id: str | None = Field(default=None, alias="tenantId")
    client_id: str = Field(default="", alias="clientId")
    scopes: list[str] = Field(default_factory=list)
    target_urls_should_start_with: list[str] = Field(
        default_factory=list, alias="targetUrlsShouldStartWith"
    )
    resource_identifier_uri: str | None = Field(default=None, alias="resourceIdentifierUri")
    created_date_time: str | None = Field(default=None, alias="createdDateTime")


class CustomOAuthConfiguration(OAuthConfigurationBase):
    identity_provider: Literal["Custom"] = Field(alias="identityProvider")
    client_secret: str | None = Field(default=None, alias="clientSecret", repr=False)
    authorization_endpoint: str = Field(default="", alias="authorizationEndpoint")
    token_exchange_endpoint: str = Field(default="", alias="tokenExchangeEndpoint")
    token_refresh_endpoint: str | None = Field(default=None, alias="tokenRefreshEndpoint")
    is_pkce_enabled: bool = Field(default=False, alias="isPKCEEnabled")
    token_exchange_method_type: TokenExchangeMethod | None = Field(
        default=None, alias="tokenExchangeMethodType"
    )


class EntraOAuthConfiguration(OAuthConfigurationBase):
    identity_provider: Literal["MicrosoftEntra"] = Field(alias="identityProvider")


OAuthConfiguration = Annotated[
    CustomOAuthConfiguration | EntraOAuthConfiguration,
    Field(discriminator="identity_provider"),
]

OAUTH_CONFIGURATION_ADAPTER: TypeAdapter[OAuthConfiguration] = TypeAdapter(OAuthConfiguration)
OAUTH_CONFIGURATION_LIST_ADAPTER: TypeAdapter[list[OAuthConfiguration]] = TypeAdapter(
    list[OAuthConfiguration]
)


class ConfigurationRegistrationId(DevPortalBaseModel):
    o_auth_config_id: str = Field(alias="oAuthConfigId")


class OAuthConfigurationCreated(DevPortalBaseModel):
    configuration_registration_id: ConfigurationRegistrationId = Field(
        alias="configurationRegistrationId"
    )
    resource_identifier_uri: str | None = Field(default=None, alias="resourceIdentifierUri")


class _OAuthInput(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)

    @field_validator(
        "authorization_endpoint",
        "token_exchange_endpoint",
        "token_refresh_endpoint",
        check_fields=False,
    )
    @classmethod
    def _https_endpoint(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None:
            return None
        label = _OAUTH_ENDPOINT_LABELS.get(info.field_name or "", "Endpoint")
        return validate_https_url(value, label=label)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class OAuthConfigurationDraft(_OAuthInput):
    """Input for registering a custom OAuth configuration."""

    description: str = Field(min_length=1, max_length=OAUTH_DESCRIPTION_MAX)
    identity_provider: Literal["Custom"] = Field(default="Custom", alias="identityProvider")
    applicable_to_apps: ApplicableToApps = Field(
        default=ApplicableToApps.ANY_APP, alias="applicableToApps"
    )
    m365_app_id: str | None = Field(default=None, alias="m365AppId")
    target_audience: TargetAudience = Field(
        default=TargetAudience.HOME_TENANT, alias="targetAudience"
    )
    tenant_id: str | None = Field(default=None, alias="tenantId")
    client_id: str = Field(alias="clientId", min_length=1, max_length=OAUTH_CLIENT_ID_MAX)
    client_secret: str = Field(
        alias="clientSecret",
        min_length=OAUTH_CLIENT_SECRET_MIN,
        max_length=OAUTH_CLIENT_SECRET_MAX,
        repr=False,
    )
    scopes: list[str] = Field(default_factory=list)
    target_urls_should_start_with: list[str] = Field(
        default_factory=list, alias="targetUrlsShouldStartWith"
    )
    authorization_endpoint: str = Field(alias="authorizationEndpoint")
    token_exchange_endpoint: str = Field(alias="tokenExchangeEndpoint")
    token_refresh_endpoint: str | None = Field(default=None, alias="tokenRefreshEndpoint")
    is_pkce_enabled: bool = Field(default=False, alias="isPKCEEnabled")
    token_exchange_method_type: TokenExchangeMethod = Field(
        default=TokenExchangeMethod.POST_REQUEST_BODY, alias="tokenExchangeMethodType"
    )

    @model_validator(mode="after")
    def _specific_app_needs_app_id(self) -> OAuthConfigurationDraft:
        if self.applicable_to_apps is ApplicableToApps.SPECIFIC_APP and not self.m365_app_id:
            raise ValueError("m365AppId is required when applicableToApps is SpecificApp")
        return self


class OAuthConfigurationChanges(_OAuthInput):
    """Partial update of an OAuth configuration; unset fields are left alone upstream."""

    description: str | None = Field(default=None, min_length=1, max_length=OAUTH_DESCRIPTION_MAX)
    applicable_to_apps: ApplicableToApps | None = Field(default=None, alias="applicableToApps")
    m365_app_id: str | None = Field(default=None, alias="m365AppId")
    target_audience: TargetAudience | None = Field(default=None, alias="targetAudience")
    client_id: str | None = Field(
        default=None, alias="clientId", min_length=1, max_length=OAUTH_CLIENT_ID_MAX
    )
    client_secret: str | None = Field(
        default=None,
        alias="clientSecret",
        min_length=OAUTH_CLIENT_SECRET_MIN,
        max_length=OAUTH_CLIENT_SECRET_MAX,
        repr=False,
    )
    scopes: list[str] | None = None
    target_urls_should_start_with: list[str] | None = Field(
        default=None, alias="targetUrlsShouldStartWith"
    )
    authorization_endpoint: str | None = Field(default=None, alias="authorizationEndpoint")
    token_exchange_endpoint: str | None = Field(default=None, alias="tokenExchangeEndpoint")
    token_refresh_endpoint: str | None = Field(default=None, alias="tokenRefreshEndpoint")
    is_pkce_enabled: bool | None = Field(default=None, alias="isPKCEEnabled")
    token_exchange_method_type: TokenExchangeMethod | None = Field(
        default=None, alias="tokenExchangeMethodType"
    )

    @property
    def is_empty(self) -> bool:
        return not self.to_payload()
