"""Translate between Developer Portal payloads, manifests and domain values."""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Final

from teamscli.domain.errors import ValidationError
from teamscli.domain.model import (
    AppOverview,
    AppRecordField,
    BotBinding,
    ChannelRegistration,
)

if TYPE_CHECKING:
    from teamscli.domain.model import ApplicationRecord, JsonObject

    from .schema import AppSummary, BotRegistrationPayload

# Top-level manifest sections the registry accepts verbatim on an app definition.
PASSTHROUGH_MANIFEST_FIELDS: Final[tuple[str, ...]] = (
    "staticTabs",
    "configurableTabs",
    "composeExtensions",
    "permissions",
    "validDomains",
    "devicePermissions",
    "activities",
    "meetingExtensionDefinition",
    "authorization",
    "localizationInfo",
)

_DEVELOPER_FIELDS: Final[tuple[tuple[str, AppRecordField], ...]] = (
    ("name", AppRecordField.DEVELOPER_NAME),
    ("websiteUrl", AppRecordField.WEBSITE_URL),
    ("privacyUrl", AppRecordField.PRIVACY_URL),
    ("termsOfUseUrl", AppRecordField.TERMS_OF_USE_URL),
)


def _section(document: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = document.get(key)
    return value if isinstance(value, Mapping) else {}


def manifest_to_app_record(document: Mapping[str, Any]) -> JsonObject:
    """Map a manifest onto the registry's flattened app-definition fields.

    Only the keys produced here are meant to overwrite the current record; every
    other key of the record is left to the merge to preserve.
    """

    app_id = document.get("id")
    name = _section(document, "name")
    short_name = name.get("short")
    if not app_id:
        raise ValidationError("Invalid manifest: missing id")
    if not short_name:
        raise ValidationError("Invalid manifest: missing name.short")

    description = _section(document, "description")
    developer = _section(document, "developer")

    record: JsonObject = {
        "appId": app_id,
        AppRecordField.SHORT_NAME.value: short_name,
        AppRecordField.LONG_NAME.value: name.get("full") or short_name,
    }
    short_description = description.get("short")
    long_description = description.get("full") or short_description
    if short_description:
        record[AppRecordField.SHORT_DESCRIPTION.value] = short_description
    if long_description:
        record[AppRecordField.LONG_DESCRIPTION.value] = long_description
    for source, target in _DEVELOPER_FIELDS:
        if developer.get(source):
            record[target.value] = developer[source]
    if document.get("version"):
        record[AppRecordField.VERSION.value] = document["version"]

    if "accentColor" in document:
        record["accentColor"] = document["accentColor"]
    if "mpnId" in document:
        record["mpnId"] = document["mpnId"]

    bots = document.get("bots")
    if isinstance(bots, list):
        record["bots"] = [
            BotBinding.from_mapping(bot).to_mapping()
            for bot in bots
            if isinstance(bot, Mapping) and bot.get("botId")
        ]

    for key in PASSTHROUGH_MANIFEST_FIELDS:
        if key in document:
            record[key] = document[key]
    return record


def app_overview(summary: AppSummary, details: ApplicationRecord | None = None) -> AppOverview:
    return AppOverview(
        teams_app_id=summary.teams_app_id,
        app_id=summary.app_id,
        name=summary.app_name,
        version=summary.version,
        updated_at=summary.updated_at,
        bots=tuple(BotBinding(bot_id=bot.bot_id, scopes=tuple(bot.scopes)) for bot in summary.bots),
        details=details,
    )


def parse_channel_registration(payload: BotRegistrationPayload) -> ChannelRegistration:
    return ChannelRegistration(
        bot_id=payload.bot_id,
        name=payload.name,
        messaging_endpoint=payload.messaging_endpoint,
        calling_endpoint=payload.calling_endpoint or "",
        description=payload.description or "",
        configured_channels=list(payload.configured_channels),
        is_single_tenant=payload.is_single_tenant,
        extra=dict(payload.model_extra or {}),
    )


def channel_registration_payload(registration: ChannelRegistration) -> JsonObject:
    """Serialize the full registration, unmodelled upstream keys included."""

    return {
        **registration.extra,
        "botId": registration.bot_id,
        "name": registration.name,
        "description": registration.description,
        "messagingEndpoint": registration.messaging_endpoint,
        "callingEndpoint": registration.calling_endpoint,
        "configuredChannels": list(registration.configured_channels),
        "isSingleTenant": registration.is_single_tenant,
    }


def decode_package(body: str) -> bytes:
    """Decode the base64 package text, which may arrive as a JSON string literal."""

    text = body.strip()
    if text.startswith('"'):
        try:
            text = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError("App package response is not valid JSON") from exc
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("App package response is not valid base64") from exc
