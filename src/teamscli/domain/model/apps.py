"""Application records, bot bindings and package inputs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .enums import BotScope

type JsonObject = dict[str, Any]

# Full representation of an app definition as the registry returns it. Kept as a
# plain mapping so keys unknown to this tool survive every read-modify-write.
type ApplicationRecord = JsonObject

DEFAULT_BOT_SCOPES: tuple[str, ...] = tuple(scope.value for scope in BotScope)


@dataclass(frozen=True, slots=True)
class BotBinding:
    bot_id: str
    scopes: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any]) -> BotBinding:
        scopes = value.get("scopes") or ()
        return cls(bot_id=str(value["botId"]), scopes=tuple(str(scope) for scope in scopes))

    def to_mapping(self) -> JsonObject:
        return {"botId": self.bot_id, "scopes": list(self.scopes)}


def first_bot_binding(record: Mapping[str, Any]) -> BotBinding | None:
    """Return the binding used to resolve a channel endpoint, if the record has one."""

    bots = record.get("bots")
    if not isinstance(bots, list) or not bots:
        return None
    first = bots[0]
    if not isinstance(first, Mapping) or not first.get("botId"):
        return None
    return BotBinding.from_mapping(first)


@dataclass(frozen=True, slots=True)
class Developer:
    name: str
    website_url: str
    privacy_url: str
    terms_of_use_url: str

    def to_manifest(self) -> JsonObject:
        return {
            "name": self.name,
            "websiteUrl": self.website_url,
            "privacyUrl": self.privacy_url,
            "termsOfUseUrl": self.terms_of_use_url,
        }


DEFAULT_DEVELOPER = Developer(
    name="Developer",
    website_url="https://www.example.com",
    privacy_url="https://www.example.com/privacy",
    terms_of_use_url="https://www.example.com/terms",
)


@dataclass(frozen=True, slots=True)
class Description:
    short: str
    full: str | None = None


@dataclass(frozen=True, slots=True)
class ManifestOptions:
    """Caller-collected options for a generated manifest (everything but the id)."""

    name: str
    endpoint: str | None = None
    description: Description | None = None
    scopes: tuple[str, ...] | None = None
    developer: Developer | None = None


@dataclass(frozen=True, slots=True)
class PackageSpec:
    id: str
    name: str
    endpoint: str | None = None
    description: Description | None = None
    scopes: tuple[str, ...] | None = None
    developer: Developer | None = None

    @classmethod
    def from_options(cls, options: ManifestOptions, *, app_id: str) -> PackageSpec:
        return cls(
            id=app_id,
            name=options.name,
            endpoint=options.endpoint,
            description=options.description,
            scopes=options.scopes,
            developer=options.developer,
        )


@dataclass(frozen=True, slots=True)
class AppOverview:
    """Summary of an app, optionally enriched with its full definition."""

    teams_app_id: str
    app_id: str
    name: str | None
    version: str | None
    updated_at: str | None
    bots: tuple[BotBinding, ...] = ()
    details: ApplicationRecord | None = field(default=None, repr=False)

    @property
    def is_degraded(self) -> bool:
        return self.details is None
