"""Build, read and rebind Teams app packages.

A package is a zip archive holding ``manifest.json`` and the two icons the
manifest points at. Generated packages use 1x1 placeholder images.
"""

from __future__ import annotations

import copy
import io
import json
import zipfile
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import urlsplit

from teamscli.domain.errors import NotFoundError, ValidationError
from teamscli.domain.model import DEFAULT_BOT_SCOPES, DEFAULT_DEVELOPER

if TYPE_CHECKING:
    from collections.abc import Mapping

    from teamscli.domain.model import JsonObject, PackageSpec

MANIFEST_SCHEMA_URL: Final[str] = (
    "https://developer.microsoft.com/en-us/json-schemas/teams/v1.16/MicrosoftTeams.schema.json"
)
MANIFEST_VERSION: Final[str] = "1.16"
DEFAULT_APP_VERSION: Final[str] = "1.0.0"
DEFAULT_ACCENT_COLOR: Final[str] = "#FFFFFF"
PLACEHOLDER_BOT_ID: Final[str] = "00000000-0000-0000-0000-000000000000"

MANIFEST_ENTRY: Final[str] = "manifest.json"
COLOR_ICON_ENTRY: Final[str] = "color.png"
OUTLINE_ICON_ENTRY: Final[str] = "outline.png"

# Minimal valid PNG: one transparent pixel.
PLACEHOLDER_PNG: Final[bytes] = bytes(
    [
        0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A, 0x00, 0x00, 0x00, 0x0D,
        0x49, 0x48, 0x44, 0x52, 0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x01,
        0x08, 0x06, 0x00, 0x00, 0x00, 0x1F, 0x15, 0xC4, 0x89, 0x00, 0x00, 0x00,
        0x0A, 0x49, 0x44, 0x41, 0x54, 0x78, 0x9C, 0x63, 0x00, 0x01, 0x00, 0x00,
        0x05, 0x00, 0x01, 0x0D, 0x0A, 0x2D, 0xB4, 0x00, 0x00, 0x00, 0x00, 0x49,
        0x45, 0x4E, 0x44, 0xAE, 0x42, 0x60, 0x82,
    ]
)  # fmt: skip


def extract_domain(url: str) -> str | None:
    """Return the hostname of ``url``, or ``None`` when it does not parse as a URL."""

    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host or None


def build_manifest(spec: PackageSpec) -> JsonObject:
    """Generate a manifest for a single-bot app from ``spec``."""

    valid_domains: list[str] = []
    if spec.endpoint:
        domain = extract_domain(spec.endpoint)
        if domain:
            valid_domains.append(domain)

    description = spec.description
    short_description = description.short if description else spec.name
    full_description = (description.full or description.short) if description else spec.name
    developer = spec.developer or DEFAULT_DEVELOPER
    scopes = list(spec.scopes) if spec.scopes is not None else list(DEFAULT_BOT_SCOPES)

    return {
        "$schema": MANIFEST_SCHEMA_URL,
        "manifestVersion": MANIFEST_VERSION,
        "version": DEFAULT_APP_VERSION,
        "id": spec.id,
        "packageName": f"com.teams.{spec.id}",
        "developer": developer.to_manifest(),
        "icons": {"color": COLOR_ICON_ENTRY, "outline": OUTLINE_ICON_ENTRY},
        "name": {"short": spec.name, "full": spec.name},
        "description": {"short": short_description, "full": full_description},
        "accentColor": DEFAULT_ACCENT_COLOR,
        "bots": [
            {
                "botId": spec.id,
                "scopes": scopes,
                "supportsFiles": False,
                "isNotificationOnly": False,
            }
        ],
        "permissions": [],
        "validDomains": valid_domains,
    }


def build_package(spec: PackageSpec) -> bytes:
    return pack_manifest(build_manifest(spec))


def rebind_manifest(document: Mapping[str, Any], new_id: str) -> JsonObject:
    """Point the manifest and each of its bots at ``new_id``; nothing else changes."""

    rebound = copy.deepcopy(dict(document))
    rebound["id"] = new_id
    bots = rebound.get("bots")
    if isinstance(bots, list):
        for bot in bots:
            if isinstance(bot, dict):
                bot["botId"] = new_id
    return rebound


def pack_manifest(
    document: Mapping[str, Any],
    *,
    assets: Mapping[str, bytes] | None = None,
) -> bytes:
    """Zip ``document`` as ``manifest.json`` together with the icon assets.

    Without ``assets`` the two placeholder icons are used.
    """

    entries = dict(assets) if assets is not None else _placeholder_assets()
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        archive.writestr(MANIFEST_ENTRY, json.dumps(document, indent=2))
        for name, content in entries.items():
            if name == MANIFEST_ENTRY:
                continue
            archive.writestr(name, content)
    return buffer.getvalue()


def read_manifest(package: bytes) -> JsonObject:
    """Return the manifest held in ``package``."""

    with _open_archive(package) as archive:
        return _load_manifest(archive)


def read_package(package: bytes) -> tuple[JsonObject, dict[str, bytes]]:
    """Return the manifest and every other entry of ``package``, in archive order."""

    with _open_archive(package) as archive:
        manifest = _load_manifest(archive)
        assets = {
            info.filename: archive.read(info)
            for info in archive.infolist()
            if info.filename != MANIFEST_ENTRY and not info.is_dir()
        }
    return manifest, assets


def rebind_package(package: bytes, new_id: str) -> bytes:
    """Rebind the manifest inside ``package``, keeping every other entry as-is."""

    manifest, assets = read_package(package)
    return pack_manifest(rebind_manifest(manifest, new_id), assets=assets)


def _placeholder_assets() -> dict[str, bytes]:
    return {COLOR_ICON_ENTRY: PLACEHOLDER_PNG, OUTLINE_ICON_ENTRY: PLACEHOLDER_PNG}


def _open_archive(package: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(package))
    except zipfile.BadZipFile as exc:
        raise ValidationError("App package is not a valid zip archive") from exc


def _load_manifest(archive: zipfile.ZipFile) -> JsonObject:
    try:
        raw = archive.read(MANIFEST_ENTRY)
    except KeyError as exc:
        raise NotFoundError(f"{MANIFEST_ENTRY} not found in package") from exc
    try:
        document = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError(f"Invalid JSON in {MANIFEST_ENTRY}: {exc}") from exc
    if not isinstance(document, dict):
        raise ValidationError(f"{MANIFEST_ENTRY} must contain a JSON object")
    return document
