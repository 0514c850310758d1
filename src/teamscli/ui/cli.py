# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from teamscli.app import (
    create_app,
    create_manifest_file,
    create_oauth_configuration,
    delete_oauth_configuration,
    describe_app,
    download_manifest,
    download_package,
    get_bot_endpoint,
    get_oauth_configuration,
    list_apps,
    list_oauth_configurations,
    load_package_source,
    read_manifest_file,
    set_bot_endpoint,
    sign_in,
    sign_in_status,
    sign_out,
    update_app_details,
    update_oauth_configuration,
    upload_manifest,
)
from teamscli.config import ConfigurationError, configure_logging
from teamscli.domain.entity_updates import AppDetailsUpdate
from teamscli.domain.errors import Cancelled, TeamsCliError, ValidationError
from teamscli.domain.model import (
    ApplicableToApps,
    BotScope,
    Description,
    Developer,
    IdentityProvider,
    ManifestOptions,
    TargetAudience,
    TokenExchangeMethod,
)
from teamscli.domain.validation import validate_https_url, validate_required

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from pydantic import BaseModel

    from teamscli.domain.model import AppOverview, SignedInAccount
    from teamscli.domain.provisioning import ProvisioningResult

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130

_OAUTH_OPTIONS: tuple[str, ...] = (
    "description",
    "client_id",
    "client_secret",
    "authorization_endpoint",
    "token_exchange_endpoint",
    "token_refresh_endpoint",
    "applicable_to_apps",
    "m365_app_id",
    "target_audience",
    "tenant_id",
    "scopes",
    "target_urls",
    "pkce",
    "token_exchange_method",
)
# Options whose OAuth configuration field is named differently
_OAUTH_FIELD_NAMES: dict[str, str] = {
    "target_urls": "target_urls_should_start_with",
    "pkce": "is_pkce_enabled",
    "token_exchange_method": "token_exchange_method_type",
}


def _emit(value: object) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False))


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True, mode="json")


def _overview_to_json(overview: AppOverview) -> dict[str, Any]:
    return {
        "teamsAppId": overview.teams_app_id,
        "appId": overview.app_id,
        "appName": overview.name,
        "version": overview.version,
        "updatedAt": overview.updated_at,
        "bots": [bot.to_mapping() for bot in overview.bots],
        "details": overview.details,
    }


def _result_to_json(result: ProvisioningResult) -> dict[str, Any]:
    values: dict[str, Any] = {
        "teamsAppId": result.teams_app_id,
        "botId": result.client_id,
        "registrationId": result.registration_id,
        "endpoint": result.endpoint,
        "secretExpiresAt": (
            result.secret.expires_at.isoformat() if result.secret.expires_at else None
        ),
    }
    if not result.persisted:
        # Only shown here: the secret cannot be read back later.
        values["credentials"] = result.credentials()
    return values


# Parser --------------------------------------------------------------------------------


def _add_manifest_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--description", type=str, help="Short description of the app")
    parser.add_argument("--long-description", type=str, help="Full description of the app")
    parser.add_argument(
        "--scope",
        dest="scopes",
        action="append",
        choices=[scope.value for scope in BotScope],
        help="Bot scope (repeatable; defaults to all scopes)",
    )
    developer = parser.add_argument_group("developer", "Publisher details (all four or none)")
    developer.add_argument("--developer-name", type=str)
    developer.add_argument("--website-url", type=str)
    developer.add_argument("--privacy-url", type=str)
    developer.add_argument("--terms-of-use-url", type=str)


def _add_oauth_options(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument("--description", type=str, required=required)
    parser.add_argument("--client-id", type=str, required=required)
    parser.add_argument("--client-secret", type=str, required=required)
    parser.add_argument("--authorization-endpoint", type=str, required=required)
    parser.add_argument("--token-exchange-endpoint", type=str, required=required)
    parser.add_argument("--token-refresh-endpoint", type=str)
    parser.add_argument(
        "--applicable-to-apps", choices=[value.value for value in ApplicableToApps]
    )
    parser.add_argument("--m365-app-id", type=str, help="Required with SpecificApp")
    parser.add_argument("--target-audience", choices=[value.value for value in TargetAudience])
    parser.add_argument("--tenant-id", type=str)
    parser.add_argument("--scope", dest="scopes", action="append", help="OAuth scope (repeatable)")
    parser.add_argument(
        "--target-url",
        dest="target_urls",
        action="append",
        help="URL prefix the token may be sent to (repeatable)",
    )
    parser.add_argument(
        "--pkce",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable PKCE",
    )
    parser.add_argument(
        "--token-exchange-method", choices=[value.value for value in TokenExchangeMethod]
    )


def _build_parser() -> argparse.ArgumentParser:  # noqa: PLR0915
    parser = argparse.ArgumentParser(prog="teams", description="Manage Microsoft Teams apps")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    auth = subparsers.add_parser("auth", help="Sign-in commands")
    auth_sub = auth.add_subparsers(dest="auth_command", required=True)
    auth_login = auth_sub.add_parser("login", help="Sign in to Microsoft 365")
    auth_login.set_defaults(handler=_cmd_auth_login)
    auth_logout = auth_sub.add_parser("logout", help="Forget the signed-in account")
    auth_logout.set_defaults(handler=_cmd_auth_logout)

    status = subparsers.add_parser("status", help="Show the signed-in account")
    status.set_defaults(handler=_cmd_status)

    app = subparsers.add_parser("app", help="Teams app commands")
    app_sub = app.add_subparsers(dest="app_command", required=True)

    app_list = app_sub.add_parser("list", help="List your Teams apps")
    app_list.set_defaults(handler=_cmd_app_list)

    app_show = app_sub.add_parser("show", help="Show an app and its details")
    app_show.add_argument("app_id", help="Teams app id")
    app_show.set_defaults(handler=_cmd_app_show)

    app_create = app_sub.add_parser("create", help="Provision a new bot-backed Teams app")
    app_create.add_argument("--endpoint", type=str, required=True, help="Bot messaging endpoint")
    app_create.add_argument("--name", type=str, help="App and bot display name")
    source = app_create.add_mutually_exclusive_group()
    source.add_argument("--manifest", type=Path, help="Existing manifest.json to import")
    source.add_argument("--package", type=Path, help="Existing app package (.zip) to import")
    _add_manifest_options(app_create)
    app_create.add_argument(
        "--env-file",
        type=Path,
        help="Write BOT_ID, BOT_PASSWORD, TEAMS_APP_ID and BOT_ENDPOINT to this file",
    )
    app_create.set_defaults(handler=_cmd_app_create)

    app_update = app_sub.add_parser("update", help="Edit an app's basic information")
    app_update.add_argument("app_id", help="Teams app id")
    app_update.add_argument("--short-name", type=str)
    app_update.add_argument("--long-name", type=str)
    app_update.add_argument("--short-description", type=str)
    app_update.add_argument("--long-description", type=str)
    app_update.add_argument("--version", type=str)
    app_update.add_argument("--developer-name", type=str)
    app_update.add_argument("--website-url", type=str)
    app_update.add_argument("--privacy-url", type=str)
    app_update.add_argument("--terms-of-use-url", type=str)
    app_update.set_defaults(handler=_cmd_app_update)

    app_endpoint = app_sub.add_parser("endpoint", help="Show or change the bot endpoint")
    app_endpoint.add_argument("app_id", help="Teams app id")
    app_endpoint.add_argument("--set", dest="endpoint", type=str, help="New messaging endpoint")
    app_endpoint.set_defaults(handler=_cmd_app_endpoint)

    manifest = subparsers.add_parser("manifest", help="Manifest commands")
    manifest_sub = manifest.add_subparsers(dest="manifest_command", required=True)

    manifest_create = manifest_sub.add_parser("create", help="Generate a manifest.json")
    manifest_create.add_argument("--name", type=str, required=True)
    manifest_create.add_argument("--endpoint", type=str, help="Bot messaging endpoint")
    manifest_create.add_argument("--bot-id", type=str, help="Bot id (placeholder if omitted)")
    manifest_create.add_argument("--output-dir", type=Path, default=Path())
    _add_manifest_options(manifest_create)
    manifest_create.set_defaults(handler=_cmd_manifest_create)

    manifest_download = manifest_sub.add_parser("download", help="Download an app's manifest")
    manifest_download.add_argument("app_id", help="Teams app id")
    manifest_download.add_argument("--output", type=Path, help="File to write (stdout if omitted)")
    manifest_download.set_defaults(handler=_cmd_manifest_download)

    manifest_upload = manifest_sub.add_parser("upload", help="Apply a manifest to an app")
    manifest_upload.add_argument("app_id", help="Teams app id")
    manifest_upload.add_argument("path", type=Path, help="Path to manifest.json")
    manifest_upload.set_defaults(handler=_cmd_manifest_upload)

    package = subparsers.add_parser("package", help="App package commands")
    package_sub = package.add_subparsers(dest="package_command", required=True)
    package_download = package_sub.add_parser("download", help="Download an app package")
    package_download.add_argument("app_id", help="Teams app id")
    package_download.add_argument("--output", type=Path, required=True, help="Zip file to write")
    package_download.set_defaults(handler=_cmd_package_download)

    oauth = subparsers.add_parser("oauth", help="OAuth configuration commands")
    oauth_sub = oauth.add_subparsers(dest="oauth_command", required=True)

    oauth_list = oauth_sub.add_parser("list", help="List OAuth configurations")
    oauth_list.add_argument(
        "--identity-provider", choices=[value.value for value in IdentityProvider]
    )
    oauth_list.set_defaults(handler=_cmd_oauth_list)

    oauth_get = oauth_sub.add_parser("get", help="Show an OAuth configuration")
    oauth_get.add_argument("config_id")
    oauth_get.set_defaults(handler=_cmd_oauth_get)

    oauth_create = oauth_sub.add_parser("create", help="Register a custom OAuth configuration")
    _add_oauth_options(oauth_create, required=True)
    oauth_create.set_defaults(handler=_cmd_oauth_create)

    oauth_update = oauth_sub.add_parser("update", help="Change an OAuth configuration")
    oauth_update.add_argument("config_id")
    _add_oauth_options(oauth_update, required=False)
    oauth_update.set_defaults(handler=_cmd_oauth_update)

    oauth_delete = oauth_sub.add_parser("delete", help="Delete an OAuth configuration")
    oauth_delete.add_argument("config_id")
    oauth_delete.set_defaults(handler=_cmd_oauth_delete)

    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    return _build_parser().parse_args(list(argv))


# Commands ------------------------------------------------------------------------------


def _description(args: argparse.Namespace) -> Description | None:
    if args.description is None:
        if args.long_description is not None:
            raise ValueError("--long-description requires --description")
        return None
    return Description(short=args.description, full=args.long_description)


def _developer(args: argparse.Namespace) -> Developer | None:
    values = (args.developer_name, args.website_url, args.privacy_url, args.terms_of_use_url)
    if all(value is None for value in values):
        return None
    if any(value is None for value in values):
        raise ValidationError(
            "--developer-name, --website-url, --privacy-url and --terms-of-use-url "
            "must be given together"
        )
    return Developer(
        name=validate_required(args.developer_name, label="Developer name"),
        website_url=validate_https_url(args.website_url, label="Website URL"),
        privacy_url=validate_https_url(args.privacy_url, label="Privacy URL"),
        terms_of_use_url=validate_https_url(args.terms_of_use_url, label="Terms of use URL"),
    )


def _scopes(args: argparse.Namespace) -> tuple[str, ...] | None:
    return tuple(dict.fromkeys(args.scopes)) if args.scopes else None


def _oauth_values(args: argparse.Namespace) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for option in _OAUTH_OPTIONS:
        value = getattr(args, option)
        if value is not None:
            values[_OAUTH_FIELD_NAMES.get(option, option)] = value
    return values


def _account_to_json(account: SignedInAccount) -> dict[str, str]:
    return {
        "username": account.username,
        "tenantId": account.tenant_id,
        "homeAccountId": account.home_account_id,
    }


def _cmd_auth_login(_args: argparse.Namespace) -> None:
    _emit(_account_to_json(sign_in()))


def _cmd_auth_logout(_args: argparse.Namespace) -> None:
    sign_out()


def _cmd_status(_args: argparse.Namespace) -> None:
    status = sign_in_status()
    if not status.signed_in:
        log.info("Not signed in. Run 'teams auth login' to authenticate.")
    _emit(
        {
            "signedIn": status.signed_in,
            "account": _account_to_json(status.account) if status.account else None,
            "environmentTokenScopes": list(status.env_token_scopes),
        }
    )


def _cmd_app_list(_args: argparse.Namespace) -> None:
    apps = list_apps()
    if not apps:
        log.info("No apps found")
    _emit([_dump(app) for app in apps])


def _cmd_app_show(args: argparse.Namespace) -> None:
    _emit(_overview_to_json(describe_app(args.app_id)))


def _cmd_app_create(args: argparse.Namespace) -> None:
    source = load_package_source(manifest_path=args.manifest, package_path=args.package)
    result = create_app(
        endpoint=args.endpoint,
        name=args.name,
        source=source,
        description=_description(args),
        scopes=_scopes(args),
        developer=_developer(args),
        env_file=args.env_file,
    )
    if result.persisted:
        log.info("Credentials written to %s", args.env_file)
    _emit(_result_to_json(result))


def _cmd_app_update(args: argparse.Namespace) -> None:
    update = AppDetailsUpdate(
        short_name=args.short_name,
        long_name=args.long_name,
        short_description=args.short_description,
        long_description=args.long_description,
        version=args.version,
        developer_name=args.developer_name,
        website_url=args.website_url,
        privacy_url=args.privacy_url,
        terms_of_use_url=args.terms_of_use_url,
    )
    _emit(update_app_details(args.app_id, update))


def _cmd_app_endpoint(args: argparse.Namespace) -> None:
    if args.endpoint is None:
        print(get_bot_endpoint(args.app_id))
        return
    registration = set_bot_endpoint(args.app_id, args.endpoint)
    print(registration.messaging_endpoint)


def _cmd_manifest_create(args: argparse.Namespace) -> None:
    options = ManifestOptions(
        name=args.name,
        endpoint=args.endpoint,
        description=_description(args),
        scopes=_scopes(args),
        developer=_developer(args),
    )
    path = create_manifest_file(options, args.output_dir, bot_id=args.bot_id)
    print(path)


def _cmd_manifest_download(args: argparse.Namespace) -> None:
    document = download_manifest(args.app_id)
    if args.output is None:
        _emit(document)
        return
    args.output.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
    log.info("Manifest saved to %s", args.output)


def _cmd_manifest_upload(args: argparse.Namespace) -> None:
    record = upload_manifest(args.app_id, read_manifest_file(args.path))
    log.info("Manifest uploaded: %s (version %s)", record.get("shortName"), record.get("version"))
    _emit(record)


def _cmd_package_download(args: argparse.Namespace) -> None:
    args.output.write_bytes(download_package(args.app_id))
    log.info("Package saved to %s", args.output)


def _cmd_oauth_list(args: argparse.Namespace) -> None:
    provider = IdentityProvider(args.identity_provider) if args.identity_provider else None
    _emit([_dump(config) for config in list_oauth_configurations(provider)])


def _cmd_oauth_get(args: argparse.Namespace) -> None:
    _emit(_dump(get_oauth_configuration(args.config_id)))


def _cmd_oauth_create(args: argparse.Namespace) -> None:
    _emit(_dump(create_oauth_configuration(_oauth_values(args))))


def _cmd_oauth_update(args: argparse.Namespace) -> None:
    _emit(_dump(update_oauth_configuration(args.config_id, _oauth_values(args))))


def _cmd_oauth_delete(args: argparse.Namespace) -> None:
    delete_oauth_configuration(args.config_id)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        parsed_args.handler(parsed_args)
    except (Cancelled, KeyboardInterrupt) as exc:
        log.error("Cancelled: %s", str(exc) or "interrupted by user")  # noqa: TRY400
        sys.exit(EXIT_CANCELLED)
    except ValueError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(EXIT_USAGE)
    except (TeamsCliError, ConfigurationError) as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(EXIT_FAILURE)
    except Exception:
        log.exception("Command failed")
        sys.exit(EXIT_FAILURE)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Abort the in-flight call on SIGINT (Ctrl+C).

    Installed before any event loop starts, so ``asyncio.run`` keeps this handler
    instead of its own task-cancelling one. ``Cancelled`` raised inside a running
    loop passes through ``run_sync`` unchanged and ``main`` exits with 130.
    """
    raise Cancelled("Closed by user (Ctrl+C)")


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
