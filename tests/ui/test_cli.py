from __future__ import annotations

import json
from datetime import UTC, datetime
from signal import SIGINT
from typing import TYPE_CHECKING

import pytest

from teamscli.adapters.http_resilience import run_sync
from teamscli.domain.errors import Cancelled, UpstreamError, ValidationError
from teamscli.domain.model import (
    AppOverview,
    BotBinding,
    ChannelRegistration,
    ClientSecret,
    Description,
    Developer,
    SignedInAccount,
    SignInStatus,
)
from teamscli.domain.provisioning import ProvisioningResult
from teamscli.ui import cli

if TYPE_CHECKING:
    from pathlib import Path

ENDPOINT = "https://contoso.example.com/api/messages"


def _result(*, persisted: bool) -> ProvisioningResult:
    return ProvisioningResult(
        client_id="client-1",
        registration_id="reg-1",
        secret=ClientSecret(
            text="s3cr3t-value",
            display_name="default",
            expires_at=datetime(2028, 1, 1, tzinfo=UTC),
        ),
        teams_app_id="teams-1",
        endpoint=ENDPOINT,
        channel=None,
        persisted=persisted,
    )


def test_app_create_passes_options(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str], tmp_path: Path
) -> None:
    captured: dict[str, object] = {}

    def fake_create_app(**kwargs: object) -> ProvisioningResult:
        captured.update(kwargs)
        return _result(persisted=True)

    monkeypatch.setattr(cli, "create_app", fake_create_app)
    env_file = tmp_path / ".env"

    cli.main(
        [
            "app",
            "create",
            "--endpoint",
            ENDPOINT,
            "--name",
            "Contoso",
            "--description",
            "Helps",
            "--scope",
            "team",
            "--scope",
            "team",
            "--scope",
            "personal",
            "--env-file",
            str(env_file),
        ]
    )

    assert captured["endpoint"] == ENDPOINT
    assert captured["name"] == "Contoso"
    assert captured["source"] is None
    assert captured["description"] == Description(short="Helps")
    assert captured["scopes"] == ("team", "personal")
    assert captured["env_file"] == env_file
    output = json.loads(capsys.readouterr().out)
    assert output["teamsAppId"] == "teams-1"
    assert "credentials" not in output


def test_app_create_prints_credentials_when_not_persisted(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "create_app", lambda **_: _result(persisted=False))

    cli.main(["app", "create", "--endpoint", ENDPOINT])

    output = json.loads(capsys.readouterr().out)
    assert output["credentials"]["BOT_PASSWORD"] == "s3cr3t-value"
    assert output["secretExpiresAt"] == "2028-01-01T00:00:00+00:00"


def test_app_create_rejects_manifest_and_package_together() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            [
                "app",
                "create",
                "--endpoint",
                ENDPOINT,
                "--manifest",
                "manifest.json",
                "--package",
                "app.zip",
            ]
        )

    assert excinfo.value.code == 2


def test_app_create_requires_endpoint() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["app", "create"])

    assert excinfo.value.code == 2


def test_app_show_emits_overview(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    overview = AppOverview(
        teams_app_id="teams-1",
        app_id="client-1",
        name="Contoso",
        version="1.0.0",
        updated_at=None,
        bots=(BotBinding("client-1", ("team",)),),
    )
    monkeypatch.setattr(cli, "describe_app", lambda app_id: overview)

    cli.main(["app", "show", "teams-1"])

    output = json.loads(capsys.readouterr().out)
    assert output["bots"] == [{"botId": "client-1", "scopes": ["team"]}]
    assert output["details"] is None


def test_app_endpoint_get_and_set(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    calls: list[tuple[str, ...]] = []

    def fake_get(app_id: str) -> str:
        calls.append(("get", app_id))
        return "https://old.example.com"

    def fake_set(app_id: str, endpoint: str) -> ChannelRegistration:
        calls.append(("set", app_id, endpoint))
        return ChannelRegistration(bot_id="client-1", name="Contoso", messaging_endpoint=endpoint)

    monkeypatch.setattr(cli, "get_bot_endpoint", fake_get)
    monkeypatch.setattr(cli, "set_bot_endpoint", fake_set)

    cli.main(["app", "endpoint", "teams-1"])
    cli.main(["app", "endpoint", "teams-1", "--set", ENDPOINT])

    assert calls == [("get", "teams-1"), ("set", "teams-1", ENDPOINT)]
    assert capsys.readouterr().out.splitlines() == ["https://old.example.com", ENDPOINT]


def test_app_update_validation_error_exits_with_usage_code() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["app", "update", "teams-1", "--website-url", "http://contoso.example.com"])

    assert excinfo.value.code == 2


def test_long_description_requires_description(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            [
                "manifest",
                "create",
                "--name",
                "Contoso",
                "--long-description",
                "Full",
                "--output-dir",
                str(tmp_path),
            ]
        )

    assert excinfo.value.code == 2


def test_manifest_create_writes_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.main(
        [
            "manifest",
            "create",
            "--name",
            "Contoso",
            "--endpoint",
            ENDPOINT,
            "--bot-id",
            "client-1",
            "--output-dir",
            str(tmp_path),
        ]
    )

    target = tmp_path / "manifest.json"
    assert capsys.readouterr().out.strip() == str(target)
    assert json.loads(target.read_text(encoding="utf-8"))["id"] == "client-1"


def test_upstream_error_exits_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_list() -> list[object]:
        raise UpstreamError("fetch apps", status=401, body="Unauthorized")

    monkeypatch.setattr(cli, "list_apps", failing_list)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["app", "list"])

    assert excinfo.value.code == 1


def test_unexpected_error_exits_with_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(_: str) -> None:
        raise RuntimeError("unexpected")

    monkeypatch.setattr(cli, "delete_oauth_configuration", broken)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["oauth", "delete", "cfg-1"])

    assert excinfo.value.code == 1


@pytest.mark.parametrize("error", [Cancelled("Request timed out"), KeyboardInterrupt()])
def test_cancellation_exits_with_130(
    monkeypatch: pytest.MonkeyPatch, error: BaseException
) -> None:
    def interrupted(_: str) -> str:
        raise error

    monkeypatch.setattr(cli, "get_bot_endpoint", interrupted)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["app", "endpoint", "teams-1"])

    assert excinfo.value.code == 130


def test_oauth_create_collects_field_values(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    captured: dict[str, object] = {}

    def fake_create(values: dict[str, object]) -> object:
        captured.update(values)
        raise ValidationError("Invalid OAuth configuration: clientSecret: too short")

    monkeypatch.setattr(cli, "create_oauth_configuration", fake_create)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(
            [
                "oauth",
                "create",
                "--description",
                "GitHub",
                "--client-id",
                "gh-client",
                "--client-secret",
                "short",
                "--authorization-endpoint",
                "https://github.com/login/oauth/authorize",
                "--token-exchange-endpoint",
                "https://github.com/login/oauth/access_token",
                "--scope",
                "repo",
                "--target-url",
                "https://api.github.com",
                "--no-pkce",
            ]
        )

    assert excinfo.value.code == 2
    assert captured == {
        "description": "GitHub",
        "client_id": "gh-client",
        "client_secret": "short",
        "authorization_endpoint": "https://github.com/login/oauth/authorize",
        "token_exchange_endpoint": "https://github.com/login/oauth/access_token",
        "scopes": ["repo"],
        "target_urls_should_start_with": ["https://api.github.com"],
        "is_pkce_enabled": False,
    }
    assert capsys.readouterr().out == ""


def test_oauth_update_passes_only_supplied_fields(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    captured: list[tuple[str, dict[str, object]]] = []

    def fake_update(config_id: str, values: dict[str, object]) -> object:
        captured.append((config_id, values))
        raise UpstreamError("update OAuth configuration", status=404, body="")

    monkeypatch.setattr(cli, "update_oauth_configuration", fake_update)

    with pytest.raises(SystemExit):
        cli.main(["oauth", "update", "cfg-1", "--description", "Renamed"])

    assert captured == [("cfg-1", {"description": "Renamed"})]


def test_sigint_during_event_loop_exits_with_130(monkeypatch: pytest.MonkeyPatch) -> None:
    async def interrupted() -> list[object]:
        cli.sigint_handler(SIGINT, None)
        return []

    monkeypatch.setattr(cli, "list_apps", lambda: run_sync(interrupted()))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["app", "list"])

    assert excinfo.value.code == 130


def test_run_installs_sigint_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    installed: list[object] = []
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.setattr(cli, "signal", lambda signum, handler: installed.append((signum, handler)))
    monkeypatch.setattr(cli, "main", lambda: None)

    cli.run()

    assert installed == [(SIGINT, cli.sigint_handler)]


def test_developer_options_reach_create_app(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_create_app(**kwargs: object) -> ProvisioningResult:
        captured.update(kwargs)
        return _result(persisted=False)

    monkeypatch.setattr(cli, "create_app", fake_create_app)

    cli.main(
        [
            "app",
            "create",
            "--endpoint",
            ENDPOINT,
            "--developer-name",
            " Contoso ",
            "--website-url",
            "https://contoso.example.com",
            "--privacy-url",
            "https://contoso.example.com/privacy",
            "--terms-of-use-url",
            "https://contoso.example.com/terms",
        ]
    )

    assert captured["developer"] == Developer(
        name="Contoso",
        website_url="https://contoso.example.com",
        privacy_url="https://contoso.example.com/privacy",
        terms_of_use_url="https://contoso.example.com/terms",
    )


def test_manifest_create_writes_developer(tmp_path: Path) -> None:
    cli.main(
        [
            "manifest",
            "create",
            "--name",
            "Contoso",
            "--developer-name",
            "Contoso",
            "--website-url",
            "https://contoso.example.com",
            "--privacy-url",
            "https://contoso.example.com/privacy",
            "--terms-of-use-url",
            "https://contoso.example.com/terms",
            "--output-dir",
            str(tmp_path),
        ]
    )

    manifest = json.loads((tmp_path / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["developer"] == {
        "name": "Contoso",
        "websiteUrl": "https://contoso.example.com",
        "privacyUrl": "https://contoso.example.com/privacy",
        "termsOfUseUrl": "https://contoso.example.com/terms",
    }


@pytest.mark.parametrize(
    "extra",
    [
        ["--developer-name", "Contoso"],
        [
            "--developer-name",
            "Contoso",
            "--website-url",
            "http://contoso.example.com",
            "--privacy-url",
            "https://contoso.example.com/privacy",
            "--terms-of-use-url",
            "https://contoso.example.com/terms",
        ],
    ],
)
def test_incomplete_or_insecure_developer_exits_with_usage_code(
    tmp_path: Path, extra: list[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["manifest", "create", "--name", "Contoso", "--output-dir", str(tmp_path), *extra])

    assert excinfo.value.code == 2
    assert not (tmp_path / "manifest.json").exists()


def test_auth_commands(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    account = SignedInAccount(
        username="ada@contoso.example.com", tenant_id="tenant-1", home_account_id="home-1"
    )
    calls: list[str] = []

    def fake_sign_in() -> SignedInAccount:
        calls.append("login")
        return account

    def fake_sign_out() -> SignedInAccount:
        calls.append("logout")
        return account

    monkeypatch.setattr(cli, "sign_in", fake_sign_in)
    monkeypatch.setattr(cli, "sign_out", fake_sign_out)

    cli.main(["auth", "login"])
    cli.main(["auth", "logout"])

    assert calls == ["login", "logout"]
    assert json.loads(capsys.readouterr().out) == {
        "username": "ada@contoso.example.com",
        "tenantId": "tenant-1",
        "homeAccountId": "home-1",
    }


def test_status_reports_signed_out(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "sign_in_status", lambda: SignInStatus(account=None))

    cli.main(["status"])

    assert json.loads(capsys.readouterr().out) == {
        "signedIn": False,
        "account": None,
        "environmentTokenScopes": [],
    }
