from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import pytest

from teamscli.domain.errors import UpstreamError, ValidationError
from teamscli.domain.model import ManifestOptions
from teamscli.domain.packaging import (
    COLOR_ICON_ENTRY,
    OUTLINE_ICON_ENTRY,
    PLACEHOLDER_PNG,
    pack_manifest,
    read_package,
)
from teamscli.domain.provisioning import (
    BOT_ENDPOINT_KEY,
    BOT_ID_KEY,
    BOT_PASSWORD_KEY,
    TEAMS_APP_ID_KEY,
    GeneratedManifest,
    ManifestDocument,
    PrebuiltPackage,
    ProvisioningPipeline,
    ProvisioningRequest,
    ProvisioningState,
    StepFailed,
    StepSucceeded,
    build_provisioning_pipeline,
    execute_step,
)
from tests.support.fakes import FakeIdentities, FakeImporter, FakeRegistrar, MemorySink

if TYPE_CHECKING:
    from teamscli.domain.provisioning import PackageSource

ENDPOINT = "https://contoso.example.com/api/messages"


def _request(source: PackageSource | None = None) -> ProvisioningRequest:
    if source is None:
        source = GeneratedManifest(ManifestOptions(name="Contoso Bot", endpoint=ENDPOINT))
    return ProvisioningRequest(name="Contoso Bot", endpoint=ENDPOINT, source=source)


@dataclass(slots=True)
class _RecordingStep:
    name: str
    calls: list[str]

    def run(self, state: ProvisioningState) -> ProvisioningState:
        self.calls.append(self.name)
        return state


@dataclass(slots=True)
class _FailingStep:
    name: str = "explode"

    def run(self, state: ProvisioningState) -> ProvisioningState:
        _ = state
        raise RuntimeError("boom")


def test_pipeline_runs_steps_in_order() -> None:
    calls: list[str] = []
    pipeline = ProvisioningPipeline(
        steps=(_RecordingStep("first", calls), _RecordingStep("second", calls))
    )

    outcome = pipeline.run(_request())

    assert calls == ["first", "second"]
    assert outcome.ok
    assert outcome.completed == ("first", "second")


def test_pipeline_stops_at_first_failure() -> None:
    calls: list[str] = []
    pipeline = ProvisioningPipeline(
        steps=(_RecordingStep("first", calls), _FailingStep(), _RecordingStep("last", calls))
    )

    outcome = pipeline.run(_request())

    assert calls == ["first"]
    assert not outcome.ok
    assert outcome.failure is not None
    assert outcome.failure.step == "explode"
    with pytest.raises(RuntimeError, match="boom"):
        outcome.unwrap()


def test_execute_step_captures_errors() -> None:
    state = ProvisioningState(request=_request())

    assert execute_step(_RecordingStep("ok", []), state) == StepSucceeded(state)
    failed = execute_step(_FailingStep(), state)
    assert isinstance(failed, StepFailed)
    assert str(failed.error) == "boom"


def test_full_run_persists_credentials() -> None:
    identities = FakeIdentities()
    importer = FakeImporter()
    registrar = FakeRegistrar()
    sink = MemorySink()
    pipeline = build_provisioning_pipeline(
        identities=identities, importer=importer, registrar=registrar, sink=sink
    )

    outcome = pipeline.run(_request())
    result = outcome.unwrap()

    assert outcome.completed == (
        "create-identity",
        "build-package",
        "create-secret",
        "import-package",
        "register-channel",
        "persist-credentials",
    )
    assert identities.calls == ["identity:Contoso Bot", "secret:reg-1"]
    assert result.client_id == "client-1"
    assert result.teams_app_id == "teams-app-1"
    assert result.persisted
    assert sink.values == {
        BOT_ID_KEY: "client-1",
        BOT_PASSWORD_KEY: "s3cr3t-value",
        TEAMS_APP_ID_KEY: "teams-app-1",
        BOT_ENDPOINT_KEY: ENDPOINT,
    }
    registration = registrar.registrations["client-1"]
    assert registration.name == "Contoso Bot"
    assert registration.messaging_endpoint == ENDPOINT
    assert registration.configured_channels == ["msteams"]


def test_run_without_sink_returns_credentials_to_caller() -> None:
    pipeline = build_provisioning_pipeline(
        identities=FakeIdentities(), importer=FakeImporter(), registrar=FakeRegistrar()
    )

    result = pipeline.run(_request()).unwrap()

    assert not result.persisted
    assert result.credentials()[BOT_PASSWORD_KEY] == "s3cr3t-value"
    assert "s3cr3t-value" not in repr(result)


def test_import_failure_keeps_created_resources(caplog: pytest.LogCaptureFixture) -> None:
    error = UpstreamError("import app package", status=400, body="bad manifest")
    registrar = FakeRegistrar()
    sink = MemorySink()
    pipeline = build_provisioning_pipeline(
        identities=FakeIdentities(),
        importer=FakeImporter(error=error),
        registrar=registrar,
        sink=sink,
    )

    with caplog.at_level(logging.WARNING):
        outcome = pipeline.run(_request())

    assert outcome.completed == ("create-identity", "build-package", "create-secret")
    assert outcome.failure is not None
    assert outcome.failure.step == "import-package"
    assert outcome.state.identity is not None
    assert outcome.state.secret is not None
    assert outcome.state.teams_app_id is None
    assert registrar.registrations == {}
    assert sink.values == {}
    assert "Left in place upstream: identity registration reg-1" in caplog.text
    with pytest.raises(UpstreamError) as exc:
        outcome.unwrap()
    assert exc.value is error


def test_secret_failure_happens_after_package_build() -> None:
    importer = FakeImporter()
    pipeline = build_provisioning_pipeline(
        identities=FakeIdentities(fail_secret=True), importer=importer, registrar=FakeRegistrar()
    )

    outcome = pipeline.run(_request())

    assert outcome.failure is not None
    assert outcome.failure.step == "create-secret"
    assert outcome.state.package is not None
    assert importer.packages == []
    assert outcome.state.created_resources() == [
        "identity registration reg-1 (client id client-1)"
    ]


def test_generated_manifest_is_bound_to_client_id() -> None:
    importer = FakeImporter()
    pipeline = build_provisioning_pipeline(
        identities=FakeIdentities(), importer=importer, registrar=FakeRegistrar()
    )

    pipeline.run(_request())

    manifest, assets = read_package(importer.packages[0])
    assert manifest["id"] == "client-1"
    assert manifest["bots"][0]["botId"] == "client-1"
    assert manifest["validDomains"] == ["contoso.example.com"]
    assert assets[COLOR_ICON_ENTRY] == PLACEHOLDER_PNG


def test_supplied_manifest_is_rebound_and_packed() -> None:
    importer = FakeImporter()
    document = {"id": "placeholder", "name": {"short": "Mine"}, "bots": [{"botId": "x"}]}
    pipeline = build_provisioning_pipeline(
        identities=FakeIdentities(), importer=importer, registrar=FakeRegistrar()
    )

    pipeline.run(_request(ManifestDocument(document)))

    manifest, assets = read_package(importer.packages[0])
    assert manifest == {
        "id": "client-1",
        "name": {"short": "Mine"},
        "bots": [{"botId": "client-1"}],
    }
    assert set(assets) == {COLOR_ICON_ENTRY, OUTLINE_ICON_ENTRY}
    assert document["id"] == "placeholder"


def test_supplied_package_keeps_its_icons() -> None:
    importer = FakeImporter()
    package = pack_manifest(
        {"id": "placeholder", "bots": [{"botId": "placeholder"}]},
        assets={COLOR_ICON_ENTRY: b"brand-color", OUTLINE_ICON_ENTRY: b"brand-outline"},
    )
    pipeline = build_provisioning_pipeline(
        identities=FakeIdentities(), importer=importer, registrar=FakeRegistrar()
    )

    pipeline.run(_request(PrebuiltPackage(package)))

    manifest, assets = read_package(importer.packages[0])
    assert manifest["id"] == "client-1"
    assert assets == {COLOR_ICON_ENTRY: b"brand-color", OUTLINE_ICON_ENTRY: b"brand-outline"}


@pytest.mark.parametrize(
    ("name", "endpoint", "message"),
    [
        ("Bot", "http://contoso.example.com/api/messages", "must start with https://"),
        ("Bot", "", "must start with https://"),
        ("   ", ENDPOINT, "App name is required"),
    ],
)
def test_request_is_validated(name: str, endpoint: str, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        ProvisioningRequest(
            name=name, endpoint=endpoint, source=GeneratedManifest(ManifestOptions(name="Bot"))
        )


def test_credentials_require_completed_run() -> None:
    with pytest.raises(ValidationError, match="Identity has not been created"):
        ProvisioningState(request=_request()).credentials()
