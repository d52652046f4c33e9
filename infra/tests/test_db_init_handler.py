"""Tests for the bootstrap Lambda entry point."""
from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from conftest import URL_SECRET_ARN, FakeDatabase, FakeSecretStore
from lobechat_infra.db_init import handler as handler_module
from lobechat_infra.db_init.errors import (
    ConfigurationMissingError,
    InvalidConfigurationError,
    InvalidEventError,
)
from lobechat_infra.db_init.handler import build_orchestrator, handle_event
from lobechat_infra.db_init.orchestrator import BootstrapOrchestrator
from lobechat_infra.db_init.settings import BootstrapSettings, LoggingSettings


@pytest.fixture
def orchestrator(secret_store: FakeSecretStore, database: FakeDatabase) -> BootstrapOrchestrator:
    return BootstrapOrchestrator(secret_store=secret_store, database=database)


@pytest.fixture(autouse=True)
def cold_start(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(handler_module, "_orchestrator", None)
    monkeypatch.setattr(handler_module, "_logging_configured", False)
    root = logging.getLogger()
    monkeypatch.setattr(root, "level", root.level)


def _unbuildable() -> BootstrapOrchestrator:
    raise AssertionError("orchestrator must not be built for this event")


def test_handle_event_create_returns_database_url(
    orchestrator: BootstrapOrchestrator,
    secret_store: FakeSecretStore,
    resource_properties: dict[str, str],
) -> None:
    response = handle_event(
        {"RequestType": "Create", "ResourceProperties": resource_properties}, lambda: orchestrator
    )
    assert response["PhysicalResourceId"] == "pgvector-init"
    assert response["Data"]["DatabaseUrl"] == secret_store.secrets[URL_SECRET_ARN]


def test_handle_event_lifecycle_delete_returns_no_data() -> None:
    response = handle_event({"tf": {"action": "delete", "prev_input": {}}}, _unbuildable)
    assert response == {"PhysicalResourceId": "pgvector-init"}


def test_handle_event_reraises_bootstrap_errors(orchestrator: BootstrapOrchestrator) -> None:
    with pytest.raises(ConfigurationMissingError):
        handle_event({"RequestType": "Create", "ResourceProperties": {}}, lambda: orchestrator)


def test_handle_event_reraises_invalid_events() -> None:
    with pytest.raises(InvalidEventError):
        handle_event({"RequestType": "Replace"}, _unbuildable)


def test_handle_event_rejects_out_of_range_port_before_building() -> None:
    with pytest.raises(InvalidEventError, match="DbPort"):
        handle_event({"RequestType": "Create", "ResourceProperties": {"DbPort": 70000}}, _unbuildable)


def test_handler_uses_cached_orchestrator(
    monkeypatch: pytest.MonkeyPatch,
    orchestrator: BootstrapOrchestrator,
    resource_properties: dict[str, str],
) -> None:
    monkeypatch.setattr(handler_module, "_orchestrator", orchestrator)
    response = handler_module.handler(
        {"RequestType": "Update", "PhysicalResourceId": "pgvector-init", "ResourceProperties": resource_properties},
        SimpleNamespace(aws_request_id="req-1"),
    )
    assert response["PhysicalResourceId"] == "pgvector-init"


@pytest.mark.parametrize(
    ("variable", "value"),
    [("DB_PORT", "not-a-port"), ("DB_PORT", "70000"), ("DB_CONNECT_TIMEOUT", "soon"), ("LOG_LEVEL", "LOUD")],
)
def test_handler_acknowledges_delete_with_malformed_environment(
    monkeypatch: pytest.MonkeyPatch, variable: str, value: str
) -> None:
    monkeypatch.setenv(variable, value)
    response = handler_module.handler(
        {"RequestType": "Delete", "PhysicalResourceId": "pgvector-init"},
        SimpleNamespace(aws_request_id="req-2"),
    )
    assert response == {"PhysicalResourceId": "pgvector-init"}


def test_handler_reports_malformed_port_fallback_on_create(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("DB_PORT", "not-a-port")
    with caplog.at_level(logging.ERROR, logger=handler_module.__name__):
        with pytest.raises(InvalidConfigurationError) as excinfo:
            handler_module.handler({"RequestType": "Create"}, SimpleNamespace(aws_request_id="req-3"))
    assert excinfo.value.invalid == ("DB_PORT",)
    assert [record.getMessage() for record in caplog.records] == ["bootstrap_failed"]


def test_handler_applies_log_level_before_first_record(
    monkeypatch: pytest.MonkeyPatch, orchestrator: BootstrapOrchestrator
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setattr(handler_module, "_orchestrator", orchestrator)
    levels: list[int] = []
    monkeypatch.setattr(
        handler_module.logger,
        "info",
        lambda *args, **kwargs: levels.append(logging.getLogger().level),
    )
    handler_module.handler({"RequestType": "Delete"}, SimpleNamespace(aws_request_id="req-4"))
    assert levels[0] == logging.WARNING


def test_settings_fallbacks_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_SECRET_ARN", "arn:creds")
    monkeypatch.setenv("DB_HOST", "db.local")
    monkeypatch.setenv("DB_PORT", "5433")
    monkeypatch.setenv("DB_NAME", "lobechat")
    monkeypatch.setenv("DATABASE_URL_SECRET_ARN", "arn:url")
    monkeypatch.setenv("DB_CONNECT_TIMEOUT", "4")
    settings = BootstrapSettings.load()
    assert settings.db_connect_timeout == 4
    target = settings.fallback_properties().require()
    assert target.db_port == 5433
    assert target.database_url_secret_arn == "arn:url"


def test_settings_without_environment_have_no_fallbacks(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DB_SECRET_ARN", "DB_HOST", "DB_PORT", "DB_NAME", "DATABASE_URL_SECRET_ARN"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(ConfigurationMissingError) as excinfo:
        BootstrapSettings.load().fallback_properties().require()
    assert len(excinfo.value.missing) == 5


def test_settings_malformed_timeout_names_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_CONNECT_TIMEOUT", "soon")
    with pytest.raises(InvalidConfigurationError) as excinfo:
        BootstrapSettings.load()
    assert excinfo.value.invalid == ("DB_CONNECT_TIMEOUT",)


def test_settings_malformed_log_level_names_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "LOUD")
    with pytest.raises(InvalidConfigurationError) as excinfo:
        LoggingSettings.load()
    assert excinfo.value.invalid == ("LOG_LEVEL",)


def test_build_orchestrator_applies_environment_defaults(
    monkeypatch: pytest.MonkeyPatch,
    secret_store: FakeSecretStore,
    database: FakeDatabase,
    resource_properties: dict[str, str],
) -> None:
    monkeypatch.setattr(handler_module.SecretsManagerStore, "create", lambda region=None: secret_store)
    monkeypatch.setattr(handler_module, "PsycopgDatabase", lambda connect_timeout: database)
    settings = BootstrapSettings(
        db_secret_arn=resource_properties["DbSecretArn"],
        db_host=resource_properties["DbHost"],
        db_port=resource_properties["DbPort"],
        db_name=resource_properties["DbName"],
        database_url_secret_arn=resource_properties["DatabaseUrlSecretArn"],
    )
    orchestrator = build_orchestrator(settings)
    response = handle_event({}, lambda: orchestrator)
    assert response["Data"]["DatabaseUrl"].startswith("postgres://postgres:")
    assert database.extensions == {"vector"}
