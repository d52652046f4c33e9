"""In-memory doubles for the bootstrap runtime's secret store and database."""
from __future__ import annotations

import json

import pytest

from lobechat_infra.db_init.credentials import ConnectionDescriptor
from lobechat_infra.db_init.errors import (
    DatabaseConnectionError,
    SchemaOperationError,
    SecretUnavailableError,
    SecretWriteError,
)

CREDENTIALS_ARN = "arn:aws:secretsmanager:us-west-2:123456789012:secret:db-credentials"
URL_SECRET_ARN = "arn:aws:secretsmanager:us-west-2:123456789012:secret:database-url"


class FakeSecretStore:
    def __init__(self, secrets: dict[str, str] | None = None) -> None:
        self.secrets: dict[str, str] = dict(secrets or {})
        self.writes: list[tuple[str, str]] = []
        self.reads: list[str] = []
        self.fail_writes: bool = False

    def get(self, reference: str) -> str:
        self.reads.append(reference)
        if reference not in self.secrets:
            raise SecretUnavailableError(reference, "ResourceNotFoundException")
        return self.secrets[reference]

    def put(self, reference: str, payload: str) -> None:
        if self.fail_writes:
            raise SecretWriteError(reference, "AccessDeniedException")
        self.writes.append((reference, payload))
        self.secrets[reference] = payload


class FakeConnection:
    def __init__(self, database: FakeDatabase) -> None:
        self._database = database
        self.closed: int = 0

    def enable_extension(self, name: str) -> None:
        if self._database.fail_statement:
            raise SchemaOperationError(f"CREATE EXTENSION IF NOT EXISTS {name}", "permission denied")
        self._database.extensions.add(name)
        self._database.statements.append(name)

    def close(self) -> None:
        self.closed += 1


class FakeDatabase:
    def __init__(self) -> None:
        self.extensions: set[str] = set()
        self.statements: list[str] = []
        self.connections: list[FakeConnection] = []
        self.descriptors: list[ConnectionDescriptor] = []
        self.refuse_connections: bool = False
        self.fail_statement: bool = False

    def connect(self, descriptor: ConnectionDescriptor) -> FakeConnection:
        self.descriptors.append(descriptor)
        if self.refuse_connections:
            raise DatabaseConnectionError(descriptor.host, descriptor.port, "connection refused")
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection


@pytest.fixture
def secret_store() -> FakeSecretStore:
    return FakeSecretStore(
        {
            CREDENTIALS_ARN: json.dumps({"username": "postgres", "password": "p@ss:w/rd"}),
            URL_SECRET_ARN: "previous-value",
        }
    )


@pytest.fixture
def database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def resource_properties() -> dict[str, str]:
    return {
        "DbSecretArn": CREDENTIALS_ARN,
        "DbHost": "lobechat.cluster-abc.us-west-2.rds.amazonaws.com",
        "DbPort": "5432",
        "DbName": "lobechat",
        "DatabaseUrlSecretArn": URL_SECRET_ARN,
    }
