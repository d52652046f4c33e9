"""Database port and its psycopg adapter."""

from __future__ import annotations

import logging
from typing import Protocol

import psycopg
from psycopg import errors, sql

from lobechat_infra.db_init.credentials import ConnectionDescriptor
from lobechat_infra.db_init.errors import DatabaseConnectionError, SchemaOperationError

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10


class DatabaseConnection(Protocol):
    def enable_extension(self, name: str) -> None:
        """Install extension ``name`` unless it is already installed."""
        ...

    def close(self) -> None: ...


class Database(Protocol):
    def connect(self, descriptor: ConnectionDescriptor) -> DatabaseConnection:
        """Open a transient connection; the caller owns closing it."""
        ...


class PsycopgConnection:
    """``DatabaseConnection`` wrapping an autocommit psycopg connection."""

    def __init__(self, connection: psycopg.Connection) -> None:
        self._connection: psycopg.Connection = connection

    def enable_extension(self, name: str) -> None:
        """Run ``CREATE EXTENSION IF NOT EXISTS``.

        Two sessions racing on the same extension can still collide on the
        catalog; the loser sees ``duplicate_object`` or ``unique_violation``,
        which means the extension is installed.
        """
        statement = sql.SQL("CREATE EXTENSION IF NOT EXISTS {}").format(sql.Identifier(name))
        try:
            self._connection.execute(statement)
        except (errors.DuplicateObject, errors.UniqueViolation):
            logger.info("extension_already_present", extra={"extension": name})
            return
        except psycopg.Error as exc:
            raise SchemaOperationError(
                f"CREATE EXTENSION IF NOT EXISTS {name}", str(exc).strip()
            ) from exc
        logger.info("extension_enabled", extra={"extension": name})

    def close(self) -> None:
        self._connection.close()


class PsycopgDatabase:
    """``Database`` that opens one psycopg connection per call."""

    def __init__(self, connect_timeout: int = DEFAULT_CONNECT_TIMEOUT) -> None:
        self._connect_timeout: int = connect_timeout

    def connect(self, descriptor: ConnectionDescriptor) -> PsycopgConnection:
        """Connect with the descriptor's credentials.

        Raises ``DatabaseConnectionError`` on refusal, timeout or
        authentication failure.
        """
        logger.info(
            "database_connecting",
            extra={
                "host": descriptor.host,
                "port": descriptor.port,
                "database": descriptor.database_name,
            },
        )
        try:
            connection = psycopg.connect(
                host=descriptor.host,
                port=descriptor.port,
                dbname=descriptor.database_name,
                user=descriptor.username,
                password=descriptor.password,
                connect_timeout=self._connect_timeout,
                autocommit=True,
            )
        except psycopg.Error as exc:
            raise DatabaseConnectionError(
                descriptor.host, descriptor.port, str(exc).strip() or exc.__class__.__name__
            ) from exc
        return PsycopgConnection(connection)
