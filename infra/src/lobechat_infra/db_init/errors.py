"""Failure taxonomy for the database bootstrap handler."""

from __future__ import annotations

from collections.abc import Iterable


class BootstrapError(Exception):
    """Base class for every terminal bootstrap failure."""


class InvalidEventError(BootstrapError):
    """Raised when an invocation payload is not a recognisable lifecycle event."""


class ConfigurationMissingError(BootstrapError):
    """Raised when required bootstrap inputs are absent."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: tuple[str, ...] = tuple(missing)
        super().__init__(
            "Missing required configuration for database bootstrap: "
            + ", ".join(self.missing)
        )


class InvalidConfigurationError(BootstrapError):
    """Raised when the function environment holds values that fail validation."""

    def __init__(self, invalid: Iterable[str]) -> None:
        self.invalid: tuple[str, ...] = tuple(invalid)
        super().__init__(
            "Invalid environment configuration for database bootstrap: "
            + ", ".join(self.invalid)
        )


class SecretUnavailableError(BootstrapError):
    """Raised when a secret does not exist or carries no string payload."""

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Secret '{reference}' is unavailable: {reason}.")


class MalformedCredentialError(BootstrapError):
    """Raised when a credential secret is not a username/password record."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(
            f"Secret '{reference}' does not contain a username/password record."
        )


class DatabaseConnectionError(BootstrapError):
    """Raised when the database rejects or times out a connection attempt."""

    def __init__(self, host: str, port: int, reason: str) -> None:
        self.host = host
        self.port = port
        super().__init__(f"Could not connect to database at {host}:{port}: {reason}")


class SchemaOperationError(BootstrapError):
    """Raised when the idempotent setup statement fails."""

    def __init__(self, statement: str, reason: str) -> None:
        self.statement = statement
        super().__init__(f"Setup statement '{statement}' failed: {reason}")


class SecretWriteError(BootstrapError):
    """Raised when the secret store rejects a write."""

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Could not write secret '{reference}': {reason}.")
