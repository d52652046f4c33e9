"""Secret store port and its AWS Secrets Manager adapter."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lobechat_infra.db_init.errors import SecretUnavailableError, SecretWriteError

logger: logging.Logger = logging.getLogger(__name__)


class SecretStore(Protocol):
    """Minimal string-valued secret store."""

    def get(self, reference: str) -> str:
        """Return the string payload stored under ``reference``."""
        ...

    def put(self, reference: str, payload: str) -> None:
        """Replace the payload stored under ``reference``."""
        ...


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", "ClientError"))


class SecretsManagerStore:
    """``SecretStore`` backed by an AWS Secrets Manager client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def create(cls, region: str | None = None) -> SecretsManagerStore:
        """Build a store around a fresh ``secretsmanager`` boto3 client."""
        return cls(boto3.client("secretsmanager", region_name=region))

    def get(self, reference: str) -> str:
        """Read the current ``SecretString`` of a secret.

        Raises ``SecretUnavailableError`` when the secret cannot be read or
        holds no string payload (binary-only or never populated).
        """
        try:
            response = self._client.get_secret_value(SecretId=reference)
        except ClientError as exc:
            raise SecretUnavailableError(reference, _error_code(exc)) from exc
        except BotoCoreError as exc:
            raise SecretUnavailableError(reference, exc.__class__.__name__) from exc

        payload = response.get("SecretString")
        if not payload:
            raise SecretUnavailableError(reference, "no SecretString payload")
        logger.debug("secret_read", extra={"secret_id": reference})
        return str(payload)

    def put(self, reference: str, payload: str) -> None:
        """Write a new current version of a secret, replacing the old value.

        Raises ``SecretWriteError`` when the write is rejected.
        """
        try:
            self._client.put_secret_value(SecretId=reference, SecretString=payload)
        except ClientError as exc:
            raise SecretWriteError(reference, _error_code(exc)) from exc
        except BotoCoreError as exc:
            raise SecretWriteError(reference, exc.__class__.__name__) from exc
        logger.debug("secret_written", extra={"secret_id": reference})
