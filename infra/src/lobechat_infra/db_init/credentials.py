"""Database credential lookup and connection string composition."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, ValidationError

from lobechat_infra.db_init.errors import MalformedCredentialError
from lobechat_infra.db_init.secrets import SecretStore

logger: logging.Logger = logging.getLogger(__name__)

# Characters left unescaped by JavaScript's encodeURIComponent, besides
# alphanumerics and the ``_.-~`` set that ``quote`` never escapes.
_URI_COMPONENT_SAFE = "!*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encode ``value`` for use as a URI userinfo component."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


class CredentialRecord(BaseModel):
    """Username/password pair held in the generated database secret."""

    model_config = ConfigDict(extra="ignore", frozen=True, hide_input_in_errors=True)

    username: str
    password: str


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Everything needed to open a connection to the application database."""

    host: str
    port: int
    database_name: str
    username: str
    password: str = field(repr=False)

    @classmethod
    def from_credentials(
        cls, host: str, port: int, database_name: str, credentials: CredentialRecord
    ) -> ConnectionDescriptor:
        return cls(
            host=host,
            port=port,
            database_name=database_name,
            username=credentials.username,
            password=credentials.password,
        )

    @property
    def database_url(self) -> str:
        """``postgres://`` URI with percent-encoded username and password."""
        return (
            f"postgres://{encode_uri_component(self.username)}"
            f":{encode_uri_component(self.password)}"
            f"@{self.host}:{self.port}/{self.database_name}"
        )


class CredentialResolver:
    """Reads database credentials from a secret store on every call."""

    def __init__(self, secret_store: SecretStore) -> None:
        self._secret_store: SecretStore = secret_store

    def resolve(self, secret_reference: str) -> CredentialRecord:
        """Fetch and parse the credential record stored at ``secret_reference``.

        Raises ``SecretUnavailableError`` (from the store) when the secret
        cannot be read, and ``MalformedCredentialError`` when its payload is
        not a JSON object with string ``username`` and ``password`` keys.
        """
        payload = self._secret_store.get(secret_reference)
        try:
            record = CredentialRecord.model_validate_json(payload)
        except ValidationError as exc:
            raise MalformedCredentialError(secret_reference) from exc
        logger.info(
            "database_credentials_resolved",
            extra={"secret_id": secret_reference, "username": record.username},
        )
        return record
