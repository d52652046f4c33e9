"""Tests for the Secrets Manager adapter."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from lobechat_infra.db_init.errors import SecretUnavailableError, SecretWriteError
from lobechat_infra.db_init.secrets import SecretsManagerStore

_ARN = "arn:aws:secretsmanager:us-west-2:123456789012:secret:db-credentials"


def _client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_get_returns_secret_string() -> None:
    client = MagicMock()
    client.get_secret_value.return_value = {"SecretString": '{"username":"postgres"}'}
    assert SecretsManagerStore(client).get(_ARN) == '{"username":"postgres"}'
    client.get_secret_value.assert_called_once_with(SecretId=_ARN)


def test_get_maps_missing_secret() -> None:
    client = MagicMock()
    client.get_secret_value.side_effect = _client_error("ResourceNotFoundException", "GetSecretValue")
    with pytest.raises(SecretUnavailableError) as excinfo:
        SecretsManagerStore(client).get(_ARN)
    assert excinfo.value.reference == _ARN
    assert excinfo.value.reason == "ResourceNotFoundException"


def test_get_maps_transport_failure() -> None:
    client = MagicMock()
    client.get_secret_value.side_effect = EndpointConnectionError(endpoint_url="https://secretsmanager")
    with pytest.raises(SecretUnavailableError) as excinfo:
        SecretsManagerStore(client).get(_ARN)
    assert excinfo.value.reason == "EndpointConnectionError"


@pytest.mark.parametrize("response", [{"SecretBinary": b"\x00"}, {"SecretString": ""}, {}])
def test_get_rejects_secret_without_string(response: dict[str, object]) -> None:
    client = MagicMock()
    client.get_secret_value.return_value = response
    with pytest.raises(SecretUnavailableError, match="no SecretString payload"):
        SecretsManagerStore(client).get(_ARN)


def test_put_writes_secret_string() -> None:
    client = MagicMock()
    SecretsManagerStore(client).put(_ARN, "postgres://u:p@h:5432/d")
    client.put_secret_value.assert_called_once_with(
        SecretId=_ARN, SecretString="postgres://u:p@h:5432/d"
    )


def test_put_maps_rejection() -> None:
    client = MagicMock()
    client.put_secret_value.side_effect = _client_error("AccessDeniedException", "PutSecretValue")
    with pytest.raises(SecretWriteError) as excinfo:
        SecretsManagerStore(client).put(_ARN, "value")
    assert excinfo.value.reason == "AccessDeniedException"


def test_create_builds_secretsmanager_client() -> None:
    with patch("lobechat_infra.db_init.secrets.boto3.client") as client_factory:
        store = SecretsManagerStore.create(region="eu-central-1")
    client_factory.assert_called_once_with("secretsmanager", region_name="eu-central-1")
    assert isinstance(store, SecretsManagerStore)
