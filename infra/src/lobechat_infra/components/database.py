"""Provider-agnostic database component interface."""

from __future__ import annotations

import logging
from typing import Protocol

import pulumi

logger: logging.Logger = logging.getLogger(__name__)


class DatabaseOutputs:
    """Resolved connection outputs from a provisioned database component."""

    def __init__(
        self,
        credentials_secret_arn: pulumi.Output[str],
        database_url_secret_arn: pulumi.Output[str],
        host: pulumi.Output[str],
        port: pulumi.Output[int],
        database_name: pulumi.Output[str],
        security_group_id: pulumi.Output[str],
    ) -> None:
        self.credentials_secret_arn: pulumi.Output[str] = credentials_secret_arn
        self.database_url_secret_arn: pulumi.Output[str] = database_url_secret_arn
        self.host: pulumi.Output[str] = host
        self.port: pulumi.Output[int] = port
        self.database_name: pulumi.Output[str] = database_name
        self.security_group_id: pulumi.Output[str] = security_group_id

    @property
    def endpoint(self) -> pulumi.Output[str]:
        """``host:port`` socket address of the writer endpoint."""
        return pulumi.Output.concat(self.host, ":", self.port.apply(str))


class LobechatDatabase(Protocol):
    @property
    def outputs(self) -> DatabaseOutputs: ...
