"""Provider-agnostic network component interface."""

from __future__ import annotations

import logging
from typing import Protocol

import pulumi

logger: logging.Logger = logging.getLogger(__name__)


class NetworkOutputs:
    """Resolved outputs from a provisioned network component."""

    def __init__(
        self,
        vpc_id: pulumi.Output[str],
        public_subnet_ids: list[pulumi.Output[str]],
        egress_subnet_ids: list[pulumi.Output[str]],
        isolated_subnet_ids: list[pulumi.Output[str]],
    ) -> None:
        """Initialise network outputs.

        Args:
            vpc_id: ID of the VPC.
            public_subnet_ids: Subnets routed through the internet gateway.
            egress_subnet_ids: Private subnets with outbound access via NAT,
                used by the Lambda functions.
            isolated_subnet_ids: Private subnets without any internet route,
                used by the database.
        """
        self.vpc_id: pulumi.Output[str] = vpc_id
        self.public_subnet_ids: list[pulumi.Output[str]] = public_subnet_ids
        self.egress_subnet_ids: list[pulumi.Output[str]] = egress_subnet_ids
        self.isolated_subnet_ids: list[pulumi.Output[str]] = isolated_subnet_ids


class LobechatNetwork(Protocol):
    @property
    def outputs(self) -> NetworkOutputs: ...
