"""Provider-agnostic app compute component interface."""

from __future__ import annotations

import logging
from typing import Protocol

import pulumi

logger: logging.Logger = logging.getLogger(__name__)


class ComputeOutputs:
    """Resolved outputs from a provisioned app compute component."""

    def __init__(
        self,
        function_name: pulumi.Output[str],
        invoke_arn: pulumi.Output[str],
        key_vaults_secret_arn: pulumi.Output[str],
        next_auth_secret_arn: pulumi.Output[str],
    ) -> None:
        """Initialise compute outputs.

        Args:
            function_name: Name of the app function.
            invoke_arn: ARN used by API Gateway integrations to invoke the function.
            key_vaults_secret_arn: ARN of the generated ``KEY_VAULTS_SECRET``.
            next_auth_secret_arn: ARN of the generated ``NEXT_AUTH_SECRET``.
        """
        self.function_name: pulumi.Output[str] = function_name
        self.invoke_arn: pulumi.Output[str] = invoke_arn
        self.key_vaults_secret_arn: pulumi.Output[str] = key_vaults_secret_arn
        self.next_auth_secret_arn: pulumi.Output[str] = next_auth_secret_arn


class LobechatCompute(Protocol):
    """Provider-agnostic interface for the app compute component."""

    @property
    def outputs(self) -> ComputeOutputs:
        """Return the resolved compute outputs."""
        ...
