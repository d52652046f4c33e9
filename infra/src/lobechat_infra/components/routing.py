"""Provider-agnostic HTTP routing component interface."""

from __future__ import annotations

import logging
from typing import Protocol

import pulumi

logger: logging.Logger = logging.getLogger(__name__)


class RoutingOutputs:
    """Resolved outputs from a provisioned routing component."""

    def __init__(
        self,
        app_url: pulumi.Output[str],
        api_id: pulumi.Output[str],
        stage_invoke_url: pulumi.Output[str],
        certificate_arn: pulumi.Output[str] | None = None,
    ) -> None:
        """Initialise routing outputs.

        Args:
            app_url: Public URL of the chat app, without a trailing slash.
            api_id: ID of the REST API.
            stage_invoke_url: Default ``execute-api`` URL of the deployed stage.
            certificate_arn: ARN of the validated custom-domain certificate,
                when a custom domain is configured.
        """
        self.app_url: pulumi.Output[str] = app_url
        self.api_id: pulumi.Output[str] = api_id
        self.stage_invoke_url: pulumi.Output[str] = stage_invoke_url
        self.certificate_arn: pulumi.Output[str] | None = certificate_arn


class LobechatRouting(Protocol):
    @property
    def outputs(self) -> RoutingOutputs: ...
