"""Typed configuration loaded from environment variables at startup."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger: logging.Logger = logging.getLogger(__name__)


class CloudProvider(StrEnum):
    """Supported cloud provider deployment targets."""

    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"


class StackConfig(BaseSettings):
    """Fully validated infrastructure stack configuration.

    All values are sourced from environment variables at startup.
    Raises ``ValidationError`` on missing or invalid values.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOBECHAT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    cloud_provider: CloudProvider = CloudProvider.AWS
    root_domain: str
    subdomain: str = "lobechat"
    db_name: str = "lobechat"
    stage: Literal["prod", "staging", "dev"] = "dev"
    region: str = "us-west-2"
    permissions_boundary_name: str = ""
    next_auth_sso_providers: str = ""
    function_layer_arns: list[str] = []

    @field_validator("root_domain")
    @classmethod
    def _root_domain_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('root_domain is required, e.g. LOBECHAT_ROOT_DOMAIN="example.com"')
        return value

    @property
    def domain_name(self) -> str:
        """Fully qualified domain the chat app is served from."""
        return f"{self.subdomain}.{self.root_domain}"

    @property
    def retain_on_delete(self) -> bool:
        """Whether stateful resources outlive the stack."""
        return self.stage == "prod"

    @classmethod
    def load(cls) -> StackConfig:
        """Load and validate configuration from the environment.

        Logs each resolved setting at DEBUG level.
        Raises ``pydantic.ValidationError`` on missing or invalid values.
        """
        config = cls()  # type: ignore[call-arg]  # env vars supply required fields
        logger.debug(
            "stack_config_loaded",
            extra={
                "cloud_provider": config.cloud_provider.value,
                "domain_name": config.domain_name,
                "stage": config.stage,
                "region": config.region,
            },
        )
        return config
