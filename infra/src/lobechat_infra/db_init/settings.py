"""Runtime settings for the bootstrap function, read from its environment."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from lobechat_infra.db_init.errors import InvalidConfigurationError
from lobechat_infra.db_init.events import BootstrapProperties
from lobechat_infra.db_init.postgres import DEFAULT_CONNECT_TIMEOUT

logger: logging.Logger = logging.getLogger(__name__)

# Property alias -> environment variable supplying its fallback.
_FALLBACK_VARIABLES: dict[str, str] = {
    "DbSecretArn": "DB_SECRET_ARN",
    "DbHost": "DB_HOST",
    "DbPort": "DB_PORT",
    "DbName": "DB_NAME",
    "DatabaseUrlSecretArn": "DATABASE_URL_SECRET_ARN",
}


def _invalid_variables(exc: ValidationError) -> list[str]:
    names: list[str] = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else ""
        names.append(_FALLBACK_VARIABLES.get(field, field.upper()))
    return names


class LoggingSettings(BaseSettings):
    """Log level shared by every invocation, whatever its event type."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @classmethod
    def load(cls) -> LoggingSettings:
        """Raises ``InvalidConfigurationError`` for an unknown ``LOG_LEVEL``."""
        try:
            return cls()
        except ValidationError as exc:
            raise InvalidConfigurationError(_invalid_variables(exc)) from exc


class BootstrapSettings(BaseSettings):
    """Environment of the bootstrap function.

    The five connection values are fallbacks for properties that an
    invocation leaves out. They are kept as raw strings here and validated
    by ``fallback_properties`` so that only Create and Update depend on them.
    """

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    db_secret_arn: str | None = None
    db_host: str | None = None
    db_port: str | None = None
    db_name: str | None = None
    database_url_secret_arn: str | None = None
    db_connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    aws_region: str | None = None

    @classmethod
    def load(cls) -> BootstrapSettings:
        """Read the environment.

        Raises ``InvalidConfigurationError`` naming each malformed variable.
        """
        try:
            settings = cls()
        except ValidationError as exc:
            raise InvalidConfigurationError(_invalid_variables(exc)) from exc
        logger.debug(
            "bootstrap_settings_loaded",
            extra={
                "db_host": settings.db_host,
                "db_name": settings.db_name,
                "db_connect_timeout": settings.db_connect_timeout,
            },
        )
        return settings

    def fallback_properties(self) -> BootstrapProperties:
        """Return the environment fallbacks as a property bag.

        Raises ``InvalidConfigurationError`` when a fallback is present but
        malformed, such as a non-numeric ``DB_PORT``.
        """
        try:
            return BootstrapProperties.model_validate(
                {
                    "DbSecretArn": self.db_secret_arn,
                    "DbHost": self.db_host,
                    "DbPort": self.db_port,
                    "DbName": self.db_name,
                    "DatabaseUrlSecretArn": self.database_url_secret_arn,
                }
            )
        except ValidationError as exc:
            raise InvalidConfigurationError(_invalid_variables(exc)) from exc
