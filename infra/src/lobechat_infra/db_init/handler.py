"""Lambda entry point for the pgvector database bootstrap."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from lobechat_infra.db_init.errors import BootstrapError, InvalidConfigurationError
from lobechat_infra.db_init.events import DeleteEvent, parse_event
from lobechat_infra.db_init.orchestrator import BootstrapOrchestrator, acknowledge_delete
from lobechat_infra.db_init.postgres import PsycopgDatabase
from lobechat_infra.db_init.secrets import SecretsManagerStore
from lobechat_infra.db_init.settings import BootstrapSettings, LoggingSettings

logger: logging.Logger = logging.getLogger(__name__)

_orchestrator: BootstrapOrchestrator | None = None
_logging_configured = False


def _configure_logging() -> None:
    global _logging_configured
    if _logging_configured:
        return
    _logging_configured = True
    try:
        level = LoggingSettings.load().log_level
    except InvalidConfigurationError as exc:
        # The level only filters output; every event type still runs.
        logger.warning("log_level_invalid", extra={"error": str(exc)})
        return
    logging.getLogger().setLevel(level)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level))
    )


def build_orchestrator(settings: BootstrapSettings) -> BootstrapOrchestrator:
    """Wire the orchestrator to Secrets Manager and PostgreSQL.

    Raises ``InvalidConfigurationError`` for a malformed fallback before any
    client is created.
    """
    defaults = settings.fallback_properties()
    return BootstrapOrchestrator(
        secret_store=SecretsManagerStore.create(region=settings.aws_region),
        database=PsycopgDatabase(connect_timeout=settings.db_connect_timeout),
        defaults=defaults,
    )


def _get_orchestrator() -> BootstrapOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(BootstrapSettings.load())
    return _orchestrator


def handle_event(
    payload: Mapping[str, Any],
    orchestrator: Callable[[], BootstrapOrchestrator],
) -> dict[str, Any]:
    """Parse ``payload``, run it and build the response.

    ``orchestrator`` is only called for Create and Update, so a Delete is
    acknowledged even when the environment is misconfigured. Failures are
    logged and re-raised so the invocation is reported as failed.
    """
    try:
        event = parse_event(payload)
        if isinstance(event, DeleteEvent):
            result = acknowledge_delete(event)
        else:
            result = orchestrator().handle(event)
    except BootstrapError as exc:
        logger.error(
            "bootstrap_failed",
            extra={"error_type": type(exc).__name__, "error": str(exc)},
        )
        raise
    return result.to_response()


def handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """AWS Lambda handler."""
    _configure_logging()
    logger.info(
        "bootstrap_invoked",
        extra={
            "request_type": event.get("RequestType") if isinstance(event, Mapping) else None,
            "request_id": getattr(context, "aws_request_id", None),
        },
    )
    return handle_event(event, _get_orchestrator)
