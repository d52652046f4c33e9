"""Lifecycle events accepted by the database bootstrap handler and its result.

Two invocation envelopes are understood:

* the CloudFormation custom-resource envelope, keyed by ``RequestType``;
* the ``aws.lambda_.Invocation`` envelope used with ``lifecycle_scope="CRUD"``,
  where the provider injects ``{"tf": {"action": ..., "prev_input": ...}}``.

A payload carrying neither is a plain one-shot invocation and is treated as a
creation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lobechat_infra.db_init.errors import ConfigurationMissingError, InvalidEventError


class RequestType(StrEnum):
    """Lifecycle operation requested by the controller."""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


_TF_ACTIONS: dict[str, RequestType] = {
    "create": RequestType.CREATE,
    "update": RequestType.UPDATE,
    "delete": RequestType.DELETE,
}


@dataclass(frozen=True)
class BootstrapTarget:
    """Fully resolved bootstrap inputs; every field is present."""

    db_secret_arn: str
    db_host: str
    db_port: int
    db_name: str
    database_url_secret_arn: str


class BootstrapProperties(BaseModel):
    """Caller-supplied property bag; any field may still be missing."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    db_secret_arn: str | None = Field(default=None, alias="DbSecretArn")
    db_host: str | None = Field(default=None, alias="DbHost")
    db_port: int | None = Field(default=None, alias="DbPort", gt=0, lt=65536)
    db_name: str | None = Field(default=None, alias="DbName")
    database_url_secret_arn: str | None = Field(default=None, alias="DatabaseUrlSecretArn")

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def merged_with(self, fallback: BootstrapProperties) -> BootstrapProperties:
        """Return a copy where missing values are taken from ``fallback``."""
        values = {
            name: getattr(self, name) if getattr(self, name) is not None else getattr(fallback, name)
            for name in type(self).model_fields
        }
        return BootstrapProperties(**values)

    def require(self) -> BootstrapTarget:
        """Validate that every input is present.

        Raises ``ConfigurationMissingError`` naming each absent property.
        """
        fields = type(self).model_fields
        missing = [info.alias or name for name, info in fields.items() if getattr(self, name) is None]
        if missing:
            raise ConfigurationMissingError(missing)
        return BootstrapTarget(
            db_secret_arn=self.db_secret_arn,  # type: ignore[arg-type]
            db_host=self.db_host,  # type: ignore[arg-type]
            db_port=self.db_port,  # type: ignore[arg-type]
            db_name=self.db_name,  # type: ignore[arg-type]
            database_url_secret_arn=self.database_url_secret_arn,  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class CreateEvent:
    properties: BootstrapProperties


@dataclass(frozen=True)
class UpdateEvent:
    properties: BootstrapProperties
    physical_resource_id: str | None = None


@dataclass(frozen=True)
class DeleteEvent:
    physical_resource_id: str | None = None


LifecycleEvent = CreateEvent | UpdateEvent | DeleteEvent


@dataclass(frozen=True)
class BootstrapResult:
    """Outcome reported back to the lifecycle controller."""

    physical_resource_id: str
    database_url: str | None = field(default=None, repr=False)

    def to_response(self) -> dict[str, Any]:
        """Serialise into the controller's response shape."""
        response: dict[str, Any] = {"PhysicalResourceId": self.physical_resource_id}
        if self.database_url is not None:
            response["Data"] = {"DatabaseUrl": self.database_url}
        return response


def _request_type(payload: Mapping[str, Any]) -> RequestType:
    if "RequestType" in payload:
        raw = payload["RequestType"]
        try:
            return RequestType(raw)
        except ValueError as exc:
            raise InvalidEventError(f"Unknown request type {raw!r}.") from exc

    lifecycle = payload.get("tf")
    if lifecycle is None:
        return RequestType.CREATE
    action = lifecycle.get("action") if isinstance(lifecycle, Mapping) else None
    request_type = _TF_ACTIONS.get(action) if isinstance(action, str) else None
    if request_type is None:
        raise InvalidEventError(f"Unknown lifecycle action {action!r}.")
    return request_type


def parse_event(payload: Mapping[str, Any]) -> LifecycleEvent:
    """Convert a raw invocation payload into a typed lifecycle event.

    Raises ``InvalidEventError`` for unknown operations or properties that
    cannot be coerced (for example a non-numeric or out-of-range ``DbPort``).
    """
    if not isinstance(payload, Mapping):
        raise InvalidEventError("Invocation payload must be a JSON object.")

    request_type = _request_type(payload)
    physical_resource_id = payload.get("PhysicalResourceId")

    if request_type is RequestType.DELETE:
        return DeleteEvent(physical_resource_id=physical_resource_id)

    try:
        properties = BootstrapProperties.model_validate(payload.get("ResourceProperties") or {})
    except ValidationError as exc:
        raise InvalidEventError(
            f"Invalid resource properties ({exc.error_count()} error(s)): "
            + "; ".join(
                ".".join(str(part) for part in error["loc"]) or "ResourceProperties"
                for error in exc.errors()
            )
        ) from exc

    if request_type is RequestType.UPDATE:
        return UpdateEvent(properties=properties, physical_resource_id=physical_resource_id)
    return CreateEvent(properties=properties)
