"""Lifecycle dispatch and the database bootstrap sequence."""

from __future__ import annotations

import logging
from contextlib import closing
from typing import assert_never

from lobechat_infra.db_init.credentials import ConnectionDescriptor, CredentialResolver
from lobechat_infra.db_init.events import (
    BootstrapProperties,
    BootstrapResult,
    CreateEvent,
    DeleteEvent,
    LifecycleEvent,
    UpdateEvent,
)
from lobechat_infra.db_init.postgres import Database
from lobechat_infra.db_init.secrets import SecretStore

logger: logging.Logger = logging.getLogger(__name__)

PHYSICAL_RESOURCE_ID = "pgvector-init"
VECTOR_EXTENSION = "vector"


def acknowledge_delete(
    event: DeleteEvent, physical_resource_id: str = PHYSICAL_RESOURCE_ID
) -> BootstrapResult:
    """Answer a Delete without touching the database or any secret.

    The database and the ``DATABASE_URL`` secret belong to other resources,
    so nothing is torn down here; configuration is not consulted either.
    """
    logger.info(
        "bootstrap_delete_acknowledged",
        extra={"physical_resource_id": event.physical_resource_id},
    )
    return BootstrapResult(physical_resource_id=physical_resource_id)


class BootstrapOrchestrator:
    """Runs the database bootstrap for one lifecycle event at a time.

    The physical resource id is constant, so the controller treats every
    Create/Update as an in-place change of a single logical resource.
    Callers are expected to serialise invocations; nothing here locks.
    """

    def __init__(
        self,
        secret_store: SecretStore,
        database: Database,
        defaults: BootstrapProperties | None = None,
        extension: str = VECTOR_EXTENSION,
        physical_resource_id: str = PHYSICAL_RESOURCE_ID,
    ) -> None:
        """Initialise the orchestrator.

        Args:
            secret_store: Store holding both the credential and output secrets.
            database: Factory for transient database connections.
            defaults: Values used for properties the event leaves out.
            extension: Extension enabled during bootstrap.
            physical_resource_id: Identifier reported for every event.
        """
        self._secret_store: SecretStore = secret_store
        self._resolver: CredentialResolver = CredentialResolver(secret_store)
        self._database: Database = database
        self._defaults: BootstrapProperties = defaults or BootstrapProperties()
        self._extension: str = extension
        self._physical_resource_id: str = physical_resource_id

    def handle(self, event: LifecycleEvent) -> BootstrapResult:
        """Dispatch ``event`` and return the result for the controller.

        Any ``BootstrapError`` propagates; nothing is reported as success
        unless every step completed.
        """
        match event:
            case DeleteEvent():
                return acknowledge_delete(event, self._physical_resource_id)
            case CreateEvent() | UpdateEvent():
                return self._bootstrap(event.properties)
            case _:
                assert_never(event)

    def _bootstrap(self, properties: BootstrapProperties) -> BootstrapResult:
        target = properties.merged_with(self._defaults).require()
        logger.info(
            "bootstrap_started",
            extra={"host": target.db_host, "port": target.db_port, "database": target.db_name},
        )

        credentials = self._resolver.resolve(target.db_secret_arn)
        descriptor = ConnectionDescriptor.from_credentials(
            host=target.db_host,
            port=target.db_port,
            database_name=target.db_name,
            credentials=credentials,
        )

        with closing(self._database.connect(descriptor)) as connection:
            connection.enable_extension(self._extension)
            database_url = descriptor.database_url
            self._secret_store.put(target.database_url_secret_arn, database_url)

        logger.info(
            "bootstrap_completed",
            extra={
                "physical_resource_id": self._physical_resource_id,
                "database_url_secret_id": target.database_url_secret_arn,
            },
        )
        return BootstrapResult(
            physical_resource_id=self._physical_resource_id,
            database_url=database_url,
        )
