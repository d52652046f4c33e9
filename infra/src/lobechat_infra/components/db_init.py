"""Provider-agnostic database bootstrap component interface."""

from __future__ import annotations

import logging
from typing import Protocol

import pulumi

logger: logging.Logger = logging.getLogger(__name__)


class DbInitOutputs:
    """Resolved outputs from the database bootstrap component."""

    def __init__(
        self,
        database_url: pulumi.Output[str],
        function_name: pulumi.Output[str],
    ) -> None:
        """Initialise bootstrap outputs.

        Args:
            database_url: Connection URI reported by the bootstrap function,
                marked secret. Resolves only after the database is bootstrapped.
            function_name: Name of the bootstrap function.
        """
        self.database_url: pulumi.Output[str] = database_url
        self.function_name: pulumi.Output[str] = function_name


class LobechatDbInit(Protocol):
    """Provider-agnostic interface for the database bootstrap component."""

    @property
    def outputs(self) -> DbInitOutputs:
        """Return the resolved bootstrap outputs."""
        ...
