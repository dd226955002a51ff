# provisioning/handlers/base.py
# -*- coding: utf-8 -*-
"""
Handler contracts.

A ``TaskHandler`` processes one task row at a time. It exposes a single
entry point, ``process``, which maps the row's pending status to an action
name and hands the row to ``handle``.

A ``BatchTaskHandler`` processes every pending row of its entity type in one
call and reports whether anything changed.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, Optional

from provisioning.models import EntityType, Failure, Outcome, TaskRow, TaskStatus

if TYPE_CHECKING:
    from provisioning.context import RunContext

ACTION_BY_STATUS: Dict[TaskStatus, str] = {
    TaskStatus.TOADD: "add",
    TaskStatus.TOCHANGE: "change",
    TaskStatus.TOCHANGEPWD: "change-password",
    TaskStatus.TOENABLE: "enable",
    TaskStatus.TODISABLE: "disable",
    TaskStatus.TORESTORE: "restore",
    TaskStatus.TODELETE: "delete",
    TaskStatus.TOINSTALL: "install",
    TaskStatus.TOUPDATE: "update",
    TaskStatus.TOUNINSTALL: "uninstall",
}


class TaskHandler(ABC):
    """Provisions one entity type, one row per call."""

    def __init__(
        self,
        entity_type: EntityType,
        context: "RunContext",
        logger: Optional[logging.Logger] = None,
    ):
        self.entity_type = entity_type
        self.context = context
        self.settings = context.settings
        self.logger = logger or context.logger.getChild(str(entity_type))

    def setup(self) -> None:
        """One-time preparation, run when the handler is first resolved."""

    def process(self, row: TaskRow) -> Outcome:
        """
        Carry out the transition requested by ``row.status``.

        Returns:
            Success, or Failure with a message for the panel.
        """
        action = ACTION_BY_STATUS.get(row.status)
        if action is None:
            return Failure(
                f"No action is defined for status '{row.status}' of {self.entity_type}"
            )
        self.logger.debug(f"Running '{action}' for {row.name} (ID {row.id})")
        return self.handle(row, action)

    @abstractmethod
    def handle(self, row: TaskRow, action: str) -> Outcome:
        """Perform ``action`` for ``row``."""


class BatchTaskHandler(ABC):
    """Processes all pending rows of its entity type in one call."""

    def __init__(
        self,
        entity_type: EntityType,
        context: "RunContext",
        logger: Optional[logging.Logger] = None,
    ):
        self.entity_type = entity_type
        self.context = context
        self.settings = context.settings
        self.logger = logger or context.logger.getChild(str(entity_type))

    def setup(self) -> None:
        """One-time preparation, run when the handler is first resolved."""

    @abstractmethod
    def process_all(self) -> bool:
        """
        Process every pending row.

        Returns:
            True if at least one row changed.
        """
