# provisioning/status_writer.py
# -*- coding: utf-8 -*-
"""
Status Writer: persists the outcome of one processed task row.

Exactly one store operation is issued per call:

- success on a transition mapped to a terminal status -> status updated,
  error cleared;
- success on a deletion -> row deleted;
- failure -> failure message stored in the row's error column, status left
  untouched so the panel can see what was attempted.
"""

import logging
from typing import Optional

from provisioning.models import Failure, Outcome, TaskRow
from provisioning.store import TaskStore
from provisioning.tables import TableSpec, table_for

module_logger = logging.getLogger(__name__)


class StatusWriter:
    def __init__(
        self, store: TaskStore, logger: Optional[logging.Logger] = None
    ):
        self.store = store
        self.logger = logger or module_logger

    def write(
        self,
        row: TaskRow,
        outcome: Outcome,
        table: Optional[TableSpec] = None,
    ) -> None:
        """
        Persist ``outcome`` for ``row``.

        Args:
            row: The processed row, with the status it had when selected.
            outcome: What the handler reported.
            table: Override for the row's table (defaults to its entity type's).

        Raises:
            StatusWriteError: The store rejected the write.
        """
        table = table or table_for(row.entity_type)

        if isinstance(outcome, Failure):
            self.logger.error(
                f"{row.entity_type} '{row.name}' (ID {row.id}) failed: {outcome.message}"
            )
            self.store.set_error(table, row.id, outcome.message)
            return

        try:
            new_status = table.status_after_success(row.status)
        except ValueError as e:
            self.logger.error(str(e))
            self.store.set_error(table, row.id, str(e))
            return

        if new_status is None:
            self.logger.debug(
                f"Deleting {table.table} row {row.id} ({row.name})"
            )
            self.store.delete_row(table, row.id)
        else:
            self.logger.debug(
                f"Setting {table.table} row {row.id} ({row.name}) to '{new_status}'"
            )
            self.store.update_status(table, row.id, new_status)
