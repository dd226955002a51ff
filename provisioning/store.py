# provisioning/store.py
# -*- coding: utf-8 -*-
"""
Access to the Entity Status Store.

``TaskStore`` is the narrow interface the engine needs: run a Pending-Work
Query and apply one of three single-row writes. ``PostgresTaskStore``
implements it on a Psycopg 3 connection.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from provisioning.errors import QueryError, StatusWriteError
from provisioning.models import TaskRow, TaskStatus
from provisioning.queries import PendingQuery
from provisioning.tables import TableSpec

ROW_COLUMNS = ("id", "name", "status", "parent_id")


class TaskStore(ABC):
    """Reads pending work and persists task outcomes."""

    @abstractmethod
    def fetch_pending(self, query: PendingQuery) -> List[TaskRow]:
        """
        Run a Pending-Work Query.

        Returns:
            Eligible rows in query order; empty when nothing is pending.

        Raises:
            QueryError: The query could not be prepared or executed.
        """

    @abstractmethod
    def fetch_rows(self, statement: str) -> List[Dict[str, Any]]:
        """Run an arbitrary read-only statement. Raises QueryError."""

    @abstractmethod
    def update_status(
        self, table: TableSpec, row_id: Any, status: TaskStatus
    ) -> None:
        """Set the row's status and clear its error. Raises StatusWriteError."""

    @abstractmethod
    def set_error(self, table: TableSpec, row_id: Any, message: str) -> None:
        """Record a failure message on the row. Raises StatusWriteError."""

    @abstractmethod
    def delete_row(self, table: TableSpec, row_id: Any) -> None:
        """Remove the row. Raises StatusWriteError."""


def row_from_record(query: PendingQuery, record: Dict[str, Any]) -> TaskRow:
    """Build a TaskRow from a result record of ``query``."""
    try:
        status = TaskStatus(record["status"])
    except ValueError as e:
        raise QueryError(
            f"Query '{query.key}' returned unknown status '{record['status']}'",
            phase=query.key,
            original_error=e,
        ) from e
    if not status.is_pending:
        raise QueryError(
            f"Query '{query.key}' returned row {record['id']} in settled status '{status}'",
            phase=query.key,
        )
    extra = {k: v for k, v in record.items() if k not in ROW_COLUMNS}
    return TaskRow(
        entity_type=query.entity_type,
        id=record["id"],
        name=str(record["name"]),
        status=status,
        parent_id=record.get("parent_id"),
        data=extra,
    )


class PostgresTaskStore(TaskStore):
    """TaskStore backed by an autocommit Psycopg 3 connection."""

    def __init__(
        self,
        conn: psycopg.Connection,
        logger: Optional[logging.Logger] = None,
    ):
        self.conn = conn
        self.logger = logger or logging.getLogger(__name__)

    def fetch_pending(self, query: PendingQuery) -> List[TaskRow]:
        records = self._select(query.sql, query.key)
        return [row_from_record(query, record) for record in records]

    def fetch_rows(self, statement: str) -> List[Dict[str, Any]]:
        return self._select(statement, "ad-hoc")

    def _select(self, statement: str, label: str) -> List[Dict[str, Any]]:
        try:
            with self.conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(statement)
                return cursor.fetchall()
        except psycopg.Error as e:
            raise QueryError(
                f"Could not execute query '{label}': {e}",
                phase=label,
                original_error=e,
            ) from e

    def update_status(
        self, table: TableSpec, row_id: Any, status: TaskStatus
    ) -> None:
        statement = sql.SQL(
            "UPDATE {table} SET {status_col} = %s, {error_col} = NULL WHERE {id_col} = %s"
        ).format(
            table=sql.Identifier(table.table),
            status_col=sql.Identifier(table.status_column),
            error_col=sql.Identifier(table.error_column),
            id_col=sql.Identifier(table.id_column),
        )
        self._write(statement, (status.value, row_id), table, row_id)

    def set_error(self, table: TableSpec, row_id: Any, message: str) -> None:
        statement = sql.SQL(
            "UPDATE {table} SET {error_col} = %s WHERE {id_col} = %s"
        ).format(
            table=sql.Identifier(table.table),
            error_col=sql.Identifier(table.error_column),
            id_col=sql.Identifier(table.id_column),
        )
        self._write(statement, (message, row_id), table, row_id)

    def delete_row(self, table: TableSpec, row_id: Any) -> None:
        statement = sql.SQL("DELETE FROM {table} WHERE {id_col} = %s").format(
            table=sql.Identifier(table.table),
            id_col=sql.Identifier(table.id_column),
        )
        self._write(statement, (row_id,), table, row_id)

    def _write(
        self,
        statement: sql.Composed,
        params: tuple,
        table: TableSpec,
        row_id: Any,
    ) -> None:
        try:
            with self.conn.cursor() as cursor:
                cursor.execute(statement, params)
        except psycopg.Error as e:
            raise StatusWriteError(
                f"Could not update {table.table} row {row_id}: {e}",
                original_error=e,
            ) from e
