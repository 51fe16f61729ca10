"""Test fixtures: sample catalog rows and a recording connection."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any


def hsqldb_column_rows() -> list[dict[str, Any]]:
    """Rows as returned by INFORMATION_SCHEMA.COLUMNS (keys already folded)."""
    return [
        {"column_name": "ID", "allow_null": "NO", "default": None, "db_type": "INTEGER"},
        {"column_name": "NAME", "allow_null": "YES", "default": "", "db_type": "CHARACTER VARYING"},
        {"column_name": "CREATED", "allow_null": "YES", "default": "CURRENT_TIMESTAMP",
         "db_type": "TIMESTAMP"},
        {"column_name": "PRICE", "allow_null": "YES", "default": None, "db_type": "NUMERIC(10,2)"},
    ]


def hsqldb_index_rows() -> list[dict[str, Any]]:
    """Rows as returned by INFORMATION_SCHEMA.SYSTEM_INDEXINFO."""
    return [
        {"index_name": "SYS_IDX_SYS_PK_10092_10093", "column_name": "ID", "non_unique": False},
        {"index_name": "ITEMS_NAME_IDX", "column_name": "NAME", "non_unique": True},
        {"index_name": "ITEMS_NAME_CREATED_UQ", "column_name": "NAME", "non_unique": False},
        {"index_name": "ITEMS_NAME_CREATED_UQ", "column_name": "CREATED", "non_unique": False},
    ]


def vertica_column_rows() -> list[dict[str, Any]]:
    """v_catalog rows: one per (column, constraint) pair."""
    return [
        {"column_name": "id", "constraint_name": "C_PRIMARY", "allow_null": False,
         "default": None, "db_type": "int"},
        {"column_name": "id", "constraint_name": "C_UNIQUE", "allow_null": False,
         "default": None, "db_type": "int"},
        {"column_name": "label", "constraint_name": None, "allow_null": True,
         "default": "'n/a'", "db_type": "varchar(80)"},
    ]


class RecordingConnection:
    """In-memory :class:`~dialectql.connection.Connection` for facade tests.

    Each ``execute`` call returns the next queued result set; every
    statement is recorded in ``statements`` as ``(sql, params)``.
    """

    def __init__(self, results: Sequence[list[dict[str, Any]]] = (), rowcount: int = 1) -> None:
        self._results = list(results)
        self._rowcount = rowcount
        self.statements: list[tuple[str, tuple[Any, ...]]] = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Iterator[dict[str, Any]]:
        self.statements.append((sql, tuple(params)))
        rows = self._results.pop(0) if self._results else []
        return iter(rows)

    def execute_insert(
        self, sql: str, params: Sequence[Any] = (), last_insert_id_sql: str | None = None
    ) -> Any:
        self.statements.append((sql, tuple(params)))
        if last_insert_id_sql is not None:
            self.statements.append((last_insert_id_sql, ()))
        return 42

    def execute_dui(self, sql: str, params: Sequence[Any] = ()) -> int:
        self.statements.append((sql, tuple(params)))
        return self._rowcount

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        self.closed = True
