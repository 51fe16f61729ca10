"""Database facade: one dialect descriptor plus one connection.

``Database`` renders IR statements with its descriptor and hands the SQL
to the connection shim.  Translation always completes before any SQL is
sent, so capability and configuration errors never leave a statement half
executed.

Usage::

    import sqlite3
    from dialectql import Database, DBAPIConnection, DialectRegistry

    db = Database("sqlite", DBAPIConnection(sqlite3.connect(":memory:")))
    with db.transaction():
        new_id = db.insert(stmt)
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from dialectql.compile.base import RenderedSQL
from dialectql.compile.builder import QueryBuilder
from dialectql.compile.literals import LiteralFormatter
from dialectql.compile.registry import DialectRegistry
from dialectql.connection import Connection, ConnectionOptions, connect
from dialectql.errors import CapabilityError, ConfigurationError
from dialectql.introspect import ColumnSchema, IndexSchema, parse_version
from dialectql.schema.dialect import DialectDescriptor
from dialectql.schema.nodes import Identifier, func
from dialectql.schema.statements import (
    AlterTableOp,
    CreateTable,
    CreateTableAs,
    DropTable,
    InsertStatement,
    SelectStatement,
    Statement,
)

logger = structlog.get_logger()

ISOLATION_LEVELS: dict[str, str] = {
    "read_uncommitted": "READ UNCOMMITTED",
    "read_committed": "READ COMMITTED",
    "repeatable_read": "REPEATABLE READ",
    "serializable": "SERIALIZABLE",
}

DDLStatement = AlterTableOp | CreateTable | CreateTableAs | DropTable


class Database:
    """Renders and executes statements for one backend.

    Args:
        dialect: Descriptor, or the name of a registered dialect.
        connection: An open :class:`~dialectql.connection.Connection`.
    """

    def __init__(self, dialect: DialectDescriptor | str, connection: Connection) -> None:
        if isinstance(dialect, str):
            dialect = DialectRegistry.get(dialect)
        self._dialect = dialect
        self._connection = connection
        self._builder = QueryBuilder(dialect)
        self._literals = LiteralFormatter(dialect)

    @classmethod
    def connect(
        cls, dialect: DialectDescriptor | str, options: ConnectionOptions | str
    ) -> Database:
        """Open a driver connection through the dialect's connector."""
        if isinstance(dialect, str):
            dialect = DialectRegistry.get(dialect)
        return cls(dialect, connect(dialect, options))

    @property
    def dialect(self) -> DialectDescriptor:
        return self._dialect

    @property
    def connection(self) -> Connection:
        return self._connection

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def render(self, statement: Statement) -> RenderedSQL:
        return self._builder.build(statement)

    def fetch(self, statement: SelectStatement) -> Iterator[dict[str, Any]]:
        """Run a SELECT and yield rows keyed by output-folded column names."""
        rendered = self.render(statement)
        for row in self._connection.execute(rendered.sql, rendered.params):
            yield {self._literals.output_identifier(k): v for k, v in row.items()}

    def fetch_one(self, statement: SelectStatement) -> dict[str, Any] | None:
        rows = self.fetch(statement)
        try:
            return next(rows, None)
        finally:
            rows.close()

    def insert(self, statement: InsertStatement) -> Any:
        """Run an INSERT and return the generated identity value, if any."""
        rendered = self.render(statement)
        return self._connection.execute_insert(
            rendered.sql, rendered.params, self._dialect.last_insert_id_sql
        )

    def execute(self, statement: Statement) -> int:
        """Run an UPDATE, DELETE or INSERT and return the affected row count."""
        rendered = self.render(statement)
        return self._connection.execute_dui(rendered.sql, rendered.params)

    def execute_ddl(self, statement: DDLStatement) -> None:
        rendered = self.render(statement)
        logger.debug("executing ddl", sql=rendered.sql, dialect=self._dialect.name)
        self._connection.execute_dui(rendered.sql, rendered.params)

    def alter_table(self, *ops: AlterTableOp) -> None:
        """Apply ALTER TABLE operations in order.

        Every operation is rendered before the first one runs.

        Raises:
            UnsupportedDDLError: If any operation is unsupported; nothing is
                executed in that case.
        """
        rendered = [self.render(op) for op in ops]
        for sql in rendered:
            self._connection.execute_dui(sql.sql, sql.params)

    def create_table(self, statement: CreateTable) -> None:
        self.execute_ddl(statement)

    def create_table_as(
        self, name: str | Identifier, query: SelectStatement, temp: bool = False
    ) -> None:
        ident = name if isinstance(name, Identifier) else Identifier.parse(name)
        self.execute_ddl(CreateTableAs(name=ident, query=query, temp=temp))

    def drop_table(self, name: str | Identifier, if_exists: bool = False) -> None:
        ident = name if isinstance(name, Identifier) else Identifier.parse(name)
        self.execute_ddl(DropTable(name=ident, if_exists=if_exists))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def schema(self, table: str | Identifier) -> dict[str, ColumnSchema]:
        """Column metadata for ``table``.

        Raises:
            CapabilityError: If the dialect has no schema parser.
        """
        parser = self._dialect.schema_parser
        if parser is None:
            raise self._unsupported("schema introspection")
        return parser(self, table)

    def indexes(self, table: str | Identifier) -> dict[str, IndexSchema]:
        """Non-primary-key indexes on ``table``."""
        parser = self._dialect.index_parser
        if parser is None:
            raise self._unsupported("index introspection")
        return parser(self, table)

    def server_version(self) -> int | None:
        """Server version as ``major * 10000 + minor * 100 + patch``."""
        if self._dialect.version_function is None:
            raise self._unsupported("server version")
        row = self.fetch_one(SelectStatement(columns=(func(self._dialect.version_function),)))
        if not row:
            return None
        return parse_version(str(next(iter(row.values()))))

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self, isolation_level: str | None = None) -> Iterator[Database]:
        """Run the block in a transaction; commit on success, roll back on error.

        Args:
            isolation_level: ``read_uncommitted``, ``read_committed``,
                ``repeatable_read`` or ``serializable``.

        Raises:
            CapabilityError: If an isolation level is requested and the
                dialect cannot set one.
        """
        if isolation_level is not None:
            if not self._dialect.supports_transaction_isolation_levels:
                raise self._unsupported("transaction isolation levels")
            level = ISOLATION_LEVELS.get(isolation_level)
            if level is None:
                raise ConfigurationError(
                    f"Unknown isolation level '{isolation_level}'. "
                    f"Expected one of {sorted(ISOLATION_LEVELS)}.",
                    dialect=self._dialect.name,
                )
            self._connection.execute_dui(f"SET TRANSACTION ISOLATION LEVEL {level}")
        try:
            yield self
        except BaseException:
            logger.debug("rolling back transaction", dialect=self._dialect.name)
            self._connection.rollback()
            raise
        self._connection.commit()

    def close(self) -> None:
        self._connection.close()

    def _unsupported(self, feature: str) -> CapabilityError:
        return CapabilityError(
            f"Dialect '{self._dialect.name}' does not support {feature}.",
            feature=feature,
            dialect=self._dialect.name,
        )
