"""DDL translation: ALTER TABLE operations, column definitions, CREATE/DROP.

``DDLTranslator`` renders one atomic DDL operation per call.  ALTER TABLE
kinds can be overridden per dialect (``alter_overrides``) or declared
unsupported (``unsupported_alter_ops``); unsupported kinds raise
:class:`~dialectql.errors.UnsupportedDDLError` before any SQL is produced.
"""
from __future__ import annotations

from collections.abc import Callable

from dialectql.compile.context import CompilationContext
from dialectql.compile.expression_builder import ExpressionBuilder, RuntimeContext
from dialectql.errors import CapabilityError, ConfigurationError, UnsupportedDDLError
from dialectql.schema.dialect import DialectDescriptor
from dialectql.schema.expressions import AlterKind
from dialectql.schema.nodes import Param
from dialectql.schema.statements import (
    AlterTableOp,
    ColumnDefinition,
    CreateTable,
    CreateTableAs,
    DropTable,
)

#: Identity sequences start here unless the column says otherwise.
DEFAULT_IDENTITY_START = 1


class DDLTranslator:
    """Renders DDL statements for one dialect.

    Args:
        ctx: Static compilation context.
    """

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx
        # DDL never binds parameters; defaults are rendered inline.
        self._expr = ExpressionBuilder(ctx, RuntimeContext())

    @property
    def dialect(self) -> DialectDescriptor:
        return self._ctx.dialect

    # ------------------------------------------------------------------
    # ALTER TABLE
    # ------------------------------------------------------------------

    def render_alter(self, op: AlterTableOp) -> str:
        """Render one ALTER TABLE operation.

        Raises:
            UnsupportedDDLError: If the dialect cannot perform ``op.kind``.
            ConfigurationError: If ``op.kind`` has no rendering at all.
        """
        try:
            kind = AlterKind(op.kind)
        except ValueError:
            raise ConfigurationError(
                f"Unknown ALTER TABLE operation '{op.kind}'.", dialect=self.dialect.name
            ) from None
        if kind in self.dialect.unsupported_alter_ops:
            raise UnsupportedDDLError(kind.value, self.dialect.name)
        override = self.dialect.alter_overrides.get(kind)
        if override is not None:
            return override(op, self)
        return _DEFAULT_ALTER_RENDERERS[kind](op, self)

    def alter_prefix(self, op: AlterTableOp) -> str:
        return f"ALTER TABLE {self._ctx.literals.quote_qualified(op.table)}"

    def quote(self, name: str) -> str:
        return self._ctx.quote(name)

    # ------------------------------------------------------------------
    # Column definitions
    # ------------------------------------------------------------------

    def type_literal(self, column: ColumnDefinition) -> str:
        """Return the column type SQL, with identity clause when requested."""
        sql = column.type
        if isinstance(column.size, tuple):
            sql += f"({column.size[0]}, {column.size[1]})"
        elif column.size is not None:
            sql += f"({column.size})"
        if not column.identity:
            return sql
        if self.dialect.identity_renderer is not None:
            return self.dialect.identity_renderer(sql, column)
        return identity_type_literal(sql, column)

    def column_definition(self, column: ColumnDefinition) -> str:
        parts = [self.quote(column.name), self.type_literal(column)]
        if isinstance(column.default, Param):
            raise ConfigurationError(
                f"Column default for '{column.name}' cannot be a bound parameter.",
                dialect=self.dialect.name,
            )
        if column.default is not None:
            parts.append(f"DEFAULT {self._expr.build(column.default)}")
        if column.null is True:
            parts.append("NULL")
        elif column.null is False:
            parts.append("NOT NULL")
        if column.unique:
            parts.append("UNIQUE")
        if column.primary_key:
            parts.append("PRIMARY KEY")
        return " ".join(parts)

    # ------------------------------------------------------------------
    # CREATE / DROP
    # ------------------------------------------------------------------

    def create_table_prefix(self, name, temp: bool = False, if_not_exists: bool = False) -> str:
        sql = "CREATE TEMPORARY TABLE" if temp else "CREATE TABLE"
        if if_not_exists:
            if not self.dialect.supports_create_table_if_not_exists:
                raise CapabilityError(
                    f"Dialect '{self.dialect.name}' does not support CREATE TABLE IF NOT EXISTS.",
                    feature="create table if not exists",
                    dialect=self.dialect.name,
                )
            sql += " IF NOT EXISTS"
        return f"{sql} {self._ctx.literals.quote_qualified(name)}"

    def create_table(self, stmt: CreateTable) -> str:
        if not stmt.columns:
            raise ConfigurationError(
                f"CREATE TABLE {stmt.name.name} needs at least one column.",
                dialect=self.dialect.name,
            )
        prefix = self.create_table_prefix(stmt.name, stmt.temp, stmt.if_not_exists)
        columns = ", ".join(self.column_definition(c) for c in stmt.columns)
        return f"{prefix} ({columns})"

    def create_table_as(self, stmt: CreateTableAs, query_sql: str) -> str:
        """``CREATE TABLE t AS <query>``, or ``AS (<query>) WITH DATA``."""
        prefix = self.create_table_prefix(stmt.name, stmt.temp)
        if self.dialect.create_table_as_with_data:
            return f"{prefix} AS ({query_sql}) WITH DATA"
        return f"{prefix} AS {query_sql}"

    def drop_table(self, stmt: DropTable) -> str:
        sql = "DROP TABLE"
        if stmt.if_exists:
            if not self.dialect.supports_drop_table_if_exists:
                raise CapabilityError(
                    f"Dialect '{self.dialect.name}' does not support DROP TABLE IF EXISTS.",
                    feature="drop table if exists",
                    dialect=self.dialect.name,
                )
            sql += " IF EXISTS"
        return f"{sql} {self._ctx.literals.quote_qualified(stmt.name)}"


def identity_type_literal(base_sql: str, column: ColumnDefinition) -> str:
    """``<type> GENERATED BY DEFAULT AS IDENTITY (START WITH n [INCREMENT BY m])``.

    The start value is always explicit so a backend's zero-based default
    never applies.
    """
    start = column.start_with if column.start_with is not None else DEFAULT_IDENTITY_START
    sql = f"{base_sql} GENERATED BY DEFAULT AS IDENTITY (START WITH {int(start)}"
    if column.increment_by is not None:
        sql += f" INCREMENT BY {int(column.increment_by)}"
    return sql + ")"


# ---------------------------------------------------------------------------
# Default ALTER TABLE renderings
# ---------------------------------------------------------------------------


def _rename_column(op: AlterTableOp, ddl: DDLTranslator) -> str:
    return (
        f"{ddl.alter_prefix(op)} ALTER COLUMN {ddl.quote(op.column)} "
        f"RENAME TO {ddl.quote(op.new_name)}"
    )


def _set_column_type(op: AlterTableOp, ddl: DDLTranslator) -> str:
    return (
        f"{ddl.alter_prefix(op)} ALTER COLUMN {ddl.quote(op.column)} "
        f"SET DATA TYPE {ddl.type_literal(op.definition)}"
    )


def _set_column_nullability(op: AlterTableOp, ddl: DDLTranslator) -> str:
    null_sql = "NULL" if op.null else "NOT NULL"
    return f"{ddl.alter_prefix(op)} ALTER COLUMN {ddl.quote(op.column)} SET {null_sql}"


def _add_column(op: AlterTableOp, ddl: DDLTranslator) -> str:
    return f"{ddl.alter_prefix(op)} ADD COLUMN {ddl.column_definition(op.definition)}"


def _drop_column(op: AlterTableOp, ddl: DDLTranslator) -> str:
    return f"{ddl.alter_prefix(op)} DROP COLUMN {ddl.quote(op.column)}"


_DEFAULT_ALTER_RENDERERS: dict[AlterKind, Callable[[AlterTableOp, DDLTranslator], str]] = {
    AlterKind.RENAME_COLUMN: _rename_column,
    AlterKind.SET_COLUMN_TYPE: _set_column_type,
    AlterKind.SET_COLUMN_NULLABILITY: _set_column_nullability,
    AlterKind.ADD_COLUMN: _add_column,
    AlterKind.DROP_COLUMN: _drop_column,
}


def render_alter(op: AlterTableOp, dialect: DialectDescriptor) -> str:
    """Render one ALTER TABLE operation for ``dialect``."""
    return DDLTranslator(CompilationContext(dialect)).render_alter(op)
