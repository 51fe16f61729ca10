"""Statement → SQL compilation.

``QueryBuilder`` is the top-level orchestrator.  It wires together the
expression builder, the clause builders, the clause assembler and the DDL
translator, then drives compilation for one statement.  All dialect
behaviour comes from the injected
:class:`~dialectql.schema.dialect.DialectDescriptor`.

Sub-builder graph
-----------------
QueryBuilder
  ├── ExpressionBuilder     (expression_builder.py)
  │     └── ExpressionTranslator
  ├── clause builders       (clause_builders.py)
  ├── ClauseAssembler       (clause_builders.py)
  └── DDLTranslator         (ddl_builder.py)

Runtime context sharing
-----------------------
A single :class:`~dialectql.compile.expression_builder.RuntimeContext` is
created per ``build()`` call and threaded through every nested SELECT
(CTEs, compounds, subqueries, INSERT ... SELECT, CREATE TABLE AS) so bound
parameters are collected in placeholder order for the whole statement.
"""

from __future__ import annotations

from dialectql.compile.base import RenderedSQL
from dialectql.compile.clause_builders import ClauseAssembler, select_fragments
from dialectql.compile.context import CompilationContext
from dialectql.compile.ddl_builder import DDLTranslator
from dialectql.compile.expression_builder import ExpressionBuilder, RuntimeContext
from dialectql.errors import ConfigurationError
from dialectql.schema.dialect import DialectDescriptor
from dialectql.schema.expressions import StatementKind
from dialectql.schema.statements import (
    AlterTableOp,
    CreateTable,
    CreateTableAs,
    DeleteStatement,
    DropTable,
    InsertStatement,
    SelectStatement,
    Statement,
    UpdateStatement,
)


class QueryBuilder:
    """Compiles IR statements to SQL for one dialect.

    Args:
        dialect: The dialect descriptor to render for.
    """

    def __init__(self, dialect: DialectDescriptor) -> None:
        self._ctx = CompilationContext(dialect=dialect)
        self._assembler = ClauseAssembler(self._ctx)

    @property
    def dialect(self) -> DialectDescriptor:
        return self._ctx.dialect

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, statement: Statement) -> RenderedSQL:
        """Compile ``statement`` to SQL.

        Args:
            statement: Any IR statement.

        Returns:
            :class:`~dialectql.compile.base.RenderedSQL` with the ``sql``
            text and bound ``params``.

        Raises:
            ConfigurationError: If the statement type is unknown.
            CapabilityError: If the statement needs a feature the dialect
                lacks.
        """
        runtime = RuntimeContext()
        expr = ExpressionBuilder(self._ctx, runtime)
        sql = self._dispatch(statement, expr)
        return RenderedSQL(sql=sql, params=tuple(runtime.params), dialect=self._ctx.dialect_name)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch(self, statement: Statement, expr: ExpressionBuilder) -> str:
        if isinstance(statement, SelectStatement):
            return self._build_select(statement, expr)
        if isinstance(statement, InsertStatement):
            return self._build_insert(statement, expr)
        if isinstance(statement, UpdateStatement):
            return self._build_update(statement, expr)
        if isinstance(statement, DeleteStatement):
            return self._build_delete(statement, expr)

        ddl = DDLTranslator(self._ctx)
        if isinstance(statement, AlterTableOp):
            return ddl.render_alter(statement)
        if isinstance(statement, CreateTable):
            return ddl.create_table(statement)
        if isinstance(statement, CreateTableAs):
            return ddl.create_table_as(statement, self._build_select(statement.query, expr))
        if isinstance(statement, DropTable):
            return ddl.drop_table(statement)
        raise ConfigurationError(
            f"Unknown statement type: {type(statement).__name__}",
            dialect=self._ctx.dialect_name,
        )

    # ------------------------------------------------------------------
    # DML
    # ------------------------------------------------------------------

    def _build_select(self, stmt: SelectStatement, expr: ExpressionBuilder) -> str:
        def build_fn(sub: SelectStatement) -> str:
            return self._build_select(sub, expr)

        fragments = select_fragments(stmt, self._ctx, expr, build_fn)
        return self._assembler.assemble(StatementKind.SELECT, fragments)

    def _build_insert(self, stmt: InsertStatement, expr: ExpressionBuilder) -> str:
        quote = self._ctx.quote

        def values() -> str:
            if stmt.query is not None:
                return self._build_select(stmt.query, expr)
            if not stmt.values:
                return "DEFAULT VALUES"
            rows = ", ".join(
                f"({', '.join(expr.build(v) for v in row)})" for row in stmt.values
            )
            return f"VALUES {rows}"

        fragments = {
            "insert": f"INSERT INTO {self._ctx.literals.quote_qualified(stmt.table)}",
            "columns": f"({', '.join(quote(c) for c in stmt.columns)})" if stmt.columns else "",
            "values": values,
        }
        return self._assembler.assemble(StatementKind.INSERT, fragments)

    def _build_update(self, stmt: UpdateStatement, expr: ExpressionBuilder) -> str:
        if not stmt.assignments:
            raise ConfigurationError(
                "UPDATE needs at least one assignment.", dialect=self._ctx.dialect_name
            )
        quote = self._ctx.quote

        def assignments() -> str:
            pairs = ", ".join(f"{quote(c)} = {expr.build(v)}" for c, v in stmt.assignments)
            return f"SET {pairs}"

        fragments = {
            "update": f"UPDATE {self._ctx.literals.quote_qualified(stmt.table)}",
            "set": assignments,
            "where": lambda: f"WHERE {expr.build(stmt.where)}" if stmt.where is not None else "",
        }
        return self._assembler.assemble(StatementKind.UPDATE, fragments)

    def _build_delete(self, stmt: DeleteStatement, expr: ExpressionBuilder) -> str:
        fragments = {
            "delete": f"DELETE FROM {self._ctx.literals.quote_qualified(stmt.table)}",
            "where": lambda: f"WHERE {expr.build(stmt.where)}" if stmt.where is not None else "",
        }
        return self._assembler.assemble(StatementKind.DELETE, fragments)


def render(statement: Statement, dialect: DialectDescriptor) -> RenderedSQL:
    """Compile ``statement`` for ``dialect``."""
    return QueryBuilder(dialect).build(statement)
