"""Clause-level SQL builders and the clause assembler.

Each builder handles exactly one SQL clause and returns a complete
fragment including its keyword (``"WHERE ..."``, ``"ORDER BY ..."``).
``ClauseAssembler`` then orders the fragments using the dialect's clause
list for the statement kind.

``CteBuilder``, ``CompoundBuilder`` and ``FromClauseBuilder`` receive a
*shared build function* (``Callable[[SelectStatement], str]``) so nested
SELECTs use the same :class:`RuntimeContext` as the outer statement and
bound parameters stay in placeholder order.

Classes
-------
ClauseAssembler      — orders fragments per dialect clause list
SelectClauseBuilder  — ``<items>`` (``*`` when empty)
FromClauseBuilder    — ``FROM <tables | subqueries>`` / default FROM
JoinClauseBuilder    — ``<kind> JOIN … ON … | USING (…)``
CteBuilder           — ``WITH [RECURSIVE] <ctes>``
CompoundBuilder      — ``UNION [ALL] / INTERSECT / EXCEPT …``
LimitBuilder         — ``LIMIT n OFFSET m`` (dialect override point)
LockBuilder          — ``FOR UPDATE`` / ``FOR SHARE``
"""
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Union

from dialectql.compile.context import CompilationContext
from dialectql.compile.expression_builder import ExpressionBuilder
from dialectql.errors import CapabilityError, ConfigurationError
from dialectql.schema.dialect import DialectDescriptor
from dialectql.schema.expressions import JoinKind, StatementKind
from dialectql.schema.nodes import Aliased, Identifier
from dialectql.schema.statements import (
    CTE,
    Compound,
    FromItem,
    Join,
    SelectStatement,
    SubQuery,
)

BuildFn = Callable[[SelectStatement], str]
Fragment = Union[str, Callable[[], str]]

_DEFAULT_SUBQUERY_ALIAS = "t1"


class ClauseAssembler:
    """Concatenates clause fragments in the dialect's order.

    Fragments that are empty or missing are skipped.  A non-empty fragment
    whose clause the dialect does not list is a capability error: clauses
    are never dropped silently.
    """

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def assemble(self, kind: StatementKind, fragments: Mapping[str, Fragment]) -> str:
        """Join the fragments present in ``fragments`` in dialect order.

        Fragments may be strings or zero-argument callables; callables are
        evaluated in dialect order so bound parameters follow placeholder
        order.
        """
        order = self._ctx.dialect.clause_order(kind)
        rendered = {name: _evaluate(fragments[name]) for name in order if name in fragments}
        for name, fragment in fragments.items():
            if name not in order and _evaluate(fragment):
                raise CapabilityError(
                    f"Dialect '{self._ctx.dialect_name}' does not support the "
                    f"'{name}' clause in {kind.value} statements.",
                    feature=f"{kind.value}.{name}",
                    dialect=self._ctx.dialect_name,
                )
        return " ".join(rendered[name] for name in order if rendered.get(name))


def _evaluate(fragment: Fragment) -> str:
    return fragment() if callable(fragment) else fragment


def assemble(
    kind: StatementKind | str, fragments: Mapping[str, Fragment], dialect: DialectDescriptor
) -> str:
    """Order ``fragments`` for a ``kind`` statement in ``dialect``."""
    return ClauseAssembler(CompilationContext(dialect)).assemble(StatementKind(kind), fragments)


class SelectClauseBuilder:
    """Builds the selected-items fragment."""

    def __init__(self, expr_builder: ExpressionBuilder) -> None:
        self._expr = expr_builder

    def build(self, columns: Sequence) -> str:
        if not columns:
            return "*"
        return ", ".join(self._expr.build(c) for c in columns)


class FromClauseBuilder:
    """Builds the ``FROM`` fragment.

    With no table sources, the dialect's ``default_from`` fragment is used
    so table-less SELECTs stay valid on backends that require a FROM.
    """

    def __init__(self, ctx: CompilationContext, build_fn: BuildFn) -> None:
        self._ctx = ctx
        self._build_fn = build_fn

    def build(self, items: Sequence[FromItem]) -> str:
        if not items:
            return self._ctx.dialect.default_from or ""
        return f"FROM {', '.join(self.build_source(i) for i in items)}"

    def build_source(self, item: FromItem) -> str:
        quote = self._ctx.quote
        if isinstance(item, Identifier):
            return self._ctx.literals.quote_qualified(item)
        if isinstance(item, Aliased) and isinstance(item.expr, Identifier):
            return f"{self._ctx.literals.quote_qualified(item.expr)} AS {quote(item.alias)}"
        if isinstance(item, SubQuery):
            alias = quote(item.alias or _DEFAULT_SUBQUERY_ALIAS)
            return f"({self._build_fn(item.query)}) AS {alias}"
        raise ConfigurationError(
            f"Invalid table source: {type(item).__name__}", dialect=self._ctx.dialect_name
        )


class JoinClauseBuilder:
    """Builds a single ``JOIN`` fragment."""

    def __init__(
        self,
        from_builder: FromClauseBuilder,
        expr_builder: ExpressionBuilder,
        ctx: CompilationContext,
    ) -> None:
        self._from = from_builder
        self._expr = expr_builder
        self._ctx = ctx

    def build(self, join: Join) -> str:
        sql = f"{join.kind.value} JOIN {self._from.build_source(join.table)}"
        if join.using:
            cols = ", ".join(self._ctx.quote(c) for c in join.using)
            return f"{sql} USING ({cols})"
        if join.condition is not None:
            return f"{sql} ON {self._expr.build(join.condition)}"
        if join.kind is not JoinKind.CROSS:
            raise ConfigurationError(
                f"{join.kind.value} JOIN needs a condition or USING columns.",
                dialect=self._ctx.dialect_name,
            )
        return sql


class CteBuilder:
    """Builds the ``WITH [RECURSIVE] <name> AS (…)`` block.

    If any CTE is recursive the whole block is introduced with the
    recursive keyword; some backends require this and it is applied to all
    dialects alike.
    """

    def __init__(self, ctx: CompilationContext, build_fn: BuildFn) -> None:
        self._ctx = ctx
        self._build_fn = build_fn

    def build(self, ctes: Sequence[CTE]) -> str:
        if not ctes:
            return ""
        dialect = self._ctx.dialect
        if not dialect.supports_ctes:
            raise CapabilityError(
                f"Dialect '{dialect.name}' does not support common table expressions.",
                feature="common table expressions",
                dialect=dialect.name,
            )
        recursive = any(c.recursive for c in ctes)
        keyword = dialect.recursive_with_keyword if recursive else dialect.with_keyword
        return f"{keyword} {', '.join(self._build_one(c) for c in ctes)}"

    def _build_one(self, cte: CTE) -> str:
        dialect = self._ctx.dialect
        quote = self._ctx.quote
        if cte.recursive and dialect.recursive_cte_requires_column_aliases and not cte.column_aliases:
            raise CapabilityError(
                f"Dialect '{dialect.name}' requires column aliases on recursive "
                f"CTE '{cte.name}'.",
                feature="recursive CTE column aliases",
                dialect=dialect.name,
            )
        name_sql = quote(cte.name)
        if cte.column_aliases:
            name_sql += f"({', '.join(quote(a) for a in cte.column_aliases)})"
        return f"{name_sql} AS ({self._build_fn(cte.query)})"


class CompoundBuilder:
    """Builds ``UNION / INTERSECT / EXCEPT [ALL] <query>`` fragments.

    A branch carrying its own ORDER BY, pagination, lock or nested compounds
    is wrapped as ``SELECT * FROM (<query>) AS t1`` so those clauses stay
    bound to the branch instead of the whole compound.
    """

    def __init__(self, ctx: CompilationContext, build_fn: BuildFn) -> None:
        self._ctx = ctx
        self._build_fn = build_fn

    def build(self, compounds: Sequence[Compound]) -> str:
        parts = []
        for compound in compounds:
            keyword = compound.kind.value
            if compound.all:
                keyword += " ALL"
            parts.append(f"{keyword} {self.build_branch(compound.query)}")
        return " ".join(parts)

    def build_branch(self, query: SelectStatement) -> str:
        sql = self._build_fn(query)
        if (
            query.order
            or query.limit is not None
            or query.offset is not None
            or query.lock is not None
            or query.compounds
        ):
            return f"SELECT * FROM ({sql}) AS {self._ctx.quote(_DEFAULT_SUBQUERY_ALIAS)}"
        return sql


class LimitBuilder:
    """Builds the pagination fragment, honouring the dialect override."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, limit: int | None, offset: int | None) -> str:
        if limit is None and offset is None:
            return ""
        renderer = self._ctx.dialect.limit_renderer
        if renderer is not None:
            return renderer(limit, offset)
        parts = []
        if limit is not None:
            parts.append(f"LIMIT {int(limit)}")
        if offset:
            parts.append(f"OFFSET {int(offset)}")
        return " ".join(parts)


class LockBuilder:
    """Maps a lock style onto the dialect's lock clause."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx

    def build(self, lock: str | None) -> str:
        if lock is None:
            return ""
        clause = self._ctx.dialect.lock_clauses.get(lock)
        if clause is None:
            raise CapabilityError(
                f"Dialect '{self._ctx.dialect_name}' does not support lock style '{lock}'.",
                feature=f"lock:{lock}",
                dialect=self._ctx.dialect_name,
            )
        return clause


def select_fragments(
    stmt: SelectStatement,
    ctx: CompilationContext,
    expr: ExpressionBuilder,
    build_fn: BuildFn,
) -> dict[str, Fragment]:
    """Map every clause of ``stmt`` to a deferred fragment renderer."""
    from_builder = FromClauseBuilder(ctx, build_fn)
    join_builder = JoinClauseBuilder(from_builder, expr, ctx)

    def where() -> str:
        return f"WHERE {expr.build(stmt.where)}" if stmt.where is not None else ""

    def group() -> str:
        return f"GROUP BY {', '.join(expr.build(g) for g in stmt.group)}" if stmt.group else ""

    def having() -> str:
        return f"HAVING {expr.build(stmt.having)}" if stmt.having is not None else ""

    def order() -> str:
        if not stmt.order:
            return ""
        return f"ORDER BY {', '.join(expr.build_ordering(o) for o in stmt.order)}"

    return {
        "with": lambda: CteBuilder(ctx, build_fn).build(stmt.with_),
        "select": "SELECT",
        "distinct": "DISTINCT" if stmt.distinct else "",
        "columns": lambda: SelectClauseBuilder(expr).build(stmt.columns),
        "from": lambda: from_builder.build(stmt.from_),
        "join": lambda: " ".join(join_builder.build(j) for j in stmt.joins),
        "where": where,
        "group": group,
        "having": having,
        "compounds": lambda: CompoundBuilder(ctx, build_fn).build(stmt.compounds),
        "order": order,
        "limit": lambda: LimitBuilder(ctx).build(stmt.limit, stmt.offset),
        "lock": lambda: LockBuilder(ctx).build(stmt.lock),
    }
