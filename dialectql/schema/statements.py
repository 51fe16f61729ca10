"""Pydantic models for dialectQL statements (DML and DDL).

Statements are built from the expression nodes in
:mod:`dialectql.schema.nodes`.  Like every IR node they are frozen; the
translators only ever read them.
"""
from __future__ import annotations

from typing import Annotated, Any

from pydantic import Discriminator, Tag, model_validator

from dialectql.schema.expressions import AlterKind, CompoundKind, JoinKind
from dialectql.schema.nodes import Aliased, Expr, Identifier, Node, Ordering


class SubQuery(Node):
    """A parenthesised SELECT used as a table source."""

    query: SelectStatement
    alias: str | None = None


def _from_discriminator(v: Any) -> str | None:
    if isinstance(v, dict):
        return v.get("node")
    return {Identifier: "identifier", Aliased: "aliased", SubQuery: "subquery"}.get(type(v))


#: A table source: ``t``, ``t AS a`` or ``(SELECT ...) AS a``.
FromItem = Annotated[
    Annotated[Identifier, Tag("identifier")]
    | Annotated[Aliased, Tag("aliased")]
    | Annotated[SubQuery, Tag("subquery")],
    Discriminator(_from_discriminator),
]


class Join(Node):
    """A single JOIN entry.

    Attributes:
        kind: SQL join type.
        table: Joined table source.
        condition: ``ON`` expression (omitted for CROSS joins).
        using: Column names for a ``USING (...)`` join.
    """

    kind: JoinKind = JoinKind.INNER
    table: FromItem
    condition: Expr | None = None
    using: tuple[str, ...] = ()


class CTE(Node):
    """A common table expression.

    Attributes:
        name: CTE name.
        query: CTE body.
        recursive: Whether the body references the CTE itself.
        column_aliases: Explicit column list (``name(a, b) AS (...)``).
    """

    name: str
    query: SelectStatement
    recursive: bool = False
    column_aliases: tuple[str, ...] = ()


class Compound(Node):
    """A set operation appended to a SELECT: ``UNION [ALL] <query>``."""

    kind: CompoundKind = CompoundKind.UNION
    all: bool = False
    query: SelectStatement


class SelectStatement(Node):
    """A SELECT statement.

    All clauses are optional.  With no ``columns`` the statement selects
    ``*``; with no ``from_`` the dialect's default FROM fragment (if any)
    is used.

    Attributes:
        with_: Common table expressions.
        distinct: Emit ``SELECT DISTINCT``.
        columns: Selected expressions.
        from_: Table sources.
        joins: JOIN entries.
        where: Filter expression.
        group: GROUP BY expressions.
        having: Post-aggregation filter expression.
        compounds: UNION / INTERSECT / EXCEPT parts.
        order: ORDER BY terms.
        limit: Row limit.
        offset: Rows to skip.
        lock: Row lock style (``"update"`` or ``"share"``).
    """

    with_: tuple[CTE, ...] = ()
    distinct: bool = False
    columns: tuple[Expr, ...] = ()
    from_: tuple[FromItem, ...] = ()
    joins: tuple[Join, ...] = ()
    where: Expr | None = None
    group: tuple[Expr, ...] = ()
    having: Expr | None = None
    compounds: tuple[Compound, ...] = ()
    order: tuple[Ordering, ...] = ()
    limit: int | None = None
    offset: int | None = None
    lock: str | None = None


class InsertStatement(Node):
    """``INSERT INTO table [(columns)] VALUES ... | SELECT ...``."""

    table: Identifier
    columns: tuple[str, ...] = ()
    values: tuple[tuple[Expr, ...], ...] = ()
    query: SelectStatement | None = None

    @model_validator(mode="after")
    def _values_or_query(self) -> InsertStatement:
        if self.values and self.query is not None:
            raise ValueError("INSERT takes either values or a query, not both.")
        return self


class UpdateStatement(Node):
    """``UPDATE table SET col = expr, ... [WHERE ...]``."""

    table: Identifier
    assignments: tuple[tuple[str, Expr], ...]
    where: Expr | None = None


class DeleteStatement(Node):
    """``DELETE FROM table [WHERE ...]``."""

    table: Identifier
    where: Expr | None = None


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------


class ColumnDefinition(Node):
    """A column in CREATE TABLE or ALTER TABLE ADD COLUMN.

    Attributes:
        name: Column name.
        type: Base type name (``"integer"``, ``"varchar"``).
        size: Length, or ``(precision, scale)``.
        null: ``True`` → ``NULL``, ``False`` → ``NOT NULL``, ``None`` → omitted.
        default: Default value expression.
        primary_key: Emit ``PRIMARY KEY``.
        unique: Emit ``UNIQUE``.
        identity: Request identity (auto-increment) semantics.
        start_with: Identity start value (defaults to 1).
        increment_by: Identity increment.
    """

    name: str
    type: str
    size: int | tuple[int, int] | None = None
    null: bool | None = None
    default: Expr | None = None
    primary_key: bool = False
    unique: bool = False
    identity: bool = False
    start_with: int | None = None
    increment_by: int | None = None


class AlterTableOp(Node):
    """One atomic ALTER TABLE operation.

    Required fields per kind:

    * ``rename_column``: ``column``, ``new_name``
    * ``set_column_type``: ``column``, ``definition`` (only its type is used)
    * ``set_column_nullability``: ``column``, ``null``
    * ``add_column``: ``definition``
    * ``drop_column``: ``column``
    """

    kind: AlterKind
    table: Identifier
    column: str | None = None
    new_name: str | None = None
    definition: ColumnDefinition | None = None
    null: bool | None = None

    @model_validator(mode="after")
    def _check_params(self) -> AlterTableOp:
        required = _ALTER_REQUIRED[self.kind]
        missing = [name for name in required if getattr(self, name) is None]
        if missing:
            raise ValueError(f"{self.kind.value} requires {', '.join(missing)}.")
        return self


_ALTER_REQUIRED: dict[AlterKind, tuple[str, ...]] = {
    AlterKind.RENAME_COLUMN: ("column", "new_name"),
    AlterKind.SET_COLUMN_TYPE: ("column", "definition"),
    AlterKind.SET_COLUMN_NULLABILITY: ("column", "null"),
    AlterKind.ADD_COLUMN: ("definition",),
    AlterKind.DROP_COLUMN: ("column",),
}


class CreateTable(Node):
    name: Identifier
    columns: tuple[ColumnDefinition, ...]
    if_not_exists: bool = False
    temp: bool = False


class CreateTableAs(Node):
    """``CREATE TABLE name AS <query>``."""

    name: Identifier
    query: SelectStatement
    temp: bool = False


class DropTable(Node):
    name: Identifier
    if_exists: bool = False


SubQuery.model_rebuild()
SelectStatement.model_rebuild()
Join.model_rebuild()
CTE.model_rebuild()
Compound.model_rebuild()
InsertStatement.model_rebuild()
CreateTableAs.model_rebuild()

#: Any statement the query builder can render.
Statement = (
    SelectStatement
    | InsertStatement
    | UpdateStatement
    | DeleteStatement
    | CreateTable
    | CreateTableAs
    | DropTable
    | AlterTableOp
)
