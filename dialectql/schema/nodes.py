"""Typed expression nodes for the dialectQL intermediate representation.

Every node is an immutable pydantic model.  Sequences are stored as tuples,
so once a tree is built no translator can mutate it.

A small set of helper constructors (:func:`col`, :func:`lit`, :func:`func`,
:func:`binary`, :func:`unary`) wraps raw Python values so trees can be
written compactly::

    from dialectql.schema.nodes import binary, col, lit
    from dialectql.schema.expressions import Op

    expr = binary(Op.BIT_AND, col("items.flags"), 4)
    assert expr.right == lit(4)

Raw dicts are accepted wherever a node is expected, provided they carry a
``"node"`` key naming the variant (``{"node": "identifier", "name": "id"}``).
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Discriminator, Tag, TypeAdapter, model_validator

from dialectql.schema.expressions import LiteralKind, Op


class Node(BaseModel):
    """Common config: immutable, no unknown keys, tolerant of the ``node`` tag."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_node_tag(cls, data: Any) -> Any:
        if isinstance(data, dict) and "node" in data:
            data = {k: v for k, v in data.items() if k != "node"}
        return data


# ---------------------------------------------------------------------------
# Leaf nodes
# ---------------------------------------------------------------------------


class Literal(Node):
    """A literal value rendered inline by the dialect's literal formatter."""

    value: Any = None

    @property
    def kind(self) -> LiteralKind | None:
        """Return the value kind, or ``None`` for values the IR does not define."""
        return literal_kind(self.value)


class Param(Node):
    """A bound parameter: rendered as a placeholder, value sent separately."""

    value: Any = None


class Identifier(Node):
    """A possibly qualified name (``column``, ``table.column``, ``schema.table``)."""

    name: str
    qualifier: str | None = None

    @classmethod
    def parse(cls, dotted: str) -> Identifier:
        """Split ``"table.column"`` into qualifier and name."""
        if "." in dotted:
            qualifier, name = dotted.split(".", 1)
            return cls(name=name, qualifier=qualifier)
        return cls(name=dotted)


class Star(Node):
    """``*`` or ``qualifier.*``."""

    qualifier: str | None = None


class Raw(Node):
    """A verbatim SQL fragment (e.g. ``CURRENT_TIMESTAMP``)."""

    sql: str


# ---------------------------------------------------------------------------
# Composite nodes
# ---------------------------------------------------------------------------


class Function(Node):
    """A function call: ``NAME(arg, ...)``."""

    name: str
    args: tuple[Expr, ...] = ()


class BinaryOp(Node):
    """An operator applied to two operands.

    Chains of the same operator are expressed by nesting on the left:
    ``a & b & c`` is ``BinaryOp(&, BinaryOp(&, a, b), c)``.
    """

    op: Op
    left: Expr
    right: Expr


class UnaryOp(Node):
    """A prefix or postfix operator applied to one operand."""

    op: Op
    operand: Expr


class Aliased(Node):
    """``expr AS alias``."""

    expr: Expr
    alias: str


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class NullsPosition(str, Enum):
    FIRST = "FIRST"
    LAST = "LAST"


class Ordering(Node):
    """A single ORDER BY term."""

    expr: Expr
    direction: SortDirection = SortDirection.ASC
    nulls: NullsPosition | None = None


# ---------------------------------------------------------------------------
# Discriminated union
# ---------------------------------------------------------------------------

_NODE_TAGS: dict[type[Node], str] = {
    Literal: "literal",
    Param: "param",
    Identifier: "identifier",
    Star: "star",
    Raw: "raw",
    Function: "function",
    BinaryOp: "binary",
    UnaryOp: "unary",
    Aliased: "aliased",
}


def _node_discriminator(v: Any) -> str | None:
    """Return the tag for the pydantic discriminated union."""
    if isinstance(v, dict):
        return v.get("node")
    return _NODE_TAGS.get(type(v))


Expr = Annotated[
    Annotated[Literal, Tag("literal")]
    | Annotated[Param, Tag("param")]
    | Annotated[Identifier, Tag("identifier")]
    | Annotated[Star, Tag("star")]
    | Annotated[Raw, Tag("raw")]
    | Annotated[Function, Tag("function")]
    | Annotated[BinaryOp, Tag("binary")]
    | Annotated[UnaryOp, Tag("unary")]
    | Annotated[Aliased, Tag("aliased")],
    Discriminator(_node_discriminator),
]

# Resolve forward references in recursive types.
Function.model_rebuild()
BinaryOp.model_rebuild()
UnaryOp.model_rebuild()
Aliased.model_rebuild()
Ordering.model_rebuild()


#: Parse a raw ``{"node": ...}`` dict into a typed node.
EXPR_ADAPTER: TypeAdapter[Expr] = TypeAdapter(Expr)


# ---------------------------------------------------------------------------
# Value kinds
# ---------------------------------------------------------------------------


def literal_kind(value: Any) -> LiteralKind | None:
    """Classify a Python value into a :class:`LiteralKind`.

    Order matters: ``bool`` is a subclass of ``int`` and ``datetime`` a
    subclass of ``date``.
    """
    if value is None:
        return LiteralKind.NULL
    if isinstance(value, bool):
        return LiteralKind.BOOLEAN
    if isinstance(value, int):
        return LiteralKind.INTEGER
    if isinstance(value, float):
        return LiteralKind.FLOAT
    if isinstance(value, Decimal):
        return LiteralKind.DECIMAL
    if isinstance(value, str):
        return LiteralKind.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return LiteralKind.BLOB
    if isinstance(value, datetime.datetime):
        return LiteralKind.DATETIME
    if isinstance(value, datetime.date):
        return LiteralKind.DATE
    if isinstance(value, datetime.time):
        return LiteralKind.TIME
    return None


# ---------------------------------------------------------------------------
# Construction helpers
# ---------------------------------------------------------------------------


def to_node(v: Any) -> Expr:
    """Return ``v`` unchanged if it is already a node, else wrap it.

    Dicts carrying a ``"node"`` key are parsed into the tagged variant;
    any other value becomes a :class:`Literal`.
    """
    if type(v) in _NODE_TAGS:
        return v
    if isinstance(v, dict) and "node" in v:
        return EXPR_ADAPTER.validate_python(v)
    return Literal(value=v)


def col(dotted: str) -> Identifier:
    """Column (or table) reference from a dotted name."""
    return Identifier.parse(dotted)


def lit(value: Any) -> Literal:
    return Literal(value=value)


def func(name: str, *args: Any) -> Function:
    return Function(name=name, args=tuple(to_node(a) for a in args))


def binary(op: Op, left: Any, right: Any, *rest: Any) -> BinaryOp:
    """Build a left-nested chain of ``op`` over two or more operands."""
    node = BinaryOp(op=op, left=to_node(left), right=to_node(right))
    for extra in rest:
        node = BinaryOp(op=op, left=node, right=to_node(extra))
    return node


def unary(op: Op, operand: Any) -> UnaryOp:
    return UnaryOp(op=op, operand=to_node(operand))


def aliased(expr: Any, alias: str) -> Aliased:
    return Aliased(expr=to_node(expr), alias=alias)


def asc(expr: Any, nulls: NullsPosition | None = None) -> Ordering:
    return Ordering(expr=to_node(expr), direction=SortDirection.ASC, nulls=nulls)


def desc(expr: Any, nulls: NullsPosition | None = None) -> Ordering:
    return Ordering(expr=to_node(expr), direction=SortDirection.DESC, nulls=nulls)


__all__ = [
    "Aliased",
    "BinaryOp",
    "EXPR_ADAPTER",
    "Expr",
    "Function",
    "Identifier",
    "Literal",
    "Node",
    "NullsPosition",
    "Ordering",
    "Param",
    "Raw",
    "SortDirection",
    "Star",
    "UnaryOp",
    "aliased",
    "asc",
    "binary",
    "col",
    "desc",
    "func",
    "lit",
    "literal_kind",
    "to_node",
    "unary",
]
