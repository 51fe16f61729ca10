"""Enumerated tags used by the dialectQL intermediate representation.

Every operator, literal kind, ALTER TABLE kind and statement kind the IR can
express is listed here.  Translators dispatch on these tags; anything outside
these sets is a configuration error, never a data error.
"""

from __future__ import annotations

from enum import Enum

# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


class Op(str, Enum):
    """Operator tags understood by the expression translator."""

    # comparison
    EQ = "EQ"
    NE = "NE"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    # boolean
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    # arithmetic
    ADD = "ADD"
    SUB = "SUB"
    MUL = "MUL"
    DIV = "DIV"
    # bitwise
    BIT_AND = "BIT_AND"
    BIT_OR = "BIT_OR"
    BIT_XOR = "BIT_XOR"
    BIT_NOT = "BIT_NOT"
    SHIFT_LEFT = "SHIFT_LEFT"
    SHIFT_RIGHT = "SHIFT_RIGHT"
    # pattern matching
    LIKE = "LIKE"
    NOT_LIKE = "NOT_LIKE"
    ILIKE = "ILIKE"
    NOT_ILIKE = "NOT_ILIKE"
    # truth / null tests
    IS_TRUE = "IS_TRUE"
    IS_FALSE = "IS_FALSE"
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"


#: Native infix rendering for binary operators.
INFIX_OPERATORS: dict[Op, str] = {
    Op.EQ: "=",
    Op.NE: "!=",
    Op.GT: ">",
    Op.GTE: ">=",
    Op.LT: "<",
    Op.LTE: "<=",
    Op.AND: "AND",
    Op.OR: "OR",
    Op.ADD: "+",
    Op.SUB: "-",
    Op.MUL: "*",
    Op.DIV: "/",
    Op.BIT_AND: "&",
    Op.BIT_OR: "|",
    Op.BIT_XOR: "^",
    Op.SHIFT_LEFT: "<<",
    Op.SHIFT_RIGHT: ">>",
    Op.LIKE: "LIKE",
    Op.NOT_LIKE: "NOT LIKE",
    Op.ILIKE: "ILIKE",
    Op.NOT_ILIKE: "NOT ILIKE",
}

#: Postfix tests taking a single operand.
POSTFIX_OPERATORS: dict[Op, str] = {
    Op.IS_TRUE: "IS TRUE",
    Op.IS_FALSE: "IS FALSE",
    Op.IS_NULL: "IS NULL",
    Op.IS_NOT_NULL: "IS NOT NULL",
}

BITWISE_OPS: frozenset[Op] = frozenset({Op.BIT_AND, Op.BIT_OR, Op.BIT_XOR})
SHIFT_OPS: frozenset[Op] = frozenset({Op.SHIFT_LEFT, Op.SHIFT_RIGHT})
CASE_INSENSITIVE_LIKE_OPS: frozenset[Op] = frozenset({Op.ILIKE, Op.NOT_ILIKE})
TRUTH_OPS: frozenset[Op] = frozenset({Op.IS_TRUE, Op.IS_FALSE})
UNARY_OPS: frozenset[Op] = frozenset({Op.NOT, Op.BIT_NOT}) | frozenset(POSTFIX_OPERATORS)


# ---------------------------------------------------------------------------
# Literal kinds
# ---------------------------------------------------------------------------


class LiteralKind(str, Enum):
    """Value kinds the literal formatter can render."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    STRING = "string"
    BLOB = "blob"
    DATETIME = "datetime"
    DATE = "date"
    TIME = "time"


# ---------------------------------------------------------------------------
# Statements and clauses
# ---------------------------------------------------------------------------


class StatementKind(str, Enum):
    """Statement kinds with a dialect-supplied clause order."""

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class AlterKind(str, Enum):
    """Atomic ALTER TABLE operations."""

    RENAME_COLUMN = "rename_column"
    SET_COLUMN_TYPE = "set_column_type"
    SET_COLUMN_NULLABILITY = "set_column_nullability"
    ADD_COLUMN = "add_column"
    DROP_COLUMN = "drop_column"


class JoinKind(str, Enum):
    INNER = "INNER"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FULL = "FULL"
    CROSS = "CROSS"


class CompoundKind(str, Enum):
    UNION = "UNION"
    INTERSECT = "INTERSECT"
    EXCEPT = "EXCEPT"
