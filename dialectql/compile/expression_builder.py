"""Expression translation: IR nodes and operators to dialect SQL.

``ExpressionTranslator`` maps one operator tag plus its operands onto the
dialect's syntax, emulating operators the dialect does not have natively.
``ExpressionBuilder`` walks whole expression trees and hands every
operator node to the translator.

Both are pure functions of their inputs and the (immutable) descriptor;
the only per-run state is the :class:`RuntimeContext` collecting bound
parameters.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from dialectql.compile.context import CompilationContext
from dialectql.errors import CapabilityError, ConfigurationError
from dialectql.schema.dialect import DialectDescriptor
from dialectql.schema.expressions import (
    BITWISE_OPS,
    CASE_INSENSITIVE_LIKE_OPS,
    INFIX_OPERATORS,
    POSTFIX_OPERATORS,
    SHIFT_OPS,
    TRUTH_OPS,
    Op,
)
from dialectql.schema.nodes import (
    Aliased,
    BinaryOp,
    Function,
    Identifier,
    Literal,
    Ordering,
    Param,
    Raw,
    Star,
    UnaryOp,
    to_node,
)

# ---------------------------------------------------------------------------
# Runtime parameter accumulator (shared across all sub-builders in one run)
# ---------------------------------------------------------------------------


@dataclass
class RuntimeContext:
    """Accumulates bound parameters during a single compilation run.

    A single instance is threaded through every sub-builder and every nested
    sub-query so parameters stay in placeholder order for the whole
    statement.
    """

    params: list[Any] = field(default_factory=list)

    def add_value(self, value: Any) -> None:
        self.params.append(value)


# ---------------------------------------------------------------------------
# Operator translator
# ---------------------------------------------------------------------------


class ExpressionTranslator:
    """Renders one operator application for a dialect.

    Args:
        dialect: Active dialect descriptor.
        render: Callable turning an operand node into SQL.
    """

    def __init__(self, dialect: DialectDescriptor, render: Callable[[Any], str]) -> None:
        self._dialect = dialect
        self._render = render

    def translate(self, op: Op | str, args: Sequence[Any]) -> str:
        """Render ``op`` applied to ``args``.

        Raises:
            ConfigurationError: For unknown operators or wrong arity.
            CapabilityError: When the dialect cannot express the operator
                and registers no equivalent.
        """
        op = self._coerce_op(op)
        args = tuple(args)
        self._check_arity(op, args)

        override = self._dialect.operator_overrides.get(op)
        if override is not None:
            return override(op, args, self._render)

        if op in CASE_INSENSITIVE_LIKE_OPS and not self._dialect.supports_ilike:
            return self._emulate_ilike(op, args)
        if op in BITWISE_OPS and not self._dialect.supports_bitwise_operators:
            return self._emulate_bitwise(op, args)
        if op in SHIFT_OPS and not self._dialect.supports_shift_operators:
            return self._emulate_shift(op, args)
        if op is Op.BIT_NOT:
            return self._complement(args[0])
        if op is Op.NOT:
            return f"NOT {self._render(args[0])}"
        if op in TRUTH_OPS and not self._dialect.supports_is_true:
            raise CapabilityError(
                f"Dialect '{self._dialect.name}' does not support {POSTFIX_OPERATORS[op]}.",
                feature=POSTFIX_OPERATORS[op],
                dialect=self._dialect.name,
            )
        if op in POSTFIX_OPERATORS:
            return f"({self._render(args[0])} {POSTFIX_OPERATORS[op]})"
        return self._infix(op, args)

    # ------------------------------------------------------------------
    # Native forms
    # ------------------------------------------------------------------

    def _infix(self, op: Op, args: tuple[Any, ...]) -> str:
        joiner = f" {INFIX_OPERATORS[op]} "
        return f"({joiner.join(self._render(a) for a in args)})"

    def _complement(self, arg: Any) -> str:
        if self._dialect.supports_bitwise_complement:
            return f"(~{self._render(arg)})"
        return f"((0 - {self._render(arg)}) - 1)"

    # ------------------------------------------------------------------
    # Emulations
    # ------------------------------------------------------------------

    def _emulate_ilike(self, op: Op, args: tuple[Any, ...]) -> str:
        """``a ILIKE b`` → ``UPPER(a) LIKE UPPER(b)``, keeping negation."""
        like_op = Op.LIKE if op is Op.ILIKE else Op.NOT_LIKE
        upper = self._dialect.upper_function
        wrapped = tuple(Function(name=upper, args=(to_node(a),)) for a in args)
        return self.translate(like_op, wrapped)

    def _emulate_bitwise(self, op: Op, args: tuple[Any, ...]) -> str:
        """``a & b & c`` → ``BITAND(BITAND(a, b), c)``."""
        name = self._dialect.bitwise_functions[op]
        return self._fold(args, lambda left, right: f"{name}({left}, {right})")

    def _emulate_shift(self, op: Op, args: tuple[Any, ...]) -> str:
        """Shift by multiplying or dividing by ``POWER(2, n)``.

        Only exact for non-negative operands that do not overflow.
        """
        sign = "*" if op is Op.SHIFT_LEFT else "/"
        return self._fold(args, lambda left, right: f"({left} {sign} POWER(2, {right}))")

    def _fold(self, args: tuple[Any, ...], combine: Callable[[str, str], str]) -> str:
        sql = self._render(args[0])
        for arg in args[1:]:
            sql = combine(sql, self._render(arg))
        return sql

    # ------------------------------------------------------------------
    # Argument checks
    # ------------------------------------------------------------------

    def _coerce_op(self, op: Op | str) -> Op:
        try:
            return Op(op)
        except ValueError:
            raise ConfigurationError(
                f"Unknown operator '{op}'.", dialect=self._dialect.name
            ) from None

    def _check_arity(self, op: Op, args: tuple[Any, ...]) -> None:
        if op in (Op.NOT, Op.BIT_NOT) or op in POSTFIX_OPERATORS:
            if len(args) != 1:
                raise ConfigurationError(
                    f"Operator '{op.value}' takes exactly one operand, got {len(args)}.",
                    dialect=self._dialect.name,
                )
        elif len(args) < 2:
            raise ConfigurationError(
                f"Operator '{op.value}' takes at least two operands, got {len(args)}.",
                dialect=self._dialect.name,
            )


# ---------------------------------------------------------------------------
# Expression builder
# ---------------------------------------------------------------------------


class ExpressionBuilder:
    """Compiles expression nodes to SQL fragments.

    Args:
        ctx: Static compilation context.
        runtime: Shared parameter accumulator for this statement.
    """

    def __init__(self, ctx: CompilationContext, runtime: RuntimeContext) -> None:
        self._ctx = ctx
        self._runtime = runtime
        self._translator = ExpressionTranslator(ctx.dialect, self.build)

    @property
    def translator(self) -> ExpressionTranslator:
        return self._translator

    def build(self, node: Any) -> str:
        """Compile an expression node (or raw Python value) to SQL."""
        node = to_node(node)
        if isinstance(node, Literal):
            return self._ctx.literals.render_literal(node.value)
        if isinstance(node, Param):
            self._runtime.add_value(node.value)
            return self._ctx.dialect.param_placeholder
        if isinstance(node, Identifier):
            return self._ctx.literals.quote_qualified(node)
        if isinstance(node, Star):
            if node.qualifier:
                qualifier = self._ctx.quote(node.qualifier)
                return f"{qualifier}{self._ctx.dialect.qualifier_separator}*"
            return "*"
        if isinstance(node, Raw):
            return node.sql
        if isinstance(node, Function):
            args_sql = ", ".join(self.build(a) for a in node.args)
            return f"{node.name.upper()}({args_sql})"
        if isinstance(node, BinaryOp):
            return self._translator.translate(node.op, (node.left, node.right))
        if isinstance(node, UnaryOp):
            return self._translator.translate(node.op, (node.operand,))
        if isinstance(node, Aliased):
            return f"{self.build(node.expr)} AS {self._ctx.quote(node.alias)}"
        raise ConfigurationError(
            f"Unknown expression node: {type(node).__name__}",
            dialect=self._ctx.dialect_name,
        )

    def build_ordering(self, term: Ordering | Any) -> str:
        if not isinstance(term, Ordering):
            return self.build(term)
        sql = f"{self.build(term.expr)} {term.direction.value}"
        if term.nulls is not None:
            sql += f" NULLS {term.nulls.value}"
        return sql


def translate(op: Op | str, args: Sequence[Any], dialect: DialectDescriptor) -> str:
    """Render ``op`` over ``args`` for ``dialect``.

    Operands may be IR nodes or raw Python values (rendered as literals).
    Bound parameters are not supported here; use :class:`QueryBuilder`.
    """
    builder = ExpressionBuilder(CompilationContext(dialect), RuntimeContext())
    return builder.translator.translate(op, args)
