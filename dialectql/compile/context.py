"""Compilation context value object.

Packages the ``(dialect, literal formatter)`` pair shared by every
clause-level and expression-level builder into a single cohesive object.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from dialectql.compile.literals import LiteralFormatter
from dialectql.schema.dialect import DialectDescriptor


@dataclass(frozen=True)
class CompilationContext:
    """Immutable context for a single compilation run.

    Attributes:
        dialect: Active dialect descriptor.
        literals: Literal and identifier formatter bound to ``dialect``.
    """

    dialect: DialectDescriptor
    literals: LiteralFormatter = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "literals", LiteralFormatter(self.dialect))

    @property
    def quote(self):
        return self.literals.quote_identifier

    @property
    def dialect_name(self) -> str:
        return self.dialect.name
