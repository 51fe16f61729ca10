"""The result of a translation: RenderedSQL."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RenderedSQL:
    """The output of a successful translation.

    Attributes:
        sql: The statement text, no trailing terminator.
        params: Values for the positional placeholders, in order of
            appearance.  Empty when the statement has no bound parameters.
        dialect: Name of the dialect the statement was rendered for.
    """

    sql: str
    params: tuple[Any, ...] = field(default_factory=tuple)
    dialect: str = ""

    def __str__(self) -> str:
        return self.sql
