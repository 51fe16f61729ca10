"""Literal and identifier formatting.

``LiteralFormatter`` renders IR leaf values (booleans, numbers, strings,
blobs, timestamps) and identifiers into dialect-correct text.  Every rule
can be replaced per dialect through ``DialectDescriptor.literal_overrides``.
"""
from __future__ import annotations

import datetime
import math
from decimal import Decimal
from typing import Any

from dialectql.errors import ConfigurationError
from dialectql.schema.dialect import DialectDescriptor
from dialectql.schema.expressions import LiteralKind
from dialectql.schema.nodes import Identifier, literal_kind

_DATE_FORMAT = "%Y-%m-%d"
_TIME_FORMAT = "%H:%M:%S"


class LiteralFormatter:
    """Renders literal values and identifiers for one dialect.

    Args:
        dialect: The active dialect descriptor.
    """

    def __init__(self, dialect: DialectDescriptor) -> None:
        self._dialect = dialect
        self._renderers = {
            LiteralKind.NULL: self._null,
            LiteralKind.BOOLEAN: self._boolean,
            LiteralKind.INTEGER: self._number,
            LiteralKind.FLOAT: self._float,
            LiteralKind.DECIMAL: self._decimal,
            LiteralKind.STRING: self._string,
            LiteralKind.BLOB: self._blob,
            LiteralKind.DATETIME: self._datetime,
            LiteralKind.DATE: self._date,
            LiteralKind.TIME: self._time,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_literal(self, value: Any) -> str:
        """Render ``value`` as an inline SQL literal.

        Raises:
            ConfigurationError: If the value kind is not an IR literal kind.
        """
        kind = literal_kind(value)
        if kind is None:
            raise ConfigurationError(
                f"Cannot render a literal of type {type(value).__name__} "
                f"for dialect '{self._dialect.name}'.",
                dialect=self._dialect.name,
            )
        override = self._dialect.literal_overrides.get(kind)
        if override is not None:
            return override(value, self._dialect)
        return self._renderers[kind](value)

    def quote_identifier(self, name: str) -> str:
        """Quote a single identifier, doubling embedded quote characters."""
        quote = self._dialect.identifier_quote
        name = _fold(name, self._dialect.identifier_input_case)
        if not quote:
            return name
        escaped = name.replace(quote, quote * 2)
        return f"{quote}{escaped}{quote}"

    def quote_qualified(self, identifier: Identifier) -> str:
        """Quote ``qualifier.name`` as quote(qualifier) + separator + quote(name)."""
        name_sql = self.quote_identifier(identifier.name)
        if identifier.qualifier:
            qualifier_sql = self.quote_identifier(identifier.qualifier)
            return f"{qualifier_sql}{self._dialect.qualifier_separator}{name_sql}"
        return name_sql

    def output_identifier(self, name: str) -> str:
        """Fold a result column name the way the dialect reports it."""
        return _fold(name, self._dialect.identifier_output_case)

    # ------------------------------------------------------------------
    # Per-kind renderers
    # ------------------------------------------------------------------

    def _null(self, value: None) -> str:
        return "NULL"

    def _boolean(self, value: bool) -> str:
        return self._dialect.true_literal if value else self._dialect.false_literal

    def _number(self, value: int) -> str:
        return str(value)

    def _float(self, value: float) -> str:
        if not math.isfinite(value):
            raise self._unrepresentable(value, "non-finite numbers have no SQL literal")
        return repr(value)

    def _decimal(self, value: Decimal) -> str:
        if not value.is_finite():
            raise self._unrepresentable(value, "non-finite numbers have no SQL literal")
        return format(value, "f")

    def _string(self, value: str) -> str:
        escaped = value.replace("'", "''")
        return f"'{escaped}'"

    def _blob(self, value: bytes | bytearray | memoryview) -> str:
        hex_digits = bytes(value).hex()
        if self._dialect.blob_hex_case == "upper":
            hex_digits = hex_digits.upper()
        return f"{self._dialect.blob_open}{hex_digits}{self._dialect.blob_close}"

    def _datetime(self, value: datetime.datetime) -> str:
        if value.tzinfo is not None:
            raise self._unrepresentable(value, "convert aware values to naive first")
        text = value.strftime(f"{_DATE_FORMAT} {_TIME_FORMAT}")
        if self._dialect.supports_timestamp_fraction and value.microsecond:
            text += f".{value.microsecond:06d}"
        return f"'{text}'"

    def _date(self, value: datetime.date) -> str:
        return f"'{value.strftime(_DATE_FORMAT)}'"

    def _time(self, value: datetime.time) -> str:
        if value.tzinfo is not None:
            raise self._unrepresentable(value, "convert aware values to naive first")
        text = value.strftime(_TIME_FORMAT)
        if self._dialect.supports_time_fraction and value.microsecond:
            text += f".{value.microsecond:06d}"
        return f"'{text}'"

    def _unrepresentable(self, value: Any, hint: str) -> ConfigurationError:
        return ConfigurationError(
            f"Cannot render {value!r} as a literal for dialect '{self._dialect.name}': {hint}.",
            dialect=self._dialect.name,
        )


def _fold(name: str, case: str | None) -> str:
    if case == "upper":
        return name.upper()
    if case == "lower":
        return name.lower()
    return name


def render_literal(value: Any, dialect: DialectDescriptor) -> str:
    """Render ``value`` as an inline literal for ``dialect``."""
    return LiteralFormatter(dialect).render_literal(value)


def quote_identifier(name: str | Identifier, dialect: DialectDescriptor) -> str:
    """Quote a plain or qualified identifier for ``dialect``."""
    formatter = LiteralFormatter(dialect)
    if isinstance(name, Identifier):
        return formatter.quote_qualified(name)
    return formatter.quote_identifier(name)
