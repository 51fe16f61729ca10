"""Schema introspection: turning catalog rows into typed column records.

Dialects supply the catalog query (``schema_parser`` / ``index_parser``
hooks on the descriptor); this module turns the returned rows into
:class:`ColumnSchema` and :class:`IndexSchema` records.  Output depends only
on the input rows and the descriptor, so callers may memoise it.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from dialectql.compile.literals import LiteralFormatter
from dialectql.schema.dialect import DialectDescriptor


class ColumnType(str, Enum):
    """Normalised semantic column types."""

    STRING = "string"
    INTEGER = "integer"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    BOOLEAN = "boolean"
    FLOAT = "float"
    DECIMAL = "decimal"
    BLOB = "blob"
    ENUM = "enum"


_TYPE_PATTERNS: tuple[tuple[re.Pattern[str], ColumnType], ...] = (
    (
        re.compile(r"\A(character( varying)?|n?(var)?char|n?text|string|clob)(\(\w+\))?\Z", re.I),
        ColumnType.STRING,
    ),
    (
        re.compile(r"\A(int(eger)?|(big|small|tiny)int)(\(\d+\))?( unsigned)?\Z", re.I),
        ColumnType.INTEGER,
    ),
    (re.compile(r"\Adate\Z", re.I), ColumnType.DATE),
    (
        re.compile(r"\A((small)?datetime|timestamp( with(out)? time zone)?)(\(\d+\))?\Z", re.I),
        ColumnType.DATETIME,
    ),
    (re.compile(r"\Atime( with(out)? time zone)?\Z", re.I), ColumnType.TIME),
    (re.compile(r"\A(bool(ean)?)\Z", re.I), ColumnType.BOOLEAN),
    (
        re.compile(r"\A(real|float|double( precision)?|double\(\d+,\d+\)( unsigned)?)\Z", re.I),
        ColumnType.FLOAT,
    ),
    (re.compile(r"bytea|[bc]lob|image|(var)?binary", re.I), ColumnType.BLOB),
    (re.compile(r"\Aenum", re.I), ColumnType.ENUM),
)

_NUMERIC_RE = re.compile(r"\A(?:num(?:ber|eric)?|decimal)(?:\(\d+,\s*(\d+|false|true)\))?\Z", re.I)


def schema_column_type(db_type: str | None) -> ColumnType | None:
    """Classify a raw engine type name (``varchar(20)``, ``int``).

    Returns ``None`` for types with no normalised equivalent.
    """
    if not db_type:
        return None
    numeric = _NUMERIC_RE.match(db_type)
    if numeric:
        # NUMERIC(p, 0) holds integers only.
        if numeric.group(1) in ("0", "false"):
            return ColumnType.INTEGER
        return ColumnType.DECIMAL
    for pattern, column_type in _TYPE_PATTERNS:
        if pattern.search(db_type):
            return column_type
    return None


class ColumnSchema(BaseModel):
    """Metadata for a single column.

    Attributes:
        name: Column name (folded per the dialect's output case).
        type: Normalised type, ``None`` when unknown.
        allow_null: Whether the column accepts NULL.
        default: Raw default expression text, ``None`` when absent.
        db_type: Raw engine type name.
        primary_key: Whether the column is part of the primary key.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    type: ColumnType | None = None
    allow_null: bool = True
    default: Any = None
    db_type: str | None = None
    primary_key: bool = False


class IndexSchema(BaseModel):
    """A non-primary-key index."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    columns: tuple[str, ...]
    unique: bool = False


def _allow_null(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().upper() in ("YES", "Y", "TRUE", "T", "1")
    return bool(value)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_schema_rows(
    rows: Iterable[Mapping[str, Any]],
    dialect: DialectDescriptor,
    primary_key_columns: Iterable[str] | None = None,
) -> dict[str, ColumnSchema]:
    """Build ordered column records from catalog rows.

    Each row needs ``column_name``, ``allow_null``, ``default`` and
    ``db_type``.  A column is a primary key if it is listed in
    ``primary_key_columns``, if the row's ``constraint_name`` equals the
    dialect's ``primary_key_constraint_name``, or if the row carries a true
    ``primary_key`` value.  Columns repeated across rows (one per joined
    constraint) are merged; anything short of a positive match means
    "not a primary key".

    Args:
        rows: Catalog rows.
        dialect: Active dialect descriptor.
        primary_key_columns: Known primary-key column names.

    Returns:
        Mapping of column name → :class:`ColumnSchema`, in row order.
    """
    formatter = LiteralFormatter(dialect)
    classify = dialect.type_classifier or schema_column_type
    pk_names = {formatter.output_identifier(c) for c in primary_key_columns or ()}
    pk_constraint = dialect.primary_key_constraint_name

    columns: dict[str, ColumnSchema] = {}
    for row in rows:
        name = formatter.output_identifier(row["column_name"])
        primary_key = (
            name in pk_names
            or (pk_constraint is not None and row.get("constraint_name") == pk_constraint)
            or bool(row.get("primary_key"))
        )
        previous = columns.get(name)
        if previous is not None:
            if primary_key and not previous.primary_key:
                columns[name] = previous.model_copy(update={"primary_key": True})
            continue
        default = row.get("default")
        columns[name] = ColumnSchema(
            name=name,
            type=classify(row.get("db_type")),
            allow_null=_allow_null(row.get("allow_null")),
            default=None if _blank(default) else default,
            db_type=row.get("db_type"),
            primary_key=primary_key,
        )
    return columns


def is_primary_key_index(name: str, dialect: DialectDescriptor) -> bool:
    """Whether ``name`` matches the dialect's primary-key index pattern."""
    pattern = dialect.primary_key_index_pattern
    return bool(pattern is not None and pattern.search(name))


def primary_key_columns_from_indexes(
    rows: Iterable[Mapping[str, Any]], dialect: DialectDescriptor
) -> list[str]:
    """Column names covered by indexes matching the primary-key pattern."""
    formatter = LiteralFormatter(dialect)
    return [
        formatter.output_identifier(row["column_name"])
        for row in rows
        if is_primary_key_index(row["index_name"], dialect)
    ]


def parse_index_rows(
    rows: Iterable[Mapping[str, Any]], dialect: DialectDescriptor
) -> dict[str, IndexSchema]:
    """Group index catalog rows into :class:`IndexSchema` records.

    Each row needs ``index_name``, ``column_name`` and ``non_unique``.
    Indexes backing the primary key are excluded.
    """
    formatter = LiteralFormatter(dialect)
    grouped: dict[str, dict[str, Any]] = {}
    for row in rows:
        index_name = row["index_name"]
        if is_primary_key_index(index_name, dialect):
            continue
        name = formatter.output_identifier(index_name)
        entry = grouped.setdefault(
            name, {"columns": [], "unique": not _allow_null(row.get("non_unique"))}
        )
        entry["columns"].append(formatter.output_identifier(row["column_name"]))
    return {
        name: IndexSchema(name=name, columns=tuple(entry["columns"]), unique=entry["unique"])
        for name, entry in grouped.items()
    }


_VERSION_RE = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")


def parse_version(text: str | None) -> int | None:
    """``"2.7.1"`` → ``20701`` (major * 10000 + minor * 100 + patch).

    Leading product names are skipped (``"Vertica Analytic Database
    v12.0.4-0"`` → ``120004``).  Returns ``None`` when no version number is
    present.
    """
    if not text:
        return None
    match = _VERSION_RE.search(text)
    if match is None:
        return None
    major, minor, patch = (int(part or 0) for part in match.groups())
    return major * 10000 + minor * 100 + patch
