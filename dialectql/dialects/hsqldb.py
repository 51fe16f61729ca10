"""HSQLDB dialect.

HSQLDB folds unquoted identifiers to upper case, so every name is
upper-cased before quoting and result column names are reported in lower
case.  Several operators have no native form and are emulated:

* ``ILIKE`` → ``UPPER(a) LIKE UPPER(b)``
* ``&`` / ``|`` / ``^`` → ``BITAND`` / ``BITOR`` / ``BITXOR``
* ``~x`` → ``((0 - x) - 1)``
* ``<<`` / ``>>`` → multiply / divide by ``POWER(2, n)``

``IS TRUE`` / ``IS FALSE`` are not available and raise
:class:`~dialectql.errors.CapabilityError`.

CTEs are off by default, so a statement carrying CTEs fails with a
capability error instead of being sent to a server build that rejects it.
``build_descriptor(enable_ctes=True)`` turns them back on.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from dialectql.connection import ConnectionOptions, DBAPIConnection
from dialectql.introspect import (
    ColumnSchema,
    IndexSchema,
    parse_index_rows,
    parse_schema_rows,
    primary_key_columns_from_indexes,
)
from dialectql.schema.dialect import DialectDescriptor
from dialectql.schema.expressions import Op
from dialectql.schema.nodes import Identifier, Param, aliased, asc, binary, col
from dialectql.schema.statements import SelectStatement

if TYPE_CHECKING:
    from dialectql.database import Database

NAME = "hsqldb"
DRIVER_CLASS = "org.hsqldb.jdbc.JDBCDriver"

#: Names of the indexes HSQLDB creates for primary keys.
PRIMARY_KEY_INDEX_RE = re.compile(r"\Asys_idx_sys_pk_", re.I)

_COLUMNS = Identifier(name="COLUMNS", qualifier="INFORMATION_SCHEMA")
_INDEXINFO = Identifier(name="SYSTEM_INDEXINFO", qualifier="INFORMATION_SCHEMA")


def _table_filter(table: str | Identifier, schema_column: str) -> Any:
    """``TABLE_NAME = ? [AND <schema_column> = ?]`` for a catalog view."""
    ident = table if isinstance(table, Identifier) else Identifier.parse(table)
    condition = binary(Op.EQ, col("table_name"), Param(value=ident.name.upper()))
    if ident.qualifier:
        condition = binary(
            Op.AND,
            condition,
            binary(Op.EQ, col(schema_column), Param(value=ident.qualifier.upper())),
        )
    return condition


def columns_query(table: str | Identifier) -> SelectStatement:
    return SelectStatement(
        columns=(
            col("column_name"),
            aliased(col("is_nullable"), "allow_null"),
            aliased(col("column_default"), "default"),
            aliased(col("data_type"), "db_type"),
        ),
        from_=(_COLUMNS,),
        where=_table_filter(table, "table_schema"),
        order=(asc(col("ordinal_position")),),
    )


def index_info_query(table: str | Identifier) -> SelectStatement:
    return SelectStatement(
        columns=(col("index_name"), col("column_name"), col("non_unique")),
        from_=(_INDEXINFO,),
        where=_table_filter(table, "table_schem"),
        order=(asc(col("index_name")), asc(col("ordinal_position"))),
    )


def parse_schema(database: Database, table: str | Identifier) -> dict[str, ColumnSchema]:
    """Column metadata from ``INFORMATION_SCHEMA.COLUMNS``.

    Primary-key membership comes from the ``SYS_IDX_SYS_PK_*`` indexes in
    ``SYSTEM_INDEXINFO``.
    """
    dialect = database.dialect
    index_rows = list(database.fetch(index_info_query(table)))
    pk_columns = primary_key_columns_from_indexes(index_rows, dialect)
    rows = database.fetch(columns_query(table))
    return parse_schema_rows(rows, dialect, primary_key_columns=pk_columns)


def parse_indexes(database: Database, table: str | Identifier) -> dict[str, IndexSchema]:
    return parse_index_rows(database.fetch(index_info_query(table)), database.dialect)


def jdbc_url(options: ConnectionOptions) -> str:
    return f"jdbc:hsqldb:hsql://{options.host}:{options.port}/{options.database or ''}"


def connect(options: ConnectionOptions) -> DBAPIConnection:
    """Open a JDBC connection through JayDeBeApi.

    Raises:
        ImportError: If ``jaydebeapi`` is not installed.
    """
    try:
        import jaydebeapi
    except ImportError as exc:
        raise ImportError(
            "JayDeBeApi is required to connect to HSQLDB. "
            'Install it with: pip install "dialectql[hsqldb]"'
        ) from exc

    raw = jaydebeapi.connect(
        DRIVER_CLASS, jdbc_url(options), [options.user, options.password or ""]
    )
    return DBAPIConnection(raw, dialect=NAME, error_types=jaydebeapi.Error)


def build_descriptor(enable_ctes: bool = False) -> DialectDescriptor:
    """Build the HSQLDB descriptor.

    Args:
        enable_ctes: Keep the ``WITH`` clause in the SELECT order.
    """
    builder = (
        DialectDescriptor.builder(NAME)
        .quoting('"', input_case="upper", output_case="lower")
        .booleans("TRUE", "FALSE")
        .blobs("X'", "'")
        .fractional_seconds(timestamp=True, time=False)
        .default_from("FROM (VALUES (0))")
        .recursive_cte_column_aliases()
        .operators(ilike=False, is_true=False, bitwise=False, complement=False, shifts=False)
        .bitwise_functions(BIT_AND="BITAND", BIT_OR="BITOR", BIT_XOR="BITXOR")
        .create_table_as_with_data()
        .introspection(
            primary_key_index_pattern=PRIMARY_KEY_INDEX_RE,
            version_function="DATABASE_VERSION",
            last_insert_id_sql="CALL IDENTITY()",
            schema_parser=parse_schema,
            index_parser=parse_indexes,
        )
        .connection(connect, host="localhost", port=9001, user="SA", password="")
    )
    if not enable_ctes:
        builder = builder.without_ctes()
    return builder.build()


DESCRIPTOR = build_descriptor()
