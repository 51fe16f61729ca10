"""Vertica dialect.

Vertica keeps the default rendering for almost everything.  It differs in:

* ``RENAME COLUMN`` instead of ``ALTER COLUMN ... RENAME TO``
* ``DROP NOT NULL`` to make a column nullable again
* identity columns declared as ``IDENTITY(start, increment)``
* ``CREATE TABLE IF NOT EXISTS`` / ``DROP TABLE IF EXISTS`` and
  ``SET TRANSACTION ISOLATION LEVEL`` are available

Primary keys are recovered from ``v_catalog`` by matching the constraint
name Vertica gives unnamed primary keys (``C_PRIMARY``).  Columns without
a matching constraint row are reported as not part of the primary key.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from dialectql.compile.ddl_builder import DEFAULT_IDENTITY_START
from dialectql.compile.literals import quote_identifier
from dialectql.connection import ConnectionOptions, DBAPIConnection
from dialectql.introspect import ColumnSchema, parse_schema_rows
from dialectql.schema.dialect import DialectDescriptor
from dialectql.schema.expressions import AlterKind, JoinKind, Op
from dialectql.schema.nodes import Identifier, Param, aliased, binary, col
from dialectql.schema.statements import AlterTableOp, ColumnDefinition, Join, SelectStatement

if TYPE_CHECKING:
    from dialectql.compile.ddl_builder import DDLTranslator
    from dialectql.database import Database

NAME = "vertica"

#: Constraint name Vertica assigns to primary keys.
PK_NAME = "C_PRIMARY"

_COLUMNS = Identifier(name="columns", qualifier="v_catalog")
_CONSTRAINT_COLUMNS = Identifier(name="constraint_columns", qualifier="v_catalog")


def rename_column(op: AlterTableOp, ddl: DDLTranslator) -> str:
    return (
        f"{ddl.alter_prefix(op)} RENAME COLUMN {ddl.quote(op.column)} "
        f"TO {ddl.quote(op.new_name)}"
    )


def set_column_nullability(op: AlterTableOp, ddl: DDLTranslator) -> str:
    action = "DROP NOT NULL" if op.null else "SET NOT NULL"
    return f"{ddl.alter_prefix(op)} ALTER COLUMN {ddl.quote(op.column)} {action}"


def identity_type(base_sql: str, column: ColumnDefinition) -> str:
    """``IDENTITY(start, increment)``; replaces the declared type."""
    start = column.start_with if column.start_with is not None else DEFAULT_IDENTITY_START
    increment = column.increment_by if column.increment_by is not None else 1
    return f"IDENTITY({int(start)}, {int(increment)})"


def columns_query(table: str | Identifier) -> SelectStatement:
    """Catalog query: one row per (column, constraint) pair."""
    ident = table if isinstance(table, Identifier) else Identifier.parse(table)
    where: Any = binary(Op.EQ, col("columns.table_name"), Param(value=ident.name))
    if ident.qualifier:
        where = binary(
            Op.AND, where, binary(Op.EQ, col("columns.table_schema"), Param(value=ident.qualifier))
        )
    join_on = binary(
        Op.AND,
        binary(Op.EQ, col("constraint_columns.table_id"), col("columns.table_id")),
        binary(Op.EQ, col("constraint_columns.column_name"), col("columns.column_name")),
    )
    return SelectStatement(
        columns=(
            col("columns.column_name"),
            col("constraint_columns.constraint_name"),
            aliased(col("columns.is_nullable"), "allow_null"),
            aliased(col("columns.column_default"), "default"),
            aliased(col("columns.data_type"), "db_type"),
        ),
        from_=(_COLUMNS,),
        joins=(Join(kind=JoinKind.LEFT, table=_CONSTRAINT_COLUMNS, condition=join_on),),
        where=where,
    )


def parse_schema(database: Database, table: str | Identifier) -> dict[str, ColumnSchema]:
    return parse_schema_rows(database.fetch(columns_query(table)), database.dialect)


def connect(options: ConnectionOptions) -> DBAPIConnection:
    """Open a connection through ``vertica-python``.

    Prepared statements are enabled so ``?`` placeholders are bound
    server-side.

    Raises:
        ImportError: If ``vertica_python`` is not installed.
    """
    try:
        import vertica_python
    except ImportError as exc:
        raise ImportError(
            "vertica-python is required to connect to Vertica. "
            'Install it with: pip install "dialectql[vertica]"'
        ) from exc

    info: dict[str, Any] = {
        "host": options.host,
        "port": options.port,
        "user": options.user,
        "password": options.password or "",
        "database": options.database or "",
        "ssl": options.ssl,
        "use_prepared_statements": True,
    }
    raw = vertica_python.connect(**info)
    if options.schema_name:
        cursor = raw.cursor()
        search_path = quote_identifier(options.schema_name, DESCRIPTOR)
        cursor.execute(f"SET SEARCH_PATH TO {search_path}, public")
        cursor.close()
    return DBAPIConnection(raw, dialect=NAME, error_types=vertica_python.Error)


def build_descriptor() -> DialectDescriptor:
    return (
        DialectDescriptor.builder(NAME)
        .quoting('"')
        .if_exists(create=True, drop=True)
        .transaction_isolation()
        .override_alter(AlterKind.RENAME_COLUMN, rename_column)
        .override_alter(AlterKind.SET_COLUMN_NULLABILITY, set_column_nullability)
        .identity(identity_type)
        .introspection(
            primary_key_constraint_name=PK_NAME,
            version_function="VERSION",
            last_insert_id_sql="SELECT LAST_INSERT_ID()",
            schema_parser=parse_schema,
        )
        .connection(connect, host="localhost", port=5433)
        .build()
    )


DESCRIPTOR = build_descriptor()
