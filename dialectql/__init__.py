"""dialectQL – one SQL engine, many dialects.

Statements are described once as an engine-agnostic IR and rendered for a
backend by a :class:`DialectDescriptor`: an immutable bundle of capability
flags, literal tokens, clause orders and override functions.

Public API
----------
``render``
    Compile an IR statement to ``RenderedSQL`` (sql text + bound params).

``Database``
    Render and execute statements over a connection; schema introspection,
    transactions, last-insert-id.

Re-exported types
-----------------
IR nodes and statements, ``DialectDescriptor``, ``DialectRegistry``,
``ColumnSchema``, connection adapters, and all error classes.

Extensibility
-------------
New dialects are registered from overrides::

    from dialectql import DialectRegistry

    DialectRegistry.register("legacydb", {"true_literal": "1", "false_literal": "0"})

or from a descriptor built with ``DialectDescriptor.builder(name)``.
HSQLDB and Vertica are registered on import.
"""

from __future__ import annotations

from dialectql.compile.base import RenderedSQL
from dialectql.compile.builder import QueryBuilder, render
from dialectql.compile.clause_builders import assemble
from dialectql.compile.ddl_builder import render_alter
from dialectql.compile.expression_builder import translate
from dialectql.compile.literals import quote_identifier, render_literal
from dialectql.compile.registry import DialectRegistry
from dialectql.connection import (
    Connection,
    ConnectionOptions,
    DBAPIConnection,
    SQLAlchemyConnection,
)
from dialectql.database import Database
from dialectql.dialects import BUILTIN_DIALECTS, hsqldb, vertica
from dialectql.errors import (
    CapabilityError,
    ConfigurationError,
    DialectQLError,
    ExecutionError,
    UnsupportedDDLError,
)
from dialectql.introspect import (
    ColumnSchema,
    ColumnType,
    IndexSchema,
    parse_schema_rows,
    parse_version,
    schema_column_type,
)
from dialectql.schema.dialect import DialectDescriptor, DialectDescriptorBuilder
from dialectql.schema.expressions import (
    AlterKind,
    CompoundKind,
    JoinKind,
    LiteralKind,
    Op,
    StatementKind,
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
    aliased,
    asc,
    binary,
    col,
    desc,
    func,
    lit,
    unary,
)
from dialectql.schema.statements import (
    CTE,
    AlterTableOp,
    ColumnDefinition,
    Compound,
    CreateTable,
    CreateTableAs,
    DeleteStatement,
    DropTable,
    InsertStatement,
    Join,
    SelectStatement,
    SubQuery,
    UpdateStatement,
)

# ---------------------------------------------------------------------------
# Register built-in dialects with DialectRegistry
# ---------------------------------------------------------------------------

for _descriptor in BUILTIN_DIALECTS:
    DialectRegistry.register_descriptor(_descriptor)

__all__ = [
    # Translation
    "render",
    "render_literal",
    "quote_identifier",
    "translate",
    "assemble",
    "render_alter",
    "RenderedSQL",
    "QueryBuilder",
    # Dialects
    "DialectDescriptor",
    "DialectDescriptorBuilder",
    "DialectRegistry",
    "hsqldb",
    "vertica",
    # IR
    "Op",
    "LiteralKind",
    "StatementKind",
    "AlterKind",
    "JoinKind",
    "CompoundKind",
    "Literal",
    "Param",
    "Identifier",
    "Star",
    "Raw",
    "Function",
    "BinaryOp",
    "UnaryOp",
    "Aliased",
    "Ordering",
    "col",
    "lit",
    "func",
    "binary",
    "unary",
    "aliased",
    "asc",
    "desc",
    "SelectStatement",
    "InsertStatement",
    "UpdateStatement",
    "DeleteStatement",
    "SubQuery",
    "Join",
    "CTE",
    "Compound",
    "ColumnDefinition",
    "AlterTableOp",
    "CreateTable",
    "CreateTableAs",
    "DropTable",
    # Execution
    "Database",
    "Connection",
    "ConnectionOptions",
    "DBAPIConnection",
    "SQLAlchemyConnection",
    # Introspection
    "ColumnSchema",
    "ColumnType",
    "IndexSchema",
    "parse_schema_rows",
    "parse_version",
    "schema_column_type",
    # Errors
    "DialectQLError",
    "ConfigurationError",
    "CapabilityError",
    "UnsupportedDDLError",
    "ExecutionError",
]
