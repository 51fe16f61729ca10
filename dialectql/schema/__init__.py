"""dialectQL IR models: expression nodes, statements and dialect descriptors."""
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
    Expr,
    Function,
    Identifier,
    Literal,
    NullsPosition,
    Ordering,
    Param,
    Raw,
    SortDirection,
    Star,
    UnaryOp,
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
    Statement,
    SubQuery,
    UpdateStatement,
)

__all__ = [
    "DialectDescriptor",
    "DialectDescriptorBuilder",
    "AlterKind",
    "CompoundKind",
    "JoinKind",
    "LiteralKind",
    "Op",
    "StatementKind",
    "Aliased",
    "BinaryOp",
    "Expr",
    "Function",
    "Identifier",
    "Literal",
    "NullsPosition",
    "Ordering",
    "Param",
    "Raw",
    "SortDirection",
    "Star",
    "UnaryOp",
    "CTE",
    "AlterTableOp",
    "ColumnDefinition",
    "Compound",
    "CreateTable",
    "CreateTableAs",
    "DeleteStatement",
    "DropTable",
    "InsertStatement",
    "Join",
    "SelectStatement",
    "Statement",
    "SubQuery",
    "UpdateStatement",
]
