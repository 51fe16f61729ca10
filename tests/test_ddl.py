"""Unit tests for DDL translation."""

from __future__ import annotations

import pytest

from dialectql import (
    AlterKind,
    AlterTableOp,
    CapabilityError,
    ColumnDefinition,
    ConfigurationError,
    CreateTable,
    CreateTableAs,
    DropTable,
    Identifier,
    Param,
    SelectStatement,
    UnsupportedDDLError,
    lit,
    render,
    render_alter,
)


def _alter(kind: AlterKind, **kwargs) -> AlterTableOp:
    return AlterTableOp(kind=kind, table=Identifier(name="items"), **kwargs)


def _create(*columns: ColumnDefinition, **kwargs) -> CreateTable:
    return CreateTable(name=Identifier(name="items"), columns=columns, **kwargs)


# ---------------------------------------------------------------------------
# Identity columns
# ---------------------------------------------------------------------------


def test_hsqldb_identity_starts_at_one(hsqldb_dialect):
    r = render(_create(ColumnDefinition(name="id", type="integer", identity=True)), hsqldb_dialect)
    assert r.sql == (
        'CREATE TABLE "ITEMS" ("ID" integer GENERATED BY DEFAULT AS IDENTITY (START WITH 1))'
    )


def test_identity_start_and_increment(hsqldb_dialect):
    column = ColumnDefinition(
        name="id", type="bigint", identity=True, start_with=100, increment_by=5, primary_key=True
    )
    r = render(_create(column), hsqldb_dialect)
    assert (
        '"ID" bigint GENERATED BY DEFAULT AS IDENTITY (START WITH 100 INCREMENT BY 5) PRIMARY KEY'
        in r.sql
    )


def test_vertica_identity_renderer(vertica_dialect):
    r = render(_create(ColumnDefinition(name="id", type="integer", identity=True)), vertica_dialect)
    assert r.sql == 'CREATE TABLE "items" ("id" IDENTITY(1, 1))'


def test_vertica_identity_with_start(vertica_dialect):
    column = ColumnDefinition(name="id", type="integer", identity=True, start_with=10, increment_by=2)
    assert '"id" IDENTITY(10, 2)' in render(_create(column), vertica_dialect).sql


# ---------------------------------------------------------------------------
# Column definitions
# ---------------------------------------------------------------------------


def test_column_constraints_order(vertica_dialect):
    column = ColumnDefinition(
        name="code", type="varchar", size=12, default=lit("x"), null=False, unique=True
    )
    r = render(_create(column), vertica_dialect)
    assert r.sql == "CREATE TABLE \"items\" (\"code\" varchar(12) DEFAULT 'x' NOT NULL UNIQUE)"


def test_precision_and_scale(vertica_dialect):
    column = ColumnDefinition(name="price", type="numeric", size=(10, 2), null=True)
    assert '"price" numeric(10, 2) NULL' in render(_create(column), vertica_dialect).sql


def test_param_default_is_configuration_error(vertica_dialect):
    column = ColumnDefinition(name="qty", type="integer", default=Param(value=0))
    with pytest.raises(ConfigurationError):
        render(_create(column), vertica_dialect)


def test_create_table_needs_columns(vertica_dialect):
    with pytest.raises(ConfigurationError):
        render(_create(), vertica_dialect)


def test_temporary_table(vertica_dialect):
    r = render(_create(ColumnDefinition(name="id", type="int"), temp=True), vertica_dialect)
    assert r.sql.startswith('CREATE TEMPORARY TABLE "items"')


# ---------------------------------------------------------------------------
# IF [NOT] EXISTS
# ---------------------------------------------------------------------------


def test_vertica_create_if_not_exists(vertica_dialect):
    r = render(_create(ColumnDefinition(name="id", type="int"), if_not_exists=True), vertica_dialect)
    assert r.sql == 'CREATE TABLE IF NOT EXISTS "items" ("id" int)'


def test_hsqldb_create_if_not_exists_unsupported(hsqldb_dialect):
    with pytest.raises(CapabilityError):
        render(_create(ColumnDefinition(name="id", type="int"), if_not_exists=True), hsqldb_dialect)


def test_drop_table(hsqldb_dialect, vertica_dialect):
    assert render(DropTable(name=Identifier(name="items")), hsqldb_dialect).sql == 'DROP TABLE "ITEMS"'
    r = render(DropTable(name=Identifier(name="items"), if_exists=True), vertica_dialect)
    assert r.sql == 'DROP TABLE IF EXISTS "items"'


def test_hsqldb_drop_if_exists_unsupported(hsqldb_dialect):
    with pytest.raises(CapabilityError):
        render(DropTable(name=Identifier(name="items"), if_exists=True), hsqldb_dialect)


# ---------------------------------------------------------------------------
# CREATE TABLE AS
# ---------------------------------------------------------------------------


def test_hsqldb_create_table_as_with_data(hsqldb_dialect):
    query = SelectStatement(from_=(Identifier(name="items"),))
    r = render(CreateTableAs(name=Identifier(name="copy"), query=query), hsqldb_dialect)
    assert r.sql == 'CREATE TABLE "COPY" AS (SELECT * FROM "ITEMS") WITH DATA'


def test_vertica_create_table_as(vertica_dialect):
    query = SelectStatement(from_=(Identifier(name="items"),))
    r = render(CreateTableAs(name=Identifier(name="copy"), query=query), vertica_dialect)
    assert r.sql == 'CREATE TABLE "copy" AS SELECT * FROM "items"'


# ---------------------------------------------------------------------------
# ALTER TABLE
# ---------------------------------------------------------------------------


def test_default_rename(hsqldb_dialect):
    sql = render_alter(_alter(AlterKind.RENAME_COLUMN, column="a", new_name="b"), hsqldb_dialect)
    assert sql == 'ALTER TABLE "ITEMS" ALTER COLUMN "A" RENAME TO "B"'


def test_vertica_rename(vertica_dialect):
    sql = render_alter(_alter(AlterKind.RENAME_COLUMN, column="a", new_name="b"), vertica_dialect)
    assert sql == 'ALTER TABLE "items" RENAME COLUMN "a" TO "b"'


def test_default_nullability(hsqldb_dialect):
    op = _alter(AlterKind.SET_COLUMN_NULLABILITY, column="a", null=True)
    assert render_alter(op, hsqldb_dialect) == 'ALTER TABLE "ITEMS" ALTER COLUMN "A" SET NULL'
    op = _alter(AlterKind.SET_COLUMN_NULLABILITY, column="a", null=False)
    assert render_alter(op, hsqldb_dialect) == 'ALTER TABLE "ITEMS" ALTER COLUMN "A" SET NOT NULL'


def test_vertica_nullability(vertica_dialect):
    op = _alter(AlterKind.SET_COLUMN_NULLABILITY, column="a", null=True)
    assert render_alter(op, vertica_dialect) == 'ALTER TABLE "items" ALTER COLUMN "a" DROP NOT NULL'
    op = _alter(AlterKind.SET_COLUMN_NULLABILITY, column="a", null=False)
    assert render_alter(op, vertica_dialect) == 'ALTER TABLE "items" ALTER COLUMN "a" SET NOT NULL'


def test_set_column_type(hsqldb_dialect):
    op = _alter(
        AlterKind.SET_COLUMN_TYPE,
        column="name",
        definition=ColumnDefinition(name="name", type="varchar", size=50),
    )
    assert render_alter(op, hsqldb_dialect) == (
        'ALTER TABLE "ITEMS" ALTER COLUMN "NAME" SET DATA TYPE varchar(50)'
    )


def test_add_and_drop_column(vertica_dialect):
    add = _alter(
        AlterKind.ADD_COLUMN,
        definition=ColumnDefinition(name="note", type="varchar", size=200, null=True),
    )
    assert render_alter(add, vertica_dialect) == (
        'ALTER TABLE "items" ADD COLUMN "note" varchar(200) NULL'
    )
    drop = _alter(AlterKind.DROP_COLUMN, column="note")
    assert render_alter(drop, vertica_dialect) == 'ALTER TABLE "items" DROP COLUMN "note"'


def test_alter_override(default_dialect):
    dialect = default_dialect.evolve(
        alter_overrides={
            AlterKind.DROP_COLUMN: lambda op, ddl: f"{ddl.alter_prefix(op)} DROP {ddl.quote(op.column)}"
        }
    )
    sql = render_alter(_alter(AlterKind.DROP_COLUMN, column="x"), dialect)
    assert sql == 'ALTER TABLE "items" DROP "x"'


def test_unsupported_alter_kind(vertica_dialect):
    dialect = vertica_dialect.evolve(unsupported_alter_ops=frozenset({AlterKind.SET_COLUMN_TYPE}))
    op = _alter(
        AlterKind.SET_COLUMN_TYPE,
        column="a",
        definition=ColumnDefinition(name="a", type="int"),
    )
    with pytest.raises(UnsupportedDDLError) as exc_info:
        render_alter(op, dialect)
    assert isinstance(exc_info.value, CapabilityError)
    assert exc_info.value.kind == "set_column_type"
    assert exc_info.value.to_error_response()["error"] == "UNSUPPORTED_DDL"


def test_alter_requires_fields_for_kind():
    with pytest.raises(ValueError):
        _alter(AlterKind.RENAME_COLUMN, column="a")
