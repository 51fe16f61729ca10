"""Unit tests for clause assembly and DML statement rendering."""

from __future__ import annotations

import pytest

from dialectql import (
    CTE,
    Aliased,
    CapabilityError,
    Compound,
    CompoundKind,
    ConfigurationError,
    DeleteStatement,
    Identifier,
    InsertStatement,
    Join,
    JoinKind,
    Op,
    Param,
    SelectStatement,
    StatementKind,
    SubQuery,
    UpdateStatement,
    aliased,
    asc,
    assemble,
    binary,
    col,
    desc,
    func,
    lit,
    render,
    unary,
)
from dialectql.schema.nodes import NullsPosition, Star


def _table(name: str) -> Identifier:
    return Identifier.parse(name)


def _counter() -> SelectStatement:
    """``SELECT 1 UNION ALL SELECT n + 1 FROM t WHERE n < 5``."""
    step = SelectStatement(
        columns=(binary(Op.ADD, col("n"), 1),),
        from_=(_table("t"),),
        where=binary(Op.LT, col("n"), 5),
    )
    return SelectStatement(
        columns=(lit(1),),
        compounds=(Compound(kind=CompoundKind.UNION, all=True, query=step),),
    )


# ---------------------------------------------------------------------------
# Default FROM
# ---------------------------------------------------------------------------


def test_hsqldb_tableless_select_gets_default_from(hsqldb_dialect):
    r = render(SelectStatement(columns=(lit(1),)), hsqldb_dialect)
    assert r.sql == "SELECT 1 FROM (VALUES (0))"


def test_vertica_tableless_select_has_no_from(vertica_dialect):
    assert render(SelectStatement(columns=(lit(1),)), vertica_dialect).sql == "SELECT 1"


def test_explicit_from_replaces_default(hsqldb_dialect):
    r = render(SelectStatement(from_=(_table("items"),)), hsqldb_dialect)
    assert r.sql == 'SELECT * FROM "ITEMS"'


# ---------------------------------------------------------------------------
# CTEs
# ---------------------------------------------------------------------------


def test_hsqldb_ctes_disabled_by_default(hsqldb_dialect):
    stmt = SelectStatement(
        with_=(CTE(name="t", query=SelectStatement(columns=(lit(1),))),),
        from_=(_table("t"),),
    )
    with pytest.raises(CapabilityError) as exc_info:
        render(stmt, hsqldb_dialect)
    assert exc_info.value.feature == "common table expressions"


def test_recursive_cte_without_aliases_rejected(hsqldb_ctes):
    stmt = SelectStatement(
        with_=(CTE(name="t", query=_counter(), recursive=True),),
        from_=(_table("t"),),
    )
    with pytest.raises(CapabilityError) as exc_info:
        render(stmt, hsqldb_ctes)
    assert exc_info.value.feature == "recursive CTE column aliases"


def test_recursive_cte_with_aliases(hsqldb_ctes):
    stmt = SelectStatement(
        with_=(CTE(name="t", query=_counter(), recursive=True, column_aliases=("n",)),),
        from_=(_table("t"),),
    )
    r = render(stmt, hsqldb_ctes)
    assert r.sql.startswith('WITH RECURSIVE "T"("N") AS (SELECT 1 FROM (VALUES (0)) UNION ALL ')
    assert r.sql.endswith(') SELECT * FROM "T"')


def test_any_recursive_cte_makes_block_recursive(vertica_dialect):
    plain = CTE(name="base", query=SelectStatement(columns=(lit(1),)))
    rec = CTE(name="t", query=_counter(), recursive=True)
    r = render(SelectStatement(with_=(plain, rec), from_=(_table("t"),)), vertica_dialect)
    assert r.sql.startswith('WITH RECURSIVE "base" AS (SELECT 1), "t" AS (')
    assert r.sql.count("RECURSIVE") == 1


def test_non_recursive_ctes_use_plain_with(vertica_dialect):
    cte = CTE(name="base", query=SelectStatement(columns=(lit(1),)))
    r = render(SelectStatement(with_=(cte,), from_=(_table("base"),)), vertica_dialect)
    assert r.sql == 'WITH "base" AS (SELECT 1) SELECT * FROM "base"'


def test_params_follow_placeholder_order_across_ctes(vertica_dialect):
    cte = CTE(
        name="recent",
        query=SelectStatement(
            from_=(_table("orders"),),
            where=binary(Op.GT, col("total"), Param(value=100)),
        ),
    )
    stmt = SelectStatement(
        with_=(cte,),
        from_=(_table("recent"),),
        where=binary(Op.EQ, col("region"), Param(value="north")),
    )
    r = render(stmt, vertica_dialect)
    assert r.params == (100, "north")


# ---------------------------------------------------------------------------
# Clause ordering
# ---------------------------------------------------------------------------


def test_assemble_follows_dialect_order(default_dialect):
    top_first = default_dialect.evolve(
        clause_orders={StatementKind.SELECT: ("select", "limit", "columns", "from")}
    )
    sql = assemble(
        "select",
        {"select": "SELECT", "limit": "TOP 5", "columns": "*", "from": 'FROM "t"'},
        top_first,
    )
    assert sql == 'SELECT TOP 5 * FROM "t"'


def test_assemble_skips_empty_fragments(default_dialect):
    sql = assemble("select", {"select": "SELECT", "columns": "1", "where": ""}, default_dialect)
    assert sql == "SELECT 1"


def test_unlisted_clause_is_capability_error(default_dialect):
    no_lock = default_dialect.evolve(
        clause_orders={StatementKind.SELECT: ("select", "columns", "from")}
    )
    with pytest.raises(CapabilityError) as exc_info:
        assemble("select", {"select": "SELECT", "columns": "*", "lock": "FOR UPDATE"}, no_lock)
    assert exc_info.value.feature == "select.lock"


def test_assembly_is_deterministic(vertica_dialect):
    stmt = SelectStatement(from_=(_table("t"),), where=binary(Op.EQ, col("a"), 1), limit=3)
    assert render(stmt, vertica_dialect) == render(stmt, vertica_dialect)


# ---------------------------------------------------------------------------
# SELECT clauses
# ---------------------------------------------------------------------------


def test_full_select(vertica_dialect):
    stmt = SelectStatement(
        distinct=True,
        columns=(col("c.region"), aliased(func("count", Star()), "n")),
        from_=(Aliased(expr=_table("customers"), alias="c"),),
        joins=(
            Join(
                kind=JoinKind.LEFT,
                table=Aliased(expr=_table("orders"), alias="o"),
                condition=binary(Op.EQ, col("o.customer_id"), col("c.id")),
            ),
        ),
        where=binary(Op.EQ, col("c.active"), True),
        group=(col("c.region"),),
        having=binary(Op.GT, func("count", Star()), 2),
        order=(desc(col("n")), asc(col("c.region"), nulls=NullsPosition.LAST)),
        limit=10,
        offset=20,
    )
    r = render(stmt, vertica_dialect)
    assert r.sql == (
        'SELECT DISTINCT "c"."region", COUNT(*) AS "n" '
        'FROM "customers" AS "c" '
        'LEFT JOIN "orders" AS "o" ON ("o"."customer_id" = "c"."id") '
        'WHERE ("c"."active" = TRUE) '
        'GROUP BY "c"."region" '
        "HAVING (COUNT(*) > 2) "
        'ORDER BY "n" DESC, "c"."region" ASC NULLS LAST '
        "LIMIT 10 OFFSET 20"
    )


def test_join_using(vertica_dialect):
    stmt = SelectStatement(
        from_=(_table("a"),),
        joins=(Join(table=_table("b"), using=("id", "tenant")),),
    )
    assert render(stmt, vertica_dialect).sql == 'SELECT * FROM "a" INNER JOIN "b" USING ("id", "tenant")'


def test_cross_join_needs_no_condition(vertica_dialect):
    stmt = SelectStatement(from_=(_table("a"),), joins=(Join(kind=JoinKind.CROSS, table=_table("b")),))
    assert render(stmt, vertica_dialect).sql == 'SELECT * FROM "a" CROSS JOIN "b"'


def test_inner_join_without_condition_is_configuration_error(vertica_dialect):
    stmt = SelectStatement(from_=(_table("a"),), joins=(Join(table=_table("b")),))
    with pytest.raises(ConfigurationError):
        render(stmt, vertica_dialect)


def test_subquery_source(hsqldb_dialect):
    inner = SelectStatement(columns=(col("id"),), from_=(_table("items"),))
    r = render(SelectStatement(from_=(SubQuery(query=inner, alias="x"),)), hsqldb_dialect)
    assert r.sql == 'SELECT * FROM (SELECT "ID" FROM "ITEMS") AS "X"'


def test_limit_without_offset(vertica_dialect):
    r = render(SelectStatement(from_=(_table("t"),), limit=5), vertica_dialect)
    assert r.sql.endswith("LIMIT 5")
    assert "OFFSET" not in r.sql


def test_pagination_override(default_dialect):
    fetch_first = default_dialect.evolve(
        limit_renderer=lambda limit, offset: f"OFFSET {offset or 0} ROWS FETCH FIRST {limit} ROWS ONLY"
    )
    r = render(SelectStatement(from_=(_table("t"),), limit=5, offset=10), fetch_first)
    assert r.sql == 'SELECT * FROM "t" OFFSET 10 ROWS FETCH FIRST 5 ROWS ONLY'


def test_lock_clause(vertica_dialect):
    r = render(SelectStatement(from_=(_table("t"),), lock="update"), vertica_dialect)
    assert r.sql.endswith("FOR UPDATE")


def test_unknown_lock_style_is_capability_error(vertica_dialect):
    with pytest.raises(CapabilityError):
        render(SelectStatement(from_=(_table("t"),), lock="skip_locked"), vertica_dialect)


def test_intersect_compound(vertica_dialect):
    other = SelectStatement(columns=(col("id"),), from_=(_table("b"),))
    stmt = SelectStatement(
        columns=(col("id"),),
        from_=(_table("a"),),
        compounds=(Compound(kind=CompoundKind.INTERSECT, query=other),),
    )
    assert render(stmt, vertica_dialect).sql == 'SELECT "id" FROM "a" INTERSECT SELECT "id" FROM "b"'


def test_compound_branch_with_order_and_limit_is_wrapped(vertica_dialect):
    top = SelectStatement(
        columns=(col("id"),), from_=(_table("b"),), order=(desc(col("id")),), limit=2
    )
    stmt = SelectStatement(
        columns=(col("id"),),
        from_=(_table("a"),),
        compounds=(Compound(kind=CompoundKind.UNION, all=True, query=top),),
    )
    assert render(stmt, vertica_dialect).sql == (
        'SELECT "id" FROM "a" UNION ALL SELECT * FROM '
        '(SELECT "id" FROM "b" ORDER BY "id" DESC LIMIT 2) AS "t1"'
    )


def test_nested_compound_branch_is_wrapped(vertica_dialect):
    inner = SelectStatement(
        columns=(col("id"),),
        from_=(_table("b"),),
        compounds=(Compound(kind=CompoundKind.UNION, query=SelectStatement(
            columns=(col("id"),), from_=(_table("c"),)
        )),),
    )
    stmt = SelectStatement(
        columns=(col("id"),),
        from_=(_table("a"),),
        compounds=(Compound(kind=CompoundKind.EXCEPT, query=inner),),
    )
    assert render(stmt, vertica_dialect).sql == (
        'SELECT "id" FROM "a" EXCEPT SELECT * FROM '
        '(SELECT "id" FROM "b" UNION SELECT "id" FROM "c") AS "t1"'
    )


# ---------------------------------------------------------------------------
# INSERT / UPDATE / DELETE
# ---------------------------------------------------------------------------


def test_insert_values_with_params(hsqldb_dialect):
    stmt = InsertStatement(
        table=_table("items"),
        columns=("name", "qty"),
        values=((Param(value="bolt"), lit(3)), (Param(value="nut"), lit(7))),
    )
    r = render(stmt, hsqldb_dialect)
    assert r.sql == 'INSERT INTO "ITEMS" ("NAME", "QTY") VALUES (?, 3), (?, 7)'
    assert r.params == ("bolt", "nut")


def test_insert_default_values(vertica_dialect):
    r = render(InsertStatement(table=_table("items")), vertica_dialect)
    assert r.sql == 'INSERT INTO "items" DEFAULT VALUES'


def test_insert_from_select(vertica_dialect):
    query = SelectStatement(columns=(col("name"),), from_=(_table("staging"),))
    r = render(InsertStatement(table=_table("items"), columns=("name",), query=query), vertica_dialect)
    assert r.sql == 'INSERT INTO "items" ("name") SELECT "name" FROM "staging"'


def test_insert_rejects_values_and_query():
    with pytest.raises(ValueError):
        InsertStatement(
            table=_table("items"),
            values=((lit(1),),),
            query=SelectStatement(),
        )


def test_update(vertica_dialect):
    stmt = UpdateStatement(
        table=_table("items"),
        assignments=(("qty", binary(Op.ADD, col("qty"), Param(value=1))),),
        where=binary(Op.EQ, col("id"), Param(value=9)),
    )
    r = render(stmt, vertica_dialect)
    assert r.sql == 'UPDATE "items" SET "qty" = ("qty" + ?) WHERE ("id" = ?)'
    assert r.params == (1, 9)


def test_update_without_assignments_is_configuration_error(vertica_dialect):
    with pytest.raises(ConfigurationError):
        render(UpdateStatement(table=_table("items"), assignments=()), vertica_dialect)


def test_delete(hsqldb_dialect):
    stmt = DeleteStatement(table=_table("items"), where=unary(Op.IS_NULL, col("name")))
    assert render(stmt, hsqldb_dialect).sql == 'DELETE FROM "ITEMS" WHERE ("NAME" IS NULL)'
