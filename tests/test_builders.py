"""Unit tests for builder state, terminal methods and pagination."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from mortarql.compile.base import CompiledSQL
from mortarql.driver.sqlite import SQLiteDriver
from mortarql.errors import ConfigurationError, ReadOnlyViolation
from mortarql.query.expression import Expression
from mortarql.query.factory import QueryFactory
from mortarql.query.pagination import DEFAULT_PER_PAGE, Page
from mortarql.query.subquery import (
    BuilderSubquery,
    CallbackSubquery,
    RawSubquery,
    as_subquery,
)
from tests.fixtures import SpyConnection


def _spy(rows=None, **kwargs) -> SpyConnection:
    return SpyConnection(SQLiteDriver(), rows=rows, **kwargs)


# ---------------------------------------------------------------------------
# Terminal methods
# ---------------------------------------------------------------------------


def test_fetch_all_passes_compiled_sql_and_params():
    conn = _spy(rows=[{"id": 1}, {"id": 2}])
    rows = conn.query().select("id").from_("users").where("id > :id", {"id": 0}).fetch_all()
    assert rows == [{"id": 1}, {"id": 2}]
    assert conn.last_sql == 'SELECT "id" FROM "users" WHERE ("id" > :id)'
    assert conn.last_params == {"id": 0}


def test_fetch_one_and_first():
    conn = _spy(rows=[{"id": 1}])
    assert conn.query().select().from_("users").fetch_one() == {"id": 1}
    assert conn.query().select().from_("users").first() == {"id": 1}
    assert _spy().query().select().from_("users").first() is None


def test_value():
    conn = _spy(rows=[{"name": "Ann"}])
    assert conn.query().select("name").from_("users").value("name") == "Ann"
    assert conn.query().select("name").from_("users").value("missing") is None


def test_value_with_blank_column_does_not_query():
    conn = _spy(rows=[{"name": "Ann"}])
    assert conn.query().select().from_("users").value("  ") is None
    assert conn.calls == []


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


def test_count_drops_ordering_and_paging():
    conn = _spy(rows=[{"__agg": 7}])
    q = (
        conn.query()
        .select(["id", "name"])
        .from_("users")
        .where("active = 1")
        .order_by("id")
        .limit(5)
        .offset(10)
    )
    assert q.count() == 7
    assert conn.last_sql == 'SELECT COUNT(*) AS __agg FROM "users" WHERE ("active" = 1)'
    # the builder itself is untouched
    assert q.compile().sql == (
        'SELECT "id", "name" FROM "users" WHERE ("active" = 1) ORDER BY "id" ASC LIMIT 5 OFFSET 10'
    )


def test_count_column_and_empty_result():
    conn = _spy()
    assert conn.query().select().from_("users").count("email") == 0
    assert conn.last_sql == 'SELECT COUNT(email) AS __agg FROM "users"'


def test_sum_parses_driver_values():
    assert _spy(rows=[{"__agg": 42}]).query().select().from_("o").sum("total") == 42
    assert _spy(rows=[{"__agg": 2.5}]).query().select().from_("o").sum("total") == 2.5
    assert _spy(rows=[{"__agg": Decimal("12.50")}]).query().select().from_("o").sum("total") == 12.5
    assert _spy(rows=[{"__agg": Decimal("3")}]).query().select().from_("o").sum("total") == 3
    assert _spy(rows=[{"__agg": None}]).query().select().from_("o").sum("total") == 0


def test_avg_min_max():
    conn = _spy(rows=[{"__agg": "4.5"}])
    q = conn.query().select().from_("orders")
    assert q.avg("total") == 4.5
    assert conn.last_sql == 'SELECT AVG(total) AS __agg FROM "orders"'
    assert q.min("total") == "4.5"
    assert conn.last_sql == 'SELECT MIN(total) AS __agg FROM "orders"'
    assert q.max("total") == "4.5"
    assert conn.last_sql == 'SELECT MAX(total) AS __agg FROM "orders"'
    assert _spy().query().select().from_("orders").avg("total") == 0.0


def test_aggregate_with_blank_column_returns_none():
    conn = _spy(rows=[{"__agg": 1}])
    assert conn.query().select().from_("orders").max(" ") is None
    assert conn.calls == []


def test_aggregate_on_union_keeps_branches():
    conn = _spy(rows=[{"__agg": 3}])
    conn.query().select("id").from_("a").union("SELECT id FROM b").order_by("id").count()
    assert conn.last_sql == 'SELECT COUNT(*) AS __agg FROM "a" UNION SELECT id FROM b'


def test_aggregate_drops_select_list_subquery_params():
    conn = _spy(rows=[{"__agg": 2}])
    q = (
        conn.query()
        .select("id")
        .from_("users u")
        .select_exists(
            lambda b: b.select("id").from_("orders o").where("status = :st", {"st": "paid"}),
            "has_paid",
        )
    )
    assert q.count() == 2
    sent = CompiledSQL(conn.last_sql, conn.last_params)
    assert sent.sql == 'SELECT COUNT(*) AS __agg FROM "users" AS "u"'
    assert sent.placeholders() == set(sent.params) == set()
    # the builder keeps its projection params
    assert q.compile().params == {"st": "paid"}


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


def test_paginate_counts_then_fetches_page():
    conn = _spy(rows=[{"__agg": 25}])
    page = conn.query().select().from_("users").order_by("id").paginate(2, 10)
    count_sql, _ = conn.calls[-2]
    assert count_sql == 'SELECT COUNT(*) AS __agg FROM "users"'
    assert conn.last_sql == 'SELECT * FROM "users" ORDER BY "id" ASC LIMIT 10 OFFSET 10'
    assert page.total == 25
    assert page.page == 2
    assert page.per_page == 10
    assert page.last_page == 3
    assert page.has_more is True


def test_paginate_floors_page_and_per_page():
    conn = _spy(rows=[{"__agg": 1}])
    page = conn.query().select().from_("users").paginate(0, 0)
    assert page.page == 1
    assert page.per_page == 1
    assert conn.last_sql == 'SELECT * FROM "users" LIMIT 1 OFFSET 0'


def test_paginate_uses_factory_default_per_page():
    conn = _spy(rows=[{"__agg": 0}])
    page = QueryFactory(conn, default_per_page=7).select().from_("users").paginate()
    assert page.per_page == 7
    assert conn.query().select().from_("users").paginate().per_page == DEFAULT_PER_PAGE


def test_page_model():
    page = Page(items=[], total=0, page=1, per_page=15)
    assert page.last_page == 1
    assert page.has_more is False
    dumped = page.model_dump()
    assert dumped["last_page"] == 1
    assert dumped["has_more"] is False


def test_page_model_validates_and_is_frozen():
    with pytest.raises(ValidationError):
        Page(total=-1)
    with pytest.raises(ValidationError):
        Page(per_page=0)
    page = Page(total=3, per_page=2)
    with pytest.raises(ValidationError):
        page.total = 4


# ---------------------------------------------------------------------------
# Subqueries
# ---------------------------------------------------------------------------


def test_as_subquery_classifies_arguments():
    conn = _spy()
    builder = conn.query().select().from_("t")
    assert isinstance(as_subquery(builder), BuilderSubquery)
    assert isinstance(as_subquery("SELECT 1"), RawSubquery)
    assert isinstance(as_subquery(Expression("SELECT 1")), RawSubquery)
    assert isinstance(as_subquery(lambda b: b), CallbackSubquery)
    raw = RawSubquery("SELECT 2")
    assert as_subquery(raw) is raw


def test_as_subquery_rejects_other_types():
    with pytest.raises(ConfigurationError) as exc_info:
        as_subquery(42)  # type: ignore[arg-type]
    assert exc_info.value.setting == "subquery"


def test_from_subquery_requires_alias():
    conn = _spy()
    with pytest.raises(ConfigurationError) as exc_info:
        conn.query().select().from_subquery("SELECT 1", "  ")
    assert exc_info.value.setting == "alias"


def test_join_subquery_requires_alias():
    conn = _spy()
    with pytest.raises(ConfigurationError):
        conn.query().select().from_("a").left_join_subquery("SELECT 1", "", "x.id = a.id")


def test_blank_subquery_is_ignored():
    conn = _spy()
    q = conn.query().select().from_("users").where_in_subquery("id", "  ").union("")
    assert q.compile().sql == 'SELECT * FROM "users"'


def test_subquery_uses_same_connection_prefix():
    conn = SpyConnection(SQLiteDriver(), prefix="p_")
    r = conn.query().select().from_("users").where_in_subquery(
        "id", lambda b: b.select("user_id").from_("orders")
    ).compile()
    assert r.sql == 'SELECT * FROM "p_users" WHERE (id IN (SELECT "user_id" FROM "p_orders"))'


# ---------------------------------------------------------------------------
# Builder state
# ---------------------------------------------------------------------------


def test_accessors_return_copies():
    conn = _spy()
    q = conn.query().select("id").from_("users").join("orders", "orders.user_id = users.id")
    q.columns.append("x")
    q.joins.clear()
    assert q.columns == ["id"]
    assert len(q.joins) == 1
    assert q.from_value == "users"
    assert q.from_is_raw is False


def test_select_replaces_implicit_star_then_appends():
    q = _spy().query().select()
    assert q.columns == ["*"]
    q.select("id").select(["name", " "])
    assert q.columns == ["id", "name"]


def test_without_pagination_and_order():
    q = _spy().query().select().from_("t").order_by("id").limit(1).offset(2)
    clone = q.without_pagination_and_order()
    assert clone.order_by_clauses == []
    assert clone.limit_value is None
    assert clone.offset_value is None
    assert q.limit_value == 1


def test_grouped_where_on_update_and_delete():
    conn = _spy()
    r = (
        conn.query()
        .update("users", {"active": 0})
        .where(lambda q: q.where("age < 18").or_where("email IS NULL"))
        .compile()
    )
    assert r.sql == 'UPDATE "users" SET "active" = :v_1 WHERE (("age" < 18) OR ("email" IS NULL))'
    r = conn.query().delete("users").or_where_in("id", [4]).compile()
    assert r.sql == 'DELETE FROM "users" WHERE ("id" IN (:in_1))'


def test_write_builders_execute_through_connection():
    conn = _spy(rowcount=3)
    assert conn.query().insert("users", {"name": "Ann"}).execute() == 3
    assert conn.last_sql == 'INSERT INTO "users" ("name") VALUES (:v_1)'
    assert conn.query().update("users", {"name": "Bob"}).execute() == 3
    assert conn.query().delete("users").execute() == 3
    assert conn.last_sql == 'DELETE FROM "users"'


def test_write_builders_respect_read_only():
    conn = _spy(read_only=True)
    with pytest.raises(ReadOnlyViolation):
        conn.query().insert("users", {"name": "Ann"}).execute()
    assert conn.calls == []


def test_raw_expression():
    expr = _spy().query().raw("  NOW()  ")
    assert expr.sql == "NOW()"
    assert str(expr) == "NOW()"
