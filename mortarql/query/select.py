"""SELECT builder.

``SelectQueryBuilder`` records projection, source, joins, conditions,
grouping, ordering, paging and unions, and hands itself to the dialect
compiler of its connection.  Terminal methods (``fetch_all``, ``count``,
``paginate`` …) compile and execute through the same connection.

Example::

    rows = (
        db.query()
        .select(["u.id", "u.email"])
        .from_("users u")
        .left_join("orders o", "o.user_id = u.id")
        .where("u.active = :active", {"active": 1})
        .where_in("u.role", ["admin", "owner"])
        .order_by("u.id", "desc")
        .limit(20)
        .fetch_all()
    )
"""
from __future__ import annotations

import copy
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from mortarql.compile.base import CompiledSQL, bind_params
from mortarql.errors import ConfigurationError
from mortarql.query.base import (
    BaseQueryBuilder,
    HavingClauseMixin,
    ParamCounter,
    WhereClauseMixin,
)
from mortarql.query.clauses import (
    AGGREGATE_ALIAS,
    ConditionTree,
    JoinClause,
    JoinType,
    OrderByItem,
    UnionClause,
    UnionType,
)
from mortarql.query.expression import Expression
from mortarql.query.pagination import DEFAULT_PER_PAGE, Page
from mortarql.query.subquery import SubqueryLike

if TYPE_CHECKING:
    from mortarql.connection.base import ConnectionInterface


def _normalize_columns(columns: str | Iterable[str]) -> list[str]:
    if isinstance(columns, str):
        columns = [columns]
    cleaned = [str(c).strip() for c in columns]
    return [c for c in cleaned if c] or ["*"]


def _join_type(value: str) -> JoinType:
    value = value.strip().upper()
    if value == "LEFT":
        return "LEFT"
    if value == "RIGHT":
        return "RIGHT"
    return "INNER"


class SelectQueryBuilder(BaseQueryBuilder, WhereClauseMixin, HavingClauseMixin):
    """Fluent SELECT builder bound to one connection.

    Args:
        connection: Connection that supplies prefix, compiler and execution.
        columns: Initial projection; ``"*"`` when omitted or empty.
        default_per_page: Page size used by :meth:`paginate` when none is
            given.
        counter: Placeholder counter shared with the builder that created
            this one, if any.
    """

    def __init__(
        self,
        connection: ConnectionInterface,
        columns: str | Iterable[str] = "*",
        default_per_page: int = DEFAULT_PER_PAGE,
        counter: ParamCounter | None = None,
    ) -> None:
        super().__init__(connection, counter)
        self.default_per_page = default_per_page
        self._columns: list[str] = _normalize_columns(columns)
        self._distinct = False
        self._from: str | None = None
        self._from_is_raw = False
        self._from_subquery_params: dict[str, Any] = {}
        self._select_subquery_params: dict[str, Any] = {}
        self._joins: list[JoinClause] = []
        self._where = ConditionTree()
        self._group_by: list[str] = []
        self._having = ConditionTree()
        self._order_by: list[OrderByItem] = []
        self._limit: int | None = None
        self._offset: int | None = None
        self._unions: list[UnionClause] = []

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def select(self, columns: str | Iterable[str]) -> SelectQueryBuilder:
        """Add columns to the projection, replacing the implicit ``*``."""
        cols = _normalize_columns(columns)
        if self._columns == ["*"]:
            self._columns = cols
        else:
            self._columns.extend(cols)
        return self

    def distinct(self, enabled: bool = True) -> SelectQueryBuilder:
        self._distinct = enabled
        return self

    def select_exists(self, subquery: SubqueryLike, alias: str = "exists") -> SelectQueryBuilder:
        """Add ``EXISTS (<subquery>) AS alias`` to the projection."""
        return self._select_exists(subquery, alias.strip() or "exists", negate=False)

    def select_not_exists(
        self, subquery: SubqueryLike, alias: str = "not_exists"
    ) -> SelectQueryBuilder:
        """Add ``NOT EXISTS (<subquery>) AS alias`` to the projection."""
        return self._select_exists(subquery, alias.strip() or "not_exists", negate=True)

    def _select_exists(self, subquery: SubqueryLike, alias: str, negate: bool) -> SelectQueryBuilder:
        compiled = self._lower_subquery(subquery)
        sql = compiled.sql.strip()
        if not sql:
            return self
        keyword = "NOT EXISTS" if negate else "EXISTS"
        self.select(f"{keyword} ({sql}) AS {self._connection.quoter.alias(alias)}")
        bind_params(self._select_subquery_params, compiled.params)
        return self

    # ------------------------------------------------------------------
    # Source
    # ------------------------------------------------------------------

    def from_(self, table: str | Expression) -> SelectQueryBuilder:
        """Set the source: ``"table [alias]"`` (prefixed) or an expression."""
        if isinstance(table, Expression):
            if table.sql:
                self._from = table.sql
                self._from_is_raw = True
            return self
        source = self._apply_prefix(table)
        if source:
            self._from = source
            self._from_is_raw = False
        return self

    def from_subquery(self, subquery: SubqueryLike, alias: str) -> SelectQueryBuilder:
        """Select from ``(<subquery>) AS alias``.

        Raises:
            ConfigurationError: If ``alias`` is blank.
        """
        alias = alias.strip()
        if not alias:
            raise ConfigurationError("A derived table needs an alias.", setting="alias")
        compiled = self._lower_subquery(subquery)
        sql = compiled.sql.strip()
        if not sql:
            return self
        self._from = f"({sql}) AS {self._connection.quoter.alias(alias)}"
        self._from_is_raw = True
        self._from_subquery_params = dict(compiled.params)
        return self

    # ------------------------------------------------------------------
    # Joins
    # ------------------------------------------------------------------

    def join(self, table: str | Expression, on: str) -> SelectQueryBuilder:
        """Alias for :meth:`inner_join`."""
        return self.inner_join(table, on)

    def inner_join(self, table: str | Expression, on: str) -> SelectQueryBuilder:
        return self._add_join("INNER", table, on)

    def left_join(self, table: str | Expression, on: str) -> SelectQueryBuilder:
        return self._add_join("LEFT", table, on)

    def right_join(self, table: str | Expression, on: str) -> SelectQueryBuilder:
        return self._add_join("RIGHT", table, on)

    def inner_join_raw(self, sql: str, on: str) -> SelectQueryBuilder:
        return self.inner_join(Expression(sql), on)

    def left_join_raw(self, sql: str, on: str) -> SelectQueryBuilder:
        return self.left_join(Expression(sql), on)

    def right_join_raw(self, sql: str, on: str) -> SelectQueryBuilder:
        return self.right_join(Expression(sql), on)

    def join_subquery(self, subquery: SubqueryLike, alias: str, on: str) -> SelectQueryBuilder:
        """``INNER JOIN (<subquery>) AS alias ON …``."""
        return self._add_join_subquery("INNER", subquery, alias, on)

    def left_join_subquery(self, subquery: SubqueryLike, alias: str, on: str) -> SelectQueryBuilder:
        return self._add_join_subquery("LEFT", subquery, alias, on)

    def right_join_subquery(self, subquery: SubqueryLike, alias: str, on: str) -> SelectQueryBuilder:
        return self._add_join_subquery("RIGHT", subquery, alias, on)

    def _add_join(self, join_type: str, table: str | Expression, on: str) -> SelectQueryBuilder:
        on = on.strip()
        if not on:
            return self
        if isinstance(table, Expression):
            if not table.sql:
                return self
            self._joins.append(JoinClause(_join_type(join_type), table.sql, on, raw=True))
            return self
        target = self._apply_prefix(table)
        if target:
            self._joins.append(JoinClause(_join_type(join_type), target, on))
        return self

    def _add_join_subquery(
        self, join_type: str, subquery: SubqueryLike, alias: str, on: str
    ) -> SelectQueryBuilder:
        alias, on = alias.strip(), on.strip()
        if not alias:
            raise ConfigurationError("A joined subquery needs an alias.", setting="alias")
        if not on:
            return self
        compiled = self._lower_subquery(subquery)
        sql = compiled.sql.strip()
        if not sql:
            return self
        target = f"({sql}) AS {self._connection.quoter.alias(alias)}"
        self._joins.append(
            JoinClause(_join_type(join_type), target, on, dict(compiled.params), raw=True)
        )
        return self

    # ------------------------------------------------------------------
    # EXISTS conditions
    # ------------------------------------------------------------------

    def where_exists(self, subquery: SubqueryLike) -> SelectQueryBuilder:
        return self._where_exists("AND", subquery, negate=False)

    def or_where_exists(self, subquery: SubqueryLike) -> SelectQueryBuilder:
        return self._where_exists("OR", subquery, negate=False)

    def where_not_exists(self, subquery: SubqueryLike) -> SelectQueryBuilder:
        return self._where_exists("AND", subquery, negate=True)

    def or_where_not_exists(self, subquery: SubqueryLike) -> SelectQueryBuilder:
        return self._where_exists("OR", subquery, negate=True)

    def _where_exists(self, connector: str, subquery: SubqueryLike, negate: bool) -> SelectQueryBuilder:
        compiled = self._lower_subquery(subquery)
        sql = compiled.sql.strip()
        if not sql:
            return self
        keyword = "NOT EXISTS" if negate else "EXISTS"
        self._where.add_leaf(connector, f"{keyword} ({sql})", compiled.params)
        return self

    # ------------------------------------------------------------------
    # Grouping, ordering, paging
    # ------------------------------------------------------------------

    def group_by(self, columns: str | Iterable[str]) -> SelectQueryBuilder:
        if isinstance(columns, str):
            columns = [columns]
        self._group_by.extend(c.strip() for c in columns if c.strip())
        return self

    def order_by(self, column: str, direction: str = "ASC") -> SelectQueryBuilder:
        """Order by ``column``; any direction other than ``desc`` means ASC."""
        column = column.strip()
        if column:
            resolved = "DESC" if direction.strip().upper() == "DESC" else "ASC"
            self._order_by.append(OrderByItem(column, resolved))
        return self

    def latest(self, column: str = "created_datetime") -> SelectQueryBuilder:
        return self.order_by(column, "DESC")

    def limit(self, limit: int) -> SelectQueryBuilder:
        self._limit = max(0, int(limit))
        return self

    def offset(self, offset: int) -> SelectQueryBuilder:
        self._offset = max(0, int(offset))
        return self

    # ------------------------------------------------------------------
    # Unions
    # ------------------------------------------------------------------

    def union(self, query: SubqueryLike) -> SelectQueryBuilder:
        return self._add_union("UNION", query)

    def union_all(self, query: SubqueryLike) -> SelectQueryBuilder:
        return self._add_union("UNION ALL", query)

    def _add_union(self, union_type: UnionType, query: SubqueryLike) -> SelectQueryBuilder:
        compiled = self._lower_subquery(query)
        sql = compiled.sql.strip()
        if sql:
            self._unions.append(UnionClause(union_type, sql, dict(compiled.params)))
        return self

    # ------------------------------------------------------------------
    # Compilation and execution
    # ------------------------------------------------------------------

    def compile(self) -> CompiledSQL:
        return self._connection.compiler.compile_select(self)

    def fetch_all(self) -> list[dict[str, Any]]:
        compiled = self.compile()
        return self._connection.fetch_all(compiled.sql, compiled.params)

    def fetch_one(self) -> dict[str, Any] | None:
        compiled = self.compile()
        return self._connection.fetch_one(compiled.sql, compiled.params)

    def first(self) -> dict[str, Any] | None:
        return self.fetch_one()

    def value(self, column: str) -> Any:
        """Return ``column`` of the first row, or ``None``."""
        column = column.strip()
        if not column:
            return None
        row = self.fetch_one()
        return None if row is None else row.get(column)

    # -- aggregates -----------------------------------------------------

    def count(self, column: str = "*") -> int:
        value = self._aggregate("COUNT", column.strip() or "*")
        return 0 if value is None else int(value)

    def sum(self, column: str) -> int | float:
        value = self._aggregate("SUM", column)
        if value is None:
            return 0
        if isinstance(value, (int, float)):
            return value
        text = str(value)
        try:
            return int(text)
        except ValueError:
            return float(text)

    def avg(self, column: str) -> float:
        value = self._aggregate("AVG", column)
        return 0.0 if value is None else float(value)

    def min(self, column: str) -> Any:
        return self._aggregate("MIN", column)

    def max(self, column: str) -> Any:
        return self._aggregate("MAX", column)

    def _aggregate(self, func: str, column: str) -> Any:
        """Run ``FUNC(column)`` on a copy without ordering or paging.

        WHERE, GROUP BY, HAVING, DISTINCT and unions are kept as they are.
        """
        column = column.strip()
        if not column:
            return None
        query = self.without_pagination_and_order()
        query._columns = [f"{func.upper()}({column}) AS {AGGREGATE_ALIAS}"]
        # The replaced projection drops any EXISTS columns and their params.
        query._select_subquery_params = {}
        row = query.fetch_one()
        return None if row is None else row.get(AGGREGATE_ALIAS)

    def paginate(self, page: int | None = None, per_page: int | None = None) -> Page:
        """Count the matching rows, then fetch one page of them.

        Both ``page`` and ``per_page`` are floored to 1.
        """
        page_value = max(1, page if page is not None else 1)
        per_page_value = max(1, per_page if per_page is not None else self.default_per_page)

        total = self.count()
        items = (
            self._clone()
            .limit(per_page_value)
            .offset((page_value - 1) * per_page_value)
            .fetch_all()
        )
        return Page(items=items, total=total, page=page_value, per_page=per_page_value)

    # ------------------------------------------------------------------
    # Accessors read by the compiler
    # ------------------------------------------------------------------

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def from_value(self) -> str | None:
        return self._from

    @property
    def from_is_raw(self) -> bool:
        return self._from_is_raw

    @property
    def joins(self) -> list[JoinClause]:
        return list(self._joins)

    @property
    def group_by_columns(self) -> list[str]:
        return list(self._group_by)

    @property
    def order_by_clauses(self) -> list[OrderByItem]:
        return list(self._order_by)

    @property
    def limit_value(self) -> int | None:
        return self._limit

    @property
    def offset_value(self) -> int | None:
        return self._offset

    @property
    def is_distinct(self) -> bool:
        return self._distinct

    @property
    def unions(self) -> list[UnionClause]:
        return list(self._unions)

    @property
    def from_subquery_params(self) -> dict[str, Any]:
        return dict(self._from_subquery_params)

    @property
    def select_subquery_params(self) -> dict[str, Any]:
        return dict(self._select_subquery_params)

    def without_pagination_and_order(self) -> SelectQueryBuilder:
        """Return a copy with ORDER BY, LIMIT and OFFSET removed."""
        clone = self._clone()
        clone._order_by = []
        clone._limit = None
        clone._offset = None
        return clone

    def _clone(self) -> SelectQueryBuilder:
        clone = copy.copy(self)
        clone._columns = list(self._columns)
        clone._joins = list(self._joins)
        clone._group_by = list(self._group_by)
        clone._order_by = list(self._order_by)
        clone._unions = list(self._unions)
        clone._from_subquery_params = dict(self._from_subquery_params)
        clone._select_subquery_params = dict(self._select_subquery_params)
        clone._where = self._where.copy()
        clone._having = self._having.copy()
        return clone
