"""Statement compilation shared by every dialect.

``StandardQueryCompiler`` is the top-level orchestrator.  It renders each
clause through a focused clause builder and drives the compilation
algorithm; dialect subclasses only choose the quoter and override the few
statements whose syntax differs.

Clause order for SELECT
-----------------------
SELECT → FROM → JOIN → WHERE → GROUP BY → HAVING → ORDER BY → LIMIT →
OFFSET → UNION.

When a SELECT carries UNION branches *and* ordering or paging, the ordering
and paging are not attached to the last branch.  The unioned statement is
compiled without them, wrapped as ``SELECT * FROM (<unioned>) AS _u`` and
the ORDER BY / LIMIT / OFFSET are applied to the wrapper instead.

Parameter merge order
---------------------
FROM subquery → JOIN subqueries → WHERE → HAVING → UNION branches →
SELECT-list subqueries.  Keys are unioned; a name bound to two different
values raises :class:`~mortarql.errors.ConfigurationError`.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mortarql.compile.base import CompiledSQL, QueryCompiler, bind_params
from mortarql.compile.clause_builders import (
    FromClauseBuilder,
    JoinClauseBuilder,
    OrderByClauseBuilder,
    PaginationClauseBuilder,
    SelectClauseBuilder,
    UnionClauseBuilder,
)
from mortarql.compile.conditions import ConditionQuoter, ConditionTreeCompiler
from mortarql.compile.quoting import Quoter

if TYPE_CHECKING:
    from mortarql.query.delete import DeleteQueryBuilder
    from mortarql.query.insert import InsertQueryBuilder
    from mortarql.query.select import SelectQueryBuilder
    from mortarql.query.update import UpdateQueryBuilder

#: Alias of the derived table used when a UNION has to be wrapped.
UNION_WRAPPER_ALIAS = "_u"


class StandardQueryCompiler(QueryCompiler):
    """Compiles builders to parameterized SQL with ``:name`` placeholders.

    Args:
        quoter: Identifier quoting policy of the target dialect.
    """

    #: Wrap each UNION branch in parentheses.
    parenthesize_union_branches = True

    def __init__(self, quoter: Quoter) -> None:
        super().__init__(quoter)
        self.condition_quoter = ConditionQuoter(quoter)
        self._conditions = ConditionTreeCompiler(self.condition_quoter)
        self._select = SelectClauseBuilder(quoter)
        self._from = FromClauseBuilder(quoter)
        self._join = JoinClauseBuilder(quoter, self.condition_quoter)
        self._order_by = OrderByClauseBuilder(quoter)
        self._pagination = PaginationClauseBuilder()
        self._union = UnionClauseBuilder(self.parenthesize_union_branches)

    @property
    def dialect_name(self) -> str:
        return "standard"

    # ------------------------------------------------------------------
    # SELECT
    # ------------------------------------------------------------------

    def compile_select(self, builder: SelectQueryBuilder) -> CompiledSQL:
        """Compile ``builder`` (and its unions) to a single statement.

        Args:
            builder: The SELECT builder to render.

        Returns:
            :class:`~mortarql.compile.base.CompiledSQL` whose ``params``
            cover every placeholder in ``sql``.
        """
        has_paging = (
            bool(builder.order_by_clauses)
            or builder.limit_value is not None
            or builder.offset_value is not None
        )
        if builder.unions and has_paging:
            return self._compile_union_wrapped(builder)

        parts: list[str] = [self._select.build(builder.columns, builder.is_distinct)]
        params: dict[str, Any] = {}

        from_sql = self._from.build(builder.from_value, raw=builder.from_is_raw)
        if from_sql:
            parts.append(from_sql)
        bind_params(params, builder.from_subquery_params)

        for join in builder.joins:
            parts.append(self._join.build(join))
            bind_params(params, join.params)

        where = self._conditions.compile(builder.where_nodes())
        if where.sql:
            parts.append(f"WHERE {where.sql}")
            bind_params(params, where.params)

        if builder.group_by_columns:
            columns = ", ".join(self.quoter.dotted(c) for c in builder.group_by_columns)
            parts.append(f"GROUP BY {columns}")

        having = self._conditions.compile(builder.having_nodes())
        if having.sql:
            parts.append(f"HAVING {having.sql}")
            bind_params(params, having.params)

        self._append_ordering(parts, builder)

        unions = self._union.build(builder.unions)
        if unions.sql:
            parts.append(unions.sql)
            bind_params(params, unions.params)

        bind_params(params, builder.select_subquery_params)

        return self._result(" ".join(parts), params)

    def _compile_union_wrapped(self, builder: SelectQueryBuilder) -> CompiledSQL:
        base = self.compile_select(builder.without_pagination_and_order())
        parts = [f"SELECT * FROM ({base.sql}) AS {UNION_WRAPPER_ALIAS}"]
        self._append_ordering(parts, builder)
        return self._result(" ".join(parts), dict(base.params))

    def _append_ordering(self, parts: list[str], builder: SelectQueryBuilder) -> None:
        order_sql = self._order_by.build(builder.order_by_clauses)
        if order_sql:
            parts.append(order_sql)
        paging_sql = self._pagination.build(builder.limit_value, builder.offset_value)
        if paging_sql:
            parts.append(paging_sql)

    # ------------------------------------------------------------------
    # INSERT / UPDATE / DELETE
    # ------------------------------------------------------------------

    def compile_insert(self, builder: InsertQueryBuilder) -> CompiledSQL:
        table = self.quoter.table_with_optional_alias(builder.table)
        columns, params = self._value_placeholders(builder.data)
        if not columns:
            return self._result(self.insert_default_values(table), {})

        quoted = ", ".join(self.quoter.ident(col) for col, _ in columns)
        placeholders = ", ".join(f":{name}" for _, name in columns)
        return self._result(
            f"INSERT INTO {table} ({quoted}) VALUES ({placeholders})", params
        )

    def insert_default_values(self, table_sql: str) -> str:
        """Return an INSERT that fills every column with its default."""
        return f"INSERT INTO {table_sql} DEFAULT VALUES"

    def compile_update(self, builder: UpdateQueryBuilder) -> CompiledSQL:
        table = self.quoter.table_with_optional_alias(builder.table)
        columns, params = self._value_placeholders(builder.data)
        assignments = [f"{self.quoter.ident(col)} = :{name}" for col, name in columns]
        # No-op assignment keeps the statement valid when there is nothing to set.
        sql = f"UPDATE {table} SET {', '.join(assignments) or '1 = 1'}"

        where = self._conditions.compile(builder.where_nodes())
        if where.sql:
            sql += f" WHERE {where.sql}"
            bind_params(params, where.params)
        return self._result(sql, params)

    def compile_delete(self, builder: DeleteQueryBuilder) -> CompiledSQL:
        sql = f"DELETE FROM {self.quoter.table_with_optional_alias(builder.table)}"
        params: dict[str, Any] = {}

        where = self._conditions.compile(builder.where_nodes())
        if where.sql:
            sql += f" WHERE {where.sql}"
            bind_params(params, where.params)
        return self._result(sql, params)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _value_placeholders(
        data: dict[str, Any],
    ) -> tuple[list[tuple[str, str]], dict[str, Any]]:
        """Assign ``v_1``, ``v_2``, … to the non-blank columns of ``data``."""
        columns: list[tuple[str, str]] = []
        params: dict[str, Any] = {}
        for column, value in data.items():
            column = str(column).strip()
            if not column:
                continue
            name = f"v_{len(columns) + 1}"
            columns.append((column, name))
            params[name] = value
        return columns, params

    def _result(self, sql: str, params: dict[str, Any]) -> CompiledSQL:
        return CompiledSQL(sql=sql, params=params, dialect=self.dialect_name)
