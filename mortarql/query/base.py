"""Builder base class and the WHERE / HAVING clause mixins.

Every builder is bound to one connection.  The connection supplies the
table prefix and the dialect compiler; the builder itself only records
state and exposes it through read-only accessors.

Placeholder naming
------------------
Helpers that generate placeholders (IN lists, LIKE patterns, BETWEEN
bounds) draw from one counter that is never reset, producing ``in_<n>``,
``like_<n>`` and ``between_<n>``.  Builders handed to subquery callbacks
and union callbacks share the counter of the builder that created them, so
generated names stay unique across the whole statement.  A finished
builder passed in directly has its own counter; if one of its names is
already bound to a different value, compilation raises
:class:`~mortarql.errors.ConfigurationError` instead of rebinding it.
Caller-written fragments use caller-chosen names (``:id``) under the same
rule.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, TypeVar

from mortarql.query.clauses import ConditionNode, ConditionTree
from mortarql.query.subquery import SubqueryLike, as_subquery

if TYPE_CHECKING:
    from mortarql.compile.base import CompiledSQL
    from mortarql.connection.base import ConnectionInterface
    from mortarql.query.select import SelectQueryBuilder

_WHITESPACE = re.compile(r"\s+")

_W = TypeVar("_W", bound="WhereClauseMixin")
_H = TypeVar("_H", bound="HavingClauseMixin")


class ParamCounter:
    """Placeholder counter shared by a builder and the subqueries built on it."""

    def __init__(self) -> None:
        self.value = 0

    def next(self, prefix: str) -> str:
        self.value += 1
        return f"{prefix}_{self.value}"


class BaseQueryBuilder:
    """State shared by all builders: the connection and the param counter.

    Args:
        connection: Connection that supplies prefix, compiler and execution.
        counter: Placeholder counter to draw from; a fresh one when omitted.
    """

    def __init__(self, connection: ConnectionInterface, counter: ParamCounter | None = None) -> None:
        self._connection = connection
        self._counter = counter if counter is not None else ParamCounter()

    @property
    def connection(self) -> ConnectionInterface:
        return self._connection

    def compile(self) -> CompiledSQL:
        raise NotImplementedError

    def _next_param(self, prefix: str) -> str:
        return self._counter.next(prefix)

    def _apply_prefix(self, table: str) -> str:
        """Prefix the table name of ``"table [alias]"``; the alias is kept."""
        parts = _WHITESPACE.split(table.strip())
        if not parts[0]:
            return ""
        name = self._connection.table(parts[0])
        return f"{name} {parts[1]}" if len(parts) > 1 else name

    def _new_select(self) -> SelectQueryBuilder:
        from mortarql.query.select import SelectQueryBuilder

        return SelectQueryBuilder(self._connection, counter=self._counter)

    def _lower_subquery(self, subquery: SubqueryLike) -> CompiledSQL:
        return as_subquery(subquery).lower(self._new_select)


# ---------------------------------------------------------------------------
# WHERE
# ---------------------------------------------------------------------------


class WhereClauseMixin:
    """Fluent WHERE methods backed by a :class:`ConditionTree`.

    Passing a callable instead of a fragment opens a group: everything the
    callable adds to the builder is collected and wrapped in one pair of
    parentheses::

        q.where("active = 1").where(
            lambda q: q.where("age > :age", {"age": 30}).or_where(
                "email = :email", {"email": "a@b.c"}
            )
        )
        # WHERE ("active" = 1) AND (("age" > :age) OR ("email" = :email))
    """

    _where: ConditionTree
    _next_param: Callable[[str], str]
    _lower_subquery: Callable[[SubqueryLike], CompiledSQL]

    def where(self: _W, condition: str | Callable[[_W], Any], params: dict[str, Any] | None = None) -> _W:
        return self._add_where("AND", condition, params)

    def or_where(self: _W, condition: str | Callable[[_W], Any], params: dict[str, Any] | None = None) -> _W:
        return self._add_where("OR", condition, params)

    def where_null(self: _W, column: str) -> _W:
        column = column.strip()
        if column:
            self._where.add_leaf("AND", f"{column} IS NULL")
        return self

    def where_not_null(self: _W, column: str) -> _W:
        column = column.strip()
        if column:
            self._where.add_leaf("AND", f"{column} IS NOT NULL")
        return self

    # -- IN -------------------------------------------------------------

    def where_in(self: _W, column: str, values: Iterable[Any]) -> _W:
        return self._where_in("AND", column, values, negate=False)

    def or_where_in(self: _W, column: str, values: Iterable[Any]) -> _W:
        return self._where_in("OR", column, values, negate=False)

    def where_not_in(self: _W, column: str, values: Iterable[Any]) -> _W:
        return self._where_in("AND", column, values, negate=True)

    def or_where_not_in(self: _W, column: str, values: Iterable[Any]) -> _W:
        return self._where_in("OR", column, values, negate=True)

    # -- LIKE -----------------------------------------------------------

    def where_like(self: _W, column: str, pattern: str) -> _W:
        return self._where_like("AND", column, pattern, negate=False)

    def or_where_like(self: _W, column: str, pattern: str) -> _W:
        return self._where_like("OR", column, pattern, negate=False)

    def where_not_like(self: _W, column: str, pattern: str) -> _W:
        return self._where_like("AND", column, pattern, negate=True)

    def or_where_not_like(self: _W, column: str, pattern: str) -> _W:
        return self._where_like("OR", column, pattern, negate=True)

    # -- BETWEEN --------------------------------------------------------

    def where_between(self: _W, column: str, low: Any, high: Any) -> _W:
        return self._where_between("AND", column, low, high, negate=False)

    def or_where_between(self: _W, column: str, low: Any, high: Any) -> _W:
        return self._where_between("OR", column, low, high, negate=False)

    def where_not_between(self: _W, column: str, low: Any, high: Any) -> _W:
        return self._where_between("AND", column, low, high, negate=True)

    def or_where_not_between(self: _W, column: str, low: Any, high: Any) -> _W:
        return self._where_between("OR", column, low, high, negate=True)

    # -- IN (subquery) --------------------------------------------------

    def where_in_subquery(self: _W, column: str, subquery: SubqueryLike) -> _W:
        return self._where_in_subquery("AND", column, subquery, negate=False)

    def or_where_in_subquery(self: _W, column: str, subquery: SubqueryLike) -> _W:
        return self._where_in_subquery("OR", column, subquery, negate=False)

    def where_not_in_subquery(self: _W, column: str, subquery: SubqueryLike) -> _W:
        return self._where_in_subquery("AND", column, subquery, negate=True)

    def or_where_not_in_subquery(self: _W, column: str, subquery: SubqueryLike) -> _W:
        return self._where_in_subquery("OR", column, subquery, negate=True)

    def where_nodes(self) -> tuple[ConditionNode, ...]:
        """Snapshot of the WHERE tree, read by the compiler."""
        return self._where.nodes

    # -- internals ------------------------------------------------------

    def _add_where(self: _W, connector: str, condition: Any, params: dict[str, Any] | None) -> _W:
        if not isinstance(condition, str) and callable(condition):
            with self._where.group(connector):
                condition(self)
            return self
        self._where.add_leaf(connector, condition, params)
        return self

    def _where_in(self: _W, connector: str, column: str, values: Iterable[Any], negate: bool) -> _W:
        column = column.strip()
        if not column:
            return self
        values = list(values)
        if not values:
            # An empty IN matches nothing; an empty NOT IN matches everything.
            self._where.add_leaf(connector, "1 = 1" if negate else "1 = 0")
            return self

        params = {self._next_param("in"): value for value in values}
        placeholders = ", ".join(f":{name}" for name in params)
        operator = "NOT IN" if negate else "IN"
        self._where.add_leaf(connector, f"{column} {operator} ({placeholders})", params)
        return self

    def _where_like(self: _W, connector: str, column: str, pattern: str, negate: bool) -> _W:
        column = column.strip()
        if not column:
            return self
        name = self._next_param("like")
        operator = "NOT LIKE" if negate else "LIKE"
        self._where.add_leaf(connector, f"{column} {operator} :{name}", {name: pattern})
        return self

    def _where_between(self: _W, connector: str, column: str, low: Any, high: Any, negate: bool) -> _W:
        column = column.strip()
        if not column:
            return self
        first = self._next_param("between")
        second = self._next_param("between")
        operator = "NOT BETWEEN" if negate else "BETWEEN"
        self._where.add_leaf(
            connector,
            f"{column} {operator} :{first} AND :{second}",
            {first: low, second: high},
        )
        return self

    def _where_in_subquery(self: _W, connector: str, column: str, subquery: SubqueryLike, negate: bool) -> _W:
        column = column.strip()
        if not column:
            return self
        compiled = self._lower_subquery(subquery)
        if not compiled.sql.strip():
            return self
        operator = "NOT IN" if negate else "IN"
        self._where.add_leaf(
            connector, f"{column} {operator} ({compiled.sql.strip()})", compiled.params
        )
        return self


# ---------------------------------------------------------------------------
# HAVING
# ---------------------------------------------------------------------------


class HavingClauseMixin:
    """Fluent HAVING methods; grouping works exactly like ``where``."""

    _having: ConditionTree

    def having(self: _H, condition: str | Callable[[_H], Any], params: dict[str, Any] | None = None) -> _H:
        return self._add_having("AND", condition, params)

    def or_having(self: _H, condition: str | Callable[[_H], Any], params: dict[str, Any] | None = None) -> _H:
        return self._add_having("OR", condition, params)

    def having_nodes(self) -> tuple[ConditionNode, ...]:
        """Snapshot of the HAVING tree, read by the compiler."""
        return self._having.nodes

    def _add_having(self: _H, connector: str, condition: Any, params: dict[str, Any] | None) -> _H:
        if not isinstance(condition, str) and callable(condition):
            with self._having.group(connector):
                condition(self)
            return self
        self._having.add_leaf(connector, condition, params)
        return self
