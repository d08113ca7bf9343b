"""Clause-level SQL builders.

Each class handles exactly one SQL clause and receives the dialect
:class:`~mortarql.compile.quoting.Quoter` of the compiler that owns it, so
one compiled statement never mixes quoting policies.

Classes
-------
SelectClauseBuilder      — ``SELECT [DISTINCT] <columns>``
FromClauseBuilder        — ``FROM <table | raw source>``
JoinClauseBuilder        — ``<type> JOIN <target> ON <fragment>``
OrderByClauseBuilder     — ``ORDER BY <column> <direction>, …``
PaginationClauseBuilder  — ``LIMIT n`` / ``OFFSET m``
UnionClauseBuilder       — ``UNION [ALL] (<compiled branch>)``
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from mortarql.compile.base import CompiledSQL, bind_params
from mortarql.compile.conditions import ConditionQuoter
from mortarql.compile.quoting import Quoter
from mortarql.query.clauses import AGGREGATE_ALIAS, JoinClause, OrderByItem, UnionClause

_NUMBER = re.compile(r"^[0-9]+(?:\.[0-9]+)?$")
_AS = re.compile(r"\s+as\s+", re.IGNORECASE)


def _has_parens(sql: str) -> bool:
    return "(" in sql or ")" in sql


class SelectClauseBuilder:
    """Builds the ``SELECT [DISTINCT] …`` clause."""

    def __init__(self, quoter: Quoter) -> None:
        self._quoter = quoter

    def build(self, columns: Iterable[str], distinct: bool = False) -> str:
        rendered = [c for c in (self.quote_column(col) for col in columns) if c]
        prefix = "SELECT DISTINCT" if distinct else "SELECT"
        return f"{prefix} {', '.join(rendered or ['*'])}"

    def quote_column(self, column: str) -> str:
        """Quote one projection entry.

        * ``*`` and numeric literals are kept.
        * ``expr AS alias`` is split at the last ``AS``; the left side is
          kept verbatim when it contains parentheses and quoted otherwise,
          the alias is always quoted (except the aggregate sentinel).
        * Anything else with parentheses is treated as an expression and
          kept verbatim; plain names are dotted-quoted.
        """
        column = column.strip()
        if not column or column == "*" or _NUMBER.match(column):
            return column

        matches = list(_AS.finditer(column))
        # An AS inside a trailing subquery is not a projection alias.
        if matches and not _has_parens(column[matches[-1].end():]):
            last = matches[-1]
            left = column[: last.start()].strip()
            alias = column[last.end():].strip()
            if not left:
                return column
            left_sql = left if _has_parens(left) else self.quote_column(left)
            if not alias:
                return left_sql
            if alias == AGGREGATE_ALIAS:
                return f"{left_sql} AS {alias}"
            return f"{left_sql} AS {self._quoter.alias(alias)}"

        if _has_parens(column):
            return column
        return self._quoter.dotted(column)


class FromClauseBuilder:
    """Builds the ``FROM …`` fragment.

    Raw sources (expressions and compiled subqueries) are emitted verbatim;
    table names go through ``table_with_optional_alias``.
    """

    def __init__(self, quoter: Quoter) -> None:
        self._quoter = quoter

    def build(self, source: str | None, raw: bool = False) -> str:
        if not source or not source.strip():
            return ""
        source = source.strip()
        body = source if raw else self._quoter.table_with_optional_alias(source)
        return f"FROM {body}"


class JoinClauseBuilder:
    """Builds a single ``<type> JOIN … ON …`` fragment."""

    def __init__(self, quoter: Quoter, condition_quoter: ConditionQuoter) -> None:
        self._quoter = quoter
        self._cq = condition_quoter

    def build(self, join: JoinClause) -> str:
        target = self.target_sql(join.target, raw=join.raw)
        return f"{join.type} JOIN {target} ON {self._cq.quote(join.on)}"

    def target_sql(self, target: str, raw: bool = False) -> str:
        """Render a JOIN target.

        Raw targets, subqueries and anything containing parentheses pass
        through.  Everything else is treated as ``table [alias]``.
        """
        target = target.strip()
        if not target or raw or _has_parens(target):
            return target
        return self._quoter.table_with_optional_alias(target)


class OrderByClauseBuilder:
    """Builds the ``ORDER BY …`` clause."""

    def __init__(self, quoter: Quoter) -> None:
        self._quoter = quoter

    def build(self, items: Iterable[OrderByItem]) -> str:
        parts = [
            f"{self.quote_expr(item.column)} {item.direction}"
            for item in items
            if item.column.strip()
        ]
        return f"ORDER BY {', '.join(parts)}" if parts else ""

    def quote_expr(self, expr: str) -> str:
        expr = expr.strip()
        if not expr or _has_parens(expr):
            return expr
        return self._quoter.dotted(expr)


class PaginationClauseBuilder:
    """Builds ``LIMIT`` / ``OFFSET``; values are already clamped by the builder."""

    def build(self, limit: int | None, offset: int | None) -> str:
        parts: list[str] = []
        if limit is not None:
            parts.append(f"LIMIT {int(limit)}")
        if offset is not None:
            parts.append(f"OFFSET {int(offset)}")
        return " ".join(parts)


class UnionClauseBuilder:
    """Appends pre-compiled UNION branches.

    Branch parenthesisation is the one place where compiled output differs
    between dialects beyond identifier quoting: SQLite rejects parenthesised
    operands of a compound SELECT, so its compiler appends branches bare.
    Clause order and params are the same either way.

    Args:
        parenthesize: Wrap each branch in parentheses.
    """

    def __init__(self, parenthesize: bool = True) -> None:
        self._parenthesize = parenthesize

    def build(self, unions: Iterable[UnionClause]) -> CompiledSQL:
        parts: list[str] = []
        params: dict[str, Any] = {}
        for union in unions:
            branch = f"({union.sql})" if self._parenthesize else union.sql
            parts.append(f"{union.type} {branch}")
            bind_params(params, union.params)
        return CompiledSQL(sql=" ".join(parts), params=params)
