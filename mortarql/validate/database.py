"""Row existence and uniqueness checks for input validation.

``DatabaseValidator`` answers the two questions form and API validators ask
of a database: does a row matching these criteria exist, and would a value
be unique.  Both run ``SELECT 1 FROM <table> WHERE … LIMIT 1`` through the
SELECT builder, so the table prefix and quoting of the target connection
apply.

Criteria map column names to expected values:

* a list, tuple or set becomes ``column IN (…)``;
* ``None`` becomes ``column IS NULL``;
* anything else becomes ``column = :_p<n>``.

Example::

    validator = DatabaseValidator(manager)
    validator.exists("users", {"id": 7})
    validator.unique("users", {"email": "ann@example.com"}, ignore_column="id", ignore_value=7)
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mortarql.manager import ConnectionManager
from mortarql.query.select import SelectQueryBuilder

_LIST_TYPES = (list, tuple, set, frozenset)


class DatabaseValidator:
    """Existence and uniqueness lookups over managed connections.

    Args:
        connections: Manager supplying the connection to query.
    """

    def __init__(self, connections: ConnectionManager) -> None:
        self._connections = connections

    def exists(
        self, table: str, criteria: Mapping[str, Any], connection: str | None = None
    ) -> bool:
        """Return ``True`` if at least one row of ``table`` matches ``criteria``."""
        query = self._base_query(table, connection)
        _apply_criteria(query, criteria)
        return query.fetch_one() is not None

    def unique(
        self,
        table: str,
        criteria: Mapping[str, Any],
        connection: str | None = None,
        ignore_column: str | None = None,
        ignore_value: Any = None,
    ) -> bool:
        """Return ``True`` if no row of ``table`` matches ``criteria``.

        Args:
            table: Unprefixed table name.
            criteria: Column to value mapping; see the module docstring.
            connection: Connection name; ``"default"`` when omitted.
            ignore_column: Column identifying a row to leave out, usually
                the primary key of the record being updated.
            ignore_value: Value of ``ignore_column`` to leave out.  Both
                must be given for the exclusion to apply.
        """
        query = self._base_query(table, connection)
        _apply_criteria(query, criteria)
        if ignore_column is not None and ignore_value is not None:
            query.where(f"{ignore_column} != :_ignore", {"_ignore": ignore_value})
        return query.fetch_one() is None

    def _base_query(self, table: str, connection: str | None) -> SelectQueryBuilder:
        conn = self._connections.connection(connection or "default")
        return conn.query().select("1").from_(table).limit(1)


def _apply_criteria(query: SelectQueryBuilder, criteria: Mapping[str, Any]) -> None:
    index = 0
    for column, value in criteria.items():
        if isinstance(value, _LIST_TYPES):
            query.where_in(column, value)
        elif value is None:
            query.where_null(column)
        else:
            index += 1
            name = f"_p{index}"
            query.where(f"{column} = :{name}", {name: value})
