"""Entry point for building queries on a connection."""
from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from mortarql.query.delete import DeleteQueryBuilder
from mortarql.query.expression import Expression
from mortarql.query.insert import InsertQueryBuilder
from mortarql.query.pagination import DEFAULT_PER_PAGE
from mortarql.query.select import SelectQueryBuilder
from mortarql.query.update import UpdateQueryBuilder

if TYPE_CHECKING:
    from mortarql.connection.base import ConnectionInterface


class QueryFactory:
    """Creates builders bound to one connection.

    Args:
        connection: Connection the builders compile and execute on.
        default_per_page: Page size used by ``paginate`` when none is given.
    """

    def __init__(
        self,
        connection: ConnectionInterface,
        default_per_page: int = DEFAULT_PER_PAGE,
    ) -> None:
        self._connection = connection
        self.default_per_page = default_per_page

    def raw(self, sql: str) -> Expression:
        return Expression(sql)

    def select(self, columns: str | Iterable[str] = "*") -> SelectQueryBuilder:
        return SelectQueryBuilder(self._connection, columns, self.default_per_page)

    def insert(self, table: str, data: dict[str, Any] | None = None) -> InsertQueryBuilder:
        return InsertQueryBuilder(self._connection, table, data)

    def update(self, table: str, data: dict[str, Any] | None = None) -> UpdateQueryBuilder:
        return UpdateQueryBuilder(self._connection, table, data)

    def delete(self, table: str) -> DeleteQueryBuilder:
        return DeleteQueryBuilder(self._connection, table)
