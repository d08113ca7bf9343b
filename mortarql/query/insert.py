"""INSERT builder."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mortarql.compile.base import CompiledSQL
from mortarql.query.base import BaseQueryBuilder

if TYPE_CHECKING:
    from mortarql.connection.base import ConnectionInterface


class InsertQueryBuilder(BaseQueryBuilder):
    """Builds ``INSERT INTO <table> (…) VALUES (…)`` for one row.

    Values are bound as ``:v_1``, ``:v_2``, … in column order.  An empty
    row inserts a record made of column defaults.
    """

    def __init__(
        self,
        connection: ConnectionInterface,
        table: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(connection)
        self._table = self._apply_prefix(table)
        self._data: dict[str, Any] = dict(data or {})

    def values(self, data: dict[str, Any]) -> InsertQueryBuilder:
        """Replace the row to insert."""
        self._data = dict(data)
        return self

    @property
    def table(self) -> str:
        return self._table

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._data)

    def compile(self) -> CompiledSQL:
        return self._connection.compiler.compile_insert(self)

    def execute(self) -> int:
        """Run the insert and return the affected row count."""
        compiled = self.compile()
        return self._connection.execute(compiled.sql, compiled.params)
