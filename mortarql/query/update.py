"""UPDATE builder."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mortarql.compile.base import CompiledSQL
from mortarql.query.base import BaseQueryBuilder, WhereClauseMixin
from mortarql.query.clauses import ConditionTree

if TYPE_CHECKING:
    from mortarql.connection.base import ConnectionInterface


class UpdateQueryBuilder(BaseQueryBuilder, WhereClauseMixin):
    """Builds ``UPDATE <table> SET col = :v_n, … [WHERE …]``.

    Example::

        db.query().update("users", {"name": "Ann"}).where("id = :id", {"id": 7}).execute()
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
        self._where = ConditionTree()

    def set(self, data: dict[str, Any]) -> UpdateQueryBuilder:
        """Replace the column assignments."""
        self._data = dict(data)
        return self

    @property
    def table(self) -> str:
        return self._table

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._data)

    def compile(self) -> CompiledSQL:
        return self._connection.compiler.compile_update(self)

    def execute(self) -> int:
        compiled = self.compile()
        return self._connection.execute(compiled.sql, compiled.params)
