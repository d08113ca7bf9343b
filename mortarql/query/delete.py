"""DELETE builder."""
from __future__ import annotations

from typing import TYPE_CHECKING

from mortarql.compile.base import CompiledSQL
from mortarql.query.base import BaseQueryBuilder, WhereClauseMixin
from mortarql.query.clauses import ConditionTree

if TYPE_CHECKING:
    from mortarql.connection.base import ConnectionInterface


class DeleteQueryBuilder(BaseQueryBuilder, WhereClauseMixin):
    """Builds ``DELETE FROM <table> [WHERE …]``.

    Without conditions every row of the table is deleted.
    """

    def __init__(self, connection: ConnectionInterface, table: str) -> None:
        super().__init__(connection)
        self._table = self._apply_prefix(table)
        self._where = ConditionTree()

    @property
    def table(self) -> str:
        return self._table

    def compile(self) -> CompiledSQL:
        return self._connection.compiler.compile_delete(self)

    def execute(self) -> int:
        compiled = self.compile()
        return self._connection.execute(compiled.sql, compiled.params)
