"""SQLite driver."""
from __future__ import annotations

from mortarql.compile.quoting import AnsiQuoter, Quoter
from mortarql.compile.sqlite import SQLiteCompiler
from mortarql.dialect import Dialect, IsolationLevel
from mortarql.driver.base import Driver


class SQLiteDriver(Driver):
    """SQLite: ANSI quoting, affinity-based column types.

    SQLite has no ``SET TRANSACTION``; the only isolation knob is the
    ``read_uncommitted`` pragma, which matters for shared-cache
    connections.
    """

    dialect = Dialect.SQLITE
    column_types = {
        "big_integer": "INTEGER",
        "integer": "INTEGER",
        "boolean": "INTEGER",
        "text": "TEXT",
        "string": "TEXT",
        "json": "TEXT",
        "datetime": "TEXT",
        "date": "TEXT",
        "time": "TEXT",
        "timestamp": "TEXT",
    }

    def quoter(self) -> Quoter:
        return AnsiQuoter()

    def compiler(self) -> SQLiteCompiler:
        return SQLiteCompiler(self.quoter())

    def isolation_statement(self, isolation_level: IsolationLevel) -> str:
        flag = 1 if isolation_level is IsolationLevel.READ_UNCOMMITTED else 0
        return f"PRAGMA read_uncommitted = {flag}"
