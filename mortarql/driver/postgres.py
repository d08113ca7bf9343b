"""PostgreSQL driver."""
from __future__ import annotations

from mortarql.compile.postgres import PostgresCompiler
from mortarql.compile.quoting import AnsiQuoter, Quoter
from mortarql.dialect import Dialect, IsolationLevel
from mortarql.driver.base import Driver


class PostgresDriver(Driver):
    """PostgreSQL: ANSI quoting, ``SET TRANSACTION`` after ``BEGIN``."""

    dialect = Dialect.POSTGRES
    column_types = {
        "big_integer": "BIGINT",
        "integer": "INTEGER",
        "boolean": "BOOLEAN",
        "text": "TEXT",
        "string": "VARCHAR",
        "json": "JSONB",
        "datetime": "TIMESTAMP",
        "date": "DATE",
        "time": "TIME",
        "timestamp": "TIMESTAMP",
    }

    def quoter(self) -> Quoter:
        return AnsiQuoter()

    def compiler(self) -> PostgresCompiler:
        return PostgresCompiler(self.quoter())

    def isolation_statement(self, isolation_level: IsolationLevel) -> str:
        return f"SET TRANSACTION ISOLATION LEVEL {isolation_level.value}"

    def last_insert_id_statement(self, sequence: str | None = None) -> str | None:
        # psycopg cursors report no usable lastrowid.
        if sequence:
            return "SELECT CURRVAL(:sequence)"
        return "SELECT LASTVAL()"
