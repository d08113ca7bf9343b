"""MariaDB / MySQL driver."""
from __future__ import annotations

from mortarql.compile.mariadb import MariaDBCompiler
from mortarql.compile.quoting import BacktickQuoter, Quoter
from mortarql.dialect import Dialect, IsolationLevel
from mortarql.driver.base import Driver


class MariaDBDriver(Driver):
    """MariaDB / MySQL: backtick quoting and table options.

    The isolation level is set immediately *before* ``START TRANSACTION``:
    without ``SESSION`` / ``GLOBAL``, ``SET TRANSACTION`` applies to the
    next transaction only, and the server rejects it while one is running.
    """

    dialect = Dialect.MARIADB
    begin_statement = "START TRANSACTION"
    isolation_before_begin = True
    column_types = {
        "big_integer": "BIGINT",
        "integer": "INT",
        "boolean": "TINYINT(1)",
        "text": "TEXT",
        "string": "VARCHAR",
        "json": "JSON",
        "datetime": "DATETIME",
        "date": "DATE",
        "time": "TIME",
        "timestamp": "TIMESTAMP",
    }

    def quoter(self) -> Quoter:
        return BacktickQuoter()

    def compiler(self) -> MariaDBCompiler:
        return MariaDBCompiler(self.quoter())

    def create_table_suffix(
        self,
        engine: str | None = None,
        charset: str | None = None,
        collation: str | None = None,
        comment: str | None = None,
    ) -> str:
        parts: list[str] = []
        if engine:
            parts.append(f"ENGINE={engine}")
        if charset:
            parts.append(f"DEFAULT CHARSET={charset}")
        if collation:
            parts.append(f"COLLATE={collation}")
        if comment:
            escaped = comment.replace("'", "''")
            parts.append(f"COMMENT='{escaped}'")
        return " ".join(parts)

    def isolation_statement(self, isolation_level: IsolationLevel) -> str:
        return f"SET TRANSACTION ISOLATION LEVEL {isolation_level.value}"
