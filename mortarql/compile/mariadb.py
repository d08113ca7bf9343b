"""MariaDB / MySQL dialect compiler."""
from __future__ import annotations

from mortarql.compile.quoting import BacktickQuoter, Quoter
from mortarql.compile.standard import StandardQueryCompiler


class MariaDBCompiler(StandardQueryCompiler):
    """Compiles builders to MariaDB-flavoured parameterized SQL.

    Identifiers are quoted with backticks (`` ` ``) rather than
    double-quotes, since ANSI quoting is off unless ``sql_mode`` enables it.

    Note: MariaDB has no ``INSERT … DEFAULT VALUES``; an insert without
    columns is rendered as ``INSERT INTO t () VALUES ()``.
    """

    def __init__(self, quoter: Quoter | None = None) -> None:
        super().__init__(quoter or BacktickQuoter())

    @property
    def dialect_name(self) -> str:
        return "mariadb"

    def insert_default_values(self, table_sql: str) -> str:
        return f"INSERT INTO {table_sql} () VALUES ()"
