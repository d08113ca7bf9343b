"""SQLite dialect compiler."""
from __future__ import annotations

from mortarql.compile.quoting import AnsiQuoter, Quoter
from mortarql.compile.standard import StandardQueryCompiler


class SQLiteCompiler(StandardQueryCompiler):
    """Compiles builders to SQLite-flavoured parameterized SQL.

    Identifiers are quoted with ANSI double quotes.  ``:name`` placeholders
    are understood natively by ``sqlite3``.  UNION branches are not
    parenthesised because SQLite rejects that form.
    """

    parenthesize_union_branches = False

    def __init__(self, quoter: Quoter | None = None) -> None:
        super().__init__(quoter or AnsiQuoter())

    @property
    def dialect_name(self) -> str:
        return "sqlite"
