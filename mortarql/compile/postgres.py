"""PostgreSQL dialect compiler."""
from __future__ import annotations

from mortarql.compile.quoting import AnsiQuoter, Quoter
from mortarql.compile.standard import StandardQueryCompiler


class PostgresCompiler(StandardQueryCompiler):
    """Compiles builders to PostgreSQL-flavoured parameterized SQL.

    Identifiers are quoted with ANSI double quotes.  The ``:name``
    placeholders are rewritten to the driver's paramstyle (``%(name)s`` for
    ``psycopg``) by SQLAlchemy's ``text()`` construct at execution time.
    """

    def __init__(self, quoter: Quoter | None = None) -> None:
        super().__init__(quoter or AnsiQuoter())

    @property
    def dialect_name(self) -> str:
        return "postgres"
