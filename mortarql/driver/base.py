"""Driver abstraction: everything that differs between database engines.

A driver owns the dialect-specific pieces that are not part of statement
compilation proper: the quoting policy, the compiler instance, the mapping
of abstract column types, and the SQL used for transaction control.  The
:class:`~mortarql.connection.connection.Connection` never branches on the
dialect itself; it asks its driver.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from mortarql.compile.base import QueryCompiler
from mortarql.compile.quoting import Quoter
from mortarql.dialect import Dialect, IsolationLevel
from mortarql.errors import ConfigurationError

#: Abstract column kinds understood by :meth:`Driver.column_type`.
COLUMN_KINDS = (
    "big_integer",
    "integer",
    "boolean",
    "text",
    "string",
    "json",
    "datetime",
    "date",
    "time",
    "timestamp",
)

DEFAULT_STRING_LENGTH = 255


class Driver(ABC):
    """Abstract base for engine drivers.

    Subclasses set :attr:`dialect` and :attr:`column_types` and implement
    the quoter / compiler factories and :meth:`isolation_statement`.
    """

    dialect: ClassVar[Dialect]
    column_types: ClassVar[dict[str, str]]

    @property
    def name(self) -> str:
        return self.dialect.value

    @abstractmethod
    def quoter(self) -> Quoter:
        """Return a new identifier quoter for this dialect."""

    @abstractmethod
    def compiler(self) -> QueryCompiler:
        """Return a new statement compiler for this dialect."""

    # ------------------------------------------------------------------
    # Column types
    # ------------------------------------------------------------------

    def column_type(self, kind: str, length: int | None = None) -> str:
        """Map an abstract column kind to this dialect's type name.

        Args:
            kind: One of :data:`COLUMN_KINDS`.
            length: Length for ``string`` columns where the dialect uses
                ``VARCHAR``; defaults to 255.

        Raises:
            ConfigurationError: If ``kind`` is not supported.
        """
        sql_type = self.column_types.get(kind)
        if sql_type is None:
            raise ConfigurationError(
                f"Unsupported column type '{kind}' for {self.name}.",
                setting="column_type",
            )
        if sql_type == "VARCHAR":
            return f"VARCHAR({length or DEFAULT_STRING_LENGTH})"
        return sql_type

    def create_table_suffix(
        self,
        engine: str | None = None,
        charset: str | None = None,
        collation: str | None = None,
        comment: str | None = None,
    ) -> str:
        """Return table options appended to ``CREATE TABLE (…)``.

        Most engines have none.
        """
        return ""

    # ------------------------------------------------------------------
    # Transaction control
    # ------------------------------------------------------------------

    begin_statement = "BEGIN"
    commit_statement = "COMMIT"
    rollback_statement = "ROLLBACK"

    #: Whether the isolation statement must run before ``begin_statement``.
    isolation_before_begin = False

    @abstractmethod
    def isolation_statement(self, isolation_level: IsolationLevel) -> str:
        """Return the statement that applies ``isolation_level``."""

    def begin_statements(self, isolation_level: IsolationLevel | None = None) -> list[str]:
        """Statements that open a transaction, applying ``isolation_level``."""
        if isolation_level is None:
            return [self.begin_statement]
        isolation = self.isolation_statement(isolation_level)
        if self.isolation_before_begin:
            return [isolation, self.begin_statement]
        return [self.begin_statement, isolation]

    @staticmethod
    def savepoint_name(depth: int) -> str:
        return f"tx_{depth}"

    def savepoint_statement(self, depth: int) -> str:
        return f"SAVEPOINT {self.savepoint_name(depth)}"

    def release_savepoint_statement(self, depth: int) -> str:
        return f"RELEASE SAVEPOINT {self.savepoint_name(depth)}"

    def rollback_to_savepoint_statement(self, depth: int) -> str:
        return f"ROLLBACK TO SAVEPOINT {self.savepoint_name(depth)}"

    def last_insert_id_statement(self, sequence: str | None = None) -> str | None:
        """SQL returning the last generated id, or ``None`` when the DB-API
        cursor's ``lastrowid`` is authoritative."""
        return None
