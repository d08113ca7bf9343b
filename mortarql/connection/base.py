"""The connection contract used by builders and application code."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from mortarql.dialect import IsolationLevel

if TYPE_CHECKING:
    from mortarql.compile.base import QueryCompiler
    from mortarql.compile.quoting import Quoter
    from mortarql.driver.base import Driver
    from mortarql.query.factory import QueryFactory

T = TypeVar("T")


class ConnectionInterface(ABC):
    """What a builder needs from a connection.

    Implementations execute SQL with ``:name`` placeholders (or the
    driver's positional paramstyle for positional params), own the table
    prefix and expose the dialect's driver, quoter and compiler.
    """

    @abstractmethod
    def fetch_all(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        """Run a query and return every row as a column → value dict."""

    @abstractmethod
    def fetch_one(self, sql: str, params: Any = None) -> dict[str, Any] | None:
        """Run a query and return its first row, or ``None``."""

    @abstractmethod
    def execute(self, sql: str, params: Any = None) -> int:
        """Run a write statement and return the affected row count.

        Raises:
            ReadOnlyViolation: On a read-only connection.
        """

    @abstractmethod
    def transaction(
        self,
        fn: Callable[[ConnectionInterface], T],
        isolation_level: IsolationLevel | None = None,
    ) -> T:
        """Run ``fn(self)`` in a transaction (a savepoint when nested)."""

    @abstractmethod
    def last_insert_id(self, sequence: str | None = None) -> str:
        """Return the id generated by the last insert."""

    @property
    @abstractmethod
    def is_read_only(self) -> bool: ...

    @property
    @abstractmethod
    def prefix(self) -> str: ...

    @property
    @abstractmethod
    def driver(self) -> Driver: ...

    @property
    @abstractmethod
    def compiler(self) -> QueryCompiler: ...

    @property
    def quoter(self) -> Quoter:
        """The quoter of :attr:`compiler`, so one statement uses one policy."""
        return self.compiler.quoter

    def table(self, name: str) -> str:
        """Return ``name`` with the connection's table prefix applied."""
        return f"{self.prefix}{name}"

    def query(self) -> QueryFactory:
        """Return a :class:`~mortarql.query.factory.QueryFactory` for this connection."""
        from mortarql.query.factory import QueryFactory

        return QueryFactory(self)
