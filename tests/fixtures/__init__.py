"""Test fixtures: a recording connection and a sample SQLite schema."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from mortarql.compile.base import QueryCompiler
from mortarql.connection.base import ConnectionInterface
from mortarql.dialect import IsolationLevel
from mortarql.driver.base import Driver
from mortarql.errors import ReadOnlyViolation

T = TypeVar("T")

SAMPLE_DDL = [
    """
    CREATE TABLE app_users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT,
        age INTEGER,
        active INTEGER NOT NULL DEFAULT 1,
        created_datetime TEXT
    )
    """,
    """
    CREATE TABLE app_orders (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        total REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'new'
    )
    """,
]

SAMPLE_USERS = [
    {"name": "Ann", "email": "ann@example.com", "age": 31, "active": 1,
     "created_datetime": "2024-01-01 09:00:00"},
    {"name": "Bob", "email": "bob@example.com", "age": 25, "active": 1,
     "created_datetime": "2024-02-01 09:00:00"},
    {"name": "Cid", "email": None, "age": 47, "active": 0,
     "created_datetime": "2024-03-01 09:00:00"},
    {"name": "Dee", "email": "dee@example.org", "age": 38, "active": 1,
     "created_datetime": "2024-04-01 09:00:00"},
]

SAMPLE_ORDERS = [
    {"user_id": 1, "total": 10.5, "status": "paid"},
    {"user_id": 1, "total": 20.0, "status": "new"},
    {"user_id": 2, "total": 5.25, "status": "paid"},
    {"user_id": 4, "total": 100.0, "status": "paid"},
]


class SpyConnection(ConnectionInterface):
    """A connection that records SQL instead of executing it.

    ``rows`` is returned by every fetch; ``rowcount`` by every execute.

    Args:
        driver: Driver whose compiler and quoting are used.
        prefix: Table prefix.
        read_only: Reject ``execute`` and ``transaction``.
        rows: Canned result rows.
    """

    def __init__(
        self,
        driver: Driver,
        prefix: str = "",
        read_only: bool = False,
        rows: list[dict[str, Any]] | None = None,
        rowcount: int = 1,
    ) -> None:
        self._driver = driver
        self._compiler = driver.compiler()
        self._prefix = prefix
        self._read_only = read_only
        self.rows: list[dict[str, Any]] = list(rows or [])
        self.rowcount = rowcount
        self.calls: list[tuple[str, Any]] = []

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def compiler(self) -> QueryCompiler:
        return self._compiler

    @property
    def last_sql(self) -> str:
        return self.calls[-1][0]

    @property
    def last_params(self) -> Any:
        return self.calls[-1][1]

    def fetch_all(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        self.calls.append((sql, params))
        return [dict(r) for r in self.rows]

    def fetch_one(self, sql: str, params: Any = None) -> dict[str, Any] | None:
        self.calls.append((sql, params))
        return dict(self.rows[0]) if self.rows else None

    def execute(self, sql: str, params: Any = None) -> int:
        if self._read_only:
            raise ReadOnlyViolation("This connection is read-only.")
        self.calls.append((sql, params))
        return self.rowcount

    def transaction(
        self,
        fn: Callable[[ConnectionInterface], T],
        isolation_level: IsolationLevel | None = None,
    ) -> T:
        if self._read_only:
            raise ReadOnlyViolation("Transactions are not allowed for read-only connections.")
        return fn(self)

    def last_insert_id(self, sequence: str | None = None) -> str:
        return "0"


def load_sample_data(db: ConnectionInterface) -> None:
    """Create the sample tables on ``db`` and fill them.

    The DDL uses the ``app_`` prefix, so ``db`` must be opened with
    ``prefix="app_"``.
    """
    for statement in SAMPLE_DDL:
        db.execute(statement)
    q = db.query()
    for user in SAMPLE_USERS:
        q.insert("users", user).execute()
    for order in SAMPLE_ORDERS:
        q.insert("orders", order).execute()
