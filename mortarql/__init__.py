"""mortarQL – dialect-aware query building and transactional execution.

Public API
----------
``connect`` / ``create_connection``
    Open a :class:`Connection` from a SQLAlchemy URL or a
    :class:`DatabaseConfig`.

``Connection.query()``
    Returns a :class:`QueryFactory` with ``select``, ``insert``, ``update``,
    ``delete`` and ``raw``.

``Connection.transaction(fn, isolation_level=None)``
    Runs ``fn`` in a transaction; nested calls become savepoints.

``ConnectionManager``
    Caches named connections and picks the read or write side of a
    connection group.

Example::

    import mortarql

    with mortarql.connect("sqlite://", prefix="app_") as db:
        q = db.query()
        db.transaction(lambda c: q.insert("users", {"name": "Ann"}).execute())
        page = q.select().from_("users").order_by("id").paginate(1, 20)

Extensibility
-------------
New drivers can be registered via::

    from mortarql.driver.registry import DriverFactory

    @DriverFactory.register("sqlite")
    class MySQLiteDriver(SQLiteDriver):
        ...

After registration, ``create_connection`` picks it up automatically for any
URL of that dialect.
"""
from __future__ import annotations

from mortarql.compile.base import CompiledSQL, QueryCompiler
from mortarql.compile.mariadb import MariaDBCompiler
from mortarql.compile.postgres import PostgresCompiler
from mortarql.compile.quoting import AnsiQuoter, BacktickQuoter, Quoter
from mortarql.compile.sqlite import SQLiteCompiler
from mortarql.config import (
    ConnectionConfig,
    ConnectionGroupConfig,
    DatabaseConfig,
    connect,
    create_connection,
)
from mortarql.connection.base import ConnectionInterface
from mortarql.connection.connection import Connection
from mortarql.dialect import Dialect, IsolationLevel
from mortarql.driver.base import Driver
from mortarql.driver.mariadb import MariaDBDriver
from mortarql.driver.postgres import PostgresDriver
from mortarql.driver.registry import DriverFactory
from mortarql.driver.sqlite import SQLiteDriver
from mortarql.manager import ConnectionManager
from mortarql.errors import (
    ConfigurationError,
    MortarQLError,
    QueryExecutionError,
    ReadOnlyViolation,
)
from mortarql.query.delete import DeleteQueryBuilder
from mortarql.query.expression import Expression
from mortarql.query.factory import QueryFactory
from mortarql.query.insert import InsertQueryBuilder
from mortarql.query.pagination import Page
from mortarql.query.select import SelectQueryBuilder
from mortarql.query.update import UpdateQueryBuilder
from mortarql.validate import DatabaseValidator

# ---------------------------------------------------------------------------
# Register built-in drivers with DriverFactory
# ---------------------------------------------------------------------------

DriverFactory.register_class(Dialect.SQLITE, SQLiteDriver)
DriverFactory.register_class(Dialect.POSTGRES, PostgresDriver)
DriverFactory.register_class(Dialect.MARIADB, MariaDBDriver)

__all__ = [
    # Entry points
    "connect",
    "create_connection",
    "ConnectionConfig",
    "ConnectionGroupConfig",
    "DatabaseConfig",
    "ConnectionManager",
    # Connections
    "Connection",
    "ConnectionInterface",
    "Dialect",
    "IsolationLevel",
    # Drivers
    "Driver",
    "DriverFactory",
    "MariaDBDriver",
    "PostgresDriver",
    "SQLiteDriver",
    # Compilation
    "CompiledSQL",
    "QueryCompiler",
    "MariaDBCompiler",
    "PostgresCompiler",
    "SQLiteCompiler",
    "Quoter",
    "AnsiQuoter",
    "BacktickQuoter",
    # Builders
    "Expression",
    "QueryFactory",
    "SelectQueryBuilder",
    "InsertQueryBuilder",
    "UpdateQueryBuilder",
    "DeleteQueryBuilder",
    "Page",
    # Validation
    "DatabaseValidator",
    # Errors
    "MortarQLError",
    "ConfigurationError",
    "QueryExecutionError",
    "ReadOnlyViolation",
]
