"""SQLAlchemy-backed connection with nested transaction bookkeeping.

Statements are executed through SQLAlchemy Core.  The underlying
SQLAlchemy connection runs in ``AUTOCOMMIT`` mode, so no transaction is
opened implicitly; transaction control SQL comes from the driver and is
issued by the depth state machine below.

Transaction depth
-----------------
* ``begin`` at depth 0 opens a real transaction (with the optional isolation
  level); at depth ``n >= 1`` it creates savepoint ``tx_<n+1>``.
* ``commit`` / ``rollback`` at depth 1 end the real transaction; deeper
  levels release / roll back to their own savepoint.
* ``commit`` / ``rollback`` with nothing open log a warning, reset the depth
  to 0 and return ``False``.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Connection as SAConnection
from sqlalchemy.engine import CursorResult, Engine
from sqlalchemy.exc import StatementError

from mortarql.compile.base import QueryCompiler
from mortarql.connection.base import ConnectionInterface
from mortarql.connection.params import (
    BoundParams,
    normalize_params,
    param_keys,
    stringify_params,
)
from mortarql.dialect import IsolationLevel
from mortarql.driver.base import Driver
from mortarql.errors import QueryExecutionError, ReadOnlyViolation
from mortarql.query.pagination import DEFAULT_PER_PAGE

if TYPE_CHECKING:
    from mortarql.query.factory import QueryFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _error_code(orig: BaseException | None) -> str | int | None:
    """Best-effort driver error code (SQLite name, SQLSTATE, or MySQL errno)."""
    if orig is None:
        return None
    for attr in ("sqlite_errorname", "sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return code
    args = getattr(orig, "args", ())
    if args and isinstance(args[0], int):
        return args[0]
    return None


class Connection(ConnectionInterface):
    """A database connection bound to one driver.

    Args:
        sa_connection: An open SQLAlchemy connection.  It is switched to
            ``AUTOCOMMIT``.
        driver: Driver of the connection's dialect.
        prefix: Table prefix applied by the builders.
        read_only: Reject writes and transactions.
        default_per_page: Page size for ``paginate`` when none is given.
        engine: Engine to dispose of on :meth:`close`, when the connection
            owns it.

    Example::

        with Connection(engine.connect(), SQLiteDriver()) as db:
            db.transaction(lambda c: c.query().insert("users", {"name": "Ann"}).execute())
    """

    def __init__(
        self,
        sa_connection: SAConnection,
        driver: Driver,
        prefix: str = "",
        read_only: bool = False,
        default_per_page: int = DEFAULT_PER_PAGE,
        engine: Engine | None = None,
    ) -> None:
        self._conn = sa_connection.execution_options(isolation_level="AUTOCOMMIT")
        self._driver = driver
        self._compiler = driver.compiler()
        self._prefix = prefix
        self._read_only = read_only
        self._default_per_page = default_per_page
        self._engine = engine
        self._depth = 0
        self._in_transaction = False
        self._last_row_id: Any = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def is_read_only(self) -> bool:
        return self._read_only

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def compiler(self) -> QueryCompiler:
        return self._compiler

    @property
    def sa_connection(self) -> SAConnection:
        """The wrapped SQLAlchemy connection."""
        return self._conn

    @property
    def transaction_depth(self) -> int:
        return self._depth

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def query(self) -> QueryFactory:
        from mortarql.query.factory import QueryFactory

        return QueryFactory(self, self._default_per_page)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def fetch_all(self, sql: str, params: Any = None) -> list[dict[str, Any]]:
        result = self._run(sql, params)
        if not result.returns_rows:
            return []
        return [dict(row) for row in result.mappings()]

    def fetch_one(self, sql: str, params: Any = None) -> dict[str, Any] | None:
        result = self._run(sql, params)
        if not result.returns_rows:
            return None
        row = result.mappings().first()
        return None if row is None else dict(row)

    def execute(self, sql: str, params: Any = None) -> int:
        self._ensure_writable("This connection is read-only.")
        result = self._run(sql, params)
        if self._driver.last_insert_id_statement() is None:
            self._last_row_id = result.lastrowid
        return result.rowcount

    def last_insert_id(self, sequence: str | None = None) -> str:
        """Return the id generated by the last insert as a string.

        Returns ``"0"`` when no id is known.
        """
        statement = self._driver.last_insert_id_statement(sequence)
        if statement is None:
            value = self._last_row_id
        else:
            row = self.fetch_one(statement, {"sequence": sequence} if sequence else None)
            value = None if row is None else next(iter(row.values()), None)
        return "0" if value is None else str(value)

    def _run(self, sql: str, params: Any) -> CursorResult[Any]:
        bound = normalize_params(params)
        started = time.perf_counter()
        try:
            result = self._dispatch(sql, bound)
        except StatementError as exc:
            logger.error(
                "DB query failed",
                extra={
                    "sql": sql,
                    "params": stringify_params(bound),
                    "elapsed_ms": (time.perf_counter() - started) * 1000,
                },
            )
            orig = getattr(exc, "orig", None)
            raise QueryExecutionError(
                str(orig) if orig is not None else str(exc.args[0] if exc.args else exc),
                code=_error_code(orig),
                param_keys=param_keys(bound),
            ) from exc

        logger.debug(
            "DB query executed",
            extra={
                "sql": sql,
                "params": stringify_params(bound),
                "elapsed_ms": (time.perf_counter() - started) * 1000,
            },
        )
        return result

    def _dispatch(self, sql: str, bound: BoundParams) -> CursorResult[Any]:
        if isinstance(bound, tuple):
            # Positional params use the driver's own paramstyle.
            if bound:
                return self._conn.exec_driver_sql(sql, bound)
            return self._conn.exec_driver_sql(sql)
        return self._conn.execute(text(sql), bound)

    def _control(self, sql: str) -> None:
        self._run(sql, ())

    def _ensure_writable(self, message: str) -> None:
        if self._read_only:
            raise ReadOnlyViolation(message)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def transaction(
        self,
        fn: Callable[[ConnectionInterface], T],
        isolation_level: IsolationLevel | None = None,
    ) -> T:
        """Run ``fn(self)`` inside a transaction.

        Commits when ``fn`` returns; rolls back and re-raises when it (or
        the commit) fails.  Nested calls use savepoints, and the isolation
        level only applies to the outermost transaction.

        Raises:
            ReadOnlyViolation: On a read-only connection.
        """
        self.begin_transaction(isolation_level)
        try:
            result = fn(self)
            self.commit()
        except BaseException:
            self.rollback()
            raise
        return result

    def begin_transaction(self, isolation_level: IsolationLevel | None = None) -> bool:
        """Open a transaction, or a savepoint when one is already open.

        Prefer :meth:`transaction`; this is exposed for test tooling.
        """
        self._ensure_writable("Transactions are not allowed for read-only connections.")
        self._depth += 1

        if self._depth > 1:
            try:
                self._control(self._driver.savepoint_statement(self._depth))
            except BaseException:
                self._depth -= 1
                raise
            return True

        logger.info(
            "Begin transaction",
            extra={"isolation": isolation_level.value if isolation_level else None},
        )
        driver = self._driver
        try:
            for statement in driver.begin_statements(isolation_level):
                self._control(statement)
                if statement == driver.begin_statement:
                    self._in_transaction = True
        except BaseException:
            if self._in_transaction:
                self._in_transaction = False
                self._control(driver.rollback_statement)
            self._depth = 0
            raise
        return True

    def commit(self) -> bool:
        """Commit the innermost transaction level.

        The level stays open when the COMMIT or RELEASE statement fails, so
        a following :meth:`rollback` still undoes it.
        """
        if not self._in_transaction:
            logger.warning(
                "Attempt to commit a transaction that has not yet begun. "
                "Transaction level: %d",
                self._depth,
            )
            self._depth = 0
            return False

        if self._depth > 1:
            self._control(self._driver.release_savepoint_statement(self._depth))
            self._depth -= 1
            return True

        logger.info("Commit transaction")
        self._control(self._driver.commit_statement)
        self._in_transaction = False
        self._depth = 0
        return True

    def rollback(self) -> bool:
        """Roll back the innermost transaction level."""
        if not self._in_transaction:
            logger.warning(
                "Attempt to rollback a transaction that has not yet begun. "
                "Transaction level: %d",
                self._depth,
            )
            self._depth = 0
            return False

        if self._depth > 1:
            self._control(self._driver.rollback_to_savepoint_statement(self._depth))
            self._depth -= 1
            return True

        logger.info("Rollback transaction")
        try:
            self._control(self._driver.rollback_statement)
        finally:
            self._in_transaction = False
            self._depth = 0
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the connection; an open transaction is rolled back."""
        if self._in_transaction:
            self._depth = 1
            self.rollback()
        self._conn.close()
        if self._engine is not None:
            self._engine.dispose()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
