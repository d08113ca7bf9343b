"""Shared pytest fixtures for mortarQL unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

import mortarql
from mortarql.connection.connection import Connection
from mortarql.driver.mariadb import MariaDBDriver
from mortarql.driver.postgres import PostgresDriver
from mortarql.driver.sqlite import SQLiteDriver
from tests.fixtures import SpyConnection, load_sample_data


@pytest.fixture()
def sq() -> SpyConnection:
    """Recording SQLite connection without a prefix."""
    return SpyConnection(SQLiteDriver())


@pytest.fixture()
def pg() -> SpyConnection:
    """Recording PostgreSQL connection without a prefix."""
    return SpyConnection(PostgresDriver())


@pytest.fixture()
def my() -> SpyConnection:
    """Recording MariaDB connection without a prefix."""
    return SpyConnection(MariaDBDriver())


@pytest.fixture()
def prefixed() -> SpyConnection:
    """Recording SQLite connection with table prefix ``t_``."""
    return SpyConnection(SQLiteDriver(), prefix="t_")


@pytest.fixture()
def sqlite_db() -> Iterator[Connection]:
    """Empty in-memory SQLite connection."""
    with mortarql.connect("sqlite://") as db:
        yield db


@pytest.fixture()
def sample_db() -> Iterator[Connection]:
    """In-memory SQLite connection (prefix ``app_``) with the sample data loaded."""
    with mortarql.connect("sqlite://", prefix="app_") as db:
        load_sample_data(db)
        yield db
