"""Dialect identity and transaction isolation levels.

A :class:`Dialect` is resolved once per connection and selects the quoter,
compiler and driver behaviour for its whole lifetime::

    from mortarql.dialect import Dialect

    Dialect.resolve("postgresql")   # Dialect.POSTGRES
    Dialect.resolve("mysql")        # Dialect.MARIADB
"""
from __future__ import annotations

from enum import Enum

from mortarql.errors import ConfigurationError

# Alternative spellings seen in SQLAlchemy URLs and driver names.
_ALIASES: dict[str, str] = {
    "mysql": "mariadb",
    "postgresql": "postgres",
    "pgsql": "postgres",
    "pysqlite": "sqlite",
}


class Dialect(str, Enum):
    """Supported SQL dialects."""

    SQLITE = "sqlite"
    MARIADB = "mariadb"
    POSTGRES = "postgres"

    @classmethod
    def resolve(cls, name: str | Dialect) -> Dialect:
        """Return the dialect for ``name``, accepting common aliases.

        Args:
            name: A dialect value (``"sqlite"``, ``"mariadb"``,
                ``"postgres"``) or alias (``"mysql"``, ``"postgresql"``,
                ``"pgsql"``), case-insensitive.

        Returns:
            The matching :class:`Dialect`.

        Raises:
            ConfigurationError: If ``name`` is not a known dialect.
        """
        if isinstance(name, Dialect):
            return name
        key = name.strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            known = sorted([d.value for d in cls] + list(_ALIASES))
            raise ConfigurationError(
                f"Unsupported dialect: '{name}'. Known names: {known}.",
                setting="dialect",
            ) from None


class IsolationLevel(str, Enum):
    """Transaction isolation levels; the value is the SQL keyword phrase."""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"
