"""Lazily opened, cached connections.

``ConnectionManager`` opens each named connection of a
:class:`~mortarql.config.DatabaseConfig` on first use and hands out the same
object afterwards.  ``read()`` and ``write()`` pick a side of a read/write
group and fall back to the plain connection when the group has no such
side::

    manager = ConnectionManager(DatabaseConfig.model_validate({
        "default": "main",
        "connections": {
            "main": {
                "read": {"url": "postgresql+psycopg://ro@replica/app", "read_only": True},
                "write": {"url": "postgresql+psycopg://app@primary/app"},
            },
        },
    }))
    users = manager.read().query().select().from_("users").fetch_all()
    manager.write().query().insert("users", {"name": "Ann"}).execute()
"""
from __future__ import annotations

import logging

from mortarql.config import DEFAULT_CONNECTION, DatabaseConfig, create_connection
from mortarql.connection.connection import Connection
from mortarql.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Creates connections on demand and caches them by requested name.

    Args:
        config: The named connections to draw from.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._connections: dict[str, Connection] = {}

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    def connection(self, name: str = DEFAULT_CONNECTION) -> Connection:
        """Return the connection called ``name``, opening it on first use.

        Raises:
            ConfigurationError: If ``name`` is not configured or its settings
                are not usable.
        """
        if name not in self._connections:
            self._connections[name] = create_connection(self._config, name)
        return self._connections[name]

    def read(self, name: str = DEFAULT_CONNECTION) -> Connection:
        """The read side of group ``name``, or ``name`` itself."""
        return self._side(name, "read")

    def write(self, name: str = DEFAULT_CONNECTION) -> Connection:
        """The write side of group ``name``, or ``name`` itself."""
        return self._side(name, "write")

    def _side(self, name: str, role: str) -> Connection:
        qualified = f"{name}.{role}"
        try:
            self._config.resolve(qualified)
        except ConfigurationError:
            return self.connection(name)
        return self.connection(qualified)

    def close(self) -> None:
        """Close every cached connection."""
        connections, self._connections = self._connections, {}
        for name, conn in connections.items():
            logger.debug("Closing connection", extra={"connection": name})
            conn.close()

    def __enter__(self) -> ConnectionManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
