"""Connection configuration.

Configuration is plain pydantic data, so it can be loaded from any source
(JSON, YAML, environment) with ``model_validate``::

    config = DatabaseConfig.model_validate({
        "default": "main",
        "connections": {
            "main": {"url": "postgresql+psycopg://app@db/app", "prefix": "app_"},
            "reports": {
                "read": {"url": "postgresql+psycopg://ro@replica/app", "read_only": True},
                "write": {"url": "postgresql+psycopg://app@db/app"},
            },
        },
    })
    db = create_connection(config)                  # "main"
    ro = create_connection(config, "reports.read")

URL parsing is delegated to SQLAlchemy; the engine's dialect name selects the
mortarQL driver.
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy import create_engine
from sqlalchemy.exc import ArgumentError, NoSuchModuleError

from mortarql.connection.connection import Connection
from mortarql.dialect import Dialect
from mortarql.driver.registry import DriverFactory
from mortarql.errors import ConfigurationError
from mortarql.query.pagination import DEFAULT_PER_PAGE

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION = "default"


class ConnectionConfig(BaseModel):
    """Settings for one named connection.

    Attributes:
        url: SQLAlchemy database URL, e.g. ``"sqlite:///app.db"``.
        prefix: Table prefix applied by the query builders.
        read_only: Reject writes and transactions on this connection.
        default_per_page: Page size used by ``paginate`` when none is given.
        engine_options: Extra keyword arguments for
            ``sqlalchemy.create_engine`` (``pool_size``, ``echo`` …).
    """

    model_config = ConfigDict(extra="forbid")

    url: str
    prefix: str = ""
    read_only: bool = False
    default_per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1)
    engine_options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("url must not be empty")
        return value


class ConnectionGroupConfig(BaseModel):
    """A read/write pair sharing one name.

    ``"<group>.read"`` and ``"<group>.write"`` select a side; the bare group
    name selects ``write`` when it is configured and ``read`` otherwise.

    Attributes:
        read: Settings for the read side, typically a read-only replica.
        write: Settings for the write side.
    """

    model_config = ConfigDict(extra="forbid")

    read: ConnectionConfig | None = None
    write: ConnectionConfig | None = None

    @model_validator(mode="after")
    def _has_a_side(self) -> ConnectionGroupConfig:
        if self.read is None and self.write is None:
            raise ValueError("a connection group needs 'read' or 'write'")
        return self

    def side(self, role: str) -> ConnectionConfig | None:
        if role == "read":
            return self.read
        if role == "write":
            return self.write
        return None


class DatabaseConfig(BaseModel):
    """A set of named connections plus the name used by default.

    Attributes:
        default: Name of the connection returned for ``"default"``.
        connections: Connection settings, or read/write groups, by name.
    """

    model_config = ConfigDict(extra="forbid")

    default: str = DEFAULT_CONNECTION
    connections: dict[str, ConnectionConfig | ConnectionGroupConfig] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _default_exists(self) -> DatabaseConfig:
        if self.connections and self.default not in self.connections:
            raise ValueError(f"default connection '{self.default}' is not configured")
        return self

    def resolve(self, name: str = DEFAULT_CONNECTION) -> ConnectionConfig:
        """Return the settings for ``name``.

        ``"default"`` follows :attr:`default`, also as the group part of
        ``"default.read"`` / ``"default.write"``.

        Raises:
            ConfigurationError: If no connection has that name.
        """
        key = self.default if name == DEFAULT_CONNECTION else name
        entry = self.connections.get(key)
        if isinstance(entry, ConnectionConfig):
            return entry
        if isinstance(entry, ConnectionGroupConfig):
            resolved = entry.write or entry.read
            if resolved is not None:
                return resolved

        if "." in name:
            group, role = name.split(".", 1)
            if group == DEFAULT_CONNECTION:
                group = self.default
            entry = self.connections.get(group)
            if isinstance(entry, ConnectionGroupConfig):
                resolved = entry.side(role)
                if resolved is not None:
                    return resolved

        known = sorted(self.connections)
        raise ConfigurationError(
            f"Unknown connection '{name}'. Configured: {known}.",
            setting="connection",
        )


def create_connection(
    config: DatabaseConfig | ConnectionConfig,
    name: str = DEFAULT_CONNECTION,
) -> Connection:
    """Open a :class:`~mortarql.connection.connection.Connection`.

    The connection owns its engine and disposes of it on ``close()``.

    Raises:
        ConfigurationError: If the connection name, URL or dialect is not
            usable.
    """
    settings = config.resolve(name) if isinstance(config, DatabaseConfig) else config

    try:
        engine = create_engine(settings.url, **settings.engine_options)
    except (ArgumentError, NoSuchModuleError, ImportError) as exc:
        raise ConfigurationError(f"Invalid database URL: {exc}", setting="url") from exc

    try:
        driver = DriverFactory.create(Dialect.resolve(engine.dialect.name))
    except ConfigurationError:
        engine.dispose()
        raise

    logger.debug(
        "Opening connection",
        extra={"dialect": driver.name, "prefix": settings.prefix, "read_only": settings.read_only},
    )
    return Connection(
        engine.connect(),
        driver,
        prefix=settings.prefix,
        read_only=settings.read_only,
        default_per_page=settings.default_per_page,
        engine=engine,
    )


def connect(url: str, **kwargs: Any) -> Connection:
    """Shortcut for ``create_connection(ConnectionConfig(url=url, **kwargs))``."""
    return create_connection(ConnectionConfig(url=url, **kwargs))
