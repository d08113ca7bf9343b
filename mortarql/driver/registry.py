"""Driver registry (Open/Closed Principle).

``DriverFactory`` maps a :class:`~mortarql.dialect.Dialect` to a
:class:`~mortarql.driver.base.Driver` class.  Register a driver once; the
connection factory looks it up automatically.

Usage::

    from mortarql.driver.registry import DriverFactory

    @DriverFactory.register(Dialect.SQLITE)
    class TracingSQLiteDriver(SQLiteDriver):
        ...
"""
from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from mortarql.dialect import Dialect
from mortarql.driver.base import Driver
from mortarql.errors import ConfigurationError


class DriverFactory:
    """Registry mapping dialects to :class:`Driver` classes.

    Example::

        DriverFactory.register_class(Dialect.POSTGRES, PostgresDriver)
        driver = DriverFactory.create("postgresql")
    """

    _drivers: ClassVar[dict[Dialect, type[Driver]]] = {}

    @classmethod
    def register(cls, dialect: Dialect | str) -> Callable[[type[Driver]], type[Driver]]:
        """Decorator that registers a driver class under ``dialect``.

        Args:
            dialect: The dialect (or any name accepted by
                :meth:`Dialect.resolve`).

        Returns:
            A decorator that registers and returns the driver class.
        """
        key = Dialect.resolve(dialect)

        def decorator(driver_cls: type[Driver]) -> type[Driver]:
            cls._drivers[key] = driver_cls
            return driver_cls

        return decorator

    @classmethod
    def register_class(cls, dialect: Dialect | str, driver_cls: type[Driver]) -> None:
        """Register a driver class without using the decorator form."""
        cls._drivers[Dialect.resolve(dialect)] = driver_cls

    @classmethod
    def create(cls, dialect: Dialect | str) -> Driver:
        """Instantiate the driver registered for ``dialect``.

        Raises:
            ConfigurationError: If the name is unknown or no driver is
                registered for it.
        """
        key = Dialect.resolve(dialect)
        driver_cls = cls._drivers.get(key)
        if driver_cls is None:
            registered = cls.registered_dialects()
            raise ConfigurationError(
                f"No driver registered for '{key.value}'. Registered: {registered}.",
                setting="dialect",
            )
        return driver_cls()

    @classmethod
    def registered_dialects(cls) -> list[str]:
        """Return the sorted list of registered dialect names."""
        return sorted(d.value for d in cls._drivers)
