"""mortarQL drivers: per-engine quoting, types and transaction SQL."""
from mortarql.driver.base import COLUMN_KINDS, Driver
from mortarql.driver.mariadb import MariaDBDriver
from mortarql.driver.postgres import PostgresDriver
from mortarql.driver.registry import DriverFactory
from mortarql.driver.sqlite import SQLiteDriver

__all__ = [
    "COLUMN_KINDS",
    "Driver",
    "DriverFactory",
    "MariaDBDriver",
    "PostgresDriver",
    "SQLiteDriver",
]
