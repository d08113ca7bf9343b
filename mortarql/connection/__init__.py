"""mortarQL connections: execution, parameter binding and transactions."""
from mortarql.connection.base import ConnectionInterface
from mortarql.connection.connection import Connection
from mortarql.connection.params import normalize_params, normalize_value

__all__ = [
    "Connection",
    "ConnectionInterface",
    "normalize_params",
    "normalize_value",
]
