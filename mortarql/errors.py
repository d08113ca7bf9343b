"""Custom exception hierarchy for mortarQL.

All public errors inherit from MortarQLError so callers can catch the base
class for any mortarQL-specific failure.
"""
from __future__ import annotations

from typing import Any


class MortarQLError(Exception):
    """Base exception for all mortarQL errors."""


class ConfigurationError(MortarQLError):
    """Raised when builder, compiler, driver or connection input is malformed.

    Always fatal to the current operation and never retried.

    Args:
        message: Human-readable description.
        setting: Name of the offending input (e.g. ``"dialect"``,
            ``"column_type"``), if one can be named.
    """

    def __init__(self, message: str, setting: str | None = None) -> None:
        super().__init__(message)
        self.setting = setting


class QueryExecutionError(MortarQLError):
    """Raised when the database engine rejects or fails a statement.

    The SQL text is deliberately left out of the message so that literals
    never leak into logs or error reports; the names of the bound parameters
    are kept for diagnosis.  The driver exception is chained as
    ``__cause__``.

    Args:
        message: The literal message reported by the engine.
        code: Driver-specific error code, if the driver exposes one.
        param_keys: Names (or positions) of the parameters bound to the
            failing statement.
    """

    def __init__(
        self,
        message: str,
        code: str | int | None = None,
        param_keys: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.param_keys: list[Any] = param_keys or []

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured description suitable for error reporting."""
        return {
            "error": "QUERY_FAILED",
            "message": str(self),
            "code": self.code,
            "param_keys": self.param_keys,
        }


class ReadOnlyViolation(MortarQLError):
    """Raised when a write is attempted on a read-only connection.

    Raised before any SQL reaches the engine.
    """
