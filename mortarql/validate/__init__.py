"""Database-backed validation helpers."""
from __future__ import annotations

from mortarql.validate.database import DatabaseValidator

__all__ = ["DatabaseValidator"]
