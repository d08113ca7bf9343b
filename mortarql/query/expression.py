"""Raw SQL expressions."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Expression:
    """A raw SQL fragment emitted verbatim.

    Expressions are never quoted and never receive the connection's table
    prefix.  Use them for sources and targets the builders cannot express,
    e.g. ``Expression("users u")`` or ``Expression("(VALUES (1), (2)) v")``.
    """

    sql: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "sql", self.sql.strip())

    def __str__(self) -> str:
        return self.sql
