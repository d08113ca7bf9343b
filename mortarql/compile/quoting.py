"""Identifier quoting policies.

Two concrete policies exist: ANSI double quotes (SQLite, PostgreSQL) and
backticks (MariaDB / MySQL).  A driver picks one when it is created and the
same quoter is used for every fragment of a compiled statement.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod

_WHITESPACE = re.compile(r"\s+")


def is_quoted(token: str) -> bool:
    """Return ``True`` if ``token`` is already wrapped in `` ` `` or ``"``."""
    if len(token) < 2:
        return False
    return (token[0] == "`" and token[-1] == "`") or (
        token[0] == '"' and token[-1] == '"'
    )


class Quoter(ABC):
    """Escapes identifiers for one dialect family.

    All methods are idempotent: input that is already quoted (with either
    quote character) is returned unchanged.
    """

    @property
    @abstractmethod
    def quote_char(self) -> str:
        """Return the dialect's identifier quote character."""

    def ident(self, name: str) -> str:
        """Quote a single identifier (no dot handling).

        The quote character is doubled when it appears inside ``name``.
        """
        name = name.strip()
        if not name:
            return ""
        if is_quoted(name):
            return name
        q = self.quote_char
        return f"{q}{name.replace(q, q + q)}{q}"

    def dotted(self, path: str) -> str:
        """Quote a dotted path segment by segment (``t.col`` -> ``"t"."col"``).

        ``*`` segments are kept verbatim, so ``t.*`` becomes ``"t".*``.
        """
        path = path.strip()
        if path in ("", "*"):
            return path
        parts = [p.strip() for p in path.split(".")]
        parts = [p for p in parts if p]
        return ".".join("*" if p == "*" else self.ident(p) for p in parts)

    def alias(self, name: str) -> str:
        """Quote an alias used in SELECT / FROM / JOIN."""
        return self.ident(name)

    def table_with_optional_alias(self, table: str) -> str:
        """Quote ``"table"``, ``"table alias"`` or ``"table AS alias"`` as
        ``"table" AS "alias"``.

        Only the table and the alias word are considered; extra words are
        dropped.
        """
        table = table.strip()
        if not table:
            return ""
        parts = _WHITESPACE.split(table)
        if len(parts) > 2 and parts[1].lower() == "as":
            del parts[1]
        out = self.dotted(parts[0])
        if len(parts) > 1:
            out += f" AS {self.alias(parts[1])}"
        return out


class AnsiQuoter(Quoter):
    """ANSI quoting: ``"identifier"``.  Used by PostgreSQL and SQLite."""

    @property
    def quote_char(self) -> str:
        return '"'


class BacktickQuoter(Quoter):
    """MariaDB / MySQL quoting: `` `identifier` ``."""

    @property
    def quote_char(self) -> str:
        return "`"
