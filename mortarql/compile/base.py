"""Compiler abstractions: CompiledSQL and the QueryCompiler ABC.

The Template Method pattern (GoF) is used:
- ``StandardQueryCompiler`` defines the algorithm skeleton for every
  statement kind and delegates clause rendering to the clause builders.
- ``SQLiteCompiler``, ``PostgresCompiler`` and ``MariaDBCompiler`` supply the
  quoting policy and override the few dialect-specific steps.
"""
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from mortarql.compile.quoting import Quoter
from mortarql.errors import ConfigurationError

if TYPE_CHECKING:
    from mortarql.query.delete import DeleteQueryBuilder
    from mortarql.query.insert import InsertQueryBuilder
    from mortarql.query.select import SelectQueryBuilder
    from mortarql.query.update import UpdateQueryBuilder

# ``::`` is a PostgreSQL cast, not a placeholder.
_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


def bind_params(target: dict[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``extra`` into ``target`` in place and return ``target``.

    A name may appear in both only when it is bound to the same value.

    Raises:
        ConfigurationError: If a name is already bound to a different value.
    """
    for key, value in extra.items():
        if key in target and target[key] is not value and target[key] != value:
            raise ConfigurationError(
                f"Parameter ':{key}' is bound to two different values in one statement.",
                setting="params",
            )
        target[key] = value
    return target


@dataclass
class CompiledSQL:
    """The output of a compilation.

    Attributes:
        sql: The compiled SQL string with ``:name`` placeholders.
        params: Values for every placeholder in ``sql``.
        dialect: The target dialect (``'sqlite'``, ``'postgres'``,
            ``'mariadb'``); empty for fragments.
    """

    sql: str
    params: dict[str, Any] = field(default_factory=dict)
    dialect: str = ""

    def placeholders(self) -> set[str]:
        """Return the names of the ``:name`` placeholders used in ``sql``."""
        return set(_PLACEHOLDER.findall(self.sql))

    def merge_params(self, extra: dict[str, Any]) -> dict[str, Any]:
        """Return a new param dict with ``extra`` applied over ``params``.

        Args:
            extra: Additional values supplied by the caller.

        Returns:
            A single dict ready for execution.
        """
        return {**self.params, **extra}


class QueryCompiler(ABC):
    """Abstract base for dialect-specific statement compilers.

    Builders hand themselves to the compiler of their connection; the
    compiler only reads builder state through its public accessors.
    """

    def __init__(self, quoter: Quoter) -> None:
        self.quoter = quoter

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the canonical dialect name."""

    @abstractmethod
    def compile_select(self, builder: SelectQueryBuilder) -> CompiledSQL:
        """Compile a SELECT builder (including its unions)."""

    @abstractmethod
    def compile_insert(self, builder: InsertQueryBuilder) -> CompiledSQL:
        """Compile an INSERT builder."""

    @abstractmethod
    def compile_update(self, builder: UpdateQueryBuilder) -> CompiledSQL:
        """Compile an UPDATE builder."""

    @abstractmethod
    def compile_delete(self, builder: DeleteQueryBuilder) -> CompiledSQL:
        """Compile a DELETE builder."""
