"""Subquery arguments.

Methods such as ``where_in_subquery``, ``from_subquery``, ``join_subquery``,
``select_exists`` and ``union`` accept three kinds of argument:

* a finished :class:`~mortarql.query.select.SelectQueryBuilder`;
* raw SQL (an :class:`~mortarql.query.expression.Expression` or a string);
* a callback that receives a fresh builder on the same connection and
  fills it in.

``as_subquery()`` turns the argument into one of three variants, and every
variant lowers to the same :class:`~mortarql.compile.base.CompiledSQL`
shape.  Callback builders draw placeholder names from the counter of the
builder that owns the subquery, so generated names never repeat within
one statement.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from mortarql.compile.base import CompiledSQL
from mortarql.errors import ConfigurationError
from mortarql.query.expression import Expression

if TYPE_CHECKING:
    from mortarql.query.select import SelectQueryBuilder

BuilderFactory = Callable[[], "SelectQueryBuilder"]


@dataclass(frozen=True)
class BuilderSubquery:
    builder: SelectQueryBuilder

    def lower(self, factory: BuilderFactory) -> CompiledSQL:
        return self.builder.compile()


@dataclass(frozen=True)
class RawSubquery:
    sql: str

    def lower(self, factory: BuilderFactory) -> CompiledSQL:
        return CompiledSQL(sql=self.sql.strip())


@dataclass(frozen=True)
class CallbackSubquery:
    callback: Callable[[SelectQueryBuilder], Any]

    def lower(self, factory: BuilderFactory) -> CompiledSQL:
        builder = factory()
        self.callback(builder)
        return builder.compile()


Subquery = Union[BuilderSubquery, RawSubquery, CallbackSubquery]
SubqueryLike = Union[
    "SelectQueryBuilder", Expression, str, Callable[["SelectQueryBuilder"], Any], Subquery
]


def as_subquery(value: SubqueryLike) -> Subquery:
    """Classify a user-supplied subquery argument.

    Raises:
        ConfigurationError: If ``value`` is none of the accepted kinds.
    """
    from mortarql.query.select import SelectQueryBuilder

    if isinstance(value, (BuilderSubquery, RawSubquery, CallbackSubquery)):
        return value
    if isinstance(value, SelectQueryBuilder):
        return BuilderSubquery(value)
    if isinstance(value, Expression):
        return RawSubquery(value.sql)
    if isinstance(value, str):
        return RawSubquery(value)
    if callable(value):
        return CallbackSubquery(value)
    raise ConfigurationError(
        f"Unsupported subquery argument of type {type(value).__name__}.",
        setting="subquery",
    )
