"""Builder state records: condition tree, joins, ordering and unions.

These are plain data holders shared by the builders (which create them) and
the compiler (which only reads them).  Nothing here knows about SQL
dialects.

Condition tree
--------------
WHERE and HAVING are stored as an ordered list of nodes.  A node is either a
:class:`ConditionLeaf` (one opaque predicate fragment with its parameters) or
a :class:`ConditionGroup` (a parenthesised list of child nodes).  Each node
carries the connector (``AND`` / ``OR``) that joins it to the previous
sibling; the connector of the first node in a list is never rendered.

:class:`ConditionTree` owns the insertion cursor: a stack of child lists.
``begin_group()`` pushes a fresh list, ``end_group()`` pops it and appends the
collected children to the parent as one group, so nested callback-style
grouping composes to any depth.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Literal, Union

from mortarql.errors import ConfigurationError

Connector = Literal["AND", "OR"]
JoinType = Literal["INNER", "LEFT", "RIGHT"]
Direction = Literal["ASC", "DESC"]
UnionType = Literal["UNION", "UNION ALL"]

#: Alias used by aggregate helpers; left unquoted so rows can be read by key.
AGGREGATE_ALIAS = "__agg"


def normalize_connector(connector: str) -> Connector:
    """Map anything other than a case-insensitive ``"or"`` to ``"AND"``."""
    return "OR" if connector.strip().upper() == "OR" else "AND"


@dataclass(frozen=True)
class ConditionLeaf:
    """A single predicate fragment, e.g. ``"age > :age"``."""

    connector: Connector
    fragment: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ConditionGroup:
    """A parenthesised list of child nodes."""

    connector: Connector
    children: tuple[ConditionNode, ...]


ConditionNode = Union[ConditionLeaf, ConditionGroup]


@dataclass
class _OpenGroup:
    connector: Connector
    children: list[ConditionNode] = field(default_factory=list)


class ConditionTree:
    """Ordered, nestable list of boolean-connected conditions.

    Example::

        tree = ConditionTree()
        tree.add_leaf("AND", "active = 1")
        with tree.group("AND"):
            tree.add_leaf("AND", "age > :age", {"age": 30})
            tree.add_leaf("OR", "role = :role", {"role": "admin"})
        # -> (active = 1) AND ((age > :age) OR (role = :role))
    """

    def __init__(self) -> None:
        self._root: list[ConditionNode] = []
        self._open: list[_OpenGroup] = []

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_leaf(
        self,
        connector: str,
        fragment: str,
        params: dict[str, Any] | None = None,
    ) -> None:
        """Append a leaf to the current insertion point.

        Blank fragments are ignored.
        """
        fragment = fragment.strip()
        if not fragment:
            return
        leaf = ConditionLeaf(normalize_connector(connector), fragment, dict(params or {}))
        self._current().append(leaf)

    def begin_group(self, connector: str) -> None:
        """Open a nested group; subsequent nodes go into it."""
        self._open.append(_OpenGroup(normalize_connector(connector)))

    def end_group(self) -> None:
        """Close the innermost group and append it to its parent.

        A group that collected no children is dropped.

        Raises:
            ConfigurationError: If no group is open.
        """
        if not self._open:
            raise ConfigurationError(
                "end_group() called without a matching begin_group().",
                setting="condition_group",
            )
        group = self._open.pop()
        if group.children:
            self._current().append(ConditionGroup(group.connector, tuple(group.children)))

    @contextmanager
    def group(self, connector: str) -> Iterator[ConditionTree]:
        """Context-manager form of ``begin_group()`` / ``end_group()``.

        If the body raises, the partially built group is discarded.
        """
        self.begin_group(connector)
        depth = len(self._open)
        try:
            yield self
        except BaseException:
            del self._open[depth - 1 :]
            raise
        self.end_group()

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> tuple[ConditionNode, ...]:
        """Snapshot of the top-level nodes."""
        return tuple(self._root)

    @property
    def open_groups(self) -> int:
        """Number of groups currently open."""
        return len(self._open)

    def is_empty(self) -> bool:
        return not self._root

    def copy(self) -> ConditionTree:
        """Return an independent tree with the same top-level nodes.

        Nodes are immutable, so sharing them between copies is safe.
        """
        clone = ConditionTree()
        clone._root = list(self._root)
        clone._open = [_OpenGroup(g.connector, list(g.children)) for g in self._open]
        return clone

    def _current(self) -> list[ConditionNode]:
        return self._open[-1].children if self._open else self._root


# ---------------------------------------------------------------------------
# Other clause records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JoinClause:
    """One JOIN entry.

    Attributes:
        type: ``INNER``, ``LEFT`` or ``RIGHT``.
        target: Table (already prefixed, optionally followed by an alias) or
            a raw / parenthesised subquery expression.
        on: Raw ON fragment.
        params: Parameters contributed by a subquery target.
        raw: ``True`` when ``target`` must be rendered verbatim.
    """

    type: JoinType
    target: str
    on: str
    params: dict[str, Any] = field(default_factory=dict)
    raw: bool = False


@dataclass(frozen=True)
class OrderByItem:
    column: str
    direction: Direction = "ASC"


@dataclass(frozen=True)
class UnionClause:
    """A compiled UNION branch."""

    type: UnionType
    sql: str
    params: dict[str, Any] = field(default_factory=dict)
