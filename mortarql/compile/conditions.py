"""Rendering of WHERE / HAVING / ON fragments.

Condition fragments are stored as raw SQL written by the caller.  They are
not parsed; :class:`ConditionQuoter` applies a token-level heuristic that
quotes plain identifiers (``col`` or ``t.col``) and leaves everything else
alone.  Callers with unusual fragments should quote identifiers themselves.

:class:`ConditionTreeCompiler` walks a condition tree and produces the
parenthesised, connector-joined SQL together with the merged parameters.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from mortarql.compile.base import CompiledSQL, bind_params
from mortarql.compile.quoting import Quoter, is_quoted
from mortarql.query.clauses import ConditionGroup, ConditionLeaf, ConditionNode

_SUBQUERY = re.compile(r"\bSELECT\b", re.IGNORECASE)
_TOKENS = re.compile(r"(\s+)")
_NUMBER = re.compile(r"^[0-9]+(?:\.[0-9]+)?$")
_FUNCTION_CALL = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*\(.*$")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

KEYWORDS = frozenset(
    {
        "AND", "OR", "NOT", "NULL", "IS", "IN", "EXISTS",
        "LIKE", "BETWEEN", "ON", "TRUE", "FALSE", "AS",
    }
)


class ConditionQuoter:
    """Quotes bare identifiers inside a raw condition fragment.

    Rules, applied per whitespace-separated token:

    * tokens containing ``:`` (placeholders such as ``:id``) are kept;
    * numeric literals are kept;
    * already-quoted tokens are kept;
    * function calls (``COUNT(*)``) are kept;
    * ``name`` / ``t.name`` are quoted unless they are a keyword.

    Fragments that contain an embedded ``SELECT`` are returned untouched.
    Operators are only recognised when surrounded by whitespace, so
    ``a=1`` is left as is.
    """

    def __init__(self, quoter: Quoter) -> None:
        self._quoter = quoter

    def quote(self, fragment: str) -> str:
        fragment = fragment.strip()
        if not fragment or _SUBQUERY.search(fragment):
            return fragment
        return "".join(self._quote_token(t) for t in _TOKENS.split(fragment))

    def _quote_token(self, token: str) -> str:
        if not token or token.isspace():
            return token
        if ":" in token or _NUMBER.match(token) or is_quoted(token):
            return token
        if _FUNCTION_CALL.match(token):
            return token
        if _IDENTIFIER.match(token) and token.upper() not in KEYWORDS:
            return self._quoter.dotted(token)
        return token


class ConditionTreeCompiler:
    """Renders a list of condition nodes into SQL.

    Each leaf is wrapped in parentheses, each group wraps its rendered
    children in one more pair, and siblings are joined with their
    connector.  Parameters from every rendered leaf are merged; a name may
    repeat only with the same value.
    """

    def __init__(self, condition_quoter: ConditionQuoter) -> None:
        self._cq = condition_quoter

    def compile(self, nodes: Iterable[ConditionNode]) -> CompiledSQL:
        parts: list[str] = []
        params: dict[str, Any] = {}

        for node in nodes:
            if isinstance(node, ConditionLeaf):
                body = self._cq.quote(node.fragment)
                node_params = node.params
            elif isinstance(node, ConditionGroup):
                inner = self.compile(node.children)
                body = inner.sql
                node_params = inner.params
            else:
                continue
            if not body:
                continue

            prefix = f" {node.connector} " if parts else ""
            parts.append(f"{prefix}({body})")
            bind_params(params, node_params)

        return CompiledSQL(sql="".join(parts), params=params)
