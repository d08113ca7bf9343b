"""Parameter normalisation for execution and logging."""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from typing import Any, Union

from mortarql.errors import ConfigurationError

NamedParams = dict[Any, Any]
PositionalParams = tuple[Any, ...]
BoundParams = Union[NamedParams, PositionalParams]


def normalize_value(value: Any) -> Any:
    """Convert temporal values to ISO-8601 strings; leave the rest alone.

    ``datetime`` is rendered at seconds precision and keeps its UTC offset
    when it is timezone-aware.
    """
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def normalize_params(params: Any) -> BoundParams:
    """Prepare caller parameters for binding.

    * ``None`` → ``{}``.
    * A list / tuple, or a mapping whose keys are all integers, is
      positional and returned as a tuple (mapping entries ordered by key).
    * Any other mapping is named: string keys lose a leading ``:``
      placeholder marker, integer keys are kept.

    Temporal values are converted with :func:`normalize_value`.

    Raises:
        ConfigurationError: If ``params`` is of any other type.
    """
    if params is None:
        return {}
    if isinstance(params, Mapping):
        if params and all(isinstance(k, int) for k in params):
            return tuple(normalize_value(params[k]) for k in sorted(params))
        named: NamedParams = {}
        for key, value in params.items():
            if isinstance(key, str) and key.startswith(":"):
                key = key[1:]
            named[key] = normalize_value(value)
        return named
    if isinstance(params, Sequence) and not isinstance(params, (str, bytes)):
        return tuple(normalize_value(v) for v in params)
    raise ConfigurationError(
        f"Parameters must be a mapping or a sequence, not {type(params).__name__}.",
        setting="params",
    )


def param_keys(params: BoundParams) -> list[Any]:
    """Names (or positions) of bound parameters, for error reports."""
    if isinstance(params, tuple):
        return list(range(len(params)))
    return sorted(params, key=str)


def stringify_params(params: BoundParams) -> dict[Any, Any]:
    """Render parameters for log output.

    Scalars are kept, temporal values become ISO strings and containers are
    JSON-encoded.
    """
    items = enumerate(params) if isinstance(params, tuple) else params.items()
    out: dict[Any, Any] = {}
    for key, value in items:
        value = normalize_value(value)
        if value is None or isinstance(value, (str, int, float, bool)):
            out[key] = value
            continue
        try:
            out[key] = json.dumps(value, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            out[key] = "[unserializable]"
    return out
