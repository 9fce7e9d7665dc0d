"""Filter and sorter variants for the Arbor query DSL.

Both families are closed sets of frozen dataclasses. Each variant has two
effects, dispatched by the module-level functions below:

- ``query_params(op)`` returns the ``(name, value)`` pairs it contributes to a
  request URL, values already JSON-literal encoded;
- ``apply_sorter(sorter, value)`` / ``apply_filter(f, value, sorter)`` return a
  new decoded value with the same semantics applied locally.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

_SCALAR_TYPES = (bool, int, float, str)


def _check_bound(value: Any) -> None:
    if not isinstance(value, _SCALAR_TYPES):
        raise TypeError(
            f"Query bounds must be a number, boolean or string, got {type(value).__name__}"
        )


def _check_limit(limit: Any) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValueError(f"Query limits must be positive integers, got {limit!r}")


# --- Filters ---


@dataclass(frozen=True)
class StartAt:
    value: bool | int | float | str

    def __post_init__(self) -> None:
        _check_bound(self.value)


@dataclass(frozen=True)
class EndAt:
    value: bool | int | float | str

    def __post_init__(self) -> None:
        _check_bound(self.value)


@dataclass(frozen=True)
class EqualTo:
    value: bool | int | float | str

    def __post_init__(self) -> None:
        _check_bound(self.value)


@dataclass(frozen=True)
class LimitToFirst:
    limit: int

    def __post_init__(self) -> None:
        _check_limit(self.limit)


@dataclass(frozen=True)
class LimitToLast:
    limit: int

    def __post_init__(self) -> None:
        _check_limit(self.limit)


@dataclass(frozen=True)
class Shallow:
    pass


# --- Sorters ---


@dataclass(frozen=True)
class OrderByKey:
    pass


@dataclass(frozen=True)
class OrderByValue:
    pass


@dataclass(frozen=True)
class OrderByChild:
    path: str

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not self.path.strip("/"):
            raise ValueError("orderByChild requires a non-empty child path")


Filter = Union[StartAt, EndAt, EqualTo, LimitToFirst, LimitToLast, Shallow]
Sorter = Union[OrderByKey, OrderByValue, OrderByChild]

FILTER_TYPES: tuple[type, ...] = (StartAt, EndAt, EqualTo, LimitToFirst, LimitToLast, Shallow)
SORTER_TYPES: tuple[type, ...] = (OrderByKey, OrderByValue, OrderByChild)


# --- Ordering ---


def sort_rank(value: Any) -> tuple[int, Any]:
    """Total order over decoded JSON values.

    null < booleans < numbers < strings < objects; within a kind the natural
    order applies. Objects all rank equal.
    """
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4, 0)


def as_mapping(value: Any) -> dict[str, Any] | None:
    """Return ``value`` as an ordered mapping, or None for scalars.

    Arrays are the mapping of their index strings; null items are dropped.
    """
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        return {str(i): item for i, item in enumerate(value) if item is not None}
    return None


def resolve_child(value: Any, path: str) -> Any:
    """Descend ``path`` (slash separated) inside ``value``; None when missing."""
    current = value
    for segment in path.split("/"):
        if not segment:
            continue
        mapping = as_mapping(current)
        if mapping is None:
            return None
        current = mapping.get(segment)
        if current is None:
            return None
    return current


def comparison_value(sorter: Sorter | None, key: str, child: Any) -> Any:
    """The value an entry is ordered and bounded by under ``sorter``."""
    if isinstance(sorter, OrderByKey):
        return key
    if isinstance(sorter, OrderByValue):
        return child
    if isinstance(sorter, OrderByChild):
        return resolve_child(child, sorter.path)
    raise TypeError(f"Unknown sorter: {sorter!r}")


# --- URL effects ---


def _literal(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def query_params(op: Filter | Sorter) -> list[tuple[str, str]]:
    """Query-string contribution of a filter or sorter."""
    if isinstance(op, OrderByKey):
        return [("orderBy", _literal("$key"))]
    if isinstance(op, OrderByValue):
        return [("orderBy", _literal("$value"))]
    if isinstance(op, OrderByChild):
        return [("orderBy", _literal(op.path))]
    if isinstance(op, StartAt):
        return [("startAt", _literal(op.value))]
    if isinstance(op, EndAt):
        return [("endAt", _literal(op.value))]
    if isinstance(op, EqualTo):
        return [("equalTo", _literal(op.value))]
    if isinstance(op, LimitToFirst):
        return [("limitToFirst", _literal(op.limit))]
    if isinstance(op, LimitToLast):
        return [("limitToLast", _literal(op.limit))]
    if isinstance(op, Shallow):
        return [("shallow", "true")]
    raise TypeError(f"Unknown query operation: {op!r}")


# --- Value effects ---


def apply_sorter(sorter: Sorter, value: Any) -> Any:
    mapping = as_mapping(value)
    if mapping is None:
        return value

    if isinstance(sorter, OrderByKey):
        ordered = sorted(mapping.items(), key=lambda kv: kv[0])
    elif isinstance(sorter, (OrderByValue, OrderByChild)):
        ordered = sorted(
            mapping.items(),
            key=lambda kv: (sort_rank(comparison_value(sorter, kv[0], kv[1])), kv[0]),
        )
    else:
        raise TypeError(f"Unknown sorter: {sorter!r}")
    return dict(ordered)


def _within(f: Filter, rank: tuple[int, Any]) -> bool:
    bound = sort_rank(f.value)  # type: ignore[union-attr]
    if isinstance(f, StartAt):
        return rank >= bound
    if isinstance(f, EndAt):
        return rank <= bound
    return rank == bound


def apply_filter(f: Filter, value: Any, sorter: Sorter | None = None) -> Any:
    """Apply one filter to a decoded value.

    Bound filters need an ordering context; without a sorter they leave the
    value untouched.
    """
    mapping = as_mapping(value)
    if mapping is None:
        return value

    if isinstance(f, Shallow):
        return {
            k: True if isinstance(v, (dict, list)) else v for k, v in mapping.items()
        }
    if isinstance(f, LimitToFirst):
        return dict(list(mapping.items())[: f.limit])
    if isinstance(f, LimitToLast):
        return dict(list(mapping.items())[-f.limit :])
    if isinstance(f, (StartAt, EndAt, EqualTo)):
        if sorter is None:
            return value
        return {
            k: v
            for k, v in mapping.items()
            if _within(f, sort_rank(comparison_value(sorter, k, v)))
        }
    raise TypeError(f"Unknown filter: {f!r}")
