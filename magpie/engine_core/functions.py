"""
Function Library - Built-in functions callable from MXL expressions.

Function names are matched case-insensitively by the evaluator, so every
key in FUNCTIONS is lowercase. Higher-order functions (filter, map, find,
minby, maxby, sorted, any, all) take a callable, normally a lambda such as
`c => c.suit == "hearts"`.
"""

from __future__ import annotations
from typing import Any, Callable

from ..errors import EvaluationError
from .variables import type_name, values_equal


def _require_list(name: str, value: Any) -> list:
    if not isinstance(value, list):
        raise EvaluationError(
            f"{name} expects a list, got {type_name(value)}."
        )
    return value


def _require_callable(name: str, value: Any) -> Callable:
    if not callable(value):
        raise EvaluationError(
            f"{name} expects a function, got {type_name(value)}."
        )
    return value


def isnull(value: Any) -> bool:
    return value is None


def not_(value: Any) -> bool:
    return not value


def or_(*values: Any) -> bool:
    return any(values)


def and_(*values: Any) -> bool:
    return all(values)


def any_(items: list, predicate: Callable | None = None) -> bool:
    items = _require_list("any", items)
    if predicate is None:
        return any(items)
    predicate = _require_callable("any", predicate)
    return any(predicate(item) for item in items)


def all_(items: list, predicate: Callable | None = None) -> bool:
    items = _require_list("all", items)
    if predicate is None:
        return all(items)
    predicate = _require_callable("all", predicate)
    return all(predicate(item) for item in items)


def union(lists: list) -> list:
    """Combine a list of lists, keeping the first occurrence of each item."""
    combined: list = []
    for items in _require_list("union", lists):
        for item in _require_list("union", items):
            if not any(values_equal(item, existing) for existing in combined):
                combined.append(item)
    return combined


def count(items: list) -> int:
    return len(_require_list("count", items))


def sum_(items: list) -> int | float:
    return sum(_require_list("sum", items))


def min_(items: list) -> Any:
    items = _require_list("min", items)
    return min(items) if items else None


def max_(items: list) -> Any:
    items = _require_list("max", items)
    return max(items) if items else None


def minby(items: list, key: Callable) -> Any:
    items = _require_list("minby", items)
    key = _require_callable("minby", key)
    return min(items, key=key) if items else None


def maxby(items: list, key: Callable) -> Any:
    items = _require_list("maxby", items)
    key = _require_callable("maxby", key)
    return max(items, key=key) if items else None


def find(items: list, predicate: Callable) -> Any:
    items = _require_list("find", items)
    predicate = _require_callable("find", predicate)
    for item in items:
        if predicate(item):
            return item
    return None


def filter_(items: list, predicate: Callable) -> list:
    items = _require_list("filter", items)
    predicate = _require_callable("filter", predicate)
    return [item for item in items if predicate(item)]


def map_(items: list, fn: Callable) -> list:
    items = _require_list("map", items)
    fn = _require_callable("map", fn)
    return [fn(item) for item in items]


def sorted_(items: list, key: Callable | None = None) -> list:
    items = _require_list("sorted", items)
    if key is None:
        return sorted(items)
    return sorted(items, key=_require_callable("sorted", key))


def ifs(*args: Any) -> Any:
    """
    ifs(cond1, value1, cond2, value2, ..., default)

    Returns the value paired with the first truthy condition, otherwise
    the trailing default.
    """
    if not args:
        raise EvaluationError("ifs expects at least one argument.")
    for i in range(0, len(args) - 1, 2):
        if args[i]:
            return args[i + 1]
    return args[-1]


def if_(condition: Any, then: Any, else_: Any) -> Any:
    return ifs(condition, then, else_)


FUNCTIONS: dict[str, Callable[..., Any]] = {
    "isnull": isnull,
    "not": not_,
    "or": or_,
    "any": any_,
    "and": and_,
    "all": all_,
    "union": union,
    "count": count,
    "min": min_,
    "minby": minby,
    "max": max_,
    "maxby": maxby,
    "sum": sum_,
    "find": find,
    "filter": filter_,
    "map": map_,
    "if": if_,
    "ifs": ifs,
    "sorted": sorted_,
}
