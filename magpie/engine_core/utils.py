"""Small list and mapping helpers shared by the engine."""

from __future__ import annotations
import json
from typing import Any, Callable, TypeVar

from .variables import to_plain

T = TypeVar("T")


def shift_array(items: list[T], num: int) -> list[T]:
    """
    Rotate a list to the left by num positions.

    Negative values rotate to the right and magnitudes larger than the
    list wrap around.
    """
    if not items:
        return []
    shift = num % len(items)
    return items[shift:] + items[:shift]


def map_keys_deep(obj: Any, fn: Callable[[Any, str], str]) -> Any:
    """Apply fn(value, key) to every mapping key, recursing into lists."""
    if isinstance(obj, dict):
        new_object = {}
        for key, value in obj.items():
            value = map_keys_deep(value, fn)
            new_object[fn(value, key)] = value
        return new_object
    if isinstance(obj, list):
        return [map_keys_deep(item, fn) for item in obj]
    return obj


def lowercase_key(_: Any, key: str) -> str:
    return str(key).lower()


def pretty_print(value: Any) -> str:
    return json.dumps(to_plain(value), indent=2, default=str)
