"""
Variable Model - Values that live in the game state.

A variable is one of:
- None, bool, int, float, str
- dict[str, Variable] (a variable container, keys are lowercase)
- list[Variable]
- a Location (ComponentLocation or CollectionLocation)

Locations are board positions. Raw definitions spell them as mappings with
a "component" or "collection" key; from_plain() turns those into the typed
variants below and to_plain() turns them back for display.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Union

from ..errors import EvaluationError


@dataclass
class ComponentLocation:
    """A location holding at most one component."""
    component: dict[str, Any] | None = None


@dataclass
class CollectionLocation:
    """
    A location holding an ordered collection of components.

    The first component is the top of the collection (the next one drawn).
    """
    collection: list[Any] = field(default_factory=list)


Location = Union[ComponentLocation, CollectionLocation]
Variable = Union[None, bool, int, float, str, dict, list, ComponentLocation, CollectionLocation]
VariableContainer = dict[str, Any]


def is_component_location(value: Any) -> bool:
    return isinstance(value, ComponentLocation)


def is_collection_location(value: Any) -> bool:
    return isinstance(value, CollectionLocation)


def is_location(value: Any) -> bool:
    return isinstance(value, (ComponentLocation, CollectionLocation))


def normalize_name(name: str) -> str:
    """Variable names are stored and looked up in lowercase."""
    return name.lower()


def resolve_location(value: Any) -> Any:
    """Unwrap a location to its component or its list of components."""
    if is_component_location(value):
        return value.component
    if is_collection_location(value):
        return value.collection
    return value


def type_name(value: Any) -> str:
    """Human-readable type name used in error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "list"
    if is_component_location(value):
        return "component location"
    if is_collection_location(value):
        return "collection location"
    if isinstance(value, dict):
        return "object"
    if callable(value):
        return "function"
    return type(value).__name__


def get_variable(
    container: Any,
    name: str,
    resolve_locations: bool = True,
) -> Any:
    """
    Look up a variable by name in a container.

    The name is normalized before lookup. Locations are unwrapped unless
    resolve_locations is False, in which case the live wrapper is returned
    so the caller can mutate it.
    """
    if not isinstance(container, dict):
        raise EvaluationError(
            f"{type_name(container)} type has no property {name}."
        )

    stored_name = normalize_name(name)
    if stored_name not in container:
        raise EvaluationError(f"Variable {name} is not defined.")

    variable = container[stored_name]
    if resolve_locations:
        return resolve_location(variable)
    return variable


def values_equal(left: Any, right: Any) -> bool:
    """
    Strict equality for variables.

    Booleans never equal numbers; containers compare structurally.
    """
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(
            values_equal(left[k], right[k]) for k in left
        )
    if is_component_location(left) and is_component_location(right):
        return values_equal(left.component, right.component)
    if is_collection_location(left) and is_collection_location(right):
        return values_equal(left.collection, right.collection)
    return left == right


def from_plain(raw: Any) -> Any:
    """
    Convert plain (JSON-like) data into variables.

    Mappings carrying a "component" or "collection" key become typed
    locations. Keys must already be normalized (see utils.map_keys_deep).
    """
    if isinstance(raw, dict):
        converted = {k: from_plain(v) for k, v in raw.items()}
        if "collection" in converted:
            collection = converted["collection"]
            if not isinstance(collection, list):
                raise EvaluationError(
                    f"A collection must be a list, got {type_name(collection)}."
                )
            return CollectionLocation(collection=collection)
        if "component" in converted:
            return ComponentLocation(component=converted["component"])
        return converted
    if isinstance(raw, (list, tuple)):
        return [from_plain(item) for item in raw]
    return raw


def to_plain(value: Any) -> Any:
    """Convert variables back to JSON-serializable data."""
    if is_component_location(value):
        return {"component": to_plain(value.component)}
    if is_collection_location(value):
        return {"collection": [to_plain(c) for c in value.collection]}
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_plain(v) for v in value]
    if callable(value):
        return "<function>"
    return value
