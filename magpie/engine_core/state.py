"""
Game State - Snapshot of every variable in a running game.

Design principles:
- Immutable by convention: blocks never mutate a state they were handed,
  they build a successor with clone() or with_updates()
- One source of truth: a single lowercase-keyed variable container
- Expression evaluation is bound to the snapshot
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

from .expression import ExpressionContext, evaluate
from .variables import get_variable, normalize_name


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    Holds the variable container that every expression reads from.
    """
    variables: dict[str, Any] = field(default_factory=dict)

    def evaluate(self, expression: Any, resolve_locations: bool = True) -> Any:
        """
        Evaluate a definition value against this state.

        Strings starting with '=' are formulas; other values pass through.
        """
        context = ExpressionContext(variables=self.variables)
        return evaluate(expression, context, resolve_locations)

    def get(self, name: str, resolve_locations: bool = True) -> Any:
        """Get a top-level variable by (case-insensitive) name."""
        return get_variable(self.variables, name, resolve_locations)

    def with_updates(self, updates: dict[str, Any]) -> GameState:
        """
        Return new state with some top-level variables replaced.

        This is a shallow merge; nested values are shared with this state,
        so callers that go on to mutate nested values must clone() first.
        """
        new_variables = dict(self.variables)
        for name, value in updates.items():
            new_variables[normalize_name(name)] = value
        return GameState(variables=new_variables)

    def clone(self) -> GameState:
        """
        Deep copy the state.

        References shared inside this snapshot stay shared inside the copy.
        """
        return GameState(variables=deepcopy(self.variables))
