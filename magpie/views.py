"""
Views - Human-readable renderings of game state.

A view is a list of labeled expressions. Phases and input blocks can name
a view; it is rendered right before the players are asked for input.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Protocol

from .engine_core.state import GameState
from .engine_core.utils import pretty_print

VIEW_BANNER = "***** VIEW *****"


@dataclass
class ViewElement:
    label: str
    expression: str


@dataclass
class View:
    """A named set of labeled expressions."""
    elements: list[ViewElement] = field(default_factory=list)

    def render(self, state: GameState) -> str:
        lines = [VIEW_BANNER]
        for element in self.elements:
            result = state.evaluate(element.expression)
            lines.append(f"{element.label}:\n{pretty_print(result)}")
        lines.append(VIEW_BANNER)
        return "\n".join(lines)


class ViewRenderer(Protocol):
    """Shows a view to the players."""

    def render(self, name: str, view: View, state: GameState) -> None:
        ...


class ConsoleViewRenderer:
    """Prints views to stdout."""

    def render(self, name: str, view: View, state: GameState) -> None:
        print(view.render(state))
