"""
Game Definition - Everything needed to start and run a game.

A definition is game-agnostic data: the variables each game starts with,
the variables each player starts with, named phases and views, and the
main flow of blocks.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..flow.blocks import FlowBlock, PhaseDefinition
from ..views import View


@dataclass
class PlayerCountRange:
    """Inclusive range of supported player counts."""
    min: int
    max: int

    def __contains__(self, num_players: int) -> bool:
        return self.min <= num_players <= self.max


@dataclass
class GameDefinition:
    """
    A complete game definition.

    Variable containers are stored as written; GameController normalizes
    them when it builds the initial state.
    """
    name: str
    player_count: PlayerCountRange
    flow: list[FlowBlock] = field(default_factory=list)
    global_variables: dict[str, Any] = field(default_factory=dict)
    player_variables: dict[str, Any] = field(default_factory=dict)
    playing_card_deck: list[dict[str, Any]] = field(default_factory=list)
    phases: dict[str, PhaseDefinition] = field(default_factory=dict)
    views: dict[str, View] = field(default_factory=dict)
