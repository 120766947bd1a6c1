"""
Block results - What executing a block hands back to its caller.

Ending a phase or the game is ordinary control flow, not an error, so it
is reported through BlockResult.signal instead of an exception. Every
caller must look at the signal and either pass the result upward or
handle it:
- CONTINUE: carry on with result.state
- END_PHASE: handled by the nearest non-implicit phase
- END_GAME: handled only by the game driver
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ..engine_core.state import GameState


class FlowSignal(Enum):
    CONTINUE = "continue"
    END_PHASE = "end_phase"
    END_GAME = "end_game"


@dataclass(frozen=True)
class BlockResult:
    """Result of executing one block."""
    signal: FlowSignal
    state: GameState
    winners: list[str] = field(default_factory=list)

    @classmethod
    def proceed(cls, state: GameState) -> BlockResult:
        return cls(signal=FlowSignal.CONTINUE, state=state)

    @classmethod
    def end_phase(cls, state: GameState) -> BlockResult:
        return cls(signal=FlowSignal.END_PHASE, state=state)

    @classmethod
    def end_game(cls, state: GameState, winners: list[str]) -> BlockResult:
        return cls(signal=FlowSignal.END_GAME, state=state, winners=winners)

    @property
    def should_continue(self) -> bool:
        return self.signal is FlowSignal.CONTINUE
