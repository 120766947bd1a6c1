"""
Phases - Loop control for sequences of blocks.

A phase runs its blocks in order, feeding each block's resulting state
into the next, for as long as its repetition strategy allows:
- OncePhase: exactly one pass
- ForeverPhase: until a block ends the phase or the game
- EachPlayerPhase: one pass per player, optionally starting from a
  given player

Lifecycle per run: before_loop -> (on_loop_start -> blocks)* -> done.
A `currentindex` variable counts passes starting at 1.

End-phase results stop a phase. A regular phase absorbs them and returns
normally; an implicit phase (synthesized for a condition branch or the
top-level flow) hands them to its caller so they reach the phase the
author actually wrote. End-game results always go up untouched.
"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from ..engine_core.state import GameState
from ..engine_core.utils import shift_array
from ..engine_core.variables import type_name
from ..errors import EvaluationError, IterationLimitError
from .blocks import FlowBlock, PhaseDefinition, PhaseRepetition
from .result import BlockResult, FlowSignal

if TYPE_CHECKING:
    from .interpreter import FlowInterpreter

logger = logging.getLogger(__name__)


class BasePhase:
    """
    The base phase class.

    Phase objects hold loop state, so a new one is created for every run.
    """

    def __init__(
        self,
        interpreter: FlowInterpreter,
        definition: PhaseDefinition,
        is_implicit: bool = False,
    ):
        self.interpreter = interpreter
        self.definition = definition
        self.name = definition.name
        self.blocks: list[FlowBlock] = definition.blocks
        self.is_implicit = is_implicit

    def should_execute(self) -> bool:
        raise NotImplementedError

    def before_loop(self, state: GameState) -> GameState:
        """Lifecycle hook that runs before the loop begins."""
        return state

    def on_loop_start(self, state: GameState) -> GameState:
        """Lifecycle hook that runs at the start of each pass."""
        return state

    async def execute(self, state: GameState) -> BlockResult:
        """
        Run the phase's blocks as long as should_execute() allows.

        Returns a CONTINUE result when the phase finishes normally, or the
        END_PHASE/END_GAME result that has to travel further up.
        """
        logger.info("Beginning new phase: %s.", self.name)

        current_index = 1
        state = self.before_loop(state).with_updates({"currentindex": current_index})
        limit = self.interpreter.max_phase_iterations

        with self.interpreter.view_scope(self.definition.view):
            while self.should_execute():
                if limit is not None and current_index > limit:
                    raise IterationLimitError(
                        f"Phase {self.name} exceeded {limit} iterations."
                    )

                state = self.on_loop_start(state)
                for block in self.blocks:
                    result = await self.interpreter.execute(block, state)
                    if result.signal is FlowSignal.END_PHASE and not self.is_implicit:
                        logger.info("End of phase: %s.", self.name)
                        return BlockResult.proceed(result.state)
                    if not result.should_continue:
                        logger.info("End of phase: %s.", self.name)
                        return result
                    state = result.state

                current_index += 1
                state = state.with_updates({"currentindex": current_index})

        logger.info("End of phase: %s.", self.name)
        return BlockResult.proceed(state)


class OncePhase(BasePhase):
    """A phase that runs through all of its blocks exactly once."""

    has_looped_through_once: bool = False

    def before_loop(self, state: GameState) -> GameState:
        self.has_looped_through_once = False
        return state

    def should_execute(self) -> bool:
        return not self.has_looped_through_once

    def on_loop_start(self, state: GameState) -> GameState:
        self.has_looped_through_once = True
        return state


class ForeverPhase(BasePhase):
    """
    A phase that keeps running through its blocks until one of them
    ends the phase or the game.
    """

    def should_execute(self) -> bool:
        return True


class EachPlayerPhase(BasePhase):
    """
    A phase that runs through its blocks once per player.

    Player order is 1..N rotated so that the starting player goes first.
    Each pass binds `current` to the player whose turn it is.
    """

    def __init__(
        self,
        interpreter: FlowInterpreter,
        definition: PhaseDefinition,
        is_implicit: bool = False,
    ):
        super().__init__(interpreter, definition, is_implicit)
        self.starting_player = definition.starting_player
        self.player_ids_remaining: list[int] = []

    def get_player_order_shift(self, state: GameState) -> int:
        if self.starting_player is None:
            return 0

        starting_player = state.evaluate(self.starting_player)
        if isinstance(starting_player, dict):
            player_id = starting_player.get("id")
        else:
            player_id = starting_player
        if not isinstance(player_id, (int, float)) or isinstance(player_id, bool):
            raise EvaluationError(
                f"Starting player must be a player or a player id, got {type_name(starting_player)}."
            )
        if isinstance(player_id, float):
            if not player_id.is_integer():
                raise EvaluationError(f"Starting player id {player_id} is not a whole number.")
            player_id = int(player_id)
        return player_id - 1

    def get_player_order(self, state: GameState) -> list[int]:
        players = _get_players(state)
        player_ids = list(range(1, len(players) + 1))
        return shift_array(player_ids, self.get_player_order_shift(state))

    def before_loop(self, state: GameState) -> GameState:
        self.player_ids_remaining = self.get_player_order(state)
        return state

    def should_execute(self) -> bool:
        return len(self.player_ids_remaining) > 0

    def on_loop_start(self, state: GameState) -> GameState:
        current_player_id = self.player_ids_remaining.pop(0)
        # `current` is the same record as in `players`, so updates through
        # either name land in both.
        current_player = _get_players(state)[current_player_id - 1]
        logger.info("Current player is now %s.", current_player.get("name"))
        return state.with_updates({"current": current_player})


def _get_players(state: GameState) -> list[dict]:
    players = state.get("players")
    if not isinstance(players, list):
        raise EvaluationError(f"players must be a list, got {type_name(players)}.")
    return players


PHASE_CLASSES: dict[PhaseRepetition, type[BasePhase]] = {
    PhaseRepetition.ONCE: OncePhase,
    PhaseRepetition.FOREVER: ForeverPhase,
    PhaseRepetition.FOR_EACH_PLAYER: EachPlayerPhase,
}


def create_phase(
    interpreter: FlowInterpreter,
    definition: PhaseDefinition,
    is_implicit: bool = False,
) -> BasePhase:
    """Factory for the phase class matching a definition's repetition."""
    phase_cls = PHASE_CLASSES.get(definition.repetition)
    if phase_cls is None:
        raise EvaluationError(f"Unknown phase repetition: {definition.repetition!r}")
    return phase_cls(interpreter, definition, is_implicit)
