"""
Event Executor - Applies event blocks to game state.

Every event works on a deep copy of the incoming state, so the caller's
state is never modified. Moves and shuffles look up locations with
resolve_locations=False to get the live wrappers inside that copy and
mutate them in place.
"""

from __future__ import annotations
import logging
import random
from typing import Any, Callable

from ..engine_core.state import GameState
from ..engine_core.utils import pretty_print
from ..engine_core.variables import (
    ComponentLocation,
    get_variable,
    is_collection_location,
    is_component_location,
    normalize_name,
    resolve_location,
    type_name,
    values_equal,
)
from ..errors import EvaluationError
from .blocks import (
    EndGameBlock,
    EndPhaseBlock,
    EventBlock,
    EventType,
    MoveComponentBlock,
    PickMethod,
    SetVariableBlock,
    ShuffleBlock,
)
from .result import BlockResult

logger = logging.getLogger(__name__)


class EventExecutor:
    """
    Executes event blocks.

    The random source used for shuffling can be injected for
    reproducible games.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def execute(self, block: EventBlock, state: GameState) -> BlockResult:
        handlers: dict[EventType, Callable[[Any, GameState], BlockResult]] = {
            EventType.SET_VARIABLE: self._set_variable,
            EventType.MOVE_COMPONENT: self._move_component,
            EventType.SHUFFLE: self._shuffle,
            EventType.END_PHASE: self._end_phase,
            EventType.END_GAME: self._end_game,
        }

        handler = handlers.get(getattr(block, "event_type", None))
        if handler is None:
            raise EvaluationError(f"Unknown event block: {block!r}")
        return handler(block, state)

    # -- set variable ------------------------------------------------------

    def _set_variable(self, block: SetVariableBlock, state: GameState) -> BlockResult:
        """
        Assign an expression's value to a (possibly nested) variable.

        A variable that currently holds a component location keeps being a
        component location; only its contents change.
        """
        new_state = state.clone()
        container, leaf = _traverse_nested_container(new_state.variables, block.variable)
        value = new_state.evaluate(block.expression)

        logger.info("Updating %s.", block.variable)
        logger.debug("New value of %s: %s", block.variable, pretty_print(value))

        if is_component_location(container.get(leaf)):
            container[leaf] = ComponentLocation(component=value)
        else:
            container[leaf] = value
        return BlockResult.proceed(new_state)

    # -- move component ----------------------------------------------------

    def _move_component(self, block: MoveComponentBlock, state: GameState) -> BlockResult:
        new_state = state.clone()
        source = new_state.evaluate(block.source, resolve_locations=False)
        destination = new_state.evaluate(block.destination, resolve_locations=False)

        component = self._extract_component(block, new_state, source)
        self._place_component(component, destination)
        return BlockResult.proceed(new_state)

    def _extract_component(self, block: MoveComponentBlock, state: GameState, location: Any) -> Any:
        """Remove one component from a location and return it."""
        logger.debug("Extracting component from %s.", pretty_print(location))

        if is_collection_location(location):
            if block.pick_method is None:
                raise EvaluationError(
                    "A pick method must be provided when moving components from a collection."
                )
            if not location.collection:
                raise EvaluationError(f"Cannot take a component from empty collection {block.source}.")

            if block.pick_method is PickMethod.DRAW:
                return location.collection.pop(0)

            if block.pick_method is PickMethod.FIND:
                if block.pick_find_expression is None:
                    raise EvaluationError("A find expression must be provided for the find pick method.")
                component_to_find = state.evaluate(block.pick_find_expression)
                for i, component in enumerate(location.collection):
                    if values_equal(component, component_to_find):
                        return location.collection.pop(i)
                raise EvaluationError(
                    f"Component {pretty_print(component_to_find)} is not in {block.source}."
                )

            raise EvaluationError(f"Unknown pick method: {block.pick_method!r}")

        if is_component_location(location):
            if location.component is None:
                raise EvaluationError(f"There is no component at {block.source}.")
            component = location.component
            location.component = None
            return component

        raise EvaluationError(
            f"{type_name(location)} type is not a location and cannot be moved from."
        )

    def _place_component(self, component: Any, location: Any):
        """Put a component into a location."""
        if is_collection_location(location):
            logger.info("Adding component to collection of size %d.", len(location.collection))
            location.collection.append(component)
        elif is_component_location(location):
            logger.info("Replacing component at location.")
            location.component = component
        else:
            raise EvaluationError(
                f"{type_name(location)} type is not a location and cannot be moved to."
            )

    # -- shuffle -----------------------------------------------------------

    def _shuffle(self, block: ShuffleBlock, state: GameState) -> BlockResult:
        new_state = state.clone()
        container, leaf = _traverse_nested_container(new_state.variables, block.stack)
        location = get_variable(container, leaf, resolve_locations=False)

        if not is_collection_location(location):
            raise EvaluationError(
                f"Location of type {type_name(location)} is not a collection and cannot be shuffled."
            )

        logger.info("Shuffling %s.", block.stack)
        self.rng.shuffle(location.collection)
        return BlockResult.proceed(new_state)

    # -- signals -----------------------------------------------------------

    def _end_phase(self, block: EndPhaseBlock, state: GameState) -> BlockResult:
        logger.info("Ending phase.")
        return BlockResult.end_phase(state)

    def _end_game(self, block: EndGameBlock, state: GameState) -> BlockResult:
        """Evaluate the winning players and end the game with their names."""
        winning_players = state.evaluate(block.winners)
        if not isinstance(winning_players, list):
            raise EvaluationError(
                f"Winners must be a list of players, got {type_name(winning_players)}."
            )

        winners = []
        for player in winning_players:
            player = resolve_location(player)
            if not isinstance(player, dict) or "name" not in player:
                raise EvaluationError(
                    f"Winner {pretty_print(player)} is not a player record with a name."
                )
            winners.append(player["name"])

        logger.info("Ending game.")
        return BlockResult.end_game(state, winners)


def _traverse_nested_container(container: dict, name: str) -> tuple[dict, str]:
    """
    Walk a dotted variable path down to the container holding its leaf.

    Intermediate names are looked up like any variable, so a component
    location on the way is unwrapped to its component.
    """
    path = normalize_name(name).split(".")
    current = container
    for key in path[:-1]:
        current = get_variable(current, key)
    if not isinstance(current, dict):
        raise EvaluationError(
            f"{type_name(current)} type cannot hold variable {path[-1]}."
        )
    return current, path[-1]
