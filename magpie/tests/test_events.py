"""
Tests for event blocks.

Tests:
- Setting plain, nested and component-location variables
- Moving components between collections and component locations
- Shuffling
- End-phase and end-game signals
"""

import random

import pytest

from ..engine_core.variables import CollectionLocation, ComponentLocation
from ..errors import EvaluationError
from ..flow.blocks import (
    EndGameBlock,
    EndPhaseBlock,
    MoveComponentBlock,
    PickMethod,
    SetVariableBlock,
    ShuffleBlock,
)
from ..flow.events import EventExecutor
from ..flow.result import FlowSignal
from .conftest import make_state


@pytest.fixture
def executor() -> EventExecutor:
    return EventExecutor(random.Random(7))


class TestSetVariable:
    """Tests for the setVariable event."""

    def test_set_top_level(self, executor, card_state):
        """A formula's value is stored under the variable name."""
        result = executor.execute(SetVariableBlock("Round", "=count(deck) + 1"), card_state)
        assert result.signal is FlowSignal.CONTINUE
        assert result.state.get("round") == 4

    def test_literal_value(self, executor, card_state):
        """Non-formula values are stored as they are."""
        result = executor.execute(SetVariableBlock("greeting", "hello"), card_state)
        assert result.state.get("greeting") == "hello"

    def test_does_not_modify_input_state(self, executor, card_state):
        """The incoming state is left untouched."""
        result = executor.execute(SetVariableBlock("round", 1), card_state)
        assert "round" not in card_state.variables
        assert result.state.get("round") == 1

    def test_nested_path(self, executor, card_state):
        """Dotted paths reach into nested objects."""
        state = card_state.with_updates({"current": card_state.get("players")[0]})
        result = executor.execute(SetVariableBlock("current.score", "=current.score + 5"), state)
        assert result.state.get("current")["score"] == 5
        # current is the same record as the first player
        assert result.state.get("players")[0]["score"] == 5
        assert card_state.get("players")[0]["score"] == 0

    def test_component_location_is_kept(self, executor, card_state):
        """Setting a component location replaces its contents only."""
        result = executor.execute(SetVariableBlock("played", "=deck[1]"), card_state)
        played = result.state.get("played", resolve_locations=False)
        assert isinstance(played, ComponentLocation)
        assert played.component == {"suit": "hearts", "rank": 1}

    def test_missing_intermediate(self, executor, card_state):
        """Every name on the path but the last must exist."""
        with pytest.raises(EvaluationError, match="Variable missing is not defined."):
            executor.execute(SetVariableBlock("missing.score", 1), card_state)


class TestMoveComponent:
    """Tests for the moveComponent event."""

    def test_draw(self, executor, card_state):
        """Draw takes the first component and appends it to the destination."""
        block = MoveComponentBlock("=deck", "=discard", PickMethod.DRAW)
        result = executor.execute(block, card_state)
        assert result.state.get("deck") == [
            {"suit": "spades", "rank": 2},
            {"suit": "hearts", "rank": 3},
        ]
        assert result.state.get("discard") == [{"suit": "hearts", "rank": 1}]
        assert len(card_state.get("deck")) == 3

    def test_find(self, executor, card_state):
        """Find takes the first component equal to the expression's value."""
        block = MoveComponentBlock(
            "=deck", "=discard", PickMethod.FIND, "=find(deck, c => c.suit == 'spades')"
        )
        result = executor.execute(block, card_state)
        assert result.state.get("discard") == [{"suit": "spades", "rank": 2}]
        assert len(result.state.get("deck")) == 2

    def test_find_without_match(self, executor, card_state):
        """Find fails when nothing in the collection matches."""
        block = MoveComponentBlock("=deck", "=discard", PickMethod.FIND, "=99")
        with pytest.raises(EvaluationError):
            executor.execute(block, card_state)

    def test_collection_requires_pick_method(self, executor, card_state):
        """Collections cannot be moved from without a pick method."""
        block = MoveComponentBlock("=deck", "=discard")
        with pytest.raises(EvaluationError, match="A pick method must be provided"):
            executor.execute(block, card_state)

    def test_empty_collection(self, executor, card_state):
        """Drawing from an empty collection fails."""
        block = MoveComponentBlock("=discard", "=deck", PickMethod.DRAW)
        with pytest.raises(EvaluationError):
            executor.execute(block, card_state)

    def test_round_trip_through_component(self, executor, card_state):
        """Moving collection -> empty component -> same collection restores it."""
        to_slot = MoveComponentBlock("=deck", "=played", PickMethod.DRAW)
        state = executor.execute(to_slot, card_state).state
        assert state.get("played") == {"suit": "hearts", "rank": 1}

        back = MoveComponentBlock("=played", "=deck")
        state = executor.execute(back, state).state
        assert state.get("played") is None
        # Drawn from the top, returned to the bottom
        assert state.get("deck") == [
            {"suit": "spades", "rank": 2},
            {"suit": "hearts", "rank": 3},
            {"suit": "hearts", "rank": 1},
        ]

    def test_empty_component(self, executor, card_state):
        """Moving out of an empty component location fails."""
        block = MoveComponentBlock("=played", "=deck")
        with pytest.raises(EvaluationError, match="There is no component"):
            executor.execute(block, card_state)

    def test_non_location(self, executor, card_state):
        """Both ends must be locations."""
        block = MoveComponentBlock("=deck", "=players", PickMethod.DRAW)
        with pytest.raises(EvaluationError, match="not a location"):
            executor.execute(block, card_state)

    def test_move_into_player_hand(self, executor, card_state):
        """Nested locations are reached through property access."""
        block = MoveComponentBlock("=deck", "=players[2].hand", PickMethod.DRAW)
        result = executor.execute(block, card_state)
        assert result.state.get("players")[1]["hand"] == CollectionLocation(
            collection=[{"suit": "hearts", "rank": 1}]
        )


class TestShuffle:
    """Tests for the shuffle event."""

    def test_shuffle_is_seeded(self, card_state):
        """The same seed gives the same order."""
        first = EventExecutor(random.Random(3)).execute(ShuffleBlock("deck"), card_state)
        second = EventExecutor(random.Random(3)).execute(ShuffleBlock("deck"), card_state)
        assert first.state.get("deck") == second.state.get("deck")
        assert sorted(c["rank"] for c in first.state.get("deck")) == [1, 2, 3]

    def test_shuffle_nested(self, executor):
        """Shuffle accepts a dotted path."""
        state = make_state({"table": {"pile": {"collection": [1, 2, 3, 4]}}})
        result = executor.execute(ShuffleBlock("table.pile"), state)
        assert sorted(result.state.get("table")["pile"].collection) == [1, 2, 3, 4]

    def test_shuffle_non_collection(self, executor, card_state):
        """Only collections can be shuffled."""
        with pytest.raises(EvaluationError, match="is not a collection and cannot be shuffled"):
            executor.execute(ShuffleBlock("played"), card_state)


class TestSignals:
    """Tests for endPhase and endGame."""

    def test_end_phase(self, executor, card_state):
        """endPhase returns an END_PHASE result."""
        result = executor.execute(EndPhaseBlock(), card_state)
        assert result.signal is FlowSignal.END_PHASE
        assert result.state is card_state

    def test_end_game(self, executor, card_state):
        """endGame reports the winners' names."""
        result = executor.execute(EndGameBlock("=[players[2], players[4]]"), card_state)
        assert result.signal is FlowSignal.END_GAME
        assert result.winners == ["Player 2", "Player 4"]

    def test_end_game_without_winners(self, executor, card_state):
        """An empty list means nobody won."""
        result = executor.execute(EndGameBlock("=[]"), card_state)
        assert result.winners == []

    def test_end_game_requires_players(self, executor, card_state):
        """Winners must be player records."""
        with pytest.raises(EvaluationError):
            executor.execute(EndGameBlock("=[1, 2]"), card_state)
        with pytest.raises(EvaluationError):
            executor.execute(EndGameBlock("=players[1]"), card_state)
