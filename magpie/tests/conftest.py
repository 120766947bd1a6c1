"""
Pytest fixtures for Magpie tests.
"""

import random
from typing import Any

import pytest

from ..config import EngineSettings
from ..engine_core.state import GameState
from ..engine_core.utils import lowercase_key, map_keys_deep
from ..engine_core.variables import from_plain
from ..flow.interpreter import FlowInterpreter
from ..session.answers import ScriptedAnswerCollector


def make_state(raw: dict[str, Any]) -> GameState:
    """Build a state from plain data the way the game driver does."""
    return GameState(variables=from_plain(map_keys_deep(raw, lowercase_key)))


def make_players(count: int, **template: Any) -> list[dict[str, Any]]:
    return [
        {"id": i + 1, "name": f"Player {i + 1}", **template}
        for i in range(count)
    ]


@pytest.fixture
def settings() -> EngineSettings:
    """Settings that ignore the environment."""
    return EngineSettings(
        log_level="DEBUG",
        shuffle_seed=1234,
        max_phase_iterations=None,
        default_players=None,
    )


@pytest.fixture
def collector() -> ScriptedAnswerCollector:
    return ScriptedAnswerCollector()


@pytest.fixture
def interpreter(collector: ScriptedAnswerCollector) -> FlowInterpreter:
    """Interpreter with a scripted collector and a seeded random source."""
    return FlowInterpreter(answer_collector=collector, rng=random.Random(1234))


@pytest.fixture
def card_state() -> GameState:
    """A small deck, an empty discard pile and four players."""
    return make_state({
        "Deck": {"collection": [
            {"Suit": "hearts", "Rank": 1},
            {"Suit": "spades", "Rank": 2},
            {"Suit": "hearts", "Rank": 3},
        ]},
        "Discard": {"collection": []},
        "Played": {"component": None},
        "Players": make_players(4, Score=0, Hand={"collection": []}),
    })


@pytest.fixture
def high_card_definition() -> dict[str, Any]:
    """
    Two players are dealt two cards each, then each plays one card.

    The highest rank played wins.
    """
    return {
        "name": "High Card",
        "playerCount": {"min": 2, "max": 4},
        "globalVariables": {"Round": 0},
        "playerVariables": {"Hand": {"collection": []}, "Score": 0},
        "playingCardDeck": [
            {"variables": {"Rank": 1}},
            {"variables": {"Rank": 2}},
            {"variables": {"Rank": 3}},
            {"variables": {"Rank": 4}},
        ],
        "phases": {
            "Deal": {
                "repetition": "forEachPlayer",
                "blocks": [
                    {
                        "type": "event",
                        "eventType": "moveComponent",
                        "source": "=playingCardDeck",
                        "destination": "=current.hand",
                        "pickMethod": "draw",
                    },
                    {
                        "type": "event",
                        "eventType": "moveComponent",
                        "source": "=playingCardDeck",
                        "destination": "=current.hand",
                        "pickMethod": "draw",
                    },
                ],
            },
            "Play": {
                "repetition": "forEachPlayer",
                "view": "Table",
                "blocks": [
                    {
                        "type": "input",
                        "form": [{
                            "name": "Choice",
                            "label": "Pick a card",
                            "type": "card",
                            "options": "=current.hand",
                            "isOptionValid": "=c => true",
                        }],
                    },
                    {
                        "type": "event",
                        "eventType": "setVariable",
                        "variable": "current.score",
                        "expression": "=Choice.rank",
                    },
                ],
            },
        },
        "views": {
            "Table": [
                {"label": "Current player", "expression": "=current.name"},
                {"label": "Hand", "expression": "=current.hand"},
            ],
        },
        "flow": [
            {"type": "phase", "phase": "Deal"},
            {"type": "phase", "phase": "Play"},
            {
                "type": "event",
                "eventType": "endGame",
                "winners": "=filter(players, p => p.score == max(map(players, q => q.score)))",
            },
        ],
    }
