"""
Game Loop - Drives one play-through of a game definition.

The loop:
1. Build the initial state from the definition and the player count
2. Wrap the main flow in an implicit single-pass phase
3. Run it, suspending only while the answer collector waits for players
4. Report the winners once the game ends

A flow that runs out of blocks (or ends its outermost phase) finishes the
game without winners.
"""

from __future__ import annotations
import asyncio
from copy import deepcopy
from dataclasses import dataclass, field
import logging
import random
from typing import Any

from ..config import EngineSettings, get_settings
from ..definition.game_definition import GameDefinition
from ..engine_core.state import GameState
from ..engine_core.utils import lowercase_key, map_keys_deep
from ..engine_core.variables import from_plain
from ..errors import DefinitionError
from ..flow.blocks import PhaseDefinition, PhaseRepetition
from ..flow.input import AnswerCollector
from ..flow.interpreter import FlowInterpreter
from ..flow.result import FlowSignal
from ..views import ViewRenderer

logger = logging.getLogger(__name__)


@dataclass
class GameResult:
    """
    Result of a finished game.

    ended_by_signal is True when an endGame block finished the game.
    """
    winners: list[str] = field(default_factory=list)
    final_state: GameState | None = None
    ended_by_signal: bool = False

    @property
    def summary(self) -> str:
        if not self.winners:
            return "No winners."
        return f"Winners are: {', '.join(self.winners)}"


class GameController:
    """
    The main game driver.

    Usage:
        controller = GameController(definition, ScriptedAnswerCollector([...]))
        result = controller.play(num_players=2)
        print(result.summary)
    """

    def __init__(
        self,
        definition: GameDefinition,
        answer_collector: AnswerCollector,
        view_renderer: ViewRenderer | None = None,
        settings: EngineSettings | None = None,
        rng: random.Random | None = None,
    ):
        self.definition = definition
        self.settings = settings or get_settings()
        self.rng = rng or random.Random(self.settings.shuffle_seed)
        self.interpreter = FlowInterpreter(
            answer_collector=answer_collector,
            phases=definition.phases,
            views=definition.views,
            view_renderer=view_renderer,
            rng=self.rng,
            max_phase_iterations=self.settings.max_phase_iterations,
        )

    def create_initial_state(
        self,
        num_players: int,
        player_names: list[str] | None = None,
    ) -> GameState:
        """
        Build the starting state.

        Global variables come first, then the playing-card deck and one
        player record per player built from the player template.
        """
        if num_players not in self.definition.player_count:
            raise DefinitionError([
                f"{self.definition.name} supports {self.definition.player_count.min}"
                f"-{self.definition.player_count.max} players, got {num_players}"
            ])
        if player_names is not None and len(player_names) != num_players:
            raise DefinitionError([
                f"Expected {num_players} player names, got {len(player_names)}"
            ])

        players = []
        for i in range(num_players):
            player: dict[str, Any] = deepcopy(self.definition.player_variables)
            player["id"] = i + 1
            player["name"] = player_names[i] if player_names else f"Player {i + 1}"
            players.append(player)

        raw: dict[str, Any] = deepcopy(self.definition.global_variables)
        raw["playingCardDeck"] = {
            "collection": deepcopy(self.definition.playing_card_deck),
        }
        raw["players"] = players

        variables = from_plain(map_keys_deep(raw, lowercase_key))
        return GameState(variables=variables)

    async def run(
        self,
        num_players: int,
        player_names: list[str] | None = None,
    ) -> GameResult:
        """Run the game from its initial state until it ends."""
        state = self.create_initial_state(num_players, player_names)
        logger.info("Starting %s with %d player(s).", self.definition.name, num_players)

        game_phase = PhaseDefinition(
            name="Game",
            blocks=self.definition.flow,
            repetition=PhaseRepetition.ONCE,
        )
        result = await self.interpreter.run_phase(game_phase, state, is_implicit=True)

        if result.signal is FlowSignal.END_GAME:
            logger.info("End of game. Winners are: %s", ", ".join(result.winners))
            return GameResult(
                winners=result.winners,
                final_state=result.state,
                ended_by_signal=True,
            )

        logger.info("End of game. No winners.")
        return GameResult(final_state=result.state)

    def play(
        self,
        num_players: int,
        player_names: list[str] | None = None,
    ) -> GameResult:
        """Synchronous wrapper around run()."""
        return asyncio.run(self.run(num_players, player_names))
