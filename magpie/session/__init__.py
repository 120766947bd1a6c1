"""
Session Module - Playing a game definition.

A session is one play-through:
- Created from a loaded GameDefinition and a player count
- Answers come from an AnswerCollector (scripted or console)
- Ends when an endGame block fires or the flow runs out

Sessions are EPHEMERAL: nothing is persisted between runs.
"""

from .answers import AnswerCollector, ConsoleAnswerCollector, ScriptedAnswerCollector
from .game_loop import GameController, GameResult

__all__ = [
    "AnswerCollector",
    "ConsoleAnswerCollector",
    "ScriptedAnswerCollector",
    "GameController",
    "GameResult",
]
