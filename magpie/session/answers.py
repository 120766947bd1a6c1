"""
Answer collectors - Where input answers come from.

ScriptedAnswerCollector replays answers prepared up front (tests and
non-interactive runs). ConsoleAnswerCollector asks on stdin.
"""

from __future__ import annotations
import asyncio
from collections import deque
import logging
from typing import Any, Callable, Iterable

from ..engine_core.utils import pretty_print
from ..errors import InputError
from ..flow.blocks import InputFieldType
from ..flow.input import AnswerCollector, FieldPrompt

logger = logging.getLogger(__name__)

__all__ = ["AnswerCollector", "ConsoleAnswerCollector", "ScriptedAnswerCollector"]


class ScriptedAnswerCollector:
    """
    Answers each input block with the next prepared dict.

    Every request is recorded in `requests` so tests can inspect what was
    asked and which cards were offered.
    """

    def __init__(self, answers: Iterable[dict[str, Any]] = ()):
        self._answers: deque[dict[str, Any]] = deque(answers)
        self.requests: list[list[FieldPrompt]] = []

    def add(self, answers: dict[str, Any]):
        self._answers.append(answers)

    @property
    def remaining(self) -> int:
        return len(self._answers)

    async def collect(self, prompts: list[FieldPrompt]) -> dict[str, Any]:
        self.requests.append(prompts)
        if not self._answers:
            raise InputError(
                f"No scripted answers left for {', '.join(p.name for p in prompts)}."
            )
        return self._answers.popleft()


class ConsoleAnswerCollector:
    """Asks every prompt on the console, re-asking until the answer parses."""

    def __init__(self, read_line: Callable[[str], str] = input):
        self.read_line = read_line

    async def collect(self, prompts: list[FieldPrompt]) -> dict[str, Any]:
        answers: dict[str, Any] = {}
        for prompt in prompts:
            answers[prompt.name] = await self._ask(prompt)
        return answers

    async def _ask(self, prompt: FieldPrompt) -> Any:
        if prompt.field_type is InputFieldType.CARD:
            if not prompt.choices:
                raise InputError(f"There are no valid cards to choose for {prompt.name}.")
            for i, choice in enumerate(prompt.choices, start=1):
                print(f"  {i}) {pretty_print(choice)}")

        while True:
            raw = (await asyncio.to_thread(self.read_line, f"{prompt.label}: ")).strip()
            try:
                return self._parse(prompt, raw)
            except ValueError as exc:
                print(exc)

    def _parse(self, prompt: FieldPrompt, raw: str) -> Any:
        if prompt.field_type is InputFieldType.BOOLEAN:
            lowered = raw.lower()
            if lowered in ("y", "yes", "true"):
                return True
            if lowered in ("n", "no", "false"):
                return False
            raise ValueError("Please answer y or n.")

        if prompt.field_type is InputFieldType.NUMBER:
            try:
                return int(raw)
            except ValueError:
                pass
            try:
                return float(raw)
            except ValueError:
                raise ValueError("Please enter a number.") from None

        # Card: pick by position in the list of choices
        try:
            index = int(raw)
        except ValueError:
            raise ValueError(f"Please enter a number from 1 to {len(prompt.choices)}.") from None
        if not 1 <= index <= len(prompt.choices):
            raise ValueError(f"Please enter a number from 1 to {len(prompt.choices)}.")
        return prompt.choices[index - 1]
