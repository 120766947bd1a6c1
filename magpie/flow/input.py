"""
Input forms - Turning an input block into prompts and answers into state.

The engine does not talk to players itself. It hands a list of
FieldPrompts to an AnswerCollector and waits for one answer per field.
That await is the only point where a running game suspends.

Known limitation: choosing a card does not remove it from the collection
it was offered from. Flows that need that follow the input block with a
moveComponent block.
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Protocol

from ..engine_core.state import GameState
from ..engine_core.utils import pretty_print
from ..engine_core.variables import ComponentLocation, normalize_name, type_name, values_equal
from ..errors import EvaluationError, InputError
from .blocks import InputBlock, InputField, InputFieldType


@dataclass
class FieldPrompt:
    """
    A single question presented to a player.

    For CARD fields, choices holds the candidate cards that passed the
    field's validity predicate.
    """
    name: str
    label: str
    field_type: InputFieldType
    options_expression: str | None = None
    is_option_valid_expression: str | None = None
    choices: list[Any] = field(default_factory=list)


class AnswerCollector(Protocol):
    """Collects one answer per prompt, keyed by prompt name."""

    async def collect(self, prompts: list[FieldPrompt]) -> dict[str, Any]:
        ...


def build_prompts(block: InputBlock, state: GameState) -> list[FieldPrompt]:
    """Create the prompts for an input block's form."""
    return [_build_prompt(input_field, state) for input_field in block.form]


def _build_prompt(input_field: InputField, state: GameState) -> FieldPrompt:
    prompt = FieldPrompt(
        name=normalize_name(input_field.name),
        label=input_field.label,
        field_type=input_field.field_type,
    )
    if input_field.field_type is not InputFieldType.CARD:
        return prompt

    all_cards = state.evaluate(input_field.options)
    if not isinstance(all_cards, list):
        raise EvaluationError(
            f"Options for {input_field.name} must be a list, got {type_name(all_cards)}."
        )
    is_option_valid = state.evaluate(input_field.is_option_valid)
    if not callable(is_option_valid):
        raise EvaluationError(
            f"isOptionValid for {input_field.name} must be a function, got {type_name(is_option_valid)}."
        )

    prompt.options_expression = input_field.options
    prompt.is_option_valid_expression = input_field.is_option_valid
    prompt.choices = [card for card in all_cards if is_option_valid(card)]
    return prompt


def apply_answers(
    prompts: list[FieldPrompt],
    answers: dict[str, Any],
    state: GameState,
) -> GameState:
    """
    Check answers against their prompts and store them in a new state.

    Card answers are stored as component locations holding the card.
    """
    answers = {normalize_name(name): value for name, value in answers.items()}
    updates: dict[str, Any] = {}

    for prompt in prompts:
        if prompt.name not in answers:
            raise InputError(f"No answer was given for {prompt.name}.")
        answer = answers[prompt.name]

        if prompt.field_type is InputFieldType.BOOLEAN:
            if not isinstance(answer, bool):
                raise InputError(f"Answer for {prompt.name} must be a boolean.")
            updates[prompt.name] = answer

        elif prompt.field_type is InputFieldType.NUMBER:
            if isinstance(answer, bool) or not isinstance(answer, (int, float)):
                raise InputError(f"Answer for {prompt.name} must be a number.")
            updates[prompt.name] = answer

        elif prompt.field_type is InputFieldType.CARD:
            if not any(values_equal(answer, choice) for choice in prompt.choices):
                raise InputError(
                    f"Answer for {prompt.name} is not one of the offered cards: {pretty_print(answer)}"
                )
            updates[prompt.name] = ComponentLocation(component=deepcopy(answer))

        else:
            raise InputError(f"Unknown input field type: {prompt.field_type!r}")

    return state.with_updates(updates)
