"""
Definition Loader - Builds a GameDefinition from JSON.

Raw data is checked against the pydantic schemas and converted into the
engine's dataclasses. All problems found are reported together in one
DefinitionError.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from ..errors import DefinitionError
from ..flow.blocks import (
    ConditionBlock,
    EndGameBlock,
    EndPhaseBlock,
    FlowBlock,
    InputBlock,
    InputField,
    MoveComponentBlock,
    PhaseBlock,
    PhaseDefinition,
    SetVariableBlock,
    ShuffleBlock,
)
from ..views import View, ViewElement
from .game_definition import GameDefinition, PlayerCountRange
from .schemas import (
    ConditionSchema,
    EndGameSchema,
    EndPhaseSchema,
    GameDefinitionSchema,
    InputSchema,
    MoveComponentSchema,
    PhaseBlockSchema,
    SetVariableSchema,
    ShuffleSchema,
)
from .validation import validate_definition

logger = logging.getLogger(__name__)

EVENT_SCHEMAS: dict[str, type[BaseModel]] = {
    "setVariable": SetVariableSchema,
    "moveComponent": MoveComponentSchema,
    "shuffle": ShuffleSchema,
    "endPhase": EndPhaseSchema,
    "endGame": EndGameSchema,
}


def load_definition(path: str | Path, validate: bool = True) -> GameDefinition:
    """
    Load a game definition from a JSON file.

    Raises DefinitionError if the file is not valid JSON, does not match
    the schema, or (with validate=True) fails validation.
    """
    path = Path(path)
    logger.info("Reading game definition from %s.", path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DefinitionError([f"{path}: invalid JSON: {exc}"]) from exc
    return parse_definition(raw, validate=validate)


def parse_definition(raw: Any, validate: bool = True) -> GameDefinition:
    """Build a GameDefinition from already-decoded JSON data."""
    try:
        schema = GameDefinitionSchema.model_validate(raw)
    except ValidationError as exc:
        raise DefinitionError(_format_errors("definition", exc)) from exc

    errors: list[str] = []
    player_count = _build_player_count(schema, errors)
    phases = {
        name: PhaseDefinition(
            name=name,
            blocks=_build_blocks(phase.blocks, f"phases.{name}", errors),
            repetition=phase.repetition,
            starting_player=phase.starting_player,
            view=phase.view,
        )
        for name, phase in schema.phases.items()
    }
    flow = _build_blocks(schema.flow, "flow", errors)

    if errors:
        raise DefinitionError(errors)

    definition = GameDefinition(
        name=schema.name,
        player_count=player_count,
        flow=flow,
        global_variables=schema.global_variables,
        player_variables=schema.player_variables,
        playing_card_deck=[card.variables for card in schema.playing_card_deck],
        phases=phases,
        views={
            name: View(elements=[ViewElement(e.label, e.expression) for e in elements])
            for name, elements in schema.views.items()
        },
    )

    if validate:
        result = validate_definition(definition)
        for warning in result.warnings:
            logger.warning("%s", warning)
        if not result.valid:
            raise DefinitionError(result.errors)

    return definition


def _build_player_count(schema: GameDefinitionSchema, errors: list[str]) -> PlayerCountRange:
    if schema.player_count is not None:
        return PlayerCountRange(min=schema.player_count.min, max=schema.player_count.max)
    if schema.num_players is not None:
        return PlayerCountRange(min=schema.num_players, max=schema.num_players)
    errors.append("definition: playerCount or numPlayers is required")
    return PlayerCountRange(min=1, max=1)


def _build_blocks(raw_blocks: list[dict[str, Any]], path: str, errors: list[str]) -> list[FlowBlock]:
    blocks = []
    for i, raw in enumerate(raw_blocks):
        block = _build_block(raw, f"{path}[{i}]", errors)
        if block is not None:
            blocks.append(block)
    return blocks


def _build_block(raw: Any, path: str, errors: list[str]) -> FlowBlock | None:
    """Validate one raw block and convert it; returns None on error."""
    if not isinstance(raw, dict):
        errors.append(f"{path}: a block must be an object")
        return None

    block_type = raw.get("type")
    try:
        if block_type == "event":
            schema_cls = EVENT_SCHEMAS.get(raw.get("eventType"))
            if schema_cls is None:
                errors.append(f"{path}: unknown eventType {raw.get('eventType')!r}")
                return None
            return _build_event(schema_cls.model_validate(raw))

        if block_type == "condition":
            schema = ConditionSchema.model_validate(raw)
            return ConditionBlock(
                expression=schema.expression,
                when_true=_build_blocks(schema.when_true, f"{path}.whenTrue", errors),
            )

        if block_type == "input":
            schema = InputSchema.model_validate(raw)
            return InputBlock(
                form=[
                    InputField(
                        name=f.name,
                        label=f.label or f.name,
                        field_type=f.type,
                        options=f.options,
                        is_option_valid=f.is_option_valid,
                    )
                    for f in schema.form
                ],
                view=schema.view,
            )

        if block_type == "phase":
            schema = PhaseBlockSchema.model_validate(raw)
            blocks = None
            if schema.blocks is not None:
                blocks = _build_blocks(schema.blocks, f"{path}.blocks", errors)
            return PhaseBlock(
                phase=schema.phase,
                blocks=blocks,
                repetition=schema.repetition,
                starting_player=schema.starting_player,
                name=schema.name,
            )
    except ValidationError as exc:
        errors.extend(_format_errors(path, exc))
        return None

    errors.append(f"{path}: unknown block type {block_type!r}")
    return None


def _build_event(schema: BaseModel) -> FlowBlock:
    if isinstance(schema, SetVariableSchema):
        return SetVariableBlock(variable=schema.variable, expression=schema.expression)
    if isinstance(schema, MoveComponentSchema):
        return MoveComponentBlock(
            source=schema.source,
            destination=schema.destination,
            pick_method=schema.pick_method,
            pick_find_expression=schema.pick_find_expression,
        )
    if isinstance(schema, ShuffleSchema):
        return ShuffleBlock(stack=schema.stack)
    if isinstance(schema, EndPhaseSchema):
        return EndPhaseBlock()
    if isinstance(schema, EndGameSchema):
        return EndGameBlock(winners=schema.winners)
    raise DefinitionError([f"Unsupported event schema: {type(schema).__name__}"])


def _format_errors(path: str, exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        where = f"{path}.{location}" if location else path
        messages.append(f"{where}: {error['msg']}")
    return messages
