"""
Pydantic Schemas for game definition files.

These models define the exact JSON contract for definitions. Field names
are camelCase in JSON (e.g. "whenTrue", "pickMethod") and snake_case in
Python. Child block lists stay as raw dicts here; the loader validates
them one block at a time so errors can name the failing block.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..flow.blocks import InputFieldType, PhaseRepetition, PickMethod


class DefinitionModel(BaseModel):
    """Base model with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Blocks
# =============================================================================

class SetVariableSchema(DefinitionModel):
    type: Literal["event"]
    event_type: Literal["setVariable"]
    variable: str = Field(min_length=1)
    expression: Any


class MoveComponentSchema(DefinitionModel):
    type: Literal["event"]
    event_type: Literal["moveComponent"]
    source: str
    destination: str
    pick_method: Optional[PickMethod] = None
    pick_find_expression: Optional[str] = None


class ShuffleSchema(DefinitionModel):
    type: Literal["event"]
    event_type: Literal["shuffle"]
    stack: str = Field(min_length=1)


class EndPhaseSchema(DefinitionModel):
    type: Literal["event"]
    event_type: Literal["endPhase"]


class EndGameSchema(DefinitionModel):
    type: Literal["event"]
    event_type: Literal["endGame"]
    winners: str


class ConditionSchema(DefinitionModel):
    type: Literal["condition"]
    expression: str
    when_true: list[dict[str, Any]] = Field(default_factory=list)


class InputFieldSchema(DefinitionModel):
    name: str = Field(min_length=1)
    label: str = ""
    type: InputFieldType
    options: Optional[str] = None
    is_option_valid: Optional[str] = None


class InputSchema(DefinitionModel):
    type: Literal["input"]
    form: list[InputFieldSchema] = Field(default_factory=list)
    view: Optional[str] = None


class PhaseBlockSchema(DefinitionModel):
    type: Literal["phase"]
    phase: Optional[str] = None
    name: Optional[str] = None
    repetition: Optional[PhaseRepetition] = None
    starting_player: Optional[str] = None
    blocks: Optional[list[dict[str, Any]]] = None


# =============================================================================
# Game definition
# =============================================================================

class PlayerCountSchema(DefinitionModel):
    min: int = Field(ge=1)
    max: int = Field(ge=1)


class PlayingCardSchema(DefinitionModel):
    variables: dict[str, Any] = Field(default_factory=dict)


class ViewElementSchema(DefinitionModel):
    label: str
    expression: str


class PhaseDefinitionSchema(DefinitionModel):
    blocks: list[dict[str, Any]] = Field(default_factory=list)
    repetition: PhaseRepetition = PhaseRepetition.ONCE
    starting_player: Optional[str] = None
    view: Optional[str] = None


class GameDefinitionSchema(DefinitionModel):
    name: str = "Untitled game"
    num_players: Optional[int] = Field(default=None, ge=1)
    player_count: Optional[PlayerCountSchema] = None
    global_variables: dict[str, Any] = Field(default_factory=dict)
    player_variables: dict[str, Any] = Field(default_factory=dict)
    playing_card_deck: list[PlayingCardSchema] = Field(default_factory=list)
    phases: dict[str, PhaseDefinitionSchema] = Field(default_factory=dict)
    views: dict[str, list[ViewElementSchema]] = Field(default_factory=dict)
    flow: list[dict[str, Any]]
