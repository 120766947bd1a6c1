"""
Flow Blocks - The typed building blocks of a game's flow.

A game's flow is a tree of blocks:
- Events: atomic state changes (set a variable, move a component,
  shuffle, end the phase, end the game)
- Conditions: run child blocks only when an expression is true
- Inputs: ask the players for answers and store them
- Phases: run child blocks once, forever, or once per player

Key design decisions:
- The set of block kinds is closed; the interpreter dispatches on the
  block class and rejects anything else
- Values that depend on state are expression strings evaluated at runtime
- Phases may be named and reused, or written inline
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union


class BlockType(Enum):
    """Top-level kinds of flow blocks."""
    EVENT = "event"
    CONDITION = "condition"
    INPUT = "input"
    PHASE = "phase"


class EventType(Enum):
    """Kinds of event blocks."""
    SET_VARIABLE = "setVariable"
    MOVE_COMPONENT = "moveComponent"
    SHUFFLE = "shuffle"
    END_PHASE = "endPhase"
    END_GAME = "endGame"


class PickMethod(Enum):
    """How one component is taken out of a collection."""
    DRAW = "draw"  # First component in the collection
    FIND = "find"  # First component equal to an expression's value


class PhaseRepetition(Enum):
    """How often a phase runs through its blocks."""
    ONCE = "once"
    FOREVER = "forever"
    FOR_EACH_PLAYER = "forEachPlayer"


class InputFieldType(Enum):
    """Kinds of fields on an input form."""
    BOOLEAN = "boolean"
    NUMBER = "number"
    CARD = "card"


# ============================================================================
# Events
# ============================================================================

@dataclass
class SetVariableBlock:
    """
    Assigns an expression's value to a variable.

    The variable may be a dotted path into nested containers
    (e.g. "current.score"), but not a full expression.
    """
    block_type: ClassVar[BlockType] = BlockType.EVENT
    event_type: ClassVar[EventType] = EventType.SET_VARIABLE

    variable: str
    expression: Any  # Formula ("=...") or a literal value


@dataclass
class MoveComponentBlock:
    """
    Moves one component from a source location to a destination location.

    Collection sources need a pick_method; FIND also needs
    pick_find_expression.
    """
    block_type: ClassVar[BlockType] = BlockType.EVENT
    event_type: ClassVar[EventType] = EventType.MOVE_COMPONENT

    source: str
    destination: str
    pick_method: PickMethod | None = None
    pick_find_expression: str | None = None


@dataclass
class ShuffleBlock:
    """Shuffles the collection stored in a variable."""
    block_type: ClassVar[BlockType] = BlockType.EVENT
    event_type: ClassVar[EventType] = EventType.SHUFFLE

    stack: str


@dataclass
class EndPhaseBlock:
    """Ends the innermost non-implicit phase."""
    block_type: ClassVar[BlockType] = BlockType.EVENT
    event_type: ClassVar[EventType] = EventType.END_PHASE


@dataclass
class EndGameBlock:
    """Ends the game; winners evaluates to a list of player records."""
    block_type: ClassVar[BlockType] = BlockType.EVENT
    event_type: ClassVar[EventType] = EventType.END_GAME

    winners: str


EventBlock = Union[
    SetVariableBlock,
    MoveComponentBlock,
    ShuffleBlock,
    EndPhaseBlock,
    EndGameBlock,
]


# ============================================================================
# Conditions, inputs and phases
# ============================================================================

@dataclass
class ConditionBlock:
    """Runs when_true as an implicit phase if expression is true."""
    block_type: ClassVar[BlockType] = BlockType.CONDITION

    expression: str
    when_true: list[FlowBlock] = field(default_factory=list)


@dataclass
class InputField:
    """
    One field on an input form.

    For CARD fields, options yields the candidate cards and
    is_option_valid yields a predicate that filters them.
    """
    name: str
    label: str
    field_type: InputFieldType
    options: str | None = None
    is_option_valid: str | None = None


@dataclass
class InputBlock:
    """A form whose answers are stored as variables named after the fields."""
    block_type: ClassVar[BlockType] = BlockType.INPUT

    form: list[InputField] = field(default_factory=list)
    view: str | None = None


@dataclass
class PhaseDefinition:
    """A named, reusable sequence of blocks."""
    name: str
    blocks: list[FlowBlock] = field(default_factory=list)
    repetition: PhaseRepetition = PhaseRepetition.ONCE
    starting_player: str | None = None  # Expression yielding a player or id
    view: str | None = None


@dataclass
class PhaseBlock:
    """
    Runs a phase.

    Either references a named PhaseDefinition via phase, or carries its own
    blocks. repetition and starting_player override the definition.
    """
    block_type: ClassVar[BlockType] = BlockType.PHASE

    phase: str | None = None
    blocks: list[FlowBlock] | None = None
    repetition: PhaseRepetition | None = None
    starting_player: str | None = None
    name: str | None = None


FlowBlock = Union[EventBlock, ConditionBlock, InputBlock, PhaseBlock]
