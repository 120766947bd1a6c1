"""Flow - Typed flow blocks and the interpreter that runs them."""

from .blocks import (
    BlockType,
    ConditionBlock,
    EndGameBlock,
    EndPhaseBlock,
    EventType,
    FlowBlock,
    InputBlock,
    InputField,
    InputFieldType,
    MoveComponentBlock,
    PhaseBlock,
    PhaseDefinition,
    PhaseRepetition,
    PickMethod,
    SetVariableBlock,
    ShuffleBlock,
)
from .input import AnswerCollector, FieldPrompt
from .interpreter import FlowInterpreter
from .result import BlockResult, FlowSignal

__all__ = [
    "BlockType",
    "ConditionBlock",
    "EndGameBlock",
    "EndPhaseBlock",
    "EventType",
    "FlowBlock",
    "InputBlock",
    "InputField",
    "InputFieldType",
    "MoveComponentBlock",
    "PhaseBlock",
    "PhaseDefinition",
    "PhaseRepetition",
    "PickMethod",
    "SetVariableBlock",
    "ShuffleBlock",
    "AnswerCollector",
    "FieldPrompt",
    "FlowInterpreter",
    "BlockResult",
    "FlowSignal",
]
