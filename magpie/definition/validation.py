"""
Definition Validation - Static checks for game definitions.

Validates that:
1. Player counts make sense (1 <= min <= max)
2. References are valid (phase names, view names)
3. Every formula ("=...") parses
4. Blocks carry the configuration they need (e.g. find expressions)

Warnings point at definitions that may never finish.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

from ..engine_core.expression import parse_formula
from ..errors import ParseError
from ..flow.blocks import (
    ConditionBlock,
    EndGameBlock,
    EndPhaseBlock,
    FlowBlock,
    InputBlock,
    InputFieldType,
    MoveComponentBlock,
    PhaseBlock,
    PhaseRepetition,
    PickMethod,
    SetVariableBlock,
)

if TYPE_CHECKING:
    from .game_definition import GameDefinition


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_definition(definition: GameDefinition) -> ValidationResult:
    """
    Validate a complete game definition.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if definition.player_count.min < 1:
        errors.append("playerCount.min must be >= 1")
    if definition.player_count.max < definition.player_count.min:
        errors.append("playerCount.max must be >= playerCount.min")

    for name, phase in definition.phases.items():
        if phase.view is not None and phase.view not in definition.views:
            errors.append(f"Phase '{name}' references unknown view '{phase.view}'")
        errors.extend(_validate_blocks(phase.blocks, f"phases.{name}", definition))
        if phase.starting_player is not None:
            errors.extend(_validate_formula(phase.starting_player, f"phases.{name}.startingPlayer"))

    errors.extend(_validate_blocks(definition.flow, "flow", definition))

    for name, view in definition.views.items():
        for element in view.elements:
            errors.extend(_validate_formula(element.expression, f"views.{name}.{element.label}"))

    # Warnings for definitions that may not terminate
    if not _can_end_game(definition.flow, definition, set()):
        warnings.append("No endGame block is reachable from the flow")
    for path, block in _walk(definition.flow, "flow"):
        if isinstance(block, PhaseBlock) and _repetition(block, definition) is PhaseRepetition.FOREVER:
            blocks = _phase_blocks(block, definition)
            if not _can_exit_phase(blocks, definition, set()):
                warnings.append(f"{path}: forever phase has no endPhase or endGame block")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_blocks(blocks: list[FlowBlock], path: str, definition: GameDefinition) -> list[str]:
    errors = []
    for block_path, block in _walk(blocks, path):
        errors.extend(_validate_block(block, block_path, definition))
    return errors


def _validate_block(block: FlowBlock, path: str, definition: GameDefinition) -> list[str]:
    """Validate a single block (not its children)."""
    errors: list[str] = []

    if isinstance(block, SetVariableBlock):
        errors.extend(_validate_formula(block.expression, f"{path}.expression"))

    elif isinstance(block, MoveComponentBlock):
        errors.extend(_validate_formula(block.source, f"{path}.source"))
        errors.extend(_validate_formula(block.destination, f"{path}.destination"))
        if block.pick_method is PickMethod.FIND:
            if block.pick_find_expression is None:
                errors.append(f"{path}: pickFindExpression is required for the find pick method")
            else:
                errors.extend(_validate_formula(block.pick_find_expression, f"{path}.pickFindExpression"))

    elif isinstance(block, EndGameBlock):
        errors.extend(_validate_formula(block.winners, f"{path}.winners"))

    elif isinstance(block, ConditionBlock):
        errors.extend(_validate_formula(block.expression, f"{path}.expression"))

    elif isinstance(block, InputBlock):
        if block.view is not None and block.view not in definition.views:
            errors.append(f"{path}: unknown view '{block.view}'")
        for input_field in block.form:
            if input_field.field_type is InputFieldType.CARD:
                if input_field.options is None or input_field.is_option_valid is None:
                    errors.append(
                        f"{path}: card field '{input_field.name}' needs options and isOptionValid"
                    )
                    continue
                errors.extend(_validate_formula(input_field.options, f"{path}.{input_field.name}.options"))
                errors.extend(
                    _validate_formula(input_field.is_option_valid, f"{path}.{input_field.name}.isOptionValid")
                )

    elif isinstance(block, PhaseBlock):
        if block.phase is None and block.blocks is None:
            errors.append(f"{path}: phase block needs a phase name or blocks")
        if block.phase is not None and block.phase not in definition.phases:
            errors.append(f"{path}: unknown phase '{block.phase}'")
        if block.starting_player is not None:
            errors.extend(_validate_formula(block.starting_player, f"{path}.startingPlayer"))

    return errors


def _validate_formula(expression: Any, path: str) -> list[str]:
    if not isinstance(expression, str) or not expression.startswith("="):
        return []
    try:
        parse_formula(expression[1:])
    except ParseError:
        return [f"{path}: invalid expression {expression!r}"]
    return []


def _walk(blocks: list[FlowBlock], path: str) -> Iterator[tuple[str, FlowBlock]]:
    """Yield (path, block) for blocks and their inline children."""
    for i, block in enumerate(blocks):
        block_path = f"{path}[{i}]"
        yield block_path, block
        if isinstance(block, ConditionBlock):
            yield from _walk(block.when_true, f"{block_path}.whenTrue")
        elif isinstance(block, PhaseBlock) and block.blocks is not None:
            yield from _walk(block.blocks, f"{block_path}.blocks")


def _phase_blocks(block: PhaseBlock, definition: GameDefinition) -> list[FlowBlock]:
    if block.blocks is not None:
        return block.blocks
    named = definition.phases.get(block.phase)
    return named.blocks if named else []


def _repetition(block: PhaseBlock, definition: GameDefinition) -> PhaseRepetition:
    named = definition.phases.get(block.phase) if block.phase else None
    return block.repetition or (named.repetition if named else None) or PhaseRepetition.ONCE


def _can_end_game(blocks: list[FlowBlock], definition: GameDefinition, seen: set[str]) -> bool:
    """Whether an endGame block is reachable, following named phases."""
    for block in blocks:
        if isinstance(block, EndGameBlock):
            return True
        if isinstance(block, ConditionBlock) and _can_end_game(block.when_true, definition, seen):
            return True
        if isinstance(block, PhaseBlock):
            if block.phase is not None:
                if block.phase in seen:
                    continue
                seen.add(block.phase)
            if _can_end_game(_phase_blocks(block, definition), definition, seen):
                return True
    return False


def _can_exit_phase(blocks: list[FlowBlock], definition: GameDefinition, seen: set[str]) -> bool:
    """Whether a phase's own blocks can end it (endPhase, or endGame at any depth)."""
    for block in blocks:
        if isinstance(block, EndPhaseBlock):
            return True
        if isinstance(block, ConditionBlock) and _can_exit_phase(block.when_true, definition, seen):
            return True
        if isinstance(block, PhaseBlock) and _can_end_game(_phase_blocks(block, definition), definition, seen):
            return True
    return _can_end_game(blocks, definition, seen)
