"""
Flow Interpreter - Executes flow blocks against game state.

The interpreter maps each block kind to a handler:
- Events are delegated to the EventExecutor
- Conditions run their branch as an implicit single-pass phase
- Inputs render the active view and wait for the answer collector
- Phases are resolved against the named phase definitions and run

Every handler returns a BlockResult. Handlers never swallow END_PHASE or
END_GAME results; only phases (and the game driver) act on them.
"""

from __future__ import annotations
from contextlib import contextmanager
import logging
import random
from typing import Any, Callable, Iterator

from ..engine_core.state import GameState
from ..engine_core.variables import type_name
from ..errors import DefinitionError, EvaluationError
from ..views import View, ViewRenderer
from .blocks import (
    BlockType,
    ConditionBlock,
    FlowBlock,
    InputBlock,
    PhaseBlock,
    PhaseDefinition,
    PhaseRepetition,
)
from .events import EventExecutor
from .input import AnswerCollector, apply_answers, build_prompts
from .phase import create_phase
from .result import BlockResult

logger = logging.getLogger(__name__)


class FlowInterpreter:
    """
    Runs blocks one at a time.

    The interpreter owns no game state; every call takes a state and
    returns a result holding the successor state.
    """

    def __init__(
        self,
        answer_collector: AnswerCollector,
        phases: dict[str, PhaseDefinition] | None = None,
        views: dict[str, View] | None = None,
        view_renderer: ViewRenderer | None = None,
        rng: random.Random | None = None,
        max_phase_iterations: int | None = None,
    ):
        self.answer_collector = answer_collector
        self.phases = phases or {}
        self.views = views or {}
        self.view_renderer = view_renderer
        self.events = EventExecutor(rng)
        self.max_phase_iterations = max_phase_iterations
        self._view_stack: list[str] = []

    async def execute(self, block: FlowBlock, state: GameState) -> BlockResult:
        """Execute a single block."""
        handlers: dict[BlockType, Callable[[Any, GameState], Any]] = {
            BlockType.EVENT: self._execute_event,
            BlockType.CONDITION: self._execute_condition,
            BlockType.INPUT: self._execute_input,
            BlockType.PHASE: self._execute_phase,
        }

        handler = handlers.get(getattr(block, "block_type", None))
        if handler is None:
            raise EvaluationError(f"Unknown flow block: {block!r}")
        return await handler(block, state)

    async def run_phase(
        self,
        definition: PhaseDefinition,
        state: GameState,
        is_implicit: bool = False,
    ) -> BlockResult:
        """Run a phase definition directly."""
        phase = create_phase(self, definition, is_implicit)
        return await phase.execute(state)

    @contextmanager
    def view_scope(self, view_name: str | None) -> Iterator[None]:
        """Make view_name the active view for inputs inside the block."""
        if view_name is None:
            yield
            return
        self._view_stack.append(view_name)
        try:
            yield
        finally:
            self._view_stack.pop()

    # -- handlers ----------------------------------------------------------

    async def _execute_event(self, block, state: GameState) -> BlockResult:
        return self.events.execute(block, state)

    async def _execute_condition(self, block: ConditionBlock, state: GameState) -> BlockResult:
        """Run the branch when the expression is true, otherwise pass through."""
        logger.info("Evaluating condition %s.", block.expression)
        outcome = state.evaluate(block.expression)
        if not isinstance(outcome, bool):
            raise EvaluationError(
                f"Condition {block.expression} must evaluate to a boolean, got {type_name(outcome)}."
            )

        if not outcome:
            logger.info("Condition is false. Skipping conditional blocks.")
            return BlockResult.proceed(state)

        logger.info("Condition is true. Following conditional blocks.")
        branch = PhaseDefinition(
            name=f"When {block.expression}",
            blocks=block.when_true,
            repetition=PhaseRepetition.ONCE,
        )
        return await self.run_phase(branch, state, is_implicit=True)

    async def _execute_input(self, block: InputBlock, state: GameState) -> BlockResult:
        """Render the active view, collect answers and store them."""
        self._render_view(block.view, state)
        prompts = build_prompts(block, state)
        logger.info("Requesting input: %s.", ", ".join(p.name for p in prompts))
        answers = await self.answer_collector.collect(prompts)
        return BlockResult.proceed(apply_answers(prompts, answers, state))

    async def _execute_phase(self, block: PhaseBlock, state: GameState) -> BlockResult:
        definition = self.resolve_phase(block)
        return await self.run_phase(definition, state)

    # -- helpers -----------------------------------------------------------

    def resolve_phase(self, block: PhaseBlock) -> PhaseDefinition:
        """
        Build the effective phase definition for a phase block.

        Block settings override the named definition; repetition falls
        back to ONCE.
        """
        named: PhaseDefinition | None = None
        if block.phase is not None:
            named = self.phases.get(block.phase)
            if named is None:
                raise DefinitionError([f"Phase {block.phase} is not defined."])

        if named is None and block.blocks is None:
            raise DefinitionError(["A phase block needs either a phase name or blocks."])

        blocks = block.blocks if block.blocks is not None else named.blocks
        repetition = block.repetition or (named.repetition if named else None) or PhaseRepetition.ONCE
        starting_player = block.starting_player or (named.starting_player if named else None)
        name = block.name or block.phase or "Unnamed phase"

        return PhaseDefinition(
            name=name,
            blocks=blocks,
            repetition=repetition,
            starting_player=starting_player,
            view=named.view if named else None,
        )

    def _render_view(self, view_name: str | None, state: GameState):
        if self.view_renderer is None:
            return
        name = view_name or (self._view_stack[-1] if self._view_stack else None)
        if name is None:
            return
        view = self.views.get(name)
        if view is None:
            raise DefinitionError([f"View {name} is not defined."])
        self.view_renderer.render(name, view, state)
