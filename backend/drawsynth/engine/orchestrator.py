"""Synthesis loop: generate → validate → refine → render, with a bounded retry budget.

Stages are an explicit enum and ``next_state`` is the only place routing
decisions are made. The synthesizer call is the only await; everything else
is pure and runs inline.

    GENERATE ──freeform──────────────────────────┐
        │                                        ▼
        └──► VALIDATE ──valid / out of attempts──► RENDER ──► DONE
                 │                ▲
                 └──► REFINE ─────┘ (back through GENERATE)
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any, Protocol

from drawsynth.engine.config import PipelineConfig
from drawsynth.engine.feedback import format_feedback
from drawsynth.engine.renderer import render
from drawsynth.engine.validator import validate
from drawsynth.errors import PrimitiveSchemaError
from drawsynth.models.canvas import Binding, RenderedShape
from drawsynth.models.primitives import DiagramType
from drawsynth.models.requests import DrawRequest
from drawsynth.models.responses import DrawingResult, RunStats
from drawsynth.models.synthesis import SynthesisOutput, SynthesisRequest
from drawsynth.models.validation import ValidationResult

logger = logging.getLogger(__name__)


class Stage(str, enum.Enum):
    GENERATE = "generate"
    VALIDATE = "validate"
    REFINE = "refine"
    RENDER = "render"
    DONE = "done"


class ShapeSynthesizer(Protocol):
    """Anything that turns a drawing request into primitive shapes."""

    async def synthesize(self, request: SynthesisRequest) -> SynthesisOutput: ...


@dataclass
class AgentState:
    """Mutable state threaded through one run."""

    prompt: str
    canvas_context: list[dict[str, Any]] = field(default_factory=list)
    prior_image: str | None = None
    max_attempts: int = 3

    attempts: int = 0
    primitives: list[Any] = field(default_factory=list)
    diagram_type: DiagramType = DiagramType.STRUCTURED
    description: str = ""
    validation: ValidationResult | None = None
    feedback: str = ""
    rejected: list[Any] = field(default_factory=list)

    shapes: list[RenderedShape] = field(default_factory=list)
    bindings: list[Binding] = field(default_factory=list)
    reply: str = ""
    error: str | None = None


def next_state(current: Stage, state: AgentState) -> Stage:
    """Routing decision after ``current`` has run."""
    if current == Stage.GENERATE:
        if state.diagram_type == DiagramType.FREEFORM:
            return Stage.RENDER
        return Stage.VALIDATE
    if current == Stage.VALIDATE:
        if (state.validation is not None and state.validation.valid) or state.attempts >= state.max_attempts:
            return Stage.RENDER
        return Stage.REFINE
    if current == Stage.REFINE:
        return Stage.GENERATE
    if current == Stage.RENDER:
        return Stage.DONE
    raise ValueError(f"No transition out of {current.value!r}")


class DiagramOrchestrator:
    def __init__(self, synthesizer: ShapeSynthesizer, config: PipelineConfig | None = None) -> None:
        self.synthesizer = synthesizer
        self.config = config or PipelineConfig()

    def initial_state(self, request: DrawRequest) -> AgentState:
        return AgentState(
            prompt=request.message,
            canvas_context=list(request.canvas_context),
            prior_image=request.canvas_image,
            max_attempts=self.config.max_attempts if request.use_validation else 1,
        )

    async def run(self, request: DrawRequest) -> DrawingResult:
        result = None
        async for update in self.stream(request):
            if update["stage"] == Stage.DONE.value:
                result = update["result"]
        return result

    async def stream(self, request: DrawRequest) -> AsyncIterator[dict[str, Any]]:
        """Yield one update per executed stage, then a final ``done`` update carrying the result."""
        start = time.perf_counter()
        state = self.initial_state(request)
        stage = Stage.GENERATE

        while stage != Stage.DONE:
            await self._execute(stage, state)
            yield self._update(stage, state)
            stage = next_state(stage, state)
            logger.debug("Routing → %s (attempt %d/%d)", stage.value, state.attempts, state.max_attempts)

        elapsed_ms = (time.perf_counter() - start) * 1000
        result = self._result(state, elapsed_ms)
        logger.info(
            "Run finished: success=%s attempts=%d shapes=%d bindings=%d (%.0f ms)",
            result.success, state.attempts, len(state.shapes), len(state.bindings), elapsed_ms,
        )
        yield {"stage": Stage.DONE.value, "result": result}

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _execute(self, stage: Stage, state: AgentState) -> None:
        if stage == Stage.GENERATE:
            await self._generate(state)
        elif stage == Stage.VALIDATE:
            self._validate(state)
        elif stage == Stage.REFINE:
            self._refine(state)
        elif stage == Stage.RENDER:
            self._render(state)

    async def _generate(self, state: AgentState) -> None:
        request = SynthesisRequest(
            prompt=state.prompt,
            canvas_context=state.canvas_context,
            feedback=state.feedback,
            previous_items=state.rejected,
            prior_image=state.prior_image,
            attempt=state.attempts,
        )
        logger.info("Synthesis attempt %d/%d", state.attempts + 1, state.max_attempts)
        state.validation = None
        try:
            output = await self.synthesizer.synthesize(request)
        except Exception as e:
            logger.exception("Synthesizer failed on attempt %d", state.attempts + 1)
            self._fail(state, f"Synthesis failed: {e}")
            return

        if not output.items:
            logger.warning("Synthesizer returned no primitives on attempt %d", state.attempts + 1)
            self._fail(state, "Synthesis failed: no shapes were generated")
            return

        state.attempts += 1
        state.error = None
        state.primitives = list(output.items)
        state.diagram_type = output.diagram_type
        state.description = output.description
        logger.debug(
            "Synthesizer returned %d primitives (%s)", len(state.primitives), state.diagram_type.value,
        )

    @staticmethod
    def _fail(state: AgentState, error: str) -> None:
        state.attempts += 1
        state.primitives = []
        state.diagram_type = DiagramType.FREEFORM
        state.description = ""
        state.error = error
        state.reply = "Sorry, I couldn't generate a drawing for that request. Please try rephrasing it."

    def _validate(self, state: AgentState) -> None:
        state.validation = validate(state.primitives, state.diagram_type, self.config)
        logger.info("Validation attempt %d: %s", state.attempts, state.validation.summary())

    def _refine(self, state: AgentState) -> None:
        state.feedback = format_feedback(state.validation.issues, self.config)
        state.rejected = list(state.primitives)
        logger.debug("Refinement feedback:\n%s", state.feedback)

    def _render(self, state: AgentState) -> None:
        try:
            rendered = render(state.primitives)
        except PrimitiveSchemaError as e:
            logger.error("Render failed: %s", e)
            state.error = str(e)
            state.reply = "The generated shapes could not be rendered."
            state.shapes, state.bindings = [], []
            return
        state.shapes = rendered.shapes
        state.bindings = rendered.bindings
        if state.error is None:
            state.reply = self._reply(state)

    @staticmethod
    def _reply(state: AgentState) -> str:
        base = state.description or f"Drew {len(state.primitives)} shapes."
        if state.validation is not None and not state.validation.valid:
            return (
                f"{base} Layout still has {state.validation.error_count} issue(s) "
                f"after {state.attempts} attempts; showing the best effort."
            )
        return base

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @staticmethod
    def _update(stage: Stage, state: AgentState) -> dict[str, Any]:
        update: dict[str, Any] = {"stage": stage.value, "attempt": state.attempts}
        if stage == Stage.GENERATE:
            update["primitiveCount"] = len(state.primitives)
            update["diagramType"] = state.diagram_type.value
            if state.error:
                update["error"] = state.error
        elif stage == Stage.VALIDATE:
            update["valid"] = state.validation.valid
            update["errorCount"] = state.validation.error_count
            update["warningCount"] = state.validation.warning_count
        elif stage == Stage.REFINE:
            update["feedback"] = state.feedback
        elif stage == Stage.RENDER:
            update["shapeCount"] = len(state.shapes)
            update["bindingCount"] = len(state.bindings)
        return update

    @staticmethod
    def _result(state: AgentState, elapsed_ms: float) -> DrawingResult:
        is_valid = state.validation.valid if state.validation is not None else state.error is None
        return DrawingResult(
            success=state.error is None,
            shapes=state.shapes,
            bindings=state.bindings,
            reply=state.reply,
            error=state.error,
            validation=state.validation,
            stats=RunStats(
                primitive_count=len(state.primitives),
                shape_count=len(state.shapes),
                binding_count=len(state.bindings),
                attempts=state.attempts,
                is_valid=is_valid,
                execution_time_ms=round(elapsed_ms, 2),
            ),
        )
