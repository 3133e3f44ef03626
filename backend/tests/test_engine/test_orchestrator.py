"""Tests for the generate → validate → refine → render loop."""

from __future__ import annotations

import asyncio

import pytest

from drawsynth.engine.config import PipelineConfig
from drawsynth.engine.orchestrator import AgentState, DiagramOrchestrator, Stage, next_state
from drawsynth.llm.parser import parse_synthesis_output
from drawsynth.models.primitives import DiagramType
from drawsynth.models.requests import DrawRequest
from drawsynth.models.synthesis import SynthesisOutput
from drawsynth.models.validation import ValidationResult
from tests.conftest import (
    CAR_ITEMS,
    FLOWCHART_ITEMS,
    OVERLAPPING_FLOWCHART_ITEMS,
    FailingSynthesizer,
    StubSynthesizer,
    structured,
)

# Two boxes stacked on top of each other, never fixed
SELF_OVERLAPPING_ITEMS = [
    {"shape": "rectangle", "x": 100, "y": 100, "w": 100, "h": 100, "label": "A"},
    {"shape": "rectangle", "x": 120, "y": 120, "w": 100, "h": 100, "label": "B"},
    {"shape": "arrow", "fromLabel": "A", "toLabel": "B"},
]


def _run(synthesizer, message: str = "Start, Decision, End flowchart", config=None, **kwargs):
    orchestrator = DiagramOrchestrator(synthesizer, config or PipelineConfig(max_attempts=3))
    return asyncio.run(orchestrator.run(DrawRequest(message=message, **kwargs)))


async def _collect(orchestrator: DiagramOrchestrator, request: DrawRequest) -> list[dict]:
    return [update async for update in orchestrator.stream(request)]


# ---------------------------------------------------------------------------
# Transition function
# ---------------------------------------------------------------------------


class TestNextState:
    def _state(self, **kwargs) -> AgentState:
        return AgentState(prompt="p", **kwargs)

    def test_freeform_skips_validation(self):
        assert next_state(Stage.GENERATE, self._state(diagram_type=DiagramType.FREEFORM)) == Stage.RENDER

    def test_structured_is_validated(self):
        assert next_state(Stage.GENERATE, self._state()) == Stage.VALIDATE

    def test_valid_goes_to_render(self):
        state = self._state(attempts=1, validation=ValidationResult(valid=True))
        assert next_state(Stage.VALIDATE, state) == Stage.RENDER

    def test_invalid_with_budget_refines(self):
        state = self._state(attempts=1, max_attempts=3, validation=ValidationResult(valid=False))
        assert next_state(Stage.VALIDATE, state) == Stage.REFINE

    def test_invalid_out_of_budget_renders(self):
        state = self._state(attempts=3, max_attempts=3, validation=ValidationResult(valid=False))
        assert next_state(Stage.VALIDATE, state) == Stage.RENDER

    def test_refine_loops_to_generate(self):
        assert next_state(Stage.REFINE, self._state()) == Stage.GENERATE

    def test_render_is_terminal(self):
        assert next_state(Stage.RENDER, self._state()) == Stage.DONE

    def test_done_has_no_transition(self):
        with pytest.raises(ValueError):
            next_state(Stage.DONE, self._state())


# ---------------------------------------------------------------------------
# Full runs
# ---------------------------------------------------------------------------


class TestRun:
    def test_valid_first_attempt(self):
        stub = StubSynthesizer(structured(FLOWCHART_ITEMS, "A simple flowchart."))
        result = _run(stub)
        assert result.success
        assert result.stats.attempts == 1
        assert result.stats.is_valid
        assert result.reply == "A simple flowchart."
        assert len(stub.requests) == 1
        assert stub.requests[0].feedback == ""

    def test_start_decision_end_scenario(self):
        stub = StubSynthesizer(structured(OVERLAPPING_FLOWCHART_ITEMS), structured(FLOWCHART_ITEMS))
        result = _run(stub)

        assert result.success
        assert result.stats.attempts == 2
        assert result.validation.valid

        # second attempt carried the feedback and the rejected primitives
        retry = stub.requests[1]
        assert retry.attempt == 1
        assert "overlap" in retry.feedback
        assert len(retry.previous_items) == len(OVERLAPPING_FLOWCHART_ITEMS)

        assert len([s for s in result.shapes if s.type == "geo"]) == 3
        assert len([s for s in result.shapes if s.type == "arrow"]) == 2
        assert len(result.bindings) == 4

    def test_bounded_retries(self):
        stub = StubSynthesizer(structured(SELF_OVERLAPPING_ITEMS))
        result = _run(stub)

        assert len(stub.requests) == 3
        assert result.stats.attempts == 3
        # best-effort render still happened
        assert result.success
        assert len(result.shapes) == 3
        assert not result.validation.valid
        assert "best effort" in result.reply
        assert result.stats.is_valid is False

    def test_max_attempts_configurable(self):
        stub = StubSynthesizer(structured(SELF_OVERLAPPING_ITEMS))
        result = _run(stub, config=PipelineConfig(max_attempts=5))
        assert result.stats.attempts == 5

    def test_use_validation_false_is_single_attempt(self):
        stub = StubSynthesizer(structured(SELF_OVERLAPPING_ITEMS))
        result = _run(stub, use_validation=False)
        assert result.stats.attempts == 1
        assert len(result.shapes) == 3

    def test_freeform_skips_validation(self):
        stub = StubSynthesizer(SynthesisOutput(items=CAR_ITEMS, diagram_type="freeform"))
        result = _run(stub, message="draw a car")
        assert result.success
        assert result.validation is None
        assert result.stats.attempts == 1
        assert result.stats.shape_count == 3
        assert result.reply == "Drew 3 shapes."

    def test_synthesizer_failure(self):
        failing = FailingSynthesizer("quota exceeded")
        result = _run(failing)
        assert failing.calls == 1
        assert not result.success
        assert "quota exceeded" in result.error
        assert result.reply
        assert result.shapes == []
        assert result.stats.attempts == 1

    def test_empty_output_is_failure(self):
        stub = StubSynthesizer(structured([]))
        result = _run(stub)
        assert len(stub.requests) == 1
        assert not result.success
        assert "no shapes" in result.error
        assert result.reply.startswith("Sorry")
        assert result.shapes == []
        assert result.validation is None
        assert result.stats.attempts == 1

    def test_empty_json_reply_is_failure(self):
        stub = StubSynthesizer(parse_synthesis_output("{}"))
        result = _run(stub)
        assert not result.success
        assert result.error
        assert result.stats.is_valid is False

    def test_render_schema_error_is_reported(self):
        bad = SynthesisOutput.model_construct(
            items=[{"shape": "blob", "x": 0, "y": 0}], diagram_type=DiagramType.FREEFORM,
        )
        result = _run(StubSynthesizer(bad), message="blob")
        assert not result.success
        assert "blob" in result.error
        assert result.shapes == []
        assert result.bindings == []
        assert result.reply

    def test_prompt_context_forwarded(self):
        stub = StubSynthesizer(structured(FLOWCHART_ITEMS))
        context = [{"type": "geo", "x": 0, "y": 0}]
        _run(stub, canvas_context=context, canvas_image="data:image/png;base64,AAAA")
        request = stub.requests[0]
        assert request.canvas_context == context
        assert request.prior_image == "data:image/png;base64,AAAA"
        assert request.attempt == 0


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------


class TestStream:
    def test_stage_sequence(self):
        stub = StubSynthesizer(structured(OVERLAPPING_FLOWCHART_ITEMS), structured(FLOWCHART_ITEMS))
        orchestrator = DiagramOrchestrator(stub, PipelineConfig(max_attempts=3))
        updates = asyncio.run(_collect(orchestrator, DrawRequest(message="flowchart")))

        assert [u["stage"] for u in updates] == [
            "generate", "validate", "refine", "generate", "validate", "render", "done",
        ]
        assert updates[1]["valid"] is False
        assert updates[1]["errorCount"] == 1
        assert updates[4]["valid"] is True
        assert updates[5]["bindingCount"] == 4
        assert updates[-1]["result"].success

    def test_freeform_stream(self):
        stub = StubSynthesizer(SynthesisOutput(items=CAR_ITEMS))
        orchestrator = DiagramOrchestrator(stub)
        updates = asyncio.run(_collect(orchestrator, DrawRequest(message="car")))
        assert [u["stage"] for u in updates] == ["generate", "render", "done"]
