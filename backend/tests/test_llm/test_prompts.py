"""Tests for prompt assembly and the synthesizer message layout."""

from __future__ import annotations

import asyncio
import json

import pytest

from drawsynth.config import Settings, settings
from drawsynth.errors import SynthesisError
from drawsynth.llm.client import AnthropicSynthesizer
from drawsynth.llm.model_router import get_model_for_task
from drawsynth.llm.prompts import MAX_CONTEXT_SHAPES, build_system_prompt, build_user_prompt, get_all_templates
from drawsynth.models.primitives import parse_primitives
from drawsynth.models.synthesis import SynthesisRequest
from tests.conftest import OVERLAPPING_FLOWCHART_ITEMS


def test_first_attempt_has_composition_guide():
    first = build_system_prompt(0)
    retry = build_system_prompt(1)
    assert "COMPOSITION GUIDE" in first
    assert "COMPOSITION GUIDE" not in retry
    assert "RESPONSE FORMAT" in retry


def test_templates_listed():
    templates = get_all_templates()
    assert set(templates) == {"first_attempt", "refinement"}


def test_plain_prompt():
    assert build_user_prompt(SynthesisRequest(prompt="  draw a star ")) == "draw a star"


def test_canvas_context_capped():
    context = [{"id": f"shape:{n}", "x": n, "y": n} for n in range(30)]
    text = build_user_prompt(SynthesisRequest(prompt="add a box", canvas_context=context))
    assert "avoid overlapping" in text
    forwarded = json.loads(text.split("(avoid overlapping):\n", 1)[1])
    assert len(forwarded) == MAX_CONTEXT_SHAPES


def test_refinement_includes_feedback_and_rejected():
    request = SynthesisRequest(
        prompt="flowchart",
        feedback="[ERROR] overlap: A overlaps B. Separate shapes by at least 20px.",
        previous_items=parse_primitives(OVERLAPPING_FLOWCHART_ITEMS),
        attempt=1,
    )
    text = build_user_prompt(request)
    assert "VALIDATION FEEDBACK" in text
    assert "Separate shapes by at least 20px." in text
    assert '"fromLabel": "Start"' in text
    assert request.is_refinement


def test_feedback_without_previous_items_is_skipped():
    text = build_user_prompt(SynthesisRequest(prompt="flowchart", feedback="something"))
    assert "VALIDATION FEEDBACK" not in text


def test_model_routing():
    assert get_model_for_task("draw") == settings.model_mid
    assert get_model_for_task("refine") == settings.model_mid
    assert get_model_for_task("unknown") == settings.model_cheap


def test_model_routing_uses_given_settings():
    custom = Settings(model_mid="custom-mid", model_cheap="custom-cheap")
    assert get_model_for_task("draw", custom) == "custom-mid"
    assert get_model_for_task("unknown", custom) == "custom-cheap"


# ---------------------------------------------------------------------------
# AnthropicSynthesizer (no network)
# ---------------------------------------------------------------------------


class TestAnthropicSynthesizer:
    def test_messages_without_image(self):
        synth = AnthropicSynthesizer(Settings(anthropic_api_key="test"))
        system, human = synth.build_messages(SynthesisRequest(prompt="draw a star"))
        assert "COMPOSITION GUIDE" in system.content
        assert human.content == "draw a star"

    def test_messages_with_prior_image(self):
        synth = AnthropicSynthesizer(Settings(anthropic_api_key="test"))
        _, human = synth.build_messages(
            SynthesisRequest(prompt="add a label", prior_image="data:image/png;base64,AAAA"),
        )
        assert isinstance(human.content, list)
        assert human.content[0] == {"type": "text", "text": "add a label"}
        assert human.content[1]["image_url"]["url"] == "data:image/png;base64,AAAA"

    def test_missing_api_key(self):
        synth = AnthropicSynthesizer(Settings(anthropic_api_key=""))
        with pytest.raises(SynthesisError, match="ANTHROPIC_API_KEY"):
            asyncio.run(synth.synthesize(SynthesisRequest(prompt="draw a star")))

    def test_raw_base64_image_gets_data_url(self):
        synth = AnthropicSynthesizer(Settings(anthropic_api_key="test"))
        _, human = synth.build_messages(SynthesisRequest(prompt="add a label", prior_image="AAAA"))
        assert human.content[1]["image_url"]["url"] == "data:image/png;base64,AAAA"

    def test_synthesize_uses_injected_model(self, monkeypatch):
        captured = {}

        class FakeReply:
            content = json.dumps({"items": OVERLAPPING_FLOWCHART_ITEMS, "diagramType": "structured"})

        class FakeChat:
            def __init__(self, **kwargs):
                captured.update(kwargs)

            async def ainvoke(self, messages):
                captured["messages"] = messages
                return FakeReply()

        monkeypatch.setattr("langchain_anthropic.ChatAnthropic", FakeChat)
        synth = AnthropicSynthesizer(Settings(anthropic_api_key="test", model_mid="injected-mid"))
        output = asyncio.run(synth.synthesize(SynthesisRequest(prompt="flowchart")))

        assert captured["model"] == "injected-mid"
        assert captured["api_key"] == "test"
        assert len(output.items) == len(OVERLAPPING_FLOWCHART_ITEMS)
