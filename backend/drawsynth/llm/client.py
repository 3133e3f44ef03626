"""LangChain ChatAnthropic shape synthesizer."""

from __future__ import annotations

import logging

from drawsynth.config import Settings, settings as default_settings
from drawsynth.errors import SynthesisError
from drawsynth.llm.model_router import get_model_for_task
from drawsynth.llm.parser import parse_synthesis_output
from drawsynth.llm.prompts import build_system_prompt, build_user_prompt
from drawsynth.models.synthesis import SynthesisOutput, SynthesisRequest

logger = logging.getLogger(__name__)


def to_data_url(image: str) -> str:
    """Raw base64 PNG payloads get a data-URL prefix; URLs pass through."""
    if image.startswith("data:"):
        return image
    return f"data:image/png;base64,{image}"


def _content_text(content) -> str:
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class AnthropicSynthesizer:
    """Calls Claude through LangChain and parses the reply into primitives."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or default_settings

    def build_messages(self, request: SynthesisRequest) -> list:
        from langchain_core.messages import HumanMessage, SystemMessage

        user_text = build_user_prompt(request)
        if request.prior_image:
            human = HumanMessage(content=[
                {"type": "text", "text": user_text},
                {"type": "image_url", "image_url": {"url": to_data_url(request.prior_image)}},
            ])
        else:
            human = HumanMessage(content=user_text)
        return [SystemMessage(content=build_system_prompt(request.attempt)), human]

    async def synthesize(self, request: SynthesisRequest) -> SynthesisOutput:
        if not self.settings.anthropic_api_key:
            raise SynthesisError("LLM not configured, set ANTHROPIC_API_KEY in .env")

        from langchain_anthropic import ChatAnthropic

        task = "refine" if request.is_refinement else "draw"
        llm = ChatAnthropic(
            model=get_model_for_task(task, self.settings),
            api_key=self.settings.anthropic_api_key,
            max_tokens=self.settings.llm_max_tokens,
            temperature=self.settings.llm_temperature,
        )

        response = await llm.ainvoke(self.build_messages(request))
        text = _content_text(response.content)
        logger.debug("Synthesizer reply (%s, attempt %d): %d chars", task, request.attempt, len(text))
        return parse_synthesis_output(text)
