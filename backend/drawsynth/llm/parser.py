"""Extract and validate the synthesizer's JSON reply."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from drawsynth.errors import SynthesisError
from drawsynth.models.synthesis import SynthesisOutput

logger = logging.getLogger(__name__)


def extract_json(text: str) -> dict[str, Any] | None:
    """Find the first JSON object in ``text``, fenced or bare."""
    match = re.search(r"```(?:json)?\s*\n?({[\s\S]*?})\s*\n?```", text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    match = re.search(r"\{[\s\S]*\}", text)
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            pass

    return None


def parse_synthesis_output(text: str) -> SynthesisOutput:
    """Parse model text into a validated SynthesisOutput.

    A bare JSON array is accepted as the item list. Raises SynthesisError when
    no JSON can be found or the items do not match the primitive schema.
    """
    data: Any = None
    stripped = text.strip()
    if stripped.startswith("["):
        try:
            data = {"items": json.loads(stripped)}
        except json.JSONDecodeError:
            pass
    if data is None:
        data = extract_json(text)
    if not isinstance(data, dict):
        logger.warning("No JSON object in synthesizer reply (%d chars)", len(text))
        raise SynthesisError("Synthesizer reply contained no JSON object")

    try:
        return SynthesisOutput.model_validate(data)
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning("Synthesizer reply failed schema validation: %s", e)
        raise SynthesisError(f"Synthesizer reply did not match the primitive schema: {e}") from e
