"""Synthesizer boundary models: what goes into the language model, what comes out."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from drawsynth.models.primitives import DiagramType, parse_primitives


class SynthesisRequest(BaseModel):
    prompt: str
    canvas_context: list[dict[str, Any]] = Field(default_factory=list)
    feedback: str = ""
    previous_items: list[Any] = Field(default_factory=list)  # rejected primitives
    prior_image: str | None = None  # data URL of the current canvas
    attempt: int = 0

    @property
    def is_refinement(self) -> bool:
        return self.attempt > 0 and bool(self.feedback)


class SynthesisOutput(BaseModel):
    """Validated synthesizer output. Items are parsed into primitive models on construction."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[Any] = Field(default_factory=list)
    diagram_type: DiagramType = Field(default=DiagramType.FREEFORM, alias="diagramType")
    description: str = ""

    @field_validator("items", mode="before")
    @classmethod
    def _parse_items(cls, value: Any) -> Any:
        if isinstance(value, list):
            return parse_primitives(value)
        return value

    @field_validator("diagram_type", mode="before")
    @classmethod
    def _lower_diagram_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value
