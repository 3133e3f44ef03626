"""API request models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from drawsynth.models.primitives import DiagramType


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DrawRequest(_Request):
    message: str = Field(..., description="What to draw, in natural language")
    canvas_image: str | None = Field(
        default=None,
        description="Data URL of the current canvas, attached to the synthesis prompt",
    )
    canvas_context: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Shapes already on the canvas (the synthesizer avoids overlapping them)",
    )
    use_validation: bool = Field(
        default=True,
        description="When false, the first synthesis attempt is rendered without retries",
    )


class ValidateRequest(_Request):
    primitives: list[dict[str, Any]] = Field(..., description="Primitive shapes to check")
    diagram_type: DiagramType = Field(default=DiagramType.STRUCTURED)
    canvas_profile: str | None = Field(
        default=None,
        description="Canvas bounds profile (primitive, layout); defaults to the configured one",
    )


class RenderRequest(_Request):
    primitives: list[dict[str, Any]] = Field(..., description="Primitive shapes to render")
