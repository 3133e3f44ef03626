"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from drawsynth.models.canvas import Binding, RenderedShape
from drawsynth.models.validation import ValidationResult


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    primitive_kinds: list[str] = Field(default_factory=list)


class RunStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    primitive_count: int = 0
    shape_count: int = 0
    binding_count: int = 0
    attempts: int = 0
    is_valid: bool = False
    execution_time_ms: float = 0.0


class DrawingResult(BaseModel):
    """Outcome of one synthesis run. ``success`` is False only when nothing usable was produced."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    shapes: list[RenderedShape] = Field(default_factory=list)
    bindings: list[Binding] = Field(default_factory=list)
    reply: str = ""
    error: str | None = None
    validation: ValidationResult | None = None
    stats: RunStats = Field(default_factory=RunStats)
