"""Canvas-ready output records (tldraw shape and binding schema)."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CanvasRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RenderedShape(_CanvasRecord):
    id: str
    type_name: Literal["shape"] = "shape"
    type: str  # geo | text | arrow | line
    x: float
    y: float
    rotation: float = 0.0
    opacity: float = 1.0
    is_locked: bool = False
    meta: dict[str, Any] = Field(default_factory=dict)
    props: dict[str, Any] = Field(default_factory=dict)


class AnchorPoint(BaseModel):
    x: float
    y: float


class BindingProps(_CanvasRecord):
    terminal: Literal["start", "end"]
    normalized_anchor: AnchorPoint
    is_exact: bool = False
    is_precise: bool = False


class Binding(_CanvasRecord):
    """Attaches one terminal of an arrow (``from_id``) to a shape (``to_id``)."""

    id: str
    type_name: Literal["binding"] = "binding"
    type: Literal["arrow"] = "arrow"
    from_id: str
    to_id: str
    props: BindingProps
    meta: dict[str, Any] = Field(default_factory=dict)


class RenderResult(_CanvasRecord):
    shapes: list[RenderedShape] = Field(default_factory=list)
    bindings: list[Binding] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
