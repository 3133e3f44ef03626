"""Primitive shape model: the closed set of shape instructions the synthesizer may emit.

Wire format is camelCase (``fromLabel``, ``fillColor``...); attributes are snake_case.
"""

from __future__ import annotations

import enum
import math
from typing import Annotated, Any, Literal, Union, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from drawsynth.errors import PrimitiveSchemaError

GeoShape = Literal[
    "rectangle",
    "ellipse",
    "diamond",
    "pentagon",
    "hexagon",
    "octagon",
    "star",
    "cloud",
    "trapezoid",
    "triangle",
    "check-box",
    "x-box",
    "rhombus",
    "arrow-right",
    "arrow-left",
    "arrow-up",
    "arrow-down",
]

GEO_SHAPES: frozenset[str] = frozenset(get_args(GeoShape))
OTHER_SHAPES: tuple[str, ...] = ("text", "arrow", "line", "polygon")

# Common LLM spellings that map onto a native geo kind
SHAPE_ALIASES = {
    "circle": "ellipse",
    "oval": "ellipse",
    "rect": "rectangle",
    "box": "rectangle",
    "square": "rectangle",
}

DEFAULT_GEO_W = 100.0
DEFAULT_GEO_H = 100.0


class DiagramType(str, enum.Enum):
    """Structured diagrams are geometry-checked; freeform compositions are not."""

    STRUCTURED = "structured"
    FREEFORM = "freeform"


def normalize_shape_name(shape: str) -> str:
    key = shape.strip().lower()
    return SHAPE_ALIASES.get(key, key)


class Point(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float
    y: float


class _PrimitiveBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        frozen=True,
    )

    x: float
    y: float
    label: str | None = None
    color: str | None = None
    fill_color: str | None = None
    stroke_width: float | None = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("shape"), str):
            return {**data, "shape": normalize_shape_name(data["shape"])}
        return data


class GeoPrimitive(_PrimitiveBase):
    """Any bounded native shape (rectangle, ellipse, diamond, star, cloud...)."""

    shape: GeoShape
    w: float = Field(default=DEFAULT_GEO_W, ge=0)
    h: float = Field(default=DEFAULT_GEO_H, ge=0)

    @field_validator("w", "h", mode="before")
    @classmethod
    def _fill_missing_size(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return DEFAULT_GEO_W if info.field_name == "w" else DEFAULT_GEO_H
        return value


class TextPrimitive(_PrimitiveBase):
    shape: Literal["text"]
    text: str = ""
    font_size: float | None = Field(default=None, gt=0)
    font_family: str | None = None  # draw | serif | mono | sans

    @property
    def content(self) -> str:
        return self.text or self.label or ""


class ArrowPrimitive(_PrimitiveBase):
    """Arrow given either by explicit points or by the labels of the shapes it joins."""

    shape: Literal["arrow"]
    x: float = 0.0
    y: float = 0.0
    start: Point | None = None
    end: Point | None = None
    from_label: str | None = None
    to_label: str | None = None
    arrow_head_type: str | None = None
    curved: bool = False

    @model_validator(mode="after")
    def _check_endpoints(self) -> ArrowPrimitive:
        if not self.has_points and not self.has_labels:
            raise ValueError(
                "arrow needs explicit start/end points or both fromLabel and toLabel"
            )
        return self

    @property
    def has_points(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def has_labels(self) -> bool:
        return bool(self.from_label and self.to_label)


class LinePrimitive(_PrimitiveBase):
    """Straight line (start/end) or open polyline (points)."""

    shape: Literal["line"]
    x: float = 0.0
    y: float = 0.0
    start: Point | None = None
    end: Point | None = None
    points: list[Point] = Field(default_factory=list)
    curved: bool = False

    @model_validator(mode="after")
    def _check_points(self) -> LinePrimitive:
        if len(self.vertices) < 2:
            raise ValueError("line needs start/end or at least two points")
        return self

    @property
    def vertices(self) -> list[Point]:
        if self.start is not None and self.end is not None:
            return [self.start, self.end]
        return list(self.points)


class PolygonPrimitive(_PrimitiveBase):
    """Closed polygon from absolute ``points``, or a regular ``sides``-gon in a 100x100 box at (x, y)."""

    shape: Literal["polygon"]
    x: float = 0.0
    y: float = 0.0
    points: list[Point] = Field(default_factory=list)
    sides: int | None = Field(default=None, ge=3)

    @model_validator(mode="after")
    def _check_vertices(self) -> PolygonPrimitive:
        if len(self.points) < 3 and self.sides is None:
            raise ValueError("polygon needs at least three points or a side count")
        return self

    @property
    def vertices(self) -> list[Point]:
        if len(self.points) >= 3:
            return list(self.points)
        radius_x, radius_y = DEFAULT_GEO_W / 2, DEFAULT_GEO_H / 2
        cx, cy = self.x + radius_x, self.y + radius_y
        n = self.sides or 3
        return [
            Point(
                x=round(cx + radius_x * math.cos(-math.pi / 2 + 2 * math.pi * k / n), 2),
                y=round(cy + radius_y * math.sin(-math.pi / 2 + 2 * math.pi * k / n), 2),
            )
            for k in range(n)
        ]


def _shape_tag(value: Any) -> str | None:
    shape = value.get("shape") if isinstance(value, dict) else getattr(value, "shape", None)
    if not isinstance(shape, str):
        return None
    shape = normalize_shape_name(shape)
    if shape in GEO_SHAPES:
        return "geo"
    if shape in OTHER_SHAPES:
        return shape
    return None


Primitive = Annotated[
    Union[
        Annotated[GeoPrimitive, Tag("geo")],
        Annotated[TextPrimitive, Tag("text")],
        Annotated[ArrowPrimitive, Tag("arrow")],
        Annotated[LinePrimitive, Tag("line")],
        Annotated[PolygonPrimitive, Tag("polygon")],
    ],
    Discriminator(_shape_tag),
]

PRIMITIVE_TYPES = (GeoPrimitive, TextPrimitive, ArrowPrimitive, LinePrimitive, PolygonPrimitive)

_PRIMITIVE_ADAPTER: TypeAdapter[Any] = TypeAdapter(Primitive)


def coerce_primitive(item: Any) -> Any:
    """Return ``item`` as a primitive model, validating raw dicts.

    Raises PrimitiveSchemaError for unknown shape kinds or malformed fields.
    """
    if isinstance(item, PRIMITIVE_TYPES):
        return item
    try:
        return _PRIMITIVE_ADAPTER.validate_python(item)
    except ValidationError as e:
        shape = item.get("shape") if isinstance(item, dict) else type(item).__name__
        raise PrimitiveSchemaError(f"Invalid primitive (shape={shape!r}): {e}") from e


def parse_primitives(items: list[Any]) -> list[Any]:
    return [coerce_primitive(item) for item in items]


def is_node(primitive: Any) -> bool:
    """Nodes are the boxes arrows connect: bounded geo shapes and polygons."""
    return isinstance(primitive, (GeoPrimitive, PolygonPrimitive))
