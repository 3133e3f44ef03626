"""Effective shape boxes shared by the validator and the renderer.

Both sides must agree on how big a shape really is, so label-driven sizing
lives here rather than in either consumer.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import box

from drawsynth.engine.spatial_constants import (
    CHAR_WIDTH,
    LABEL_PADDING_X,
    LABEL_PADDING_Y,
    LINE_HEIGHT,
    MIN_SHAPE_H,
    MIN_SHAPE_W,
    TEXT_CHAR_W,
    TEXT_H,
    TEXT_MIN_W,
)
from drawsynth.models.primitives import (
    ArrowPrimitive,
    GeoPrimitive,
    LinePrimitive,
    PolygonPrimitive,
    TextPrimitive,
)


class BoundingBox(NamedTuple):
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    def inflate(self, margin: float) -> BoundingBox:
        return BoundingBox(self.x - margin, self.y - margin, self.w + 2 * margin, self.h + 2 * margin)

    def intersects(self, other: BoundingBox) -> bool:
        """Strict intersection; boxes that only touch along an edge do not intersect."""
        return not (
            self.right <= other.x
            or other.right <= self.x
            or self.bottom <= other.y
            or other.bottom <= self.y
        )


def label_min_size(label: str | None) -> tuple[float, float]:
    """Smallest box that fits ``label`` without clipping."""
    if not label:
        return (MIN_SHAPE_W, MIN_SHAPE_H)
    lines = label.split("\n")
    longest = max(len(line) for line in lines)
    w = longest * CHAR_WIDTH + 2 * LABEL_PADDING_X
    h = len(lines) * LINE_HEIGHT + 2 * LABEL_PADDING_Y
    return (max(w, MIN_SHAPE_W), max(h, MIN_SHAPE_H))


def effective_size(primitive: GeoPrimitive) -> tuple[float, float]:
    min_w, min_h = label_min_size(primitive.label)
    return (max(primitive.w, min_w), max(primitive.h, min_h))


def text_size(text: str) -> tuple[float, float]:
    return (max(TEXT_MIN_W, TEXT_CHAR_W * len(text)), TEXT_H)


def bounding_box(primitive: Any) -> BoundingBox | None:
    """Effective box of a primitive, or None for connectors (arrows and lines)."""
    if isinstance(primitive, GeoPrimitive):
        w, h = effective_size(primitive)
        return BoundingBox(primitive.x, primitive.y, w, h)
    if isinstance(primitive, TextPrimitive):
        w, h = text_size(primitive.content)
        return BoundingBox(primitive.x, primitive.y, w, h)
    if isinstance(primitive, PolygonPrimitive):
        xs = [p.x for p in primitive.vertices]
        ys = [p.y for p in primitive.vertices]
        return BoundingBox(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))
    if isinstance(primitive, (ArrowPrimitive, LinePrimitive)):
        return None
    raise TypeError(f"Not a primitive: {type(primitive).__name__}")


def edge_distance(bbox: BoundingBox, x: float, y: float) -> float:
    """Distance from (x, y) to the box outline. Interior points are measured to the nearest edge."""
    outline = box(bbox.x, bbox.y, bbox.right, bbox.bottom).exterior
    return float(outline.distance(ShapelyPoint(x, y)))


def point_near_edge(bbox: BoundingBox, x: float, y: float, threshold: float) -> bool:
    return edge_distance(bbox, x, y) <= threshold


def describe(primitive: Any, index: int) -> str:
    """Human-readable handle for a primitive in issue messages."""
    label = getattr(primitive, "label", None)
    if label:
        return f'"{label}"'
    if isinstance(primitive, TextPrimitive) and primitive.text:
        return f'text "{primitive.text}"'
    return f"{primitive.shape} #{index} at ({primitive.x:.0f}, {primitive.y:.0f})"
