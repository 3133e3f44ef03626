"""Primitive → tldraw shape records, plus arrow bindings resolved by label.

Each ``render`` call works inside its own RenderSession (id counter, label
index, shape boxes). Sessions are never shared between requests.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from drawsynth.engine.geometry import BoundingBox, effective_size, text_size
from drawsynth.models.canvas import AnchorPoint, Binding, BindingProps, RenderedShape, RenderResult
from drawsynth.models.primitives import (
    ArrowPrimitive,
    GeoPrimitive,
    LinePrimitive,
    Point,
    PolygonPrimitive,
    TextPrimitive,
    parse_primitives,
)

logger = logging.getLogger(__name__)

# tldraw colour palette
CANVAS_COLORS = frozenset({
    "black", "grey", "light-violet", "violet", "blue", "light-blue", "yellow",
    "orange", "green", "light-green", "light-red", "red", "white",
})
_COLOR_ALIASES = {
    "gray": "grey",
    "purple": "violet",
    "pink": "light-red",
    "cyan": "light-blue",
    "lime": "light-green",
}

# Binding anchors: leave the source at its bottom centre, enter the target at its top centre
START_ANCHOR = (0.5, 1.0)
END_ANCHOR = (0.5, 0.0)

# Length of an arrow with only one (or no) resolved endpoint
DEFAULT_ARROW_LENGTH = 100.0

# tldraw bend for curved arrows
_ARROW_BEND = 30


@dataclass
class RenderSession:
    """Per-invocation render state."""

    run_token: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    counter: int = 0
    label_index: dict[str, str] = field(default_factory=dict)  # lower-cased label -> shape id
    boxes: dict[str, BoundingBox] = field(default_factory=dict)  # shape id -> effective box

    def next_id(self, prefix: str, kind: str = "shape") -> str:
        shape_id = f"{kind}:{prefix}-{self.counter}-{self.run_token}"
        self.counter += 1
        return shape_id

    def register(self, label: str | None, shape_id: str, bbox: BoundingBox) -> None:
        self.boxes[shape_id] = bbox
        if label:
            # last writer wins on duplicate labels
            self.label_index[label.strip().lower()] = shape_id

    def resolve(self, label: str | None) -> str | None:
        if not label:
            return None
        return self.label_index.get(label.strip().lower())


def render(primitives: list[Any], session: RenderSession | None = None) -> RenderResult:
    """Render primitives into canvas shapes and bindings.

    Arrows are rendered after every other primitive so that label references
    resolve regardless of input order. Raises PrimitiveSchemaError for items
    that are not a known primitive kind.
    """
    items = parse_primitives(primitives)
    session = session or RenderSession()
    result = RenderResult()

    for prim in items:
        if not isinstance(prim, ArrowPrimitive):
            result.shapes.extend(_render_one(prim, session))

    for prim in items:
        if isinstance(prim, ArrowPrimitive):
            shape, bindings = _render_arrow(prim, session)
            result.shapes.append(shape)
            result.bindings.extend(bindings)

    logger.debug(
        "Rendered %d primitives into %d shapes, %d bindings",
        len(items), len(result.shapes), len(result.bindings),
    )
    return result


def _render_one(prim: Any, session: RenderSession) -> list[RenderedShape]:
    if isinstance(prim, GeoPrimitive):
        return [_render_geo(prim, session)]
    if isinstance(prim, TextPrimitive):
        return [_render_text(prim, session)]
    if isinstance(prim, LinePrimitive):
        return [_render_line(prim.vertices, prim, session)]
    if isinstance(prim, PolygonPrimitive):
        return _render_polygon(prim, session)
    raise TypeError(f"Unhandled primitive type: {type(prim).__name__}")


# ---------------------------------------------------------------------------
# Prop helpers
# ---------------------------------------------------------------------------


def to_rich_text(text: str) -> dict[str, Any]:
    """tldraw rich-text document, one paragraph per line."""
    content = []
    for line in text.split("\n"):
        if line:
            content.append({"type": "paragraph", "content": [{"type": "text", "text": line}]})
        else:
            content.append({"type": "paragraph"})
    return {"type": "doc", "content": content}


def map_font_size(font_size: float | None) -> str:
    if not font_size:
        return "m"
    if font_size <= 12:
        return "s"
    if font_size <= 18:
        return "m"
    if font_size <= 24:
        return "l"
    return "xl"


def normalize_color(color: str | None) -> str:
    if not color:
        return "black"
    key = color.strip().lower()
    key = _COLOR_ALIASES.get(key, key)
    return key if key in CANVAS_COLORS else "black"


def _size_token(stroke_width: float | None) -> str:
    if not stroke_width:
        return "m"
    if stroke_width <= 1:
        return "s"
    if stroke_width <= 3:
        return "m"
    if stroke_width <= 5:
        return "l"
    return "xl"


def _shape(shape_id: str, kind: str, x: float, y: float, props: dict[str, Any], **meta) -> RenderedShape:
    return RenderedShape(id=shape_id, type=kind, x=x, y=y, props=props, meta=meta)


# ---------------------------------------------------------------------------
# Bounded shapes
# ---------------------------------------------------------------------------


def _render_geo(prim: GeoPrimitive, session: RenderSession) -> RenderedShape:
    w, h = effective_size(prim)
    shape_id = session.next_id(prim.shape)
    session.register(prim.label, shape_id, BoundingBox(prim.x, prim.y, w, h))
    return _shape(shape_id, "geo", prim.x, prim.y, {
        "geo": prim.shape,
        "w": w,
        "h": h,
        "color": normalize_color(prim.color),
        "labelColor": "black",
        "fill": "solid" if prim.fill_color else "none",
        "dash": "draw",
        "size": _size_token(prim.stroke_width),
        "font": "draw",
        "richText": to_rich_text(prim.label or ""),
        "align": "middle",
        "verticalAlign": "middle",
        "growY": 0,
        "url": "",
        "scale": 1,
    }, label=prim.label or "")


def _render_text(prim: TextPrimitive, session: RenderSession) -> RenderedShape:
    content = prim.content
    w, h = text_size(content)
    shape_id = session.next_id("text")
    session.boxes[shape_id] = BoundingBox(prim.x, prim.y, w, h)
    return _shape(shape_id, "text", prim.x, prim.y, {
        "richText": to_rich_text(content),
        "color": normalize_color(prim.color),
        "size": map_font_size(prim.font_size),
        "font": prim.font_family or "draw",
        "textAlign": "start",
        "w": w,
        "scale": 1,
        "autoSize": False,
    })


# ---------------------------------------------------------------------------
# Lines and polygons (local coordinates relative to the first vertex)
# ---------------------------------------------------------------------------


_BASE_62 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def index_key(n: int) -> str:
    """Order-preserving fractional-index integer key: a1..az, then b00..bzz, c000..."""
    width, head = 1, "a"
    while n >= len(_BASE_62) ** width:
        n -= len(_BASE_62) ** width
        width += 1
        head = chr(ord(head) + 1)
    digits = []
    for _ in range(width):
        n, d = divmod(n, len(_BASE_62))
        digits.append(_BASE_62[d])
    return head + "".join(reversed(digits))


def _line_points(vertices: list[Point]) -> dict[str, dict[str, Any]]:
    ox, oy = vertices[0].x, vertices[0].y
    points = {}
    for n, v in enumerate(vertices):
        key = index_key(n + 1)
        points[key] = {"id": key, "index": key, "x": v.x - ox, "y": v.y - oy}
    return points


def _render_line(
    vertices: list[Point],
    prim: LinePrimitive | PolygonPrimitive,
    session: RenderSession,
    prefix: str = "line",
) -> RenderedShape:
    shape_id = session.next_id(prefix)
    return _shape(shape_id, "line", vertices[0].x, vertices[0].y, {
        "points": _line_points(vertices),
        "color": normalize_color(prim.color),
        "dash": "draw",
        "size": _size_token(prim.stroke_width),
        "spline": "cubic" if getattr(prim, "curved", False) else "line",
        "scale": 1,
    })


def _render_polygon(prim: PolygonPrimitive, session: RenderSession) -> list[RenderedShape]:
    """One segment per edge; the last edge closes back to the first vertex."""
    vertices = prim.vertices
    shapes = []
    for n, start in enumerate(vertices):
        end = vertices[(n + 1) % len(vertices)]
        shapes.append(_render_line([start, end], prim, session, prefix="polygon-line"))
    return shapes


# ---------------------------------------------------------------------------
# Arrows
# ---------------------------------------------------------------------------


def _anchor_point(bbox: BoundingBox, anchor: tuple[float, float]) -> tuple[float, float]:
    return (bbox.x + bbox.w * anchor[0], bbox.y + bbox.h * anchor[1])


def _arrow_endpoints(
    prim: ArrowPrimitive,
    from_id: str | None,
    to_id: str | None,
    session: RenderSession,
) -> tuple[tuple[float, float], tuple[float, float]]:
    if prim.has_points:
        return (prim.start.x, prim.start.y), (prim.end.x, prim.end.y)

    start = _anchor_point(session.boxes[from_id], START_ANCHOR) if from_id else None
    end = _anchor_point(session.boxes[to_id], END_ANCHOR) if to_id else None
    if start is None and end is None:
        start = (prim.x, prim.y)
    if end is None:
        end = (start[0], start[1] + DEFAULT_ARROW_LENGTH)
    if start is None:
        start = (end[0], end[1] - DEFAULT_ARROW_LENGTH)
    return start, end


def _binding(arrow_id: str, shape_id: str, terminal: str, session: RenderSession) -> Binding:
    anchor = START_ANCHOR if terminal == "start" else END_ANCHOR
    return Binding(
        id=session.next_id("arrow", kind="binding"),
        from_id=arrow_id,
        to_id=shape_id,
        props=BindingProps(
            terminal=terminal,
            normalized_anchor=AnchorPoint(x=anchor[0], y=anchor[1]),
            is_exact=False,
            is_precise=True,
        ),
    )


def _render_arrow(prim: ArrowPrimitive, session: RenderSession) -> tuple[RenderedShape, list[Binding]]:
    from_id = session.resolve(prim.from_label)
    to_id = session.resolve(prim.to_label)
    if prim.from_label and from_id is None:
        logger.debug("Arrow source label %r not found; leaving start unbound", prim.from_label)
    if prim.to_label and to_id is None:
        logger.debug("Arrow target label %r not found; leaving end unbound", prim.to_label)

    (sx, sy), (ex, ey) = _arrow_endpoints(prim, from_id, to_id, session)
    arrow_id = session.next_id("arrow")
    shape = _shape(arrow_id, "arrow", sx, sy, {
        "start": {"x": 0.0, "y": 0.0},
        "end": {"x": ex - sx, "y": ey - sy},
        "color": normalize_color(prim.color),
        "arrowheadStart": "none",
        "arrowheadEnd": prim.arrow_head_type or "arrow",
        "bend": _ARROW_BEND if prim.curved else 0,
        "size": _size_token(prim.stroke_width),
        "dash": "draw",
        "richText": to_rich_text(prim.label or ""),
        "labelPosition": 0.5,
        "scale": 1,
    }, fromLabel=prim.from_label, toLabel=prim.to_label)

    bindings = []
    if from_id:
        bindings.append(_binding(arrow_id, from_id, "start", session))
    if to_id:
        bindings.append(_binding(arrow_id, to_id, "end", session))
    return shape, bindings
