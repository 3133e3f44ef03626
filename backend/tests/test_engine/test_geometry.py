"""Tests for effective shape boxes and edge proximity."""

from __future__ import annotations

import pytest

from drawsynth.engine.geometry import (
    BoundingBox,
    bounding_box,
    edge_distance,
    effective_size,
    label_min_size,
    point_near_edge,
)
from drawsynth.engine.spatial_constants import MIN_SHAPE_H, MIN_SHAPE_W
from drawsynth.models.primitives import coerce_primitive


def test_unlabelled_minimum():
    assert label_min_size(None) == (MIN_SHAPE_W, MIN_SHAPE_H)
    assert label_min_size("") == (MIN_SHAPE_W, MIN_SHAPE_H)


def test_label_grows_box():
    prim = coerce_primitive({
        "shape": "rectangle", "x": 0, "y": 0, "w": 50, "h": 30,
        "label": "A rather long process step name",
    })
    w, h = effective_size(prim)
    assert w > 50
    assert h > 30


def test_requested_size_kept_when_larger():
    prim = coerce_primitive({"shape": "rectangle", "x": 0, "y": 0, "w": 400, "h": 300, "label": "Hi"})
    assert effective_size(prim) == (400, 300)


def test_label_size_monotonic():
    short = label_min_size("Go")
    longer = label_min_size("Go to the next step")
    multiline = label_min_size("Go to the next step\nthen stop")
    assert longer[0] >= short[0] and longer[1] >= short[1]
    assert multiline[1] > longer[1]
    assert multiline[0] >= longer[0]


def test_text_box_width():
    prim = coerce_primitive({"shape": "text", "x": 10, "y": 20, "text": "Title"})
    assert bounding_box(prim) == BoundingBox(10, 20, 100, 30)
    long_text = coerce_primitive({"shape": "text", "x": 0, "y": 0, "text": "x" * 60})
    assert bounding_box(long_text).w == 240


def test_polygon_box_from_points():
    prim = coerce_primitive({
        "shape": "polygon", "points": [{"x": 10, "y": 20}, {"x": 60, "y": 20}, {"x": 35, "y": 90}],
    })
    assert bounding_box(prim) == BoundingBox(10, 20, 50, 70)


def test_connectors_have_no_box():
    assert bounding_box(coerce_primitive({"shape": "arrow", "fromLabel": "a", "toLabel": "b"})) is None
    assert bounding_box(
        coerce_primitive({"shape": "line", "start": {"x": 0, "y": 0}, "end": {"x": 1, "y": 1}})
    ) is None


class TestBoundingBox:
    def test_touching_boxes_do_not_intersect(self):
        a = BoundingBox(0, 0, 100, 100)
        b = BoundingBox(100, 0, 100, 100)
        assert not a.intersects(b)
        assert a.inflate(1).intersects(b)

    def test_intersection_is_symmetric(self):
        a = BoundingBox(0, 0, 100, 100)
        b = BoundingBox(50, 50, 100, 100)
        assert a.intersects(b) and b.intersects(a)

    def test_center(self):
        assert BoundingBox(10, 20, 100, 50).center == (60, 45)


class TestEdgeProximity:
    box = BoundingBox(100, 100, 200, 100)

    def test_point_on_edge(self):
        assert edge_distance(self.box, 300, 150) == pytest.approx(0)

    def test_point_outside(self):
        assert edge_distance(self.box, 320, 150) == pytest.approx(20)
        assert point_near_edge(self.box, 320, 150, 30)
        assert not point_near_edge(self.box, 340, 150, 30)

    def test_interior_point_far_from_border(self):
        # centre of the box is 50px from the nearest (top/bottom) edge
        assert not point_near_edge(self.box, 200, 150, 30)

    def test_interior_point_near_border(self):
        assert point_near_edge(self.box, 110, 150, 30)
