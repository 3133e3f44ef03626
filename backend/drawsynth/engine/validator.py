"""Geometry validator: overlap, canvas bounds, arrow connectivity, spacing.

Pure and deterministic: the same primitives always yield the same issues in
the same order. Geometry problems are reported as issues, never raised.
Freeform compositions skip every check.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from drawsynth.engine.config import PipelineConfig
from drawsynth.engine.geometry import BoundingBox, bounding_box, describe, point_near_edge
from drawsynth.engine.spatial_constants import (
    ALIGNMENT_SNAP_TOLERANCE,
    ALIGNMENT_TOLERANCE,
    OFF_CANVAS_TOLERANCE,
    SPACING_ABSOLUTE_THRESHOLD,
    SPACING_MIN_GROUP,
    SPACING_RELATIVE_THRESHOLD,
)
from drawsynth.models.primitives import ArrowPrimitive, DiagramType, is_node, parse_primitives
from drawsynth.models.validation import IssueType, Severity, ValidationIssue, ValidationResult

logger = logging.getLogger(__name__)


def validate(
    primitives: list[Any],
    diagram_type: DiagramType | str = DiagramType.STRUCTURED,
    config: PipelineConfig | None = None,
) -> ValidationResult:
    """Check a primitive set. ``valid`` is True iff no error-severity issue was found."""
    diagram_type = DiagramType(diagram_type)
    if diagram_type == DiagramType.FREEFORM:
        return ValidationResult(valid=True, issues=[], diagram_type=diagram_type)

    config = config or PipelineConfig()
    items = parse_primitives(primitives)

    boxed = [(i, p, bounding_box(p)) for i, p in enumerate(items)]
    boxed = [(i, p, b) for i, p, b in boxed if b is not None]
    nodes = [(i, p, b) for i, p, b in boxed if is_node(p)]

    issues: list[ValidationIssue] = []
    issues.extend(_check_overlaps(boxed, config.min_spacing))
    issues.extend(_check_bounds(boxed, config))
    issues.extend(_check_connectivity(items, nodes, config.connection_threshold))
    issues.extend(_check_spacing(nodes))

    valid = not any(issue.severity == Severity.ERROR for issue in issues)
    result = ValidationResult(valid=valid, issues=issues, diagram_type=diagram_type)
    logger.debug("Validated %d primitives: %s", len(items), result.summary())
    return result


# ---------------------------------------------------------------------------
# Overlap
# ---------------------------------------------------------------------------


def _check_overlaps(
    boxed: list[tuple[int, Any, BoundingBox]],
    min_spacing: float,
) -> list[ValidationIssue]:
    issues = []
    for a in range(len(boxed)):
        i, prim_i, box_i = boxed[a]
        grown = box_i.inflate(min_spacing)
        for b in range(a + 1, len(boxed)):
            j, prim_j, box_j = boxed[b]
            if not grown.intersects(box_j):
                continue
            issues.append(ValidationIssue(
                type=IssueType.OVERLAP,
                severity=Severity.ERROR,
                index=i,
                message=(
                    f"{describe(prim_i, i)} overlaps {describe(prim_j, j)} "
                    f"(need {min_spacing:.0f}px clearance)"
                ),
                details={"indices": [i, j], "labels": [prim_i.label, prim_j.label]},
            ))
    return issues


# ---------------------------------------------------------------------------
# Canvas bounds
# ---------------------------------------------------------------------------


def _check_bounds(
    boxed: list[tuple[int, Any, BoundingBox]],
    config: PipelineConfig,
) -> list[ValidationIssue]:
    issues = []
    for i, prim, bbox in boxed:
        if (
            bbox.x < -OFF_CANVAS_TOLERANCE
            or bbox.y < -OFF_CANVAS_TOLERANCE
            or bbox.right > config.canvas_width
            or bbox.bottom > config.canvas_height
        ):
            issues.append(ValidationIssue(
                type=IssueType.OFF_CANVAS,
                severity=Severity.ERROR,
                index=i,
                message=(
                    f"{describe(prim, i)} spans ({bbox.x:.0f}, {bbox.y:.0f})-"
                    f"({bbox.right:.0f}, {bbox.bottom:.0f}), outside the "
                    f"{config.canvas_width:.0f}x{config.canvas_height:.0f} canvas"
                ),
                details={"bbox": list(bbox)},
            ))
    return issues


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


def _check_connectivity(
    items: list[Any],
    nodes: list[tuple[int, Any, BoundingBox]],
    threshold: float,
) -> list[ValidationIssue]:
    issues = []
    arrows = [(i, p) for i, p in enumerate(items) if isinstance(p, ArrowPrimitive)]

    if len(nodes) >= 2 and not arrows:
        issues.append(ValidationIssue(
            type=IssueType.DISCONNECTED,
            severity=Severity.ERROR,
            message=f"{len(nodes)} shapes but no arrows connecting them",
            details={"nodes": [i for i, _, _ in nodes]},
        ))
        return issues

    node_boxes = [b for _, _, b in nodes]
    for i, arrow in arrows:
        # Label-addressed arrows are bound by the renderer
        if not arrow.has_points:
            continue
        start_ok = any(point_near_edge(b, arrow.start.x, arrow.start.y, threshold) for b in node_boxes)
        end_ok = any(point_near_edge(b, arrow.end.x, arrow.end.y, threshold) for b in node_boxes)
        if start_ok and end_ok:
            continue
        if not start_ok and not end_ok:
            issues.append(ValidationIssue(
                type=IssueType.DISCONNECTED,
                severity=Severity.ERROR,
                index=i,
                message=f"Arrow #{i}: neither endpoint touches a shape edge",
                details={"start": False, "end": False},
            ))
        else:
            loose = "start" if not start_ok else "end"
            issues.append(ValidationIssue(
                type=IssueType.DISCONNECTED,
                severity=Severity.WARNING,
                index=i,
                message=f"Arrow #{i}: {loose} point is not within {threshold:.0f}px of a shape edge",
                details={"start": start_ok, "end": end_ok},
            ))
    return issues


# ---------------------------------------------------------------------------
# Spacing and alignment (warnings only)
# ---------------------------------------------------------------------------


def _group_by(
    nodes: list[tuple[int, Any, BoundingBox]],
    axis: int,
) -> list[list[tuple[int, Any, BoundingBox]]]:
    """Greedy grouping of nodes whose centre coordinate on ``axis`` is within tolerance."""
    groups: dict[float, list[tuple[int, Any, BoundingBox]]] = {}
    for node in nodes:
        c = node[2].center[axis]
        for key in groups:
            if abs(c - key) < ALIGNMENT_TOLERANCE:
                groups[key].append(node)
                break
        else:
            groups[c] = [node]
    return list(groups.values())


def _check_spacing(nodes: list[tuple[int, Any, BoundingBox]]) -> list[ValidationIssue]:
    issues = []
    # axis 1: rows share a centre y and are spaced along x; axis 0: columns
    for axis, name in ((1, "row"), (0, "column")):
        for group in _group_by(nodes, axis):
            if len(group) < 2:
                continue
            issues.extend(_spacing_issue(group, axis, name))
            issues.extend(_alignment_issue(group, axis, name))
    return issues


def _spacing_issue(group, axis: int, name: str) -> list[ValidationIssue]:
    if len(group) < SPACING_MIN_GROUP:
        return []
    along = 1 - axis
    ordered = sorted(group, key=lambda n: (n[2].x, n[2].y)[along])
    gaps = []
    for (_, _, a), (_, _, b) in zip(ordered, ordered[1:]):
        gap = (b.x - a.right) if along == 0 else (b.y - a.bottom)
        if gap > 0:
            gaps.append(gap)
    if len(gaps) < 2:
        return []

    arr = np.array(gaps)
    mean = float(np.mean(arr))
    max_dev = float(np.max(np.abs(arr - mean)))
    if max_dev <= SPACING_RELATIVE_THRESHOLD * mean or max_dev <= SPACING_ABSOLUTE_THRESHOLD:
        return []

    gap_text = ", ".join(f"{g:.0f}" for g in gaps)
    return [ValidationIssue(
        type=IssueType.SPACING,
        severity=Severity.WARNING,
        index=ordered[0][0],
        message=f"Uneven gaps in {name} of {len(group)} shapes: {gap_text}px (mean {mean:.0f}px)",
        details={"gaps": [round(g, 1) for g in gaps], "mean": round(mean, 1)},
    )]


def _alignment_issue(group, axis: int, name: str) -> list[ValidationIssue]:
    centres = [n[2].center[axis] for n in group]
    spread = max(centres) - min(centres)
    if spread <= ALIGNMENT_SNAP_TOLERANCE:
        return []
    target = round(float(np.mean(centres)))
    coord = "y" if axis == 1 else "x"
    labels = ", ".join(describe(p, i) for i, p, _ in group)
    return [ValidationIssue(
        type=IssueType.ALIGNMENT,
        severity=Severity.WARNING,
        index=group[0][0],
        message=f"Nearly aligned {name} ({labels}): centre {coord} differs by {spread:.0f}px; use {coord}={target}",
        details={"indices": [i for i, _, _ in group], "axis": coord, "target": target},
    )]
