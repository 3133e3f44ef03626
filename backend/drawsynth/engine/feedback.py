"""Turns validation issues into corrective text for the next synthesis attempt."""

from __future__ import annotations

from drawsynth.engine.config import PipelineConfig
from drawsynth.models.validation import IssueType, Severity, ValidationIssue

_TEMPLATES: dict[IssueType, str] = {
    IssueType.OVERLAP: "Separate shapes by at least {min_spacing:.0f}px.",
    IssueType.DISCONNECTED: "Move the arrow endpoint to touch a shape edge.",
    IssueType.OFF_CANVAS: "Keep x within 0-{width:.0f} and y within 0-{height:.0f}.",
    IssueType.SPACING: "Use consistent gaps.",
    IssueType.ALIGNMENT: "Snap aligned shapes to the same coordinate.",
}


def remedy(issue_type: IssueType, config: PipelineConfig | None = None) -> str:
    config = config or PipelineConfig()
    return _TEMPLATES[issue_type].format(
        min_spacing=config.min_spacing,
        width=config.canvas_width,
        height=config.canvas_height,
    )


def format_feedback(issues: list[ValidationIssue], config: PipelineConfig | None = None) -> str:
    """One line per issue, errors first, each tagged with its type and remedy."""
    if not issues:
        return ""
    config = config or PipelineConfig()

    errors = [i for i in issues if i.severity == Severity.ERROR]
    warnings = [i for i in issues if i.severity == Severity.WARNING]

    lines = []
    for issue in errors + warnings:
        lines.append(
            f"[{issue.severity.value.upper()}] {issue.type.value}: "
            f"{issue.message}. {remedy(issue.type, config)}"
        )
    return "\n".join(lines)
