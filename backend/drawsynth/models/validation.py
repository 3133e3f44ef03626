"""Geometry validation result models."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from drawsynth.models.primitives import DiagramType


class IssueType(str, enum.Enum):
    OVERLAP = "overlap"
    DISCONNECTED = "disconnected"
    OFF_CANVAS = "off-canvas"
    SPACING = "spacing"
    ALIGNMENT = "alignment"


class Severity(str, enum.Enum):
    ERROR = "error"  # blocks acceptance, drives the refine loop
    WARNING = "warning"  # reported, never blocks


class ValidationIssue(BaseModel):
    """A single geometry problem. Issues are created once and never mutated."""

    model_config = ConfigDict(frozen=True)

    type: IssueType
    message: str
    severity: Severity
    index: int | None = None  # primitive index the issue is anchored on
    details: dict[str, Any] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    diagram_type: DiagramType = Field(default=DiagramType.STRUCTURED, alias="diagramType")

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def summary(self) -> str:
        status = "valid" if self.valid else "invalid"
        return f"{status} ({self.error_count} errors, {self.warning_count} warnings)"
