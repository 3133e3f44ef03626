"""Exception types raised across the synthesis pipeline."""

from __future__ import annotations


class DrawSynthError(Exception):
    """Base class for pipeline errors."""


class PrimitiveSchemaError(DrawSynthError, ValueError):
    """A primitive does not match any known shape kind or violates its schema.

    Raised instead of coercing, since a mismatch usually means the synthesizer
    and the renderer disagree on the schema version.
    """


class SynthesisError(DrawSynthError):
    """The shape synthesizer failed or returned unusable output."""
