"""Pipeline configuration: canvas bounds, retry budget, geometry thresholds."""

from __future__ import annotations

from dataclasses import dataclass

# Deployment profiles. The primitive drawer works on a square page; the
# layout drawer targets a landscape viewport.
CANVAS_PROFILES: dict[str, tuple[float, float]] = {
    "primitive": (1200.0, 1200.0),
    "layout": (1200.0, 800.0),
}


@dataclass
class PipelineConfig:
    """Controls the synthesis loop and the geometry checks."""

    # Retry budget (total synthesizer calls)
    max_attempts: int = 3

    # Canvas bounds
    canvas_width: float = 1200.0
    canvas_height: float = 1200.0

    # Minimum clear gap between shape boxes
    min_spacing: float = 20.0

    # Max distance from an arrow endpoint to a shape edge to count as attached
    connection_threshold: float = 30.0

    @classmethod
    def for_profile(cls, profile: str, **overrides) -> PipelineConfig:
        try:
            width, height = CANVAS_PROFILES[profile]
        except KeyError:
            raise ValueError(
                f"Unknown canvas profile {profile!r}; expected one of {sorted(CANVAS_PROFILES)}"
            ) from None
        return cls(canvas_width=width, canvas_height=height, **overrides)

    @classmethod
    def from_settings(cls, settings=None) -> PipelineConfig:
        if settings is None:
            from drawsynth.config import settings

        return cls.for_profile(
            settings.canvas_profile,
            max_attempts=settings.max_attempts,
            min_spacing=settings.min_spacing,
            connection_threshold=settings.connection_threshold,
        )
