"""DrawSynth geometry engine: validation, feedback, rendering, orchestration."""

from drawsynth.engine.config import PipelineConfig
from drawsynth.engine.feedback import format_feedback
from drawsynth.engine.orchestrator import AgentState, DiagramOrchestrator, ShapeSynthesizer, Stage, next_state
from drawsynth.engine.renderer import RenderSession, render
from drawsynth.engine.validator import validate

__all__ = [
    "PipelineConfig",
    "format_feedback",
    "AgentState",
    "DiagramOrchestrator",
    "ShapeSynthesizer",
    "Stage",
    "next_state",
    "RenderSession",
    "render",
    "validate",
]
