"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import Depends

from drawsynth.config import Settings, settings
from drawsynth.engine.config import PipelineConfig


def get_settings() -> Settings:
    return settings


def get_pipeline_config(app_settings: Settings = Depends(get_settings)) -> PipelineConfig:
    return PipelineConfig.from_settings(app_settings)


def get_synthesizer(app_settings: Settings = Depends(get_settings)):
    from drawsynth.llm.client import AnthropicSynthesizer

    return AnthropicSynthesizer(app_settings)
