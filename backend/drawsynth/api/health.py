"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from drawsynth.models.primitives import GEO_SHAPES, OTHER_SHAPES
from drawsynth.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        primitive_kinds=sorted(GEO_SHAPES) + list(OTHER_SHAPES),
    )


@router.get("/prompts")
async def prompts() -> dict[str, str]:
    from drawsynth.llm.prompts import get_all_templates

    return get_all_templates()
