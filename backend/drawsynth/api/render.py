"""POST /api/render: primitives → canvas shapes and bindings, no model call."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from drawsynth.engine.renderer import render
from drawsynth.errors import PrimitiveSchemaError
from drawsynth.models.canvas import RenderResult
from drawsynth.models.requests import RenderRequest

router = APIRouter()


@router.post("/render", response_model=RenderResult, response_model_by_alias=True)
async def render_primitives(req: RenderRequest) -> RenderResult:
    try:
        return render(req.primitives)
    except PrimitiveSchemaError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
