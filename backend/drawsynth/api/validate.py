"""POST /api/validate: geometry checks on posted primitives."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException

from drawsynth.dependencies import get_pipeline_config
from drawsynth.engine.config import PipelineConfig
from drawsynth.engine.validator import validate
from drawsynth.errors import PrimitiveSchemaError
from drawsynth.models.requests import ValidateRequest
from drawsynth.models.validation import ValidationResult

router = APIRouter()


@router.post("/validate", response_model=ValidationResult, response_model_by_alias=True)
async def validate_primitives(
    req: ValidateRequest,
    config: PipelineConfig = Depends(get_pipeline_config),
) -> ValidationResult:
    if req.canvas_profile:
        try:
            profile = PipelineConfig.for_profile(req.canvas_profile)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        config = replace(config, canvas_width=profile.canvas_width, canvas_height=profile.canvas_height)

    try:
        return validate(req.primitives, req.diagram_type, config)
    except PrimitiveSchemaError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
