"""POST /api/draw: natural language → canvas shapes (standard + streaming)."""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from drawsynth.dependencies import get_pipeline_config, get_synthesizer
from drawsynth.engine.config import PipelineConfig
from drawsynth.engine.orchestrator import DiagramOrchestrator, Stage
from drawsynth.models.requests import DrawRequest
from drawsynth.models.responses import DrawingResult

router = APIRouter()


def _require_message(req: DrawRequest) -> None:
    if not req.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")


@router.post("/draw", response_model=DrawingResult, response_model_by_alias=True)
async def draw(
    req: DrawRequest,
    synthesizer=Depends(get_synthesizer),
    config: PipelineConfig = Depends(get_pipeline_config),
) -> DrawingResult:
    _require_message(req)
    orchestrator = DiagramOrchestrator(synthesizer, config)
    return await orchestrator.run(req)


async def _sse_events(orchestrator: DiagramOrchestrator, req: DrawRequest) -> AsyncGenerator[str, None]:
    async for update in orchestrator.stream(req):
        if update["stage"] == Stage.DONE.value:
            result: DrawingResult = update["result"]
            data = json.dumps(result.model_dump(mode="json", by_alias=True))
            yield f"event: result\ndata: {data}\n\n"
        else:
            yield f"event: {update['stage']}\ndata: {json.dumps(update)}\n\n"
    yield f"event: done\ndata: {json.dumps({'type': 'done'})}\n\n"


@router.post("/draw/stream")
async def draw_stream(
    req: DrawRequest,
    synthesizer=Depends(get_synthesizer),
    config: PipelineConfig = Depends(get_pipeline_config),
) -> StreamingResponse:
    _require_message(req)
    orchestrator = DiagramOrchestrator(synthesizer, config)
    return StreamingResponse(
        _sse_events(orchestrator, req),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
