"""Master API router: mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from drawsynth.api import draw, health, render, validate

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(draw.router)
api_router.include_router(validate.router)
api_router.include_router(render.router)
