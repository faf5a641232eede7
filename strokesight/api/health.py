"""Health check + adapter availability."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from strokesight.dependencies import get_pipeline
from strokesight.engine.pipeline import DetectionPipeline
from strokesight.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(pipeline: DetectionPipeline = Depends(get_pipeline)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        adapters={
            name: adapter is not None and adapter.configured
            for name, adapter in pipeline.adapters.items()
        },
    )
