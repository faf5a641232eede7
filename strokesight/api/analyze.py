"""POST /api/analyze-strokes: recognize shapes and objects in a stroke set."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from strokesight.config import Settings
from strokesight.dependencies import get_pipeline, get_settings
from strokesight.engine.pipeline import DetectionPipeline
from strokesight.errors import ValidationError
from strokesight.models.requests import AnalyzeStrokesRequest
from strokesight.models.responses import DetectionResult

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/analyze-strokes",
    response_model=DetectionResult,
    response_model_exclude_none=True,
)
async def analyze_strokes(
    req: AnalyzeStrokesRequest,
    pipeline: DetectionPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
) -> DetectionResult:
    try:
        return await pipeline.run(
            req.strokes,
            options=req.options,
            context=req.context,
            canvas_width=settings.canvas_width if req.canvas_width is None else req.canvas_width,
            canvas_height=settings.canvas_height if req.canvas_height is None else req.canvas_height,
        )
    except ValidationError as e:
        logger.info("Rejected stroke payload: %s", e)
        raise HTTPException(status_code=400, detail=str(e)) from e
