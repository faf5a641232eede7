"""API response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from strokesight.models.detection import DetectedObject
from strokesight.models.strokes import CamelModel

UNRECOGNIZED = "unrecognized"


class Analysis(CamelModel):
    type: str = "drawing"
    content: str = UNRECOGNIZED
    confidence: float = 0.0


class DetectionResult(CamelModel):
    analysis: Analysis = Field(default_factory=Analysis)
    detected_shapes: list[DetectedObject] = Field(default_factory=list)
    debug: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    adapters: dict[str, bool] = Field(default_factory=dict)
