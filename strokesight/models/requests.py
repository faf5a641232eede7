"""API request models."""

from __future__ import annotations

from pydantic import Field

from strokesight.models.strokes import AnalysisOptions, CamelModel, Stroke


class AnalyzeStrokesRequest(CamelModel):
    strokes: list[Stroke] = Field(..., description="Strokes to recognize, non-empty")
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)
    context: str = Field("", description="Optional hint text for enrichment")
    canvas_width: int | None = Field(None, description="Source canvas width in pixels")
    canvas_height: int | None = Field(None, description="Source canvas height in pixels")
