"""Stroke input models, as supplied by the drawing surface."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Point(CamelModel):
    x: float
    y: float
    pressure: float | None = None


class Stroke(CamelModel):
    id: str | None = Field(None, description="Client-side stroke identifier")
    points: tuple[Point, ...] = Field(..., description="Points in drawing order")
    color: str = Field("#000000", description="CSS color of the ink")
    width: float = Field(2.0, description="Pen width in canvas units")
    tool: str = Field("pen", description="Tool tag: pen, highlighter, ...")


class AnalysisOptions(CamelModel):
    """Per-request recognizer toggles. A disabled recognizer is never invoked."""

    use_geometric: bool = True
    use_classifier: bool = True
    use_object_detector: bool = True
    use_enrichment: bool = True
