"""Detected objects: one variant per recognizer source, sharing a base record."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field

from strokesight.models.strokes import CamelModel

Source = Literal["geometric", "composite", "classifier", "detector", "enrichment"]

# Which kind of evidence produced the box an object currently carries
BoxOrigin = Literal["strokes", "detector", "enrichment", "placeholder"]


class BoundingBox(CamelModel):
    """Axis-aligned box in pixel form, normalized form, or both.

    Pixel form is x/y/width/height in canvas units. Normalized form is
    min/max/center plus width/height as fractions of the canvas. Any field
    may be missing; see utils.bbox.complete_bounding_box.
    """

    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    min_x: float | None = None
    min_y: float | None = None
    max_x: float | None = None
    max_y: float | None = None
    center_x: float | None = None
    center_y: float | None = None


class ShapeProperties(CamelModel):
    is_regular: bool = False
    aspect_ratio: float = 0.0
    corners: int = 0
    area: float = 0.0
    perimeter: float = 0.0
    closed: bool = False


class DetectedObjectBase(CamelModel):
    id: str | None = None
    name: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    bounding_box: BoundingBox | None = None
    box_origin: BoxOrigin | None = None
    stroke_ids: tuple[str, ...] = ()
    # Every source that contributed to this object, originating source first
    sources: tuple[str, ...] = ()
    parent_id: str | None = None
    children: tuple[str, ...] = ()


class GeometricDetection(DetectedObjectBase):
    source: Literal["geometric"] = "geometric"
    properties: ShapeProperties | None = None


class CompositeDetection(DetectedObjectBase):
    source: Literal["composite"] = "composite"
    pattern: str = ""
    evidence: dict[str, float] = Field(default_factory=dict)


class ClassifierDetection(DetectedObjectBase):
    source: Literal["classifier"] = "classifier"
    rank: int = 0
    synthetic_box: bool = False


class DetectorDetection(DetectedObjectBase):
    source: Literal["detector"] = "detector"
    raw_label: str = ""


class EnrichmentDetection(DetectedObjectBase):
    source: Literal["enrichment"] = "enrichment"
    category: str = "other"
    color: str | None = None


DetectedObject = Annotated[
    Union[
        GeometricDetection,
        CompositeDetection,
        ClassifierDetection,
        DetectorDetection,
        EnrichmentDetection,
    ],
    Field(discriminator="source"),
]
