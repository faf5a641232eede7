"""Sketch-classifier adapter.

Whole-image mode labels the entire bitmap and, since the model does not
localize, tags every label with a centered placeholder box. Region mode
groups nearby strokes, classifies each group's crop on its own and keeps
the stroke-derived box.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import numpy as np

from strokesight.adapters.base import AdapterInput, ClassifierModel, RecognizerAdapter, clamp_confidence
from strokesight.engine.grouping import group_strokes
from strokesight.errors import AdapterError
from strokesight.models.detection import BoundingBox, ClassifierDetection
from strokesight.utils.bbox import normalize_bounding_box
from strokesight.utils.geometry import bbox

logger = logging.getLogger(__name__)

# Covers most of the canvas; carries no positional information
PLACEHOLDER_BOX = BoundingBox(
    min_x=0.1, min_y=0.1, max_x=0.9, max_y=0.9, center_x=0.5, center_y=0.5, width=0.8, height=0.8
)

_REGION_PADDING = 10.0
_MIN_REGION_SIZE = 20.0
_GROUP_DISTANCE = 100.0


def clean_label(label: Any) -> str:
    return str(label).replace("_", " ").strip().lower()


class ClassifierRecognizer(RecognizerAdapter):
    name = "classifier"

    def __init__(
        self,
        model: ClassifierModel | None,
        top_k: int = 3,
        min_confidence: float = 0.2,
        region_mode: bool = False,
    ) -> None:
        self.model = model
        self.top_k = top_k
        self.min_confidence = min_confidence
        self.region_mode = region_mode

    @property
    def configured(self) -> bool:
        return self.model is not None and getattr(self.model, "configured", True)

    def cache_params(self, request: AdapterInput) -> dict[str, Any]:
        params: dict[str, Any] = {"top_k": self.top_k, "region_mode": self.region_mode}
        if self.region_mode:
            params["strokes"] = [s.id for s in request.strokes]
        return params

    async def recognize(self, request: AdapterInput) -> list[ClassifierDetection]:
        if self.model is None:
            raise AdapterError(self.name, "no model configured")
        if self.region_mode and request.strokes:
            return await self._recognize_regions(request)

        ranked = await asyncio.to_thread(self.model.classify, request.bitmap.png)
        return self._whole_image(ranked)

    def _ranked(self, raw: list[dict[str, Any]]) -> list[tuple[str, float]]:
        scored = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            label = clean_label(item.get("label", ""))
            confidence = clamp_confidence(item.get("probability", item.get("score")))
            if label and confidence >= self.min_confidence:
                scored.append((label, confidence))
        scored.sort(key=lambda t: -t[1])
        return scored

    def _whole_image(self, raw: list[dict[str, Any]]) -> list[ClassifierDetection]:
        return [
            ClassifierDetection(
                name=label,
                confidence=confidence,
                bounding_box=PLACEHOLDER_BOX,
                box_origin="placeholder",
                sources=("classifier",),
                rank=rank,
                synthetic_box=True,
            )
            for rank, (label, confidence) in enumerate(self._ranked(raw)[: self.top_k])
        ]

    async def _recognize_regions(self, request: AdapterInput) -> list[ClassifierDetection]:
        bitmap = request.bitmap
        strokes = list(request.strokes)
        found = []
        for group in group_strokes(strokes, _GROUP_DISTANCE):
            pts = np.array(
                [[p.x, p.y] for i in group for p in strokes[i].points], dtype=np.float64
            )
            xmin, ymin, xmax, ymax = bbox(pts)
            if xmax - xmin < _MIN_REGION_SIZE and ymax - ymin < _MIN_REGION_SIZE:
                continue
            x = max(0.0, xmin - _REGION_PADDING)
            y = max(0.0, ymin - _REGION_PADDING)
            region = BoundingBox(
                x=x,
                y=y,
                width=min(bitmap.canvas_width, xmax + _REGION_PADDING) - x,
                height=min(bitmap.canvas_height, ymax + _REGION_PADDING) - y,
            )
            crop = bitmap.crop_png(
                normalize_bounding_box(region, bitmap.canvas_width, bitmap.canvas_height)
            )
            ranked = self._ranked(await asyncio.to_thread(self.model.classify, crop))
            if not ranked:
                continue
            label, confidence = ranked[0]
            found.append(
                ClassifierDetection(
                    name=label,
                    confidence=confidence,
                    bounding_box=region,
                    box_origin="strokes",
                    stroke_ids=tuple(strokes[i].id for i in group if strokes[i].id),
                    sources=("classifier",),
                )
            )
        logger.debug("Classifier regions: %s", [(d.name, d.confidence) for d in found])
        return found
