"""Generic object-detector adapter."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from strokesight.adapters.base import AdapterInput, DetectorModel, RecognizerAdapter, clamp_confidence
from strokesight.errors import AdapterError
from strokesight.models.detection import BoundingBox, DetectorDetection

logger = logging.getLogger(__name__)


class ObjectDetectorRecognizer(RecognizerAdapter):
    name = "detector"

    def __init__(self, model: DetectorModel | None, min_confidence: float = 0.5) -> None:
        self.model = model
        self.min_confidence = min_confidence

    @property
    def configured(self) -> bool:
        return self.model is not None and getattr(self.model, "configured", True)

    async def recognize(self, request: AdapterInput) -> list[DetectorDetection]:
        if self.model is None:
            raise AdapterError(self.name, "no model configured")
        raw = await asyncio.to_thread(self.model.detect, request.bitmap.png)
        if not isinstance(raw, list):
            raise AdapterError(self.name, f"expected a list, got {type(raw).__name__}")

        found = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            raw_label = str(item.get("label", "")).strip()
            confidence = clamp_confidence(item.get("confidence", item.get("score")))
            if not raw_label or confidence < self.min_confidence:
                continue
            found.append(
                DetectorDetection(
                    name=raw_label.lower(),
                    raw_label=raw_label,
                    confidence=confidence,
                    bounding_box=self._canvas_box(request, item.get("boundingBox")),
                    box_origin="detector",
                    sources=("detector",),
                )
            )
        return found

    @staticmethod
    def _canvas_box(request: AdapterInput, raw: Any) -> BoundingBox | None:
        """Bitmap-pixel rect -> canvas-pixel rect. Unusable boxes become None."""
        if not isinstance(raw, dict):
            return None
        try:
            x, y = float(raw["x"]), float(raw["y"])
            width, height = float(raw["width"]), float(raw["height"])
        except (KeyError, TypeError, ValueError):
            logger.debug("Detector box unusable: %s", raw)
            return None
        return request.bitmap.to_canvas_box(x, y, width, height)
