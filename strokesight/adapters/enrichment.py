"""Semantic enrichment: a vision LLM names objects and parts in the sketch.

The model boundary (AnthropicEnrichmentModel) returns raw JSON-ish dicts;
SemanticEnrichmentAdapter turns those into EnrichmentDetections with
canvas-pixel boxes. Purely additive: any failure here leaves the rest of
the result untouched.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from strokesight.adapters.base import AdapterInput, EnrichmentModel, RecognizerAdapter, clamp_confidence
from strokesight.adapters.prompts import build_enrich_prompt
from strokesight.errors import AdapterError
from strokesight.models.detection import BoundingBox, EnrichmentDetection

logger = logging.getLogger(__name__)

CATEGORY_COLORS = {
    "human": "#FF5733",
    "person": "#FF5733",
    "face": "#FF7F50",
    "head": "#FF7F50",
    "body": "#FF7F50",
    "animal": "#FF33A5",
    "building": "#3357FF",
    "nature": "#33FF57",
    "geometric": "#33A5FF",
    "abstract": "#9C27B0",
}
_DEFAULT_COLOR = "#9C27B0"

# (width, height) as canvas fractions when the model gives no size
_FALLBACK_SIZES = {
    "face": (0.15, 0.15),
    "head": (0.15, 0.15),
    "body": (0.2, 0.4),
    "person": (0.2, 0.4),
    "eye": (0.05, 0.03),
    "nose": (0.05, 0.08),
    "mouth": (0.08, 0.04),
    "hair": (0.2, 0.1),
}
_DEFAULT_SIZE = (0.1, 0.1)


def fallback_size(name: str) -> tuple[float, float]:
    """Typical size for a named part; substring match so 'left eye' sizes like 'eye'."""
    lowered = name.lower()
    for key, size in _FALLBACK_SIZES.items():
        if key in lowered:
            return size
    return _DEFAULT_SIZE


def category_color(category: str, name: str) -> str:
    return CATEGORY_COLORS.get(category.lower()) or CATEGORY_COLORS.get(name.lower()) or _DEFAULT_COLOR


def parse_enrichment(text: str) -> dict | None:
    """Extract JSON from LLM response text."""
    match = re.search(r"```(?:json)?\s*\n?({[\s\S]*?})\s*\n?```", text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    match = re.search(r"({[\s\S]*\"objects\"[\s\S]*})", text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    return None


class AnthropicEnrichmentModel:
    """Claude vision over langchain_anthropic."""

    def __init__(self, api_key: str, model: str, max_tokens: int = 1500) -> None:
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def enrich(
        self, png: bytes, context: str, current: Sequence[dict[str, Any]]
    ) -> dict[str, Any]:
        from langchain_anthropic import ChatAnthropic
        from langchain_core.messages import HumanMessage

        llm = ChatAnthropic(model=self.model, api_key=self.api_key, max_tokens=self.max_tokens)
        prompt = build_enrich_prompt(context, [str(c.get("name", "")) for c in current])
        message = HumanMessage(
            content=[
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": "image/png",
                        "data": base64.b64encode(png).decode("ascii"),
                    },
                },
                {"type": "text", "text": prompt},
            ]
        )

        response = await llm.ainvoke([message])
        parsed = parse_enrichment(str(response.content))
        if parsed is None:
            raise AdapterError("enrichment", "could not parse model reply as JSON")
        return parsed


class SemanticEnrichmentAdapter(RecognizerAdapter):
    name = "enrichment"

    def __init__(self, model: EnrichmentModel | None, default_confidence: float = 0.75) -> None:
        self.model = model
        self.default_confidence = default_confidence

    @property
    def configured(self) -> bool:
        return self.model is not None and getattr(self.model, "configured", True)

    def cache_params(self, request: AdapterInput) -> dict[str, Any]:
        return {"context": request.context, "current": sorted(o.name for o in request.current)}

    async def recognize(self, request: AdapterInput) -> list[EnrichmentDetection]:
        if self.model is None:
            raise AdapterError(self.name, "no model configured")
        current = [{"name": o.name, "confidence": o.confidence} for o in request.current]
        reply = await self.model.enrich(request.bitmap.png, request.context, current)
        if not isinstance(reply, dict):
            raise AdapterError(self.name, f"expected an object, got {type(reply).__name__}")

        request.notes["description"] = str(reply.get("description", ""))
        objects = reply.get("objects", reply.get("detectedShapes", []))
        if not isinstance(objects, list):
            raise AdapterError(self.name, "objects is not a list")

        found = []
        for item in objects:
            detection = self._to_detection(item, request)
            if detection is not None:
                found.append(detection)
        return found

    def _to_detection(self, item: Any, request: AdapterInput) -> EnrichmentDetection | None:
        if not isinstance(item, dict):
            return None
        name = str(item.get("name", "")).strip().lower()
        if not name:
            return None
        category = str(item.get("category") or "other").lower()

        cx = _fraction(item.get("x"))
        cy = _fraction(item.get("y"))
        default_w, default_h = fallback_size(name)
        w = _size(item.get("width"), default_w)
        h = _size(item.get("height"), default_h)

        canvas_w = request.bitmap.canvas_width
        canvas_h = request.bitmap.canvas_height
        min_x = max(0.0, cx - w / 2)
        min_y = max(0.0, cy - h / 2)
        max_x = min(1.0, cx + w / 2)
        max_y = min(1.0, cy + h / 2)
        box = BoundingBox(
            x=min_x * canvas_w,
            y=min_y * canvas_h,
            width=(max_x - min_x) * canvas_w,
            height=(max_y - min_y) * canvas_h,
        )

        confidence = item.get("confidence")
        return EnrichmentDetection(
            name=name,
            confidence=clamp_confidence(confidence) if confidence is not None else self.default_confidence,
            bounding_box=box,
            box_origin="enrichment",
            sources=("enrichment",),
            category=category,
            color=item.get("color") or category_color(category, name),
        )


def _fraction(value: Any) -> float:
    """Center coordinate in [0, 1]; anything else means 'center'."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
        return 0.5
    return float(value)


def _size(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 < value <= 1:
        return default
    return float(value)
