"""Recognizer adapters: async wrappers over external model boundaries.

An adapter turns one model's raw output into DetectedObjects. Failure
handling (timeouts, exceptions) lives in the pipeline, not here; adapters
simply raise AdapterError when the boundary misbehaves.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from strokesight.models.detection import DetectedObjectBase
from strokesight.models.strokes import Stroke
from strokesight.svg.rasterizer import Bitmap


class ClassifierModel(Protocol):
    def classify(self, png: bytes) -> list[dict[str, Any]]:
        """[{label, probability}] for the whole image."""


class DetectorModel(Protocol):
    def detect(self, png: bytes) -> list[dict[str, Any]]:
        """[{label, confidence, boundingBox: {x, y, width, height}}] in bitmap pixels."""


class EnrichmentModel(Protocol):
    async def enrich(
        self, png: bytes, context: str, current: Sequence[dict[str, Any]]
    ) -> dict[str, Any]:
        """{description, objects: [...]}"""


@dataclass
class AdapterInput:
    bitmap: Bitmap
    strokes: Sequence[Stroke] = ()
    context: str = ""
    # Hypotheses already on the table (geometric), for context-aware adapters
    current: Sequence[DetectedObjectBase] = field(default_factory=tuple)
    # Per-call side information an adapter wants surfaced in the debug payload
    notes: dict[str, Any] = field(default_factory=dict)


class RecognizerAdapter(abc.ABC):
    """One external recognizer."""

    name: str = ""

    @property
    def configured(self) -> bool:
        return True

    def cache_params(self, request: AdapterInput) -> dict[str, Any]:
        """Everything besides the bitmap that changes this adapter's answer."""
        return {}

    @abc.abstractmethod
    async def recognize(self, request: AdapterInput) -> list[DetectedObjectBase]:
        ...


def clamp_confidence(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    return min(1.0, max(0.0, number))
