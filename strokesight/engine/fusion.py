"""Detection fusion: reconcile every recognizer's hypotheses into one ranked list.

Order of operations:
  1. normalize each box to canvas fractions and weight each confidence
  2. seed with geometric/composite hypotheses (no deduplication)
  3. fold in later sources, merging by case-insensitive name
  4. stable sort by confidence, descending
  5. ids + containment hierarchy, then the headline analysis

Objects are frozen; a merge produces a new copy.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from strokesight.engine.config import FusionConfig
from strokesight.engine.hierarchy import assign_hierarchy
from strokesight.errors import FusionError
from strokesight.models.detection import DetectedObjectBase
from strokesight.models.responses import UNRECOGNIZED, Analysis, DetectionResult
from strokesight.utils.bbox import calculate_iou, complete_bounding_box, normalize_bounding_box

logger = logging.getLogger(__name__)

# Stroke-derived boxes beat model-estimated ones; the classifier placeholder beats nothing
_BOX_FIDELITY = {"strokes": 3, "detector": 2, "enrichment": 1, "placeholder": 0}


def box_fidelity(obj: DetectedObjectBase) -> int:
    if obj.bounding_box is None:
        return -1
    return _BOX_FIDELITY.get(obj.box_origin or "", 0)


class FusionEngine:
    def __init__(self, config: FusionConfig | None = None) -> None:
        self.config = config or FusionConfig()
        self.discarded: list[str] = []

    def fuse(
        self,
        geometric: Sequence[DetectedObjectBase],
        sources: Sequence[Sequence[DetectedObjectBase]],
        canvas_width: float,
        canvas_height: float,
    ) -> DetectionResult:
        """Merge geometric output with adapter outputs (in merge order)."""
        self.discarded = []

        fused: list[DetectedObjectBase] = []
        for obj in geometric:
            prepared = self._prepare(obj, canvas_width, canvas_height)
            if prepared is not None:
                fused.append(prepared)

        for source_objects in sources:
            for obj in source_objects:
                prepared = self._prepare(obj, canvas_width, canvas_height)
                if prepared is None:
                    continue
                idx = self._find_match(fused, prepared)
                if idx is None:
                    fused.append(prepared)
                else:
                    fused[idx] = merge_detections(fused[idx], prepared)

        ranked = sorted(fused, key=lambda o: -o.confidence)
        if self.config.build_hierarchy:
            ranked = assign_hierarchy(ranked, self.config.containment_area_ratio)
        else:
            ranked = [o.model_copy(update={"id": f"obj-{i + 1}"}) for i, o in enumerate(ranked)]

        return DetectionResult(analysis=summarize(ranked), detected_shapes=ranked)

    def _prepare(
        self, obj: DetectedObjectBase, canvas_width: float, canvas_height: float
    ) -> DetectedObjectBase | None:
        try:
            return self._normalize(obj, canvas_width, canvas_height)
        except FusionError as e:
            self.discarded.append(f"{getattr(obj, 'source', '?')}:{obj.name}")
            logger.warning("Discarding %s from %s: %s", obj.name, getattr(obj, "source", "?"), e)
            return None

    def _normalize(
        self, obj: DetectedObjectBase, canvas_width: float, canvas_height: float
    ) -> DetectedObjectBase:
        source = getattr(obj, "source", "")
        if not obj.name or not obj.name.strip():
            raise FusionError("empty label")

        weight = self.config.source_weights.get(source, 1.0)
        confidence = obj.confidence * weight
        if not math.isfinite(confidence):
            raise FusionError(f"non-finite confidence {obj.confidence!r}")
        confidence = min(1.0, max(0.0, confidence))

        box = complete_bounding_box(normalize_bounding_box(obj.bounding_box, canvas_width, canvas_height))
        if box is not None:
            self._check_box(box)

        return obj.model_copy(
            update={
                "bounding_box": box,
                "confidence": confidence,
                "sources": obj.sources or (source,),
            }
        )

    def _check_box(self, box) -> None:
        values = (box.min_x, box.min_y, box.max_x, box.max_y)
        if not all(math.isfinite(v) for v in values):
            raise FusionError("non-finite box coordinates")
        if box.min_x > box.max_x or box.min_y > box.max_y:
            raise FusionError("inverted box")
        lo = -self.config.box_margin
        hi = 1.0 + self.config.box_margin
        if any(v < lo or v > hi for v in values):
            raise FusionError("box lies far outside the canvas")

    def _find_match(
        self, fused: Sequence[DetectedObjectBase], incoming: DetectedObjectBase
    ) -> int | None:
        key = incoming.name.casefold()
        threshold = self.config.merge_iou_threshold
        for i, existing in enumerate(fused):
            if existing.name.casefold() != key:
                continue
            if (
                threshold > 0
                and existing.bounding_box is not None
                and incoming.bounding_box is not None
                and calculate_iou(existing.bounding_box, incoming.bounding_box) < threshold
            ):
                continue
            return i
        return None


def merge_detections(existing: DetectedObjectBase, incoming: DetectedObjectBase) -> DetectedObjectBase:
    """Fold ``incoming`` into ``existing``.

    The higher-fidelity box wins (ties keep the existing box); confidence
    is raised to the incoming value only when it is strictly higher.
    """
    if box_fidelity(incoming) > box_fidelity(existing):
        box, origin = incoming.bounding_box, incoming.box_origin
    else:
        box, origin = existing.bounding_box, existing.box_origin

    stroke_ids = existing.stroke_ids + tuple(
        sid for sid in incoming.stroke_ids if sid not in existing.stroke_ids
    )
    incoming_source = getattr(incoming, "source", "")
    sources = existing.sources
    if incoming_source and incoming_source not in sources:
        sources = sources + (incoming_source,)

    return existing.model_copy(
        update={
            "bounding_box": box,
            "box_origin": origin,
            "confidence": max(existing.confidence, incoming.confidence),
            "stroke_ids": stroke_ids,
            "sources": sources,
        }
    )


def summarize(ranked: Sequence[DetectedObjectBase]) -> Analysis:
    if not ranked:
        return Analysis(type="drawing", content=UNRECOGNIZED, confidence=0.0)
    top = ranked[0]
    return Analysis(type="drawing", content=top.name, confidence=top.confidence)
