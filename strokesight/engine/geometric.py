"""Geometric recognizer: rule-based shape hypotheses straight from stroke points.

Pure and synchronous. Composite patterns are tried first (in registry
order) so that a recognized figure outranks the primitives it is made of
when confidences tie. Never raises on validated strokes; "no hypothesis"
is an empty list.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from strokesight.engine.config import RecognizerConfig
from strokesight.engine.context import SketchContext, StrokeData, build_context
from strokesight.engine.registry import PatternRegistry, get_registry
from strokesight.models.detection import (
    BoundingBox,
    CompositeDetection,
    GeometricDetection,
    ShapeProperties,
)
from strokesight.models.strokes import Stroke
from strokesight.utils.geometry import bbox, enclosed_area, find_corners, path_length

logger = logging.getLogger(__name__)

GeometricCandidate = GeometricDetection | CompositeDetection


class GeometricRecognizer:
    def __init__(
        self,
        config: RecognizerConfig | None = None,
        registry: PatternRegistry | None = None,
    ) -> None:
        self.config = config or RecognizerConfig()
        self.registry = registry or get_registry()

    def recognize(
        self,
        strokes: Sequence[Stroke],
        canvas_width: float = 800.0,
        canvas_height: float = 600.0,
    ) -> list[GeometricCandidate]:
        ctx = build_context(
            strokes,
            closed_distance=self.config.closed_distance,
            closed_min_points=self.config.closed_min_points,
            canvas_width=canvas_width,
            canvas_height=canvas_height,
        )
        if not ctx.strokes:
            return []

        candidates: list[GeometricCandidate] = []
        candidates.extend(self._composites(ctx))
        candidates.extend(self._primitives(ctx))

        logger.debug(
            "Geometric: %d strokes, %d points -> %s",
            ctx.stroke_count,
            ctx.point_count,
            [(c.name, c.confidence) for c in candidates],
        )
        return candidates

    def _composites(self, ctx: SketchContext) -> list[CompositeDetection]:
        found = []
        for pattern in self.registry.ordered():
            try:
                match = pattern.fn(ctx, self.config)
            except Exception as e:
                # One broken matcher must not take the primitives down with it
                logger.warning("  pattern %s FAILED: %s", pattern.name, e)
                continue
            if match is None:
                continue
            confidence = min(1.0, max(0.0, match.confidence))
            if confidence < self.config.min_composite_confidence:
                continue

            members = (
                ctx.strokes
                if match.stroke_indices is None
                else [ctx.strokes[i] for i in match.stroke_indices]
            )
            found.append(
                CompositeDetection(
                    name=pattern.name,
                    confidence=round(confidence, 4),
                    bounding_box=_pixel_box(members),
                    box_origin="strokes",
                    stroke_ids=tuple(s.stroke_id for s in members if s.stroke_id),
                    sources=("composite",),
                    pattern=pattern.name,
                    evidence=match.evidence,
                )
            )
        return found

    def _primitives(self, ctx: SketchContext) -> list[GeometricDetection]:
        cfg = self.config
        n_strokes = ctx.stroke_count
        n_points = ctx.point_count
        closed = ctx.any_closed

        rules: list[tuple[str, float]] = []
        if closed and n_strokes <= 2 and n_points > 10:
            rules.append(("circle", cfg.circle_confidence))
        if closed and n_strokes <= 4:
            rules.append(("rectangle", cfg.rectangle_confidence))
        if closed and n_strokes <= 3:
            rules.append(("triangle", cfg.triangle_confidence))
        if n_strokes == 1 and n_points > 2 and not closed:
            rules.append(("line", cfg.line_confidence))
        if n_strokes > cfg.complex_stroke_count or n_points > cfg.complex_point_count:
            busy = n_strokes > cfg.busy_stroke_count
            rules.append(("human", cfg.human_confidence_busy if busy else cfg.human_confidence))
            rules.append(("drawing", cfg.drawing_confidence))

        kept = [(name, conf) for name, conf in rules if conf >= cfg.min_confidence]
        if not kept:
            return []

        box = _pixel_box(ctx.strokes)
        props = self._properties(ctx)
        return [
            GeometricDetection(
                name=name,
                confidence=conf,
                bounding_box=box,
                box_origin="strokes",
                stroke_ids=ctx.stroke_ids,
                sources=("geometric",),
                properties=props,
            )
            for name, conf in kept
        ]

    def _properties(self, ctx: SketchContext) -> ShapeProperties:
        """Shape measurements of the sketch, summed over strokes."""
        xmin, ymin, xmax, ymax = ctx.bbox
        width = xmax - xmin
        height = ymax - ymin
        aspect = height / width if width > 0 else 0.0
        cfg = self.config
        return ShapeProperties(
            is_regular=cfg.regular_aspect_min <= aspect <= cfg.regular_aspect_max,
            aspect_ratio=round(aspect, 4),
            corners=sum(
                len(find_corners(s.points, cfg.corner_angle, closed=s.closed)) for s in ctx.strokes
            ),
            area=round(sum(enclosed_area(s.points) for s in ctx.strokes if s.closed), 2),
            perimeter=round(sum(path_length(s.points) for s in ctx.strokes), 2),
            closed=ctx.any_closed,
        )


def _pixel_box(strokes: Sequence[StrokeData]) -> BoundingBox:
    xmin, ymin, xmax, ymax = bbox(np.vstack([s.points for s in strokes]))
    return BoundingBox(x=xmin, y=ymin, width=xmax - xmin, height=ymax - ymin)


def recognize_strokes(
    strokes: Sequence[Stroke],
    config: RecognizerConfig | None = None,
) -> list[GeometricCandidate]:
    """Convenience wrapper over GeometricRecognizer with default registry."""
    return GeometricRecognizer(config=config).recognize(strokes)
