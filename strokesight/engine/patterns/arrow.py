"""Arrow: a straight shaft with a head at one end."""

from __future__ import annotations

import numpy as np

from strokesight.engine.config import RecognizerConfig
from strokesight.engine.context import SketchContext
from strokesight.engine.registry import CompositeMatch, composite_pattern
from strokesight.utils.geometry import centroid, count_direction_changes, find_corners, straightness

# Share of a single-stroke arrow taken as the shaft; the rest is the head
_SHAFT_FRACTION = 0.7
_SINGLE_STROKE_MIN_POINTS = 10


@composite_pattern(name="arrow", order=10, description="Straight shaft plus arrowhead")
def arrow(ctx: SketchContext, config: RecognizerConfig) -> CompositeMatch | None:
    if ctx.stroke_count == 1:
        return _single_stroke(ctx, config)
    if ctx.stroke_count == 2:
        return _shaft_and_head(ctx, config)
    return None


def _single_stroke(ctx: SketchContext, config: RecognizerConfig) -> CompositeMatch | None:
    pts = ctx.strokes[0].points
    if len(pts) < _SINGLE_STROKE_MIN_POINTS:
        return None
    if not find_corners(pts, config.corner_angle):
        return None

    cut = int(len(pts) * _SHAFT_FRACTION)
    shaft_score = straightness(pts[:cut])
    if shaft_score < config.arrow_line_score_min:
        return None

    turns = count_direction_changes(pts[cut:])
    head_score = 1.0 if turns >= 2 else 0.0
    return CompositeMatch(
        confidence=shaft_score * 0.7 + head_score * 0.3,
        evidence={"shaft_straightness": round(shaft_score, 3), "head_turns": float(turns)},
    )


def _shaft_and_head(ctx: SketchContext, config: RecognizerConfig) -> CompositeMatch | None:
    a, b = ctx.strokes
    score_a = straightness(a.points)
    score_b = straightness(b.points)
    shaft, head = (a, b) if score_a >= score_b else (b, a)
    shaft_score = max(score_a, score_b)
    head_score = min(score_a, score_b)

    # Two straight strokes are a cross or parallel lines, not an arrow
    if shaft_score < config.arrow_line_score_min or head_score >= config.arrow_line_score_min:
        return None
    # A closed shape next to a line is a separate object, not a head
    if head.closed:
        return None

    head_center = np.array(centroid(head.points))
    distance = float(
        min(np.hypot(*(shaft.points[-1] - head_center)), np.hypot(*(shaft.points[0] - head_center)))
    )
    proximity = max(0.0, 1.0 - distance / config.arrow_head_distance)
    if proximity <= 0:
        return None
    return CompositeMatch(
        confidence=shaft_score * 0.7 + proximity * 0.3,
        evidence={
            "shaft_straightness": round(shaft_score, 3),
            "head_distance": round(distance, 2),
        },
    )
