"""Star: one closed stroke zig-zagging between outer tips and inner vertices.

A polygonal circle also has sharp corners at every vertex, so the corner
count alone is not enough: a star's points swing between two clearly
different distances from its center.
"""

from __future__ import annotations

import math

import numpy as np

from strokesight.engine.config import RecognizerConfig
from strokesight.engine.context import SketchContext
from strokesight.engine.registry import CompositeMatch, composite_pattern
from strokesight.utils.geometry import centroid, count_direction_changes, endpoint_gap, find_corners

_MIN_POINTS = 10


def _corner_score(corners: int) -> float:
    # Five tips, or tips plus inner vertices
    if corners == 10:
        return 1.0
    if corners == 5:
        return 0.8
    if 5 < corners < 12:
        return 0.6
    return 0.0


def radius_ratio(points: np.ndarray) -> float:
    """Innermost over outermost distance from the centroid; 1.0 for a round ring."""
    ring = points[:-1] if len(points) > 1 and np.allclose(points[0], points[-1]) else points
    radii = np.hypot(*(ring - np.array(centroid(ring))).T)
    outer = float(radii.max())
    if outer <= 0:
        return 1.0
    return float(radii.min()) / outer


@composite_pattern(name="star", order=20, description="Closed stroke with five points")
def star(ctx: SketchContext, config: RecognizerConfig) -> CompositeMatch | None:
    if ctx.stroke_count != 1:
        return None
    stroke = ctx.strokes[0]
    if len(stroke.points) < _MIN_POINTS or not stroke.closed:
        return None

    ratio = radius_ratio(stroke.points)
    if ratio > config.star_max_radius_ratio:
        return None

    corners = find_corners(stroke.points, config.corner_angle, closed=True)
    corner_score = _corner_score(len(corners))
    if corner_score == 0:
        return None

    diagonal = math.hypot(stroke.width, stroke.height)
    if diagonal <= 0:
        return None
    closure = max(0.0, 1.0 - endpoint_gap(stroke.points) / (diagonal * 0.25))
    turn_score = min(1.0, count_direction_changes(stroke.points) / 8)

    return CompositeMatch(
        confidence=corner_score * 0.5 + closure * 0.3 + turn_score * 0.2,
        evidence={
            "corners": float(len(corners)),
            "closure": round(closure, 3),
            "radius_ratio": round(ratio, 3),
        },
    )
