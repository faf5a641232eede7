"""House: a pitched roof over a box.

Diagonal strokes in the top third of the sketch, with at least two
horizontal and two vertical segments below them. Sketches of three or
more strokes with a house-like aspect ratio match through a relaxed
fallback.
"""

from __future__ import annotations

from strokesight.engine.config import RecognizerConfig
from strokesight.engine.context import SketchContext
from strokesight.engine.registry import CompositeMatch, composite_pattern


@composite_pattern(name="house", order=0, description="Roof diagonals over a rectangular body")
def house(ctx: SketchContext, config: RecognizerConfig) -> CompositeMatch | None:
    xmin, ymin, xmax, ymax = ctx.bbox
    width = xmax - xmin
    height = ymax - ymin
    if width <= 0 or height <= 0:
        return None

    ratio = width / height
    if not config.house_ratio_min <= ratio <= config.house_ratio_max:
        return None

    roof_line = ymin + height / 3
    t = config.segment_min_delta
    diagonals = horizontals = verticals = 0
    horizontal_run = vertical_run = 0.0

    for start, end in ctx.segments():
        dx = abs(float(end[0] - start[0]))
        dy = abs(float(end[1] - start[1]))
        mid_y = float(start[1] + end[1]) / 2

        if mid_y <= roof_line:
            if dx > t and dy > t:
                diagonals += 1
        else:
            if dx > t and dy <= dx * config.axis_slope_tolerance:
                horizontals += 1
                horizontal_run += dx
            elif dy > t and dx <= dy * config.axis_slope_tolerance:
                verticals += 1
                vertical_run += dy

    # Walls and floor must span the body, which rules out smooth loops
    # whose short chords happen to point along the axes
    structural = (
        diagonals >= 1
        and horizontals >= 2
        and verticals >= 2
        and horizontal_run >= width * config.house_min_horizontal_coverage
        and vertical_run >= height * config.house_min_vertical_coverage
    )
    relaxed = (
        ctx.stroke_count >= config.house_relaxed_min_strokes
        and ratio <= config.house_relaxed_ratio_max
    )
    if not (structural or relaxed):
        return None

    return CompositeMatch(
        confidence=config.house_confidence,
        evidence={
            "aspect_ratio": round(ratio, 3),
            "roof_diagonals": float(diagonals),
            "horizontal_segments": float(horizontals),
            "vertical_segments": float(verticals),
            "relaxed": 0.0 if structural else 1.0,
        },
    )
