"""SketchContext: per-request state shared by the geometric recognizer and its patterns.

Per-stroke measurements -> StrokeData
Whole-sketch measurements -> SketchContext
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from strokesight.models.strokes import Stroke
from strokesight.utils.geometry import bbox, centroid, endpoint_gap


@dataclass
class StrokeData:
    """Measurements for a single stroke."""

    index: int
    stroke_id: str | None
    # Nx2 array of (x, y) in drawing order
    points: NDArray[np.float64] = field(default_factory=lambda: np.empty((0, 2)))
    closed: bool = False
    # (xmin, ymin, xmax, ymax)
    bbox: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    features: dict[str, Any] = field(default_factory=dict)

    @property
    def centroid(self) -> tuple[float, float]:
        return centroid(self.points)

    @property
    def width(self) -> float:
        return self.bbox[2] - self.bbox[0]

    @property
    def height(self) -> float:
        return self.bbox[3] - self.bbox[1]


@dataclass
class SketchContext:
    """Whole-sketch state."""

    strokes: list[StrokeData] = field(default_factory=list)
    canvas_width: float = 800.0
    canvas_height: float = 600.0

    @property
    def stroke_count(self) -> int:
        return len(self.strokes)

    @property
    def point_count(self) -> int:
        return sum(len(s.points) for s in self.strokes)

    @property
    def any_closed(self) -> bool:
        return any(s.closed for s in self.strokes)

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        """Bounding box over every point of every stroke."""
        if not self.strokes:
            return (0.0, 0.0, 0.0, 0.0)
        return bbox(np.vstack([s.points for s in self.strokes]))

    @property
    def stroke_ids(self) -> tuple[str, ...]:
        return tuple(s.stroke_id for s in self.strokes if s.stroke_id)

    def segments(self) -> list[tuple[NDArray[np.float64], NDArray[np.float64]]]:
        """Consecutive point pairs within each stroke, as (start, end)."""
        pairs = []
        for s in self.strokes:
            for i in range(len(s.points) - 1):
                pairs.append((s.points[i], s.points[i + 1]))
        return pairs


def build_context(
    strokes: list[Stroke] | tuple[Stroke, ...],
    closed_distance: float = 20.0,
    closed_min_points: int = 3,
    canvas_width: float = 800.0,
    canvas_height: float = 600.0,
) -> SketchContext:
    data = []
    for i, stroke in enumerate(strokes):
        pts = np.array([[p.x, p.y] for p in stroke.points], dtype=np.float64).reshape(-1, 2)
        closed = len(pts) >= closed_min_points and endpoint_gap(pts) < closed_distance
        data.append(
            StrokeData(index=i, stroke_id=stroke.id, points=pts, closed=closed, bbox=bbox(pts))
        )
    return SketchContext(strokes=data, canvas_width=canvas_width, canvas_height=canvas_height)
