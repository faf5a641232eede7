"""Leaf-node geometry helpers over Nx2 point arrays. No engine imports."""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray
from shapely.geometry import LineString, Polygon


def bbox(points: NDArray[np.float64]) -> tuple[float, float, float, float]:
    """Compute (xmin, ymin, xmax, ymax) bounding box."""
    if len(points) == 0:
        return (0.0, 0.0, 0.0, 0.0)
    return (
        float(np.min(points[:, 0])),
        float(np.min(points[:, 1])),
        float(np.max(points[:, 0])),
        float(np.max(points[:, 1])),
    )


def centroid(points: NDArray[np.float64]) -> tuple[float, float]:
    """Mean of a point set."""
    if len(points) == 0:
        return (0.0, 0.0)
    return (float(np.mean(points[:, 0])), float(np.mean(points[:, 1])))


def endpoint_gap(points: NDArray[np.float64]) -> float:
    """Distance between the first and last point."""
    if len(points) < 2:
        return 0.0
    return float(np.hypot(*(points[-1] - points[0])))


def path_length(points: NDArray[np.float64]) -> float:
    if len(points) < 2:
        return 0.0
    return float(LineString(points).length)


def enclosed_area(points: NDArray[np.float64]) -> float:
    """Area of the polygon traced by the points (0 for fewer than 3)."""
    ring = _unique_ring(points)
    if len(ring) < 3:
        return 0.0
    return float(Polygon(ring).area)


def _unique_ring(points: NDArray[np.float64]) -> NDArray[np.float64]:
    if len(points) > 1 and np.allclose(points[0], points[-1]):
        return points[:-1]
    return points


def find_corners(
    points: NDArray[np.float64],
    angle_threshold: float = 0.5,
    closed: bool = False,
    min_distance: float = 10.0,
) -> list[int]:
    """Indices where the direction turns by more than ``angle_threshold`` radians.

    The look-ahead step grows with point count so hand jitter on dense
    strokes does not register as corners. A hit within ``min_distance`` of
    the previous corner belongs to that corner. Closed strokes wrap around,
    so the start point can be a corner too.
    """
    pts = _unique_ring(points) if closed else points
    n = len(pts)
    if n < 3:
        return []
    step = max(1, n // 50)

    if closed:
        indices = range(n)
    else:
        indices = range(step, n - step)

    hits: list[int] = []
    for i in indices:
        prev_pt = pts[(i - step) % n]
        next_pt = pts[(i + step) % n]
        v1 = pts[i] - prev_pt
        v2 = next_pt - pts[i]
        n1 = float(np.hypot(*v1))
        n2 = float(np.hypot(*v2))
        if n1 < 1e-9 or n2 < 1e-9:
            continue
        cos = float(np.clip(np.dot(v1, v2) / (n1 * n2), -1.0, 1.0))
        if math.acos(cos) > angle_threshold:
            hits.append(i)

    corners: list[int] = []
    for i in hits:
        if corners and float(np.hypot(*(pts[i] - pts[corners[-1]]))) <= min_distance:
            continue
        corners.append(i)
    return corners


def straightness(points: NDArray[np.float64]) -> float:
    """1.0 for a perfectly straight polyline, falling toward 0 as it bows.

    Mean perpendicular deviation of the interior points from the chord,
    measured against 10% of the chord length.
    """
    if len(points) < 2:
        return 0.0
    start, end = points[0], points[-1]
    chord = float(np.hypot(*(end - start)))
    if chord < 1e-9:
        return 0.0
    if len(points) == 2:
        return 1.0
    interior = points[1:-1]
    direction = (end - start) / chord
    rel = interior - start
    deviation = np.abs(rel[:, 0] * direction[1] - rel[:, 1] * direction[0])
    return max(0.0, 1.0 - float(np.mean(deviation)) / (chord * 0.1))


def simplify(points: NDArray[np.float64], epsilon: float) -> NDArray[np.float64]:
    """Douglas-Peucker simplification; endpoints are always kept."""
    if len(points) < 3 or epsilon <= 0:
        return points
    simplified = LineString(points).simplify(epsilon, preserve_topology=False)
    return np.asarray(simplified.coords, dtype=np.float64)


def count_direction_changes(points: NDArray[np.float64], min_step: float = 5.0) -> int:
    """Count changes in the coarse (sign dx, sign dy) heading.

    Steps shorter than ``min_step`` on both axes are ignored as jitter.
    """
    if len(points) < 3:
        return 0
    deltas = np.diff(points, axis=0)
    headings = np.sign(deltas[:, 0]) + 2 * np.sign(deltas[:, 1])
    changes = 0
    current = headings[0]
    for heading, (dx, dy) in zip(headings[1:], deltas[1:]):
        if heading != current and (abs(dx) > min_step or abs(dy) > min_step):
            changes += 1
            current = heading
    return changes
