"""Stroke grouping: strokes whose centroids chain within a distance form one region."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from sklearn.cluster import DBSCAN

from strokesight.models.strokes import Stroke
from strokesight.utils.geometry import centroid


def group_strokes(strokes: Sequence[Stroke], max_distance: float = 100.0) -> list[list[int]]:
    """Indices of related strokes, grouped transitively by centroid distance.

    DBSCAN with min_samples=1 is single-linkage clustering: every stroke
    lands in some group and chains of nearby strokes merge. Groups come
    back in order of their first stroke.
    """
    if not strokes:
        return []
    centers = np.array(
        [centroid(np.array([[p.x, p.y] for p in s.points], dtype=np.float64)) for s in strokes]
    )
    labels = DBSCAN(eps=max_distance, min_samples=1).fit_predict(centers)

    groups: dict[int, list[int]] = {}
    for idx, label in enumerate(labels):
        groups.setdefault(int(label), []).append(idx)
    return sorted(groups.values(), key=lambda g: g[0])
