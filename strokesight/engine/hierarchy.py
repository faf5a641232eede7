"""Containment hierarchy between fused objects.

An object is a child of another when its box center lies inside the other
box and its area is clearly smaller; the parent is the smallest such
container. Classifier placeholder boxes say nothing about position, so
objects carrying one take no part.
"""

from __future__ import annotations

from collections.abc import Sequence

from strokesight.models.detection import DetectedObjectBase
from strokesight.utils.bbox import box_area, complete_bounding_box


def _contains(outer, inner, area_ratio: float) -> bool:
    if not (outer.min_x <= inner.center_x <= outer.max_x and outer.min_y <= inner.center_y <= outer.max_y):
        return False
    return box_area(inner) < box_area(outer) * area_ratio


def assign_hierarchy(
    objects: Sequence[DetectedObjectBase], area_ratio: float = 0.9
) -> list[DetectedObjectBase]:
    """Return copies of ``objects`` with ids, parent_id and children filled in."""
    ids = [f"obj-{i + 1}" for i in range(len(objects))]
    boxes = [
        complete_bounding_box(o.bounding_box)
        if o.bounding_box is not None and o.box_origin != "placeholder"
        else None
        for o in objects
    ]

    parents: list[int | None] = [None] * len(objects)
    for i, inner in enumerate(boxes):
        if inner is None:
            continue
        best: int | None = None
        best_area = float("inf")
        for j, outer in enumerate(boxes):
            if i == j or outer is None or not _contains(outer, inner, area_ratio):
                continue
            area = box_area(outer)
            if area < best_area:
                best, best_area = j, area
        parents[i] = best

    children: list[list[str]] = [[] for _ in objects]
    for i, parent in enumerate(parents):
        if parent is not None:
            children[parent].append(ids[i])

    return [
        o.model_copy(
            update={
                "id": ids[i],
                "parent_id": ids[parents[i]] if parents[i] is not None else None,
                "children": tuple(children[i]),
            }
        )
        for i, o in enumerate(objects)
    ]
