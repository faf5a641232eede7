"""Bounding-box normalizer: pixel form <-> fractional form, completion, IoU.

Every function returns None for a None box so callers can pass optional
boxes straight through.
"""

from __future__ import annotations

from strokesight.models.detection import BoundingBox


def _check_canvas(canvas_w: float, canvas_h: float) -> None:
    if canvas_w <= 0 or canvas_h <= 0:
        raise ValueError(f"Canvas dimensions must be positive, got {canvas_w}x{canvas_h}")


def normalize_bounding_box(
    box: BoundingBox | None, canvas_w: float, canvas_h: float
) -> BoundingBox | None:
    """Pixel box -> fractions of the canvas. Boxes already carrying min/max X pass through."""
    if box is None:
        return None
    if box.min_x is not None and box.max_x is not None:
        return box
    _check_canvas(canvas_w, canvas_h)

    x = box.x or 0.0
    y = box.y or 0.0
    width = box.width or 0.0
    height = box.height or 0.0

    min_x = x / canvas_w
    min_y = y / canvas_h
    max_x = (x + width) / canvas_w
    max_y = (y + height) / canvas_h
    return BoundingBox(
        x=min_x,
        y=min_y,
        width=width / canvas_w,
        height=height / canvas_h,
        min_x=min_x,
        min_y=min_y,
        max_x=max_x,
        max_y=max_y,
        center_x=(min_x + max_x) / 2,
        center_y=(min_y + max_y) / 2,
    )


def denormalize_bounding_box(
    box: BoundingBox | None, canvas_w: float, canvas_h: float
) -> BoundingBox | None:
    """Fractional box -> integer pixel box with every field filled."""
    if box is None:
        return None
    _check_canvas(canvas_w, canvas_h)

    min_x = box.min_x * canvas_w if box.min_x is not None else (box.x or 0.0)
    min_y = box.min_y * canvas_h if box.min_y is not None else (box.y or 0.0)

    if box.max_x is not None and box.min_x is not None:
        width = (box.max_x - box.min_x) * canvas_w
    else:
        width = (box.width or 0.0) * canvas_w
    if box.max_y is not None and box.min_y is not None:
        height = (box.max_y - box.min_y) * canvas_h
    else:
        height = (box.height or 0.0) * canvas_h

    x = round(min_x)
    y = round(min_y)
    w = round(width)
    h = round(height)
    return BoundingBox(
        x=x,
        y=y,
        width=w,
        height=h,
        min_x=x,
        min_y=y,
        max_x=x + w,
        max_y=y + h,
        center_x=round(min_x + width / 2),
        center_y=round(min_y + height / 2),
    )


def _complete_axis(
    pos: float | None,
    size: float | None,
    lo: float | None,
    hi: float | None,
    center: float | None,
) -> tuple[float, float, float, float, float]:
    """Fill one axis. Returns (pos, size, lo, hi, center)."""
    if lo is None:
        if pos is not None:
            lo = pos
        elif center is not None and size is not None:
            lo = center - size / 2
        else:
            lo = 0.0
    if hi is None:
        if size is not None:
            hi = lo + size
        elif center is not None:
            hi = 2 * center - lo
        else:
            hi = lo
    if size is None:
        size = hi - lo
    if center is None:
        center = (lo + hi) / 2
    if pos is None:
        pos = lo
    return pos, size, lo, hi, center


def complete_bounding_box(box: BoundingBox | None) -> BoundingBox | None:
    """Derive whichever field groups are missing. Present fields are never changed."""
    if box is None:
        return None
    x, width, min_x, max_x, center_x = _complete_axis(
        box.x, box.width, box.min_x, box.max_x, box.center_x
    )
    y, height, min_y, max_y, center_y = _complete_axis(
        box.y, box.height, box.min_y, box.max_y, box.center_y
    )
    return BoundingBox(
        x=x,
        y=y,
        width=width,
        height=height,
        min_x=min_x,
        min_y=min_y,
        max_x=max_x,
        max_y=max_y,
        center_x=center_x,
        center_y=center_y,
    )


def box_area(box: BoundingBox | None) -> float:
    """Area from the box extents (not the stored width/height)."""
    full = complete_bounding_box(box)
    if full is None:
        return 0.0
    return max(0.0, full.max_x - full.min_x) * max(0.0, full.max_y - full.min_y)


def calculate_iou(a: BoundingBox | None, b: BoundingBox | None) -> float:
    """Intersection over union of two boxes in the same frame, in [0, 1]."""
    if a is None or b is None:
        return 0.0
    ca = complete_bounding_box(a)
    cb = complete_bounding_box(b)

    inter_w = min(ca.max_x, cb.max_x) - max(ca.min_x, cb.min_x)
    inter_h = min(ca.max_y, cb.max_y) - max(ca.min_y, cb.min_y)
    intersection = max(0.0, inter_w) * max(0.0, inter_h)

    union = box_area(ca) + box_area(cb) - intersection
    if union <= 0:
        return 0.0
    return min(1.0, max(0.0, intersection / union))
