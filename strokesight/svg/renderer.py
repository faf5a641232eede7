"""Vector renderer: strokes -> standalone SVG document.

The document maps the caller's canvas onto the viewBox with
preserveAspectRatio="none", so a fraction of the canvas is the same
fraction of any bitmap rasterized from it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from xml.sax.saxutils import quoteattr

import numpy as np
from svgpathtools import parse_path

from strokesight.errors import RenderError
from strokesight.models.strokes import Stroke
from strokesight.utils.geometry import simplify

logger = logging.getLogger(__name__)

# Highlighter ink is translucent, matching the drawing surface
_TOOL_OPACITY = {"highlighter": 0.4}

# Ink smaller than this in both axes is noise, not a drawing
_MIN_CONTENT_SIZE = 2.0


@dataclass(frozen=True)
class VectorDocument:
    svg: str
    width: float
    height: float
    # Ink extent (xmin, ymin, xmax, ymax) including pen width
    content_bbox: tuple[float, float, float, float]


def stroke_path_data(points: np.ndarray) -> str:
    """Absolute M/L path; a lone point becomes a zero-length segment so round caps draw a dot."""
    if len(points) == 1:
        x, y = points[0]
        return f"M {x:.2f} {y:.2f} L {x:.2f} {y:.2f}"
    head = f"M {points[0][0]:.2f} {points[0][1]:.2f}"
    tail = " ".join(f"L {x:.2f} {y:.2f}" for x, y in points[1:])
    return f"{head} {tail}"


def render_strokes(
    strokes: Sequence[Stroke],
    width: float,
    height: float,
    background: str | None = None,
    simplify_epsilon: float = 0.0,
    min_content_size: float = _MIN_CONTENT_SIZE,
) -> VectorDocument:
    """Render strokes in input order, keeping each stroke's color and width."""
    if width <= 0 or height <= 0:
        raise RenderError(f"Canvas must be positive, got {width}x{height}")

    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width:g}" height="{height:g}"'
        f' viewBox="0 0 {width:g} {height:g}" preserveAspectRatio="none">',
    ]
    if background:
        lines.append(f'  <rect x="0" y="0" width="{width:g}" height="{height:g}" fill={quoteattr(background)} />')

    xmin = ymin = float("inf")
    xmax = ymax = float("-inf")
    for stroke in strokes:
        pts = np.array([[p.x, p.y] for p in stroke.points], dtype=np.float64).reshape(-1, 2)
        if len(pts) == 0:
            continue
        if simplify_epsilon > 0:
            pts = simplify(pts, simplify_epsilon)

        d = stroke_path_data(pts)
        try:
            pxmin, pxmax, pymin, pymax = parse_path(d).bbox()
        except Exception as e:
            raise RenderError(f"Unparseable path for stroke {stroke.id or '?'}: {e}") from e

        half = max(stroke.width, 0.0) / 2
        xmin = min(xmin, pxmin - half)
        ymin = min(ymin, pymin - half)
        xmax = max(xmax, pxmax + half)
        ymax = max(ymax, pymax + half)

        attrs = [
            f'd="{d}"',
            'fill="none"',
            f"stroke={quoteattr(stroke.color)}",
            f'stroke-width="{stroke.width:g}"',
            'stroke-linecap="round"',
            'stroke-linejoin="round"',
        ]
        opacity = _TOOL_OPACITY.get(stroke.tool)
        if opacity is not None:
            attrs.append(f'opacity="{opacity}"')
        lines.append(f"  <path {' '.join(attrs)} />")

    lines.append("</svg>")

    if xmax == float("-inf"):
        raise RenderError("No drawable strokes")
    if (xmax - xmin) < min_content_size and (ymax - ymin) < min_content_size:
        raise RenderError(
            f"Content is degenerate ({xmax - xmin:.2f}x{ymax - ymin:.2f} units)"
        )

    logger.debug("Rendered %d strokes into %dx%d SVG", len(strokes), width, height)
    return VectorDocument(
        svg="\n".join(lines),
        width=width,
        height=height,
        content_bbox=(xmin, ymin, xmax, ymax),
    )
