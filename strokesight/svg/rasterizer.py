"""Rasterizer: SVG document -> fixed-size grayscale bitmap via cairosvg."""

from __future__ import annotations

import hashlib
import io
import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from strokesight.errors import RasterError
from strokesight.models.detection import BoundingBox
from strokesight.svg.renderer import VectorDocument

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Bitmap:
    """A rasterized sketch plus the canvas it was drawn on."""

    # HxW uint8 grayscale, 255 = paper
    pixels: NDArray[np.uint8]
    png: bytes
    canvas_width: float
    canvas_height: float
    digest: str = ""

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def to_canvas_box(self, x: float, y: float, width: float, height: float) -> BoundingBox:
        """Scale a bitmap-pixel rect into canvas pixels."""
        sx = self.canvas_width / self.width
        sy = self.canvas_height / self.height
        return BoundingBox(x=x * sx, y=y * sy, width=width * sx, height=height * sy)

    def crop_png(self, box: BoundingBox) -> bytes:
        """PNG of a normalized region (min/max fractions), clamped to the bitmap."""
        left = int(max(0.0, box.min_x or 0.0) * self.width)
        top = int(max(0.0, box.min_y or 0.0) * self.height)
        right = int(min(1.0, box.max_x if box.max_x is not None else 1.0) * self.width)
        bottom = int(min(1.0, box.max_y if box.max_y is not None else 1.0) * self.height)
        if right <= left or bottom <= top:
            raise RasterError(f"Empty crop region {box!r}")
        region = Image.fromarray(np.ascontiguousarray(self.pixels[top:bottom, left:right]))
        buf = io.BytesIO()
        region.save(buf, format="PNG")
        return buf.getvalue()


def rasterize(doc: VectorDocument, size: int = 512) -> Bitmap:
    """Render ``doc`` to a ``size`` x ``size`` bitmap on white."""
    import cairosvg

    if size <= 0:
        raise RasterError(f"Raster size must be positive, got {size}")
    try:
        png = cairosvg.svg2png(
            bytestring=doc.svg.encode("utf-8"),
            output_width=size,
            output_height=size,
            background_color="white",
        )
        image = Image.open(io.BytesIO(png)).convert("L")
        pixels = np.array(image, dtype=np.uint8)
    except Exception as e:
        logger.warning("Failed to rasterize SVG: %s", e)
        raise RasterError(str(e)) from e

    if pixels.shape != (size, size):
        raise RasterError(f"Expected {size}x{size} bitmap, got {pixels.shape[1]}x{pixels.shape[0]}")

    return Bitmap(
        pixels=pixels,
        png=png,
        canvas_width=doc.width,
        canvas_height=doc.height,
        digest=hashlib.sha256(png).hexdigest()[:16],
    )
