"""Shared test fixtures: sample sketches and fake model boundaries."""

from __future__ import annotations

import asyncio
import math

import numpy as np
import pytest

from strokesight.models.strokes import Point, Stroke
from strokesight.svg.rasterizer import Bitmap
from strokesight.svg.renderer import VectorDocument


def make_stroke(coords, id=None, **kwargs) -> Stroke:
    return Stroke(id=id, points=tuple(Point(x=x, y=y) for x, y in coords), **kwargs)


# 24-gon of radius 50 around (200, 200), closed back onto its start
CIRCLE_COORDS = [
    (200 + 50 * math.cos(math.radians(a)), 200 + 50 * math.sin(math.radians(a)))
    for a in range(0, 361, 15)
]



def polygon_circle(sides: int, radius: float = 50, cx: float = 200, cy: float = 200):
    """Regular polygon approximating a circle, closed back onto its start."""
    coords = [
        (cx + radius * math.cos(2 * math.pi * i / sides), cy + radius * math.sin(2 * math.pi * i / sides))
        for i in range(sides)
    ]
    return coords + [coords[0]]


# Axis-aligned 200x100 rectangle: four corners plus the closing point
RECTANGLE_COORDS = [(100, 100), (300, 100), (300, 200), (100, 200), (100, 100)]

# Body 240x130 under a pitched roof; overall box 240x200 (ratio 1.2)
HOUSE_BODY_COORDS = [(100, 170), (340, 170), (340, 300), (100, 300), (100, 170)]
HOUSE_ROOF_COORDS = [(100, 160), (220, 100), (340, 160)]

LINE_COORDS = [(10, 10), (60, 60), (110, 110)]

# Five-pointed star: alternating outer (r=100) and inner (r=40) vertices
STAR_COORDS = [
    (
        300 + (100 if i % 2 == 0 else 40) * math.sin(math.radians(i * 36)),
        300 - (100 if i % 2 == 0 else 40) * math.cos(math.radians(i * 36)),
    )
    for i in range(11)
]


@pytest.fixture
def circle_stroke() -> Stroke:
    return make_stroke(CIRCLE_COORDS, id="c1")


@pytest.fixture
def rectangle_stroke() -> Stroke:
    return make_stroke(RECTANGLE_COORDS, id="r1")


@pytest.fixture
def house_strokes() -> list[Stroke]:
    return [make_stroke(HOUSE_BODY_COORDS, id="body"), make_stroke(HOUSE_ROOF_COORDS, id="roof")]


def blank_rasterizer(doc: VectorDocument, size: int) -> Bitmap:
    """Stands in for cairosvg: a white bitmap with the right geometry."""
    return Bitmap(
        pixels=np.full((size, size), 255, dtype=np.uint8),
        png=b"\x89PNG fake",
        canvas_width=doc.width,
        canvas_height=doc.height,
        digest=f"blank-{doc.width}x{doc.height}-{len(doc.svg)}",
    )


def blank_bitmap(size: int = 100, canvas_width: float = 800, canvas_height: float = 600) -> Bitmap:
    return Bitmap(
        pixels=np.full((size, size), 255, dtype=np.uint8),
        png=b"\x89PNG fake",
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        digest="blank",
    )


class FakeClassifier:
    def __init__(self, results=None) -> None:
        self.results = results or []
        self.calls = 0

    def classify(self, png: bytes):
        self.calls += 1
        return self.results


class FakeDetector:
    def __init__(self, results=None) -> None:
        self.results = results or []
        self.calls = 0

    def detect(self, png: bytes):
        self.calls += 1
        return self.results


class FakeEnrichment:
    def __init__(self, reply=None) -> None:
        self.reply = reply or {"description": "", "objects": []}
        self.calls = 0
        self.seen_context = None
        self.seen_current = None

    async def enrich(self, png, context, current):
        self.calls += 1
        self.seen_context = context
        self.seen_current = list(current)
        return self.reply


class BrokenModel:
    """Every boundary call blows up."""

    def classify(self, png):
        raise RuntimeError("classifier down")

    def detect(self, png):
        raise RuntimeError("detector down")

    async def enrich(self, png, context, current):
        raise RuntimeError("enrichment down")


class HangingEnrichment:
    async def enrich(self, png, context, current):
        await asyncio.sleep(30)
        return {"objects": []}
