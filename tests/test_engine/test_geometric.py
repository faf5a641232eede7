"""Tests for the rule-based geometric recognizer."""

from __future__ import annotations

import pytest

from strokesight.engine.config import RecognizerConfig
from strokesight.engine.geometric import GeometricRecognizer, recognize_strokes
from strokesight.models.detection import CompositeDetection, GeometricDetection
from tests.conftest import (
    CIRCLE_COORDS,
    LINE_COORDS,
    RECTANGLE_COORDS,
    STAR_COORDS,
    make_stroke,
    polygon_circle,
)


def _by_name(candidates):
    return {c.name: c for c in candidates}


class TestPrimitives:
    def test_circle(self, circle_stroke):
        found = _by_name(recognize_strokes([circle_stroke]))
        assert found["circle"].confidence == 0.8
        assert isinstance(found["circle"], GeometricDetection)
        assert found["circle"].stroke_ids == ("c1",)

    def test_circle_is_top_hypothesis(self, circle_stroke):
        candidates = recognize_strokes([circle_stroke])
        assert max(candidates, key=lambda c: c.confidence).name == "circle"

    def test_rectangle(self, rectangle_stroke):
        found = _by_name(recognize_strokes([rectangle_stroke]))
        assert found["rectangle"].confidence >= 0.7
        # Too few points for a circle
        assert "circle" not in found

    def test_rectangle_box_and_properties(self, rectangle_stroke):
        rect = _by_name(recognize_strokes([rectangle_stroke]))["rectangle"]
        box = rect.bounding_box
        assert (box.x, box.y, box.width, box.height) == (100, 100, 200, 100)
        assert rect.box_origin == "strokes"
        assert rect.properties.closed
        assert rect.properties.corners == 4
        assert rect.properties.area == 20000.0
        assert rect.properties.aspect_ratio == 0.5
        assert not rect.properties.is_regular

    def test_line(self):
        found = _by_name(recognize_strokes([make_stroke(LINE_COORDS)]))
        assert found["line"].confidence == 0.9
        assert "rectangle" not in found

    def test_two_point_stroke_is_nothing(self):
        assert recognize_strokes([make_stroke([(0, 0), (50, 50)])]) == []

    def test_complex_sketch(self):
        strokes = [make_stroke([(i * 40, 0), (i * 40 + 10, 30), (i * 40 + 20, 0)]) for i in range(12)]
        found = _by_name(recognize_strokes(strokes))
        assert found["drawing"].confidence == 0.8
        # More than 10 strokes lifts the human hypothesis over the threshold
        assert found["human"].confidence == 0.7

    def test_sparse_complex_sketch_drops_human(self):
        strokes = [make_stroke([(i * 40, 0), (i * 40 + 10, 30), (i * 40 + 20, 0)]) for i in range(6)]
        found = _by_name(recognize_strokes(strokes))
        assert "drawing" in found
        assert "human" not in found

    def test_threshold_is_tunable(self, rectangle_stroke):
        config = RecognizerConfig(min_confidence=0.75)
        assert recognize_strokes([rectangle_stroke], config=config) == []


class TestComposites:
    def test_house(self, house_strokes):
        candidates = recognize_strokes(house_strokes)
        assert candidates[0].name == "house"
        house = candidates[0]
        assert isinstance(house, CompositeDetection)
        assert house.confidence == 0.85
        assert house.evidence["relaxed"] == 0.0
        assert house.evidence["aspect_ratio"] == 1.2
        assert set(house.stroke_ids) == {"body", "roof"}
        others = [c.confidence for c in candidates[1:]]
        assert others and all(c < 0.85 for c in others)

    def test_relaxed_house(self):
        strokes = [
            make_stroke([(0, 0), (10, 10)]),
            make_stroke([(90, 0), (100, 10)]),
            make_stroke([(0, 90), (100, 100)]),
        ]
        found = _by_name(recognize_strokes(strokes))
        assert found["house"].evidence["relaxed"] == 1.0

    def test_no_house_for_circle(self, circle_stroke):
        assert "house" not in _by_name(recognize_strokes([circle_stroke]))

    def test_no_house_for_lone_rectangle(self, rectangle_stroke):
        assert "house" not in _by_name(recognize_strokes([rectangle_stroke]))

    def test_star(self):
        candidates = recognize_strokes([make_stroke(STAR_COORDS, id="s")])
        top = max(candidates, key=lambda c: c.confidence)
        assert top.name == "star"
        assert top.evidence["corners"] == 10.0

    def test_two_stroke_arrow(self):
        shaft = make_stroke([(0, 100), (100, 100), (200, 100)], id="shaft")
        head = make_stroke([(180, 80), (200, 100), (180, 120)], id="head")
        arrow = _by_name(recognize_strokes([shaft, head]))["arrow"]
        assert arrow.confidence > 0.9
        assert arrow.source == "composite"

    def test_crossed_lines_are_not_an_arrow(self):
        a = make_stroke([(0, 0), (50, 50), (100, 100)])
        b = make_stroke([(0, 100), (50, 50), (100, 0)])
        assert "arrow" not in _by_name(recognize_strokes([a, b]))

    def test_ground_line_and_sun_are_not_an_arrow(self, circle_stroke):
        ground = make_stroke([(0, 500), (100, 500), (200, 500)])
        found = _by_name(recognize_strokes([ground, circle_stroke]))
        assert "arrow" not in found
        assert "circle" in found

    @pytest.mark.parametrize("sides", [10, 11])
    def test_coarse_circle_stays_a_circle(self, sides):
        candidates = recognize_strokes([make_stroke(polygon_circle(sides))])
        assert "star" not in _by_name(candidates)
        assert max(candidates, key=lambda c: c.confidence).name == "circle"

    def test_broken_matcher_is_isolated(self, rectangle_stroke):
        from strokesight.engine.registry import CompositePattern, PatternRegistry

        def explode(ctx, config):
            raise RuntimeError("boom")

        reg = PatternRegistry()
        reg.register(CompositePattern(name="explode", order=0, fn=explode))
        found = _by_name(GeometricRecognizer(registry=reg).recognize([rectangle_stroke]))
        assert "rectangle" in found
