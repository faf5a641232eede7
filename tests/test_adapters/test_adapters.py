"""Tests for the classifier, detector and enrichment adapters."""

from __future__ import annotations

import asyncio

import pytest

from strokesight.adapters.base import AdapterInput, clamp_confidence
from strokesight.adapters.classifier import PLACEHOLDER_BOX, ClassifierRecognizer, clean_label
from strokesight.adapters.detector import ObjectDetectorRecognizer
from strokesight.adapters.enrichment import (
    SemanticEnrichmentAdapter,
    category_color,
    fallback_size,
    parse_enrichment,
)
from strokesight.adapters.prompts import build_enrich_prompt
from strokesight.errors import AdapterError
from strokesight.models.detection import GeometricDetection
from tests.conftest import FakeClassifier, FakeDetector, FakeEnrichment, blank_bitmap, make_stroke


def _recognize(adapter, **kwargs):
    kwargs.setdefault("bitmap", blank_bitmap())
    return asyncio.run(adapter.recognize(AdapterInput(**kwargs)))


def test_clamp_confidence():
    assert clamp_confidence(1.7) == 1.0
    assert clamp_confidence(-0.2) == 0.0
    assert clamp_confidence("0.4") == 0.4
    assert clamp_confidence(None) == 0.0
    assert clamp_confidence(float("nan")) == 0.0


class TestClassifier:
    RANKED = [
        {"label": "cat_face", "probability": 0.5},
        {"label": "Dog", "probability": 0.9},
        {"label": "noise", "probability": 0.1},
        {"label": "house", "probability": 0.3},
        {"label": "tree", "probability": 0.25},
    ]

    def test_clean_label(self):
        assert clean_label("Hot_Air_Balloon ") == "hot air balloon"

    def test_top_k_above_threshold_with_placeholder_boxes(self):
        found = _recognize(ClassifierRecognizer(FakeClassifier(self.RANKED), top_k=3))
        assert [(d.name, d.rank) for d in found] == [("dog", 0), ("cat face", 1), ("house", 2)]
        for d in found:
            assert d.bounding_box == PLACEHOLDER_BOX
            assert d.box_origin == "placeholder"
            assert d.synthetic_box

    def test_min_confidence_filters(self):
        found = _recognize(ClassifierRecognizer(FakeClassifier(self.RANKED), min_confidence=0.6))
        assert [d.name for d in found] == ["dog"]

    def test_unconfigured_without_model(self):
        assert not ClassifierRecognizer(None).configured

    def test_region_mode_classifies_each_group(self):
        left = make_stroke([(100, 100), (300, 100), (300, 200), (100, 200), (100, 100)], id="left")
        right = make_stroke([(500, 400), (700, 400), (700, 500), (500, 500), (500, 400)], id="right")
        model = FakeClassifier([{"label": "box", "probability": 0.8}])
        adapter = ClassifierRecognizer(model, region_mode=True)

        found = _recognize(adapter, strokes=(left, right))

        assert model.calls == 2
        assert [d.stroke_ids for d in found] == [("left",), ("right",)]
        assert found[0].box_origin == "strokes"
        assert found[0].bounding_box.x == 90
        assert found[0].bounding_box.width == 220
        assert found[0].bounding_box.height == 120

    def test_region_mode_skips_specks(self):
        speck = make_stroke([(10, 10), (12, 11)], id="speck")
        model = FakeClassifier([{"label": "dot", "probability": 0.8}])
        found = _recognize(ClassifierRecognizer(model, region_mode=True), strokes=(speck,))
        assert found == []
        assert model.calls == 0


class TestDetector:
    def test_boxes_scale_from_bitmap_to_canvas(self):
        model = FakeDetector(
            [
                {"label": "Cat", "confidence": 0.8, "boundingBox": {"x": 10, "y": 10, "width": 50, "height": 25}},
                {"label": "dog", "confidence": 0.3, "boundingBox": {"x": 0, "y": 0, "width": 5, "height": 5}},
            ]
        )
        found = _recognize(ObjectDetectorRecognizer(model))

        assert len(found) == 1
        cat = found[0]
        assert (cat.name, cat.raw_label, cat.box_origin) == ("cat", "Cat", "detector")
        # 100px bitmap over an 800x600 canvas
        box = cat.bounding_box
        assert (box.x, box.y, box.width, box.height) == (80, 60, 400, 150)

    def test_unusable_box_becomes_none(self):
        model = FakeDetector([{"label": "cat", "confidence": 0.9, "boundingBox": {"x": "left"}}])
        found = _recognize(ObjectDetectorRecognizer(model))
        assert found[0].bounding_box is None

    def test_non_list_reply_raises(self):
        model = FakeDetector()
        model.results = {"error": "loading"}
        with pytest.raises(AdapterError):
            _recognize(ObjectDetectorRecognizer(model))


class TestEnrichment:
    def test_fallback_sizes(self):
        assert fallback_size("left eye") == (0.05, 0.03)
        assert fallback_size("Face") == (0.15, 0.15)
        assert fallback_size("spaceship") == (0.1, 0.1)

    def test_category_color(self):
        assert category_color("animal", "cat") == "#FF33A5"
        assert category_color("other", "person") == "#FF5733"
        assert category_color("other", "spaceship") == "#9C27B0"

    def test_part_without_size_uses_fallback(self):
        reply = {"description": "a face", "objects": [{"name": "Left Eye", "category": "human", "x": 0.3, "y": 0.2}]}
        request = AdapterInput(bitmap=blank_bitmap())
        found = asyncio.run(SemanticEnrichmentAdapter(FakeEnrichment(reply)).recognize(request))

        eye = found[0]
        assert eye.name == "left eye"
        assert eye.confidence == 0.75
        assert eye.color == "#FF5733"
        assert eye.box_origin == "enrichment"
        assert eye.bounding_box.x == pytest.approx(220)
        assert eye.bounding_box.y == pytest.approx(111)
        assert eye.bounding_box.width == pytest.approx(40)
        assert eye.bounding_box.height == pytest.approx(18)
        assert request.notes["description"] == "a face"

    def test_bad_position_centers_and_box_is_clamped(self):
        reply = {"objects": [{"name": "sun", "x": "top", "y": 0.0, "width": 0.4, "height": 0.4}]}
        found = _recognize(SemanticEnrichmentAdapter(FakeEnrichment(reply)))
        box = found[0].bounding_box
        assert box.x == pytest.approx(0.3 * 800)
        assert box.y == 0.0
        assert box.height == pytest.approx(0.2 * 600)

    def test_detected_shapes_key_accepted(self):
        reply = {"detectedShapes": [{"name": "tree", "confidence": 0.9}, {"name": ""}, "junk"]}
        found = _recognize(SemanticEnrichmentAdapter(FakeEnrichment(reply)))
        assert [(d.name, d.confidence) for d in found] == [("tree", 0.9)]

    def test_non_dict_reply_raises(self):
        with pytest.raises(AdapterError):
            _recognize(SemanticEnrichmentAdapter(FakeEnrichment(["not", "a", "dict"])))

    def test_model_sees_current_hypotheses(self):
        model = FakeEnrichment()
        current = (GeometricDetection(name="circle", confidence=0.8),)
        _recognize(SemanticEnrichmentAdapter(model), context="a face", current=current)
        assert model.seen_context == "a face"
        assert model.seen_current == [{"name": "circle", "confidence": 0.8}]

    def test_cache_params_track_context_and_hypotheses(self):
        adapter = SemanticEnrichmentAdapter(FakeEnrichment())
        a = adapter.cache_params(AdapterInput(bitmap=blank_bitmap(), context="x"))
        b = adapter.cache_params(AdapterInput(bitmap=blank_bitmap(), context="y"))
        assert a != b


class TestParseEnrichment:
    def test_fenced_json(self):
        text = 'Here you go:\n```json\n{"description": "a cat", "objects": []}\n```'
        assert parse_enrichment(text) == {"description": "a cat", "objects": []}

    def test_bare_json(self):
        text = 'Sure. {"objects": [{"name": "cat"}]} Hope that helps.'
        assert parse_enrichment(text) == {"objects": [{"name": "cat"}]}

    def test_garbage(self):
        assert parse_enrichment("I cannot see any drawing.") is None


def test_prompt_mentions_context_and_hypotheses():
    prompt = build_enrich_prompt("a smiling face", ["circle", "line"])
    assert '"a smiling face"' in prompt
    assert "circle, line" in prompt
    assert '"objects"' in prompt
