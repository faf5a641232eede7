"""Tests for the composite-pattern registry."""

import pytest

from strokesight.engine.config import RecognizerConfig
from strokesight.engine.context import SketchContext
from strokesight.engine.registry import CompositeMatch, CompositePattern, PatternRegistry, get_registry


def _never(ctx: SketchContext, config: RecognizerConfig) -> CompositeMatch | None:
    return None


def test_register_and_get():
    reg = PatternRegistry()
    pattern = CompositePattern(name="kite", order=5, fn=_never)
    reg.register(pattern)
    assert reg.get("kite") is pattern
    assert reg.count == 1


def test_duplicate_name_rejected():
    reg = PatternRegistry()
    reg.register(CompositePattern(name="kite", order=5, fn=_never))
    with pytest.raises(ValueError, match="Duplicate"):
        reg.register(CompositePattern(name="kite", order=6, fn=_never))


def test_ordered_by_order_then_name():
    reg = PatternRegistry()
    reg.register(CompositePattern(name="b", order=1, fn=_never))
    reg.register(CompositePattern(name="a", order=1, fn=_never))
    reg.register(CompositePattern(name="z", order=0, fn=_never))
    assert [p.name for p in reg.ordered()] == ["z", "a", "b"]


def test_default_registry_runs_house_first():
    names = [p.name for p in get_registry().ordered()]
    assert names[0] == "house"
    assert {"house", "arrow", "star"} <= set(names)


def test_loading_twice_does_not_duplicate():
    first = get_registry().count
    assert get_registry().count == first
