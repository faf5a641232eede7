"""Composite-pattern registry: every multi-part shape matcher is a standalone
function registered via decorator.

Usage:
    @composite_pattern(name="house", order=0)
    def house(ctx: SketchContext, config: RecognizerConfig) -> CompositeMatch | None:
        ...

Matchers run in ascending ``order``; an earlier match is inserted earlier
in the candidate list. Adding a pattern = creating one module under
``engine/patterns`` with the decorator. Nothing else changes.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from strokesight.engine.config import RecognizerConfig
    from strokesight.engine.context import SketchContext

logger = logging.getLogger(__name__)


@dataclass
class CompositeMatch:
    confidence: float
    # Measurements that led to the match, surfaced on the detection
    evidence: dict[str, float] = field(default_factory=dict)
    # Strokes taking part; None means all of them
    stroke_indices: list[int] | None = None


MatcherFn = Callable[["SketchContext", "RecognizerConfig"], Optional[CompositeMatch]]


@dataclass
class CompositePattern:
    name: str
    order: int
    fn: MatcherFn
    description: str = ""


class PatternRegistry:
    """Ordered collection of composite-pattern matchers."""

    def __init__(self) -> None:
        self._patterns: dict[str, CompositePattern] = {}

    def register(self, pattern: CompositePattern) -> None:
        if pattern.name in self._patterns:
            raise ValueError(f"Duplicate composite pattern: {pattern.name}")
        self._patterns[pattern.name] = pattern
        logger.debug("Registered composite pattern %s (order %d)", pattern.name, pattern.order)

    def get(self, name: str) -> CompositePattern:
        return self._patterns[name]

    def ordered(self) -> list[CompositePattern]:
        return sorted(self._patterns.values(), key=lambda p: (p.order, p.name))

    @property
    def count(self) -> int:
        return len(self._patterns)


# Module-level singleton
_registry = PatternRegistry()


def get_registry() -> PatternRegistry:
    load_patterns()
    return _registry


def composite_pattern(*, name: str, order: int, description: str = ""):
    """Decorator to register a composite-pattern matcher."""

    def decorator(fn: MatcherFn) -> MatcherFn:
        _registry.register(CompositePattern(name=name, order=order, fn=fn, description=description))
        return fn

    return decorator


def load_patterns() -> None:
    """Import every module in engine.patterns so @composite_pattern decorators fire."""
    package = importlib.import_module("strokesight.engine.patterns")
    for _, module_name, _ in pkgutil.iter_modules(package.__path__):
        importlib.import_module(f"{package.__name__}.{module_name}")
