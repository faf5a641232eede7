"""StrokeSight detection engine."""

from strokesight.engine.fusion import FusionEngine
from strokesight.engine.geometric import GeometricRecognizer
from strokesight.engine.pipeline import DetectionPipeline, create_pipeline
from strokesight.engine.registry import composite_pattern, get_registry

__all__ = [
    "composite_pattern",
    "get_registry",
    "GeometricRecognizer",
    "FusionEngine",
    "DetectionPipeline",
    "create_pipeline",
]
