"""Recognizer and fusion configuration. Thresholds are tunable per deployment."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RecognizerConfig:
    """Thresholds for the rule-based geometric recognizer."""

    # A stroke with >= 3 points whose ends are closer than this is closed
    closed_distance: float = 20.0
    closed_min_points: int = 3

    # Primitive confidences
    circle_confidence: float = 0.8
    rectangle_confidence: float = 0.7
    triangle_confidence: float = 0.7
    line_confidence: float = 0.9
    drawing_confidence: float = 0.8
    human_confidence: float = 0.5
    human_confidence_busy: float = 0.7  # more than 10 strokes

    # Complex-sketch fallback triggers
    complex_stroke_count: int = 5
    complex_point_count: int = 50
    busy_stroke_count: int = 10

    # Candidates below these are dropped
    min_confidence: float = 0.7
    min_composite_confidence: float = 0.6

    # House pattern
    house_confidence: float = 0.85
    house_ratio_min: float = 0.8
    house_ratio_max: float = 2.0
    house_relaxed_ratio_max: float = 1.7
    house_relaxed_min_strokes: int = 3
    # Both |dx| and |dy| must exceed this for a diagonal segment
    segment_min_delta: float = 2.0
    # ~20 degrees off axis still counts as horizontal / vertical
    axis_slope_tolerance: float = 0.36
    # Summed length of axis-aligned segments below the roof, relative to the sketch
    house_min_horizontal_coverage: float = 0.8
    house_min_vertical_coverage: float = 0.6

    # Corner detection turn angle (radians)
    corner_angle: float = 0.5
    # Aspect ratio window for ShapeProperties.is_regular
    regular_aspect_min: float = 0.9
    regular_aspect_max: float = 1.1

    # Arrow pattern
    arrow_line_score_min: float = 0.7
    arrow_head_distance: float = 50.0

    # Star pattern: tips and inner vertices sit at clearly different radii
    star_max_radius_ratio: float = 0.6


@dataclass
class FusionConfig:
    """Controls how recognizer outputs are reconciled."""

    # 0 keeps name-only matching; > 0 also requires this IoU when both boxes exist
    merge_iou_threshold: float = 0.0
    # Per-source confidence multipliers, applied before merging
    source_weights: dict[str, float] = field(
        default_factory=lambda: {
            "geometric": 1.0,
            "composite": 1.0,
            "classifier": 1.0,
            "detector": 1.0,
            "enrichment": 1.0,
        }
    )
    # Normalized coordinates outside this range mean a broken adapter
    box_margin: float = 0.5
    # Containment hierarchy: child area must be below this share of the parent
    containment_area_ratio: float = 0.9
    build_hierarchy: bool = True
