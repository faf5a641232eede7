"""Stroke validator: the gate in front of every recognizer."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

import pydantic

from strokesight.errors import ValidationError
from strokesight.models.strokes import Stroke


def validate_strokes(strokes: Sequence[Stroke | Mapping[str, Any]] | None) -> tuple[Stroke, ...]:
    """Return the strokes as an immutable tuple or raise ValidationError.

    Raw mappings (wire payloads) are parsed into Stroke models first.
    """
    if not strokes:
        raise ValidationError("No strokes provided")

    validated: list[Stroke] = []
    for i, raw in enumerate(strokes):
        if isinstance(raw, Stroke):
            stroke = raw
        else:
            try:
                stroke = Stroke.model_validate(raw)
            except pydantic.ValidationError as e:
                raise ValidationError(f"Stroke {i} is malformed: {e.error_count()} error(s)") from e

        if not stroke.points:
            raise ValidationError(f"Stroke {i} has no points")
        for j, p in enumerate(stroke.points):
            if not (_is_number(p.x) and _is_number(p.y)):
                raise ValidationError(f"Stroke {i} point {j} has non-numeric coordinates")
        validated.append(stroke)

    return tuple(validated)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
