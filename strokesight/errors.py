"""Error taxonomy for the detection pipeline.

Only ValidationError escapes a pipeline run. Everything else is caught at
the stage that raised it and degrades the result instead of failing it.
"""

from __future__ import annotations


class StrokeSightError(Exception):
    """Base class for all pipeline errors."""


class ValidationError(StrokeSightError):
    """Malformed or empty stroke input. Fails the whole request."""


class RenderError(StrokeSightError):
    """Strokes could not be turned into a usable vector document."""


class RasterError(StrokeSightError):
    """The vector document could not be rasterized."""


class AdapterError(StrokeSightError):
    """An external recognizer failed, timed out or answered garbage."""

    def __init__(self, adapter: str, message: str) -> None:
        super().__init__(f"{adapter}: {message}")
        self.adapter = adapter


class FusionError(StrokeSightError):
    """A recognizer handed fusion an object that breaks the box contract."""
