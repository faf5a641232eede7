"""Pipeline orchestrator: validate -> geometric -> render/raster -> adapters -> fusion.

Validation is the only stage allowed to fail a request. Rendering and
rasterizing are synchronous; the adapters then run concurrently, each in
its own failure boundary with its own timeout. Fusion starts once every
adapter has settled.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable

from strokesight.adapters.base import AdapterInput, RecognizerAdapter
from strokesight.cache import TTLCache
from strokesight.engine.config import FusionConfig, RecognizerConfig
from strokesight.engine.fusion import FusionEngine
from strokesight.engine.geometric import GeometricRecognizer
from strokesight.engine.validation import validate_strokes
from strokesight.errors import RasterError, RenderError, ValidationError
from strokesight.models.detection import DetectedObjectBase
from strokesight.models.responses import DetectionResult
from strokesight.models.strokes import AnalysisOptions, Stroke
from strokesight.svg.rasterizer import Bitmap, rasterize
from strokesight.svg.renderer import VectorDocument, render_strokes

logger = logging.getLogger(__name__)


@dataclass
class AdapterOutcome:
    name: str
    # ok | cached | failed | timeout | skipped | disabled
    status: str
    detections: list[DetectedObjectBase] = field(default_factory=list)
    elapsed_ms: float = 0.0
    error: str = ""
    notes: dict[str, Any] = field(default_factory=dict)

    def summary(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "status": self.status,
            "count": len(self.detections),
            "elapsedMs": self.elapsed_ms,
        }
        if self.error:
            out["error"] = self.error
        return out


class DetectionPipeline:
    """Runs every recognizer over one stroke set and fuses the results."""

    def __init__(
        self,
        classifier: RecognizerAdapter | None = None,
        detector: RecognizerAdapter | None = None,
        enricher: RecognizerAdapter | None = None,
        cache: TTLCache | None = None,
        recognizer_config: RecognizerConfig | None = None,
        fusion_config: FusionConfig | None = None,
        adapter_timeout_s: float = 10.0,
        raster_size: int = 512,
        simplify_epsilon: float = 0.0,
        rasterizer: Callable[[VectorDocument, int], Bitmap] = rasterize,
    ) -> None:
        self.classifier = classifier
        self.detector = detector
        self.enricher = enricher
        self.cache = cache
        self.recognizer = GeometricRecognizer(config=recognizer_config)
        self.fusion_config = fusion_config or FusionConfig()
        self.adapter_timeout_s = adapter_timeout_s
        self.raster_size = raster_size
        self.simplify_epsilon = simplify_epsilon
        self.rasterizer = rasterizer

    @property
    def adapters(self) -> dict[str, RecognizerAdapter | None]:
        return {"classifier": self.classifier, "detector": self.detector, "enrichment": self.enricher}

    async def run(
        self,
        strokes: Sequence[Stroke | Mapping[str, Any]],
        options: AnalysisOptions | None = None,
        context: str = "",
        canvas_width: float = 800,
        canvas_height: float = 600,
    ) -> DetectionResult:
        """Recognize ``strokes``. Raises ValidationError on malformed input, nothing else."""
        start = time.perf_counter()
        options = options or AnalysisOptions()
        timings: dict[str, float] = {}
        errors: dict[str, str] = {}

        validated = validate_strokes(strokes)
        if canvas_width <= 0 or canvas_height <= 0:
            raise ValidationError(f"Canvas must be positive, got {canvas_width}x{canvas_height}")

        if self.cache is not None:
            self.cache.evict_expired()

        geometric: list[DetectedObjectBase] = []
        if options.use_geometric:
            t0 = time.perf_counter()
            geometric = list(self.recognizer.recognize(validated, canvas_width, canvas_height))
            timings["geometric"] = _ms(t0)

        enabled = {
            "classifier": options.use_classifier,
            "detector": options.use_object_detector,
            "enrichment": options.use_enrichment,
        }
        outcomes: dict[str, AdapterOutcome] = {}
        active: list[RecognizerAdapter] = []
        for name, adapter in self.adapters.items():
            if not enabled[name]:
                outcomes[name] = AdapterOutcome(name, "disabled")
            elif adapter is None or not adapter.configured:
                outcomes[name] = AdapterOutcome(name, "skipped", error="not configured")
            else:
                active.append(adapter)

        bitmap = self._rasterize(validated, canvas_width, canvas_height, timings, errors) if active else None
        if active and bitmap is None:
            for adapter in active:
                outcomes[adapter.name] = AdapterOutcome(adapter.name, "skipped", error="no bitmap")
        elif active:
            t0 = time.perf_counter()
            settled = await asyncio.gather(
                *(
                    self._settle(
                        adapter,
                        AdapterInput(
                            bitmap=bitmap,
                            strokes=validated,
                            context=context,
                            current=tuple(geometric),
                        ),
                    )
                    for adapter in active
                )
            )
            timings["adapters"] = _ms(t0)
            for outcome in settled:
                outcomes[outcome.name] = outcome
                if outcome.status in ("failed", "timeout"):
                    errors[outcome.name] = outcome.error

        t0 = time.perf_counter()
        fusion = FusionEngine(self.fusion_config)
        result = fusion.fuse(
            geometric,
            [outcomes[name].detections for name in ("classifier", "detector", "enrichment")],
            canvas_width,
            canvas_height,
        )
        timings["fusion"] = _ms(t0)
        timings["total"] = _ms(start)

        debug: dict[str, Any] = {
            "strokeCount": len(validated),
            "pointCount": sum(len(s.points) for s in validated),
            "shapeRecognition": [
                {"name": g.name, "confidence": g.confidence, "source": g.source} for g in geometric
            ],
            "adapters": {name: outcomes[name].summary() for name in self.adapters},
            "errors": errors,
            "timingsMs": timings,
        }
        if fusion.discarded:
            debug["discarded"] = fusion.discarded
        enrichment_notes = outcomes["enrichment"].notes
        if enrichment_notes:
            debug["enrichment"] = enrichment_notes

        logger.info(
            "Pipeline complete: %d shapes (top %s %.2f) in %.0fms, %d adapter errors",
            len(result.detected_shapes),
            result.analysis.content,
            result.analysis.confidence,
            timings["total"],
            len([n for n in errors if n in self.adapters]),
        )
        return result.model_copy(update={"debug": debug})

    def _rasterize(
        self,
        strokes: Sequence[Stroke],
        canvas_width: float,
        canvas_height: float,
        timings: dict[str, float],
        errors: dict[str, str],
    ) -> Bitmap | None:
        """Render + rasterize; on failure the bitmap adapters are skipped."""
        t0 = time.perf_counter()
        try:
            doc = render_strokes(
                strokes, canvas_width, canvas_height, simplify_epsilon=self.simplify_epsilon
            )
            timings["render"] = _ms(t0)
            t0 = time.perf_counter()
            bitmap = self.rasterizer(doc, self.raster_size)
            timings["raster"] = _ms(t0)
            return bitmap
        except RenderError as e:
            errors["render"] = str(e)
            logger.warning("  render FAILED: %s", e)
        except RasterError as e:
            errors["raster"] = str(e)
            logger.warning("  raster FAILED: %s", e)
        return None

    async def _settle(self, adapter: RecognizerAdapter, request: AdapterInput) -> AdapterOutcome:
        """Run one adapter inside its own failure boundary. Never raises."""
        key = None
        if self.cache is not None:
            key = TTLCache.make_key(
                adapter.name,
                digest=request.bitmap.digest,
                canvas=(request.bitmap.canvas_width, request.bitmap.canvas_height),
                **adapter.cache_params(request),
            )
            cached = self.cache.get(key)
            if cached is not None:
                detections, notes = cached
                return AdapterOutcome(adapter.name, "cached", list(detections), notes=dict(notes))

        t0 = time.perf_counter()
        try:
            detections = await asyncio.wait_for(
                adapter.recognize(request), timeout=self.adapter_timeout_s
            )
        except asyncio.TimeoutError:
            logger.warning("  %s TIMED OUT after %.1fs", adapter.name, self.adapter_timeout_s)
            return AdapterOutcome(
                adapter.name,
                "timeout",
                elapsed_ms=_ms(t0),
                error=f"timed out after {self.adapter_timeout_s}s",
            )
        except Exception as e:
            logger.warning("  %s FAILED: %s", adapter.name, e)
            return AdapterOutcome(adapter.name, "failed", elapsed_ms=_ms(t0), error=str(e))

        elapsed = _ms(t0)
        logger.debug("  %s completed in %.1fms (%d objects)", adapter.name, elapsed, len(detections))
        if key is not None:
            self.cache.set(key, (tuple(detections), dict(request.notes)))
        return AdapterOutcome(
            adapter.name, "ok", list(detections), elapsed_ms=elapsed, notes=dict(request.notes)
        )


def _ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000, 1)


def create_pipeline(settings: Any = None, cache: TTLCache | None = None) -> DetectionPipeline:
    """Factory wiring the concrete model boundaries from settings."""
    from strokesight.adapters.classifier import ClassifierRecognizer
    from strokesight.adapters.detector import ObjectDetectorRecognizer
    from strokesight.adapters.enrichment import AnthropicEnrichmentModel, SemanticEnrichmentAdapter
    from strokesight.adapters.huggingface import HuggingFaceClassifier, HuggingFaceDetector

    if settings is None:
        from strokesight.config import settings

    classifier = ClassifierRecognizer(
        HuggingFaceClassifier(
            settings.classifier_model,
            settings.hf_api_token,
            base_url=settings.hf_inference_url,
            timeout=settings.adapter_timeout_s,
        ),
        top_k=settings.classifier_top_k,
        min_confidence=settings.classifier_min_confidence,
        region_mode=settings.classifier_region_mode,
    )
    detector = ObjectDetectorRecognizer(
        HuggingFaceDetector(
            settings.detector_model,
            settings.hf_api_token,
            base_url=settings.hf_inference_url,
            timeout=settings.adapter_timeout_s,
        ),
        min_confidence=settings.detector_min_confidence,
    )
    enricher = SemanticEnrichmentAdapter(
        AnthropicEnrichmentModel(settings.anthropic_api_key, settings.enrichment_model),
        default_confidence=settings.enrichment_default_confidence,
    )
    return DetectionPipeline(
        classifier=classifier,
        detector=detector,
        enricher=enricher,
        cache=cache,
        adapter_timeout_s=settings.adapter_timeout_s,
        raster_size=settings.raster_size,
    )
