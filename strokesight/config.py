"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    hf_api_token: str = ""
    strokesight_env: str = "development"
    strokesight_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Canvas defaults when the client omits its dimensions
    canvas_width: int = 800
    canvas_height: int = 600
    # Square bitmap handed to raster-based recognizers
    raster_size: int = 512

    # External model boundaries
    hf_inference_url: str = "https://api-inference.huggingface.co/models"
    classifier_model: str = "kmewhort/beit-sketch-classifier"
    detector_model: str = "facebook/detr-resnet-50"
    enrichment_model: str = "claude-haiku-4-5-20251001"

    classifier_top_k: int = 3
    classifier_min_confidence: float = 0.2
    classifier_region_mode: bool = False
    detector_min_confidence: float = 0.5
    enrichment_default_confidence: float = 0.75

    # Seconds before an adapter call is abandoned
    adapter_timeout_s: float = 10.0

    # Adapter result cache
    cache_ttl_s: float = 300.0
    cache_max_entries: int = 256

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
