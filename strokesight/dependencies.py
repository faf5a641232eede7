"""FastAPI dependency injection."""

from __future__ import annotations

from functools import lru_cache

from strokesight.cache import TTLCache
from strokesight.config import settings
from strokesight.engine.pipeline import DetectionPipeline, create_pipeline


def get_settings():
    return settings


@lru_cache(maxsize=1)
def get_cache() -> TTLCache:
    return TTLCache(ttl_seconds=settings.cache_ttl_s, max_entries=settings.cache_max_entries)


@lru_cache(maxsize=1)
def get_pipeline() -> DetectionPipeline:
    return create_pipeline(settings, cache=get_cache())
