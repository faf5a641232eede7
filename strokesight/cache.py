"""TTL result cache for external recognizer calls.

Entries are keyed by (operation, params-hash) and hold (result, timestamp).
Expired entries are dropped when touched, or in bulk via evict_expired().
One instance is created per app and injected into the pipeline.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str]


class TTLCache:
    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[CacheKey, tuple[Any, float]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(operation: str, **params: Any) -> CacheKey:
        """Stable key: params are JSON-encoded with sorted keys and hashed."""
        blob = json.dumps(params, sort_keys=True, default=str)
        return (operation, hashlib.sha256(blob.encode()).hexdigest()[:16])

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.ttl_seconds

    def get(self, key: CacheKey) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        result, stored_at = entry
        if self._expired(stored_at, self._clock()):
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return result

    def set(self, key: CacheKey, result: Any) -> None:
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache full, evicted %s", evicted[0])
        self._entries[key] = (result, self._clock())

    def evict_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        stale = [k for k, (_, stored_at) in self._entries.items() if self._expired(stored_at, now)]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.debug("Evicted %d expired cache entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._expired(entry[1], self._clock())
