"""Time-bounded memoization of ranked search results.

Entries expire after a fixed TTL and are evicted lazily when read. Any document
write invalidates the whole cache; a generation counter guarantees that a
search which started before the invalidation cannot store its (now stale)
results afterwards.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from blueprint_rag.search.base_search import ScoredResult
from blueprint_rag.search.terms import normalize_query

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60

CacheKey = Tuple[str, str, int]


def make_key(query: str, platform: Optional[str], limit: int) -> CacheKey:
    """Build the cache key ``(normalized query, platform or "all", limit)``."""
    return (normalize_query(query), (platform or "all").lower(), int(limit))


@dataclass(slots=True)
class CacheEntry:
    key: CacheKey
    results: List[ScoredResult] = field(default_factory=list)
    created_at: float = 0.0


class SearchCache:
    """Thread-safe TTL cache keyed by ``make_key`` tuples."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return a live entry or ``None``; expired entries are evicted."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            return entry

    def put(
        self, key: CacheKey, results: List[ScoredResult], generation: Optional[int] = None
    ) -> bool:
        """Store ``results`` under ``key``.

        When ``generation`` is given and the cache has been invalidated since
        it was read, the write is skipped and ``False`` is returned.
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Discarding stale cache write for %r", key)
                return False
            self._entries[key] = CacheEntry(key=key, results=list(results), created_at=self._clock())
            return True

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generation += 1

    def purge_expired(self) -> int:
        """Remove expired entries in bulk and return how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if self._expired(e, now)]
            for k in expired:
                del self._entries[k]
            return len(expired)
