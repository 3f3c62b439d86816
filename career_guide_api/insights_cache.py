"""In-memory TTL cache for generated industry insights."""

import threading

from cachetools import TTLCache

from career_guide_api.config import get_settings


class InsightsCache:
    """Thread-safe cache of insights text keyed by industry name."""

    def __init__(self, ttl_seconds: int | None = None, max_entries: int | None = None):
        """Initialize the cache.

        Args:
            ttl_seconds: Time-to-live for entries. Defaults to config value; 0 disables caching.
            max_entries: Maximum number of industries kept. Defaults to config value.
        """
        settings = get_settings()
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.insights_cache_ttl
        self._max_entries = max_entries or settings.insights_cache_size
        self._cache: TTLCache[str, str] | None = None
        if self._ttl > 0:
            self._cache = TTLCache(maxsize=self._max_entries, ttl=self._ttl)
        self._lock = threading.Lock()

    @staticmethod
    def _key(industry: str) -> str:
        return industry.strip().lower()

    @property
    def enabled(self) -> bool:
        return self._cache is not None

    def get(self, industry: str) -> str | None:
        """Get cached insights, None if absent, expired or caching is disabled."""
        if self._cache is None:
            return None
        with self._lock:
            return self._cache.get(self._key(industry))

    def set(self, industry: str, insights: str) -> None:
        if self._cache is None:
            return
        with self._lock:
            self._cache[self._key(industry)] = insights

    def count(self) -> int:
        if self._cache is None:
            return 0
        with self._lock:
            return len(self._cache)

    def clear(self) -> None:
        if self._cache is None:
            return
        with self._lock:
            self._cache.clear()
