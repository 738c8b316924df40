"""TTL cache over an injected key-value store.

Entries live under ``cache_<key>`` so they never collide with other data in
the same store (settings, for instance) and can be cleared as a group.
"""

import logging
import time
from typing import Any, Callable, Optional

from application.ports import KeyValueStore
from core.errors import StorageError
from core.models import CacheEntry, CacheInfo
from core.settings import DEFAULT_CACHE_TTL

CACHE_KEY_PREFIX = "cache_"
logger = logging.getLogger("dashboard.cache")


class CacheManager:
    def __init__(self, store: KeyValueStore, clock: Callable[[], float] = time.time) -> None:
        self.store = store
        self.clock = clock

    @staticmethod
    def cache_key(key: str) -> str:
        return f"{CACHE_KEY_PREFIX}{key}"

    def set(self, key: str, data: Any, ttl: float = DEFAULT_CACHE_TTL) -> None:
        entry = CacheEntry(data=data, stored_at=self.clock(), ttl=ttl)
        try:
            self.store.set(self.cache_key(key), entry.to_dict())
        except StorageError as exc:
            logger.warning("Failed to save cache for %r: %s", key, exc)
            return
        logger.debug("Cache saved: %s (TTL: %ss)", key, ttl)

    def _load(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = self.store.get(self.cache_key(key))
        except StorageError as exc:
            logger.warning("Failed to read cache for %r: %s", key, exc)
            return None
        return CacheEntry.from_dict(raw) if raw is not None else None

    def get(self, key: str) -> Optional[Any]:
        """Return cached data, or None on a miss. Expired entries are evicted."""
        entry = self._load(key)
        if entry is None:
            logger.debug("Cache miss: %s", key)
            return None
        now = self.clock()
        if entry.is_expired(now):
            logger.debug("Cache expired: %s (age: %ds)", key, entry.age(now))
            self.delete(key)
            return None
        logger.debug("Cache hit: %s (age: %ds, TTL: %ds)", key, entry.age(now), entry.ttl)
        return entry.data

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> None:
        try:
            self.store.remove([self.cache_key(key)])
        except StorageError as exc:
            logger.warning("Failed to delete cache for %r: %s", key, exc)

    def clear_all(self) -> int:
        """Remove every cache entry; keys outside the cache prefix are untouched."""
        try:
            cache_keys = [k for k in self.store.keys() if k.startswith(CACHE_KEY_PREFIX)]
            if cache_keys:
                self.store.remove(cache_keys)
        except StorageError as exc:
            logger.warning("Failed to clear cache: %s", exc)
            return 0
        logger.info("Cleared %s cache entries", len(cache_keys))
        return len(cache_keys)

    def info(self, key: str) -> CacheInfo:
        entry = self._load(key)
        if entry is None:
            return CacheInfo(exists=False)
        age = entry.age(self.clock())
        return CacheInfo(exists=True, age=int(age), ttl=int(entry.ttl), expired=age > entry.ttl)


__all__ = ["CACHE_KEY_PREFIX", "CacheManager"]
