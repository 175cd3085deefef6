"""
image_cache.py - in-memory cache of resized image bytes with a byte budget.

Entries are keyed by image name and target size. Every read hit refreshes the
entry's access time; when a new entry pushes the total size over the budget,
the least recently accessed entries are removed until it fits again.

Example:
    cache = ImageCache(100 * MB)
    data = cache.get(name, 800, 600)
    if data is None:
        data = render(name, 800, 600)
        cache.put(name, 800, 600, data)
"""

import itertools
import threading
import time
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import EvictionAccountingError
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

MB = 1024 * 1024


def build_cache_key(name: str, width: int, height: int) -> str:
    """Return the cache key for `name` resized to `width` x `height`."""
    return f"{name}/{width}/{height}"


class CacheEntry:
    """Cached image bytes with their last access time."""

    __slots__ = ("image", "last_access", "access_seq")

    def __init__(self, image: bytes, last_access: float, access_seq: int):
        self.image = image
        self.last_access = last_access
        # breaks ties between accesses within the clock resolution
        self.access_seq = access_seq

    def touch(self, now: float, seq: int) -> None:
        self.last_access = now
        self.access_seq = seq

    @property
    def size(self) -> int:
        return len(self.image)


class ImageCache:
    """Bounded in-memory cache for resized images with least-recently-used eviction."""

    def __init__(self, size_limit: int, clock=time.time):
        """
        Args:
            size_limit: Maximum total size of cached images in bytes.
            clock: Time source for access timestamps.
        """
        self.size_limit = size_limit
        self.size = 0
        self.hits = 0
        self.misses = 0
        self._clock = clock
        self._seq = itertools.count()
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        logger.info("Cache size: %.1f MB", size_limit / MB)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, name: str, width: int, height: int) -> Optional[bytes]:
        """Return cached bytes for `name` at `width` x `height`, or None if not present."""
        key = build_cache_key(name, width, height)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            entry.touch(self._clock(), next(self._seq))
            self.hits += 1
            logger.debug("Cache hit for: %s", key)
            return entry.image

    def put(self, name: str, width: int, height: int, image: bytes) -> None:
        """
        Store a copy of `image` for `name` at `width` x `height`, replacing any
        previous entry, and evict old entries if the budget is exceeded.
        """
        key = build_cache_key(name, width, height)
        data = bytes(image)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self.size -= entry.size
                entry.image = data
                entry.touch(self._clock(), next(self._seq))
            else:
                self._entries[key] = CacheEntry(data, self._clock(), next(self._seq))
            self.size += len(data)

            logger.debug("Added image '%s' to cache, cache size %.3f MB", key, self.size / MB)

            if self.size > self.size_limit:
                self._evict()

    def _release(self, key: str, entry: CacheEntry) -> None:
        """Subtract `entry` from the byte counter. Caller holds the lock."""
        self.size -= entry.size
        if self.size < 0:
            raise EvictionAccountingError(f"cache size went negative ({self.size}) removing {key}")

    def _evict(self) -> int:
        """Remove least recently accessed entries until the cache fits. Caller holds the lock."""
        ordered = sorted(self._entries.items(),
                         key=lambda item: (item[1].last_access, item[1].access_seq))
        removed = 0
        for key, entry in ordered:
            if self.size <= self.size_limit:
                break
            try:
                self._release(key, entry)
            except EvictionAccountingError as e:
                logger.warning("%s, clamping to 0", e)
                self.size = 0
            logger.debug("Removing cache entry: %s", key)
            del self._entries[key]
            removed += 1

        logger.debug("Evicted %d entries, final cache size %.3f MB", removed, self.size / MB)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.size = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            timestamps = [entry.last_access for entry in self._entries.values()]
            return {
                "total_entries": len(self._entries),
                "size_bytes": self.size,
                "size_limit": self.size_limit,
                "hits": self.hits,
                "misses": self.misses,
                "oldest_access": datetime.fromtimestamp(min(timestamps)).isoformat() if timestamps else None,
                "newest_access": datetime.fromtimestamp(max(timestamps)).isoformat() if timestamps else None,
            }
