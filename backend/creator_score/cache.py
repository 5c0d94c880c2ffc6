"""
In-process TTL cache with tag invalidation.

Services receive a cache instance instead of holding module-level state, so
tests can hand them a fresh cache or a fake clock.

The cache is shared between the event loop and FastAPI's threadpool (sync
routes invalidate it), so every public method holds ``self._lock``.
"""
import logging
import threading
import time
from collections.abc import Callable, Iterable
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic, max_size: int = 256):
        self._clock = clock
        self._max_size = max_size
        self._entries: dict[str, tuple[float, Any]] = {}  # key -> (expires_at, value)
        self._tags: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            item = self._entries.get(key, _MISSING)
            if item is _MISSING:
                logger.debug("Cache miss for %s", key)
                return default
            expires_at, value = item
            if self._clock() >= expires_at:
                logger.debug("Cache expired for %s", key)
                self._drop(key)
                return default
            logger.debug("Cache hit for %s", key)
            return value

    def set(self, key: str, value: Any, ttl: float, tags: Iterable[str] = ()) -> None:
        if ttl <= 0:
            return
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)
            for tag in tags:
                self._tags.setdefault(tag, set()).add(key)
            if len(self._entries) > self._max_size:
                self._cleanup()

    def invalidate(self, key: str) -> None:
        logger.debug("Invalidating cache key %s", key)
        with self._lock:
            self._drop(key)

    def invalidate_tag(self, tag: str) -> int:
        with self._lock:
            keys = self._tags.pop(tag, set())
            for key in keys:
                self._entries.pop(key, None)
        logger.info("Invalidated %s cache entries for tag %s", len(keys), tag)
        return len(keys)

    def clear(self) -> None:
        logger.info("Clearing entire cache")
        with self._lock:
            self._entries.clear()
            self._tags.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    # Callers hold self._lock
    def _drop(self, key: str) -> None:
        self._entries.pop(key, None)
        for keys in list(self._tags.values()):
            keys.discard(key)

    def _cleanup(self) -> None:
        now = self._clock()
        for key in [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]:
            self._drop(key)
        # Still too large: evict the entries closest to expiry
        overflow = len(self._entries) - self._max_size
        if overflow > 0:
            for key, _ in sorted(self._entries.items(), key=lambda kv: kv[1][0])[:overflow]:
                self._drop(key)
