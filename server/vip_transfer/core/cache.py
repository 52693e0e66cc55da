"""In-process data cache and tagged output cache."""

import logging
import threading
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Optional, TypeVar

from .clock import Clock, system_clock
from .observability import metrics_collector

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MemoryCache:
    """
    Thread-safe key/value cache with per-entry TTL.

    Values should be immutable snapshots (pydantic models, tuples, plain
    dicts that callers do not mutate). The lock is only held for dictionary
    access, never across an awaited call.

    Every removal bumps a generation, per key for ``remove``/``remove_many``
    and cache-wide for ``remove_prefix``/``clear``. A load started by
    ``get_or_create`` before a removal is returned to its caller but never
    stored.
    """

    def __init__(self, clock: Optional[Clock] = None, name: str = "memory"):
        self.clock = clock or system_clock
        self.name = name
        self._entries: dict[str, tuple[float, Any]] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        now = self.clock.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= now:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        expires_at = self.clock.monotonic() + ttl_seconds
        with self._lock:
            self._entries[key] = (expires_at, value)

    def _generation(self, key: str) -> tuple[int, int]:
        with self._lock:
            return self._epoch, self._generations.get(key, 0)

    def _set_if_unchanged(self, key: str, value: Any, ttl_seconds: float, generation: tuple[int, int]) -> bool:
        expires_at = self.clock.monotonic() + ttl_seconds
        with self._lock:
            if (self._epoch, self._generations.get(key, 0)) != generation:
                return False
            self._entries[key] = (expires_at, value)
            return True

    async def get_or_create(
        self,
        key: str,
        ttl_seconds: float,
        factory: Callable[[], Awaitable[T]],
    ) -> T | None:
        """
        Return the cached value for key, loading it through factory on a miss.

        A factory result of None is returned but not stored, so unknown ids
        are looked up again on every call. A result whose key was removed
        while factory was running is not stored either.

        Args:
            key: Cache key
            ttl_seconds: Lifetime of a newly stored value
            factory: Coroutine function producing the value

        Returns:
            Cached or freshly loaded value
        """
        value = self.get(key)
        if value is not None:
            metrics_collector.record_cache_lookup(self.name, hit=True)
            return value

        metrics_collector.record_cache_lookup(self.name, hit=False)
        generation = self._generation(key)
        value = await factory()
        if value is not None and not self._set_if_unchanged(key, value, ttl_seconds, generation):
            logger.debug("Discarded load for invalidated cache key", extra={"key": key, "cache": self.name})
        return value

    def remove(self, key: str) -> bool:
        """Remove a key; returns True if it was present."""
        with self._lock:
            self._generations[key] = self._generations.get(key, 0) + 1
            return self._entries.pop(key, None) is not None

    def remove_many(self, keys: Iterable[str]) -> int:
        removed = 0
        with self._lock:
            for key in keys:
                self._generations[key] = self._generations.get(key, 0) + 1
                if self._entries.pop(key, None) is not None:
                    removed += 1
        return removed

    def remove_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix."""
        with self._lock:
            self._epoch += 1
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        return len(doomed)

    def keys(self) -> list[str]:
        now = self.clock.monotonic()
        with self._lock:
            return sorted(k for k, (expires_at, _) in self._entries.items() if expires_at > now)

    def clear(self) -> None:
        with self._lock:
            self._epoch += 1
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self.keys())


class OutputCache:
    """
    Response-level cache whose entries carry tags.

    Public catalog endpoints store rendered payloads here; admin mutations
    evict whole tag groups ("regions", "homepage", ...).
    """

    def __init__(self, clock: Optional[Clock] = None, name: str = "output"):
        self.clock = clock or system_clock
        self.name = name
        self._entries: dict[str, tuple[float, frozenset[str], Any]] = {}
        self._tag_generations: dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        now = self.clock.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                metrics_collector.record_cache_lookup(self.name, hit=False)
                return None
            expires_at, _, payload = entry
            if expires_at <= now:
                del self._entries[key]
                metrics_collector.record_cache_lookup(self.name, hit=False)
                return None
        metrics_collector.record_cache_lookup(self.name, hit=True)
        return payload

    def store(self, key: str, payload: Any, tags: Iterable[str], ttl_seconds: float) -> None:
        expires_at = self.clock.monotonic() + ttl_seconds
        with self._lock:
            self._entries[key] = (expires_at, frozenset(tags), payload)

    def generation(self, tags: Iterable[str]) -> tuple[int, ...]:
        """Snapshot of the eviction counters for tags, taken before rendering."""
        with self._lock:
            return tuple(self._tag_generations.get(tag, 0) for tag in sorted(set(tags)))

    def store_if_unchanged(
        self,
        key: str,
        payload: Any,
        tags: Iterable[str],
        ttl_seconds: float,
        generation: tuple[int, ...],
    ) -> bool:
        """Store payload unless one of its tags was evicted since generation was taken."""
        tags = frozenset(tags)
        expires_at = self.clock.monotonic() + ttl_seconds
        with self._lock:
            current = tuple(self._tag_generations.get(tag, 0) for tag in sorted(tags))
            if current != generation:
                return False
            self._entries[key] = (expires_at, tags, payload)
            return True

    async def evict_by_tag(self, tag: str) -> int:
        """
        Evict every entry carrying tag.

        Returns:
            Number of evicted entries
        """
        with self._lock:
            self._tag_generations[tag] = self._tag_generations.get(tag, 0) + 1
            doomed = [key for key, (_, tags, _) in self._entries.items() if tag in tags]
            for key in doomed:
                del self._entries[key]

        logger.debug(
            "Output cache tag evicted",
            extra={"cache": self.name, "tag": tag, "evicted": len(doomed)}
        )
        return len(doomed)

    def tags_of(self, key: str) -> frozenset[str]:
        with self._lock:
            entry = self._entries.get(key)
        return entry[1] if entry else frozenset()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Process-wide cache instances, injected through FastAPI dependencies
memory_cache = MemoryCache()
output_cache = OutputCache()
