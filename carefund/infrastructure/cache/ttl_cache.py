"""
In-process TTL cache for external source responses.

Entries expire lazily on read and through a periodic sweep task. Lifetime is
the process lifetime; nothing is persisted.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SWEEP_INTERVAL_SECONDS = 300

_MISSING = object()


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl_seconds


def make_cache_key(prefix: str, params: Mapping[str, Any]) -> str:
    """
    Build a cache key independent of parameter order.

    >>> make_cache_key("climate", {"city": "Delhi"})
    'climate:city:Delhi'
    """
    joined = "|".join(f"{key}:{params[key]}" for key in sorted(params))
    return f"{prefix}:{joined}"


class TTLCache:
    """
    Key -> value store with per-entry TTL.

    No single-flight: concurrent misses on the same key may each run the
    producer. Producers are idempotent reads, so the last write wins.
    """

    def __init__(
        self,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._entries: Dict[str, CacheEntry] = {}
        self._clock = clock
        self._sweep_interval = sweep_interval_seconds
        self._sweep_task: Optional[asyncio.Task] = None

    def get(self, key: str, default: Optional[Any] = None) -> Optional[Any]:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def _lookup(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return _MISSING
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock(), ttl_seconds=ttl_seconds)

    def has(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, Any]:
        keys: List[str] = list(self._entries.keys())
        return {"size": len(keys), "keys": keys}

    async def with_cache(
        self,
        key: str,
        ttl_seconds: float,
        producer: Callable[[], Awaitable[T]],
        should_cache: Optional[Callable[[T], bool]] = None,
    ) -> T:
        """
        Return the cached value, or await producer and return its result.

        The result is stored unless should_cache rejects it. A stored None
        counts as a hit.
        """
        cached = self._lookup(key)
        if cached is not _MISSING:
            logger.debug("Cache hit: %s", key)
            return cached

        logger.debug("Cache miss: %s", key)
        value = await producer()
        if should_cache is None or should_cache(value):
            self.set(key, value, ttl_seconds)
        else:
            logger.debug("Not caching %s", key)
        return value

    def sweep(self) -> int:
        """Purge expired entries; returns how many were removed"""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Cache sweep removed %d expired entries", len(expired))
        return len(expired)

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        """Start the periodic sweep; calling twice keeps a single task"""
        if not self.running:
            self._sweep_task = asyncio.create_task(self._sweep_loop())
            logger.info("Cache sweep started (every %ss)", self._sweep_interval)

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it; safe to call when not started"""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Cache sweep stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()
