"""
Template for a cached, fallback-protected data source.

Subclasses implement _fetch_live (may raise SourceError) and fallback
(must not raise). fetch() never raises SourceError: it returns the live
value, a cached live value, or the fallback. Fallback values are not cached
so the next call tries the source again; subclasses that merge several
sources override is_cacheable to keep partial estimates out of the cache too.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, TypeVar

from carefund.domain.errors import InvalidInput, SourceError, SourceRejected, SourceUnavailable
from carefund.infrastructure.cache.ttl_cache import TTLCache, make_cache_key
from carefund.infrastructure.sources.http_client import ResilientFetcher
from carefund.infrastructure.sources.types import SourceConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SourceFetcher(ABC, Generic[T]):
    #: cache key prefix and log name
    name: str = ""
    #: source whose cache_ttl_seconds applies to the merged result
    primary_source: str = ""

    def __init__(
        self,
        http: ResilientFetcher,
        cache: TTLCache,
        sources: Mapping[str, SourceConfig],
    ):
        self.http = http
        self.cache = cache
        self.sources = sources

    def source(self, name: str) -> SourceConfig:
        try:
            return self.sources[name]
        except KeyError:
            raise SourceRejected(name, "source not configured") from None

    @property
    def ttl_seconds(self) -> int:
        return self.source(self.primary_source).cache_ttl_seconds

    async def fetch(self, **params: Any) -> T:
        key = make_cache_key(self.name, params)
        started = time.monotonic()
        try:
            result = await self.cache.with_cache(
                key,
                self.ttl_seconds,
                lambda: self._guarded_fetch(**params),
                should_cache=self.is_cacheable,
            )
        except SourceRejected as exc:
            logger.warning("%s rejected after %dms, using fallback: %s", self.name, _elapsed_ms(started), exc)
            return self.fallback(**params)
        except SourceUnavailable as exc:
            logger.warning("%s unavailable after %dms, using fallback: %s", self.name, _elapsed_ms(started), exc)
            return self.fallback(**params)

        logger.info("%s ready in %dms", self.name, _elapsed_ms(started))
        return result

    def is_cacheable(self, result: T) -> bool:
        return True

    async def _guarded_fetch(self, **params: Any) -> T:
        """Turn malformed upstream payloads into SourceUnavailable"""
        try:
            return await self._fetch_live(**params)
        except (SourceError, InvalidInput):
            raise
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
            raise SourceUnavailable(self.name, f"malformed response: {exc!r}") from exc

    @abstractmethod
    async def _fetch_live(self, **params: Any) -> T:
        ...

    @abstractmethod
    def fallback(self, **params: Any) -> T:
        ...


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
