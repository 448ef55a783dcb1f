"""
Reference Data Cache
====================

Purpose
-------
Read-through Redis cache in front of a `ReferenceDataStore`. Title data
changes only when the game team publishes new content, so every combat
request re-reading it from the record service is wasted latency.

Behavior
--------
- Keys: ``starfall:v1:titledata:{key}``; values are the JSON documents.
- Hits are served from Redis; misses are fetched from the inner store in a
  single call and written back with the configured TTL.
- Any Redis failure is logged as a `CacheError` warning and the request is
  served from the inner store. The cache never fails a request.
- Random-result-table evaluation always goes to the inner store.

Configuration
-------------
- REDIS_URL
- REFERENCE_CACHE_TTL_SECONDS (0 disables the cache at bootstrap)
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import redis.asyncio as redis
from redis.exceptions import RedisError

from starfall.adapters.base import ReferenceDataStore
from starfall.core.exceptions import CacheError
from starfall.core.logging.logger import get_logger

logger = get_logger(__name__)

KEY_PREFIX = "starfall:v1:titledata"


class CachedReferenceDataStore(ReferenceDataStore):
    """
    Args:
        inner: Authoritative reference data store
        client: `redis.asyncio.Redis` client (``decode_responses=True``)
        ttl_seconds: Expiry for cached documents
    """

    def __init__(
        self,
        inner: ReferenceDataStore,
        client: redis.Redis,
        ttl_seconds: int,
        key_prefix: str = KEY_PREFIX,
    ) -> None:
        self._inner = inner
        self._client = client
        self._ttl = ttl_seconds
        self._prefix = key_prefix
        self.hits = 0
        self.misses = 0

    @classmethod
    def from_url(
        cls,
        inner: ReferenceDataStore,
        url: str,
        ttl_seconds: int,
        socket_timeout: float = 5.0,
        key_prefix: str = KEY_PREFIX,
    ) -> "CachedReferenceDataStore":
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )
        return cls(inner, client, ttl_seconds, key_prefix=key_prefix)

    def cache_key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def _degraded(self, operation: str, cache_key: str, exc: Exception) -> None:
        error = CacheError(operation, cache_key, exc)
        logger.warning(
            "Reference cache unavailable; using record service",
            extra={"error_code": error.error_code, **error.details},
        )

    async def _read(self, keys: List[str]) -> Dict[str, Any]:
        cache_keys = [self.cache_key(key) for key in keys]
        try:
            raw_values = await self._client.mget(cache_keys)
        except (RedisError, OSError) as exc:
            self._degraded("mget", ",".join(cache_keys), exc)
            return {}

        found: Dict[str, Any] = {}
        for key, raw in zip(keys, raw_values):
            if raw is None:
                continue
            try:
                found[key] = json.loads(raw)
            except ValueError:
                logger.warning(
                    "Discarding undecodable cache entry",
                    extra={"cache_key": self.cache_key(key)},
                )
        return found

    async def _write(self, documents: Dict[str, Any]) -> None:
        for key, document in documents.items():
            cache_key = self.cache_key(key)
            try:
                await self._client.setex(cache_key, self._ttl, json.dumps(document))
            except (RedisError, OSError) as exc:
                self._degraded("setex", cache_key, exc)
                return

    async def get_title_data(self, keys: Sequence[str]) -> Dict[str, Any]:
        wanted = list(keys)
        result = await self._read(wanted)

        missing = [key for key in wanted if key not in result]
        self.hits += len(wanted) - len(missing)
        self.misses += len(missing)

        if missing:
            fetched = await self._inner.get_title_data(missing)
            await self._write(fetched)
            result.update(fetched)

        logger.debug(
            "Reference data lookup",
            extra={"cache_hits": len(wanted) - len(missing), "cache_misses": len(missing)},
        )
        return result

    async def evaluate_random_result_table(
        self, table_id: str, catalog_version: Optional[str] = None
    ) -> str:
        return await self._inner.evaluate_random_result_table(table_id, catalog_version)

    async def invalidate(self, keys: Sequence[str]) -> None:
        """Drop cached documents, e.g. after publishing new content."""
        try:
            await self._client.delete(*[self.cache_key(key) for key in keys])
        except (RedisError, OSError) as exc:
            self._degraded("delete", ",".join(keys), exc)

    async def close(self) -> None:
        await self._client.aclose()
