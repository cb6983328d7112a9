"""
Redis caching service for event listings.

CACHING STRATEGY
================

What we cache:
  - Event listing responses (paginated, JSON-serialized)
  - Cache key pattern: "events:list:q=..&city=..&from=..&to=..&min=..&max=..&page=..&limit=.."
    built from the normalized filters, so equivalent queries share a key

Invalidation strategy:
  - On event create, update and delete: delete all event list keys
  - Ticket purchases do not touch list items, so they do not invalidate
  - TTL-based expiry as safety net (5 minutes)

  All event list keys start with "events:list:" so we can SCAN and delete them.

Event detail is never cached: it carries a live ticket count.

The cache is optional. When REDIS_ENABLED is false, or redis cannot be
reached, every call is a no-op and the catalog is read straight from the
database.
"""

import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from dance_events.core.config import Settings
from dance_events.core.logging import get_logger
from dance_events.core.metrics import record_cache_operation, redis_connection_errors
from dance_events.schemas.event import EventFilters

logger = get_logger(__name__)

EVENT_LIST_PREFIX = "events:list:"


class EventCache:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: Optional[redis.Redis] = None

    async def get_client(self) -> Optional[redis.Redis]:
        """Get or create Redis connection. Returns None if Redis is disabled."""
        if not self.settings.REDIS_ENABLED:
            return None

        if self._client is None:
            client = redis.from_url(
                self.settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            try:
                # Test connection
                await client.ping()
            except RedisError as e:
                redis_connection_errors.inc()
                logger.error("redis_connection_failed", error=str(e))
                await client.aclose()
                return None
            self._client = client
            logger.info("redis_connected", url=self.settings.REDIS_URL)

        return self._client

    async def close(self) -> None:
        """Close Redis connection on shutdown."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def make_key(filters: EventFilters) -> str:
        return EVENT_LIST_PREFIX + filters.cache_key()

    async def get_events(self, filters: EventFilters) -> Optional[dict]:
        """Retrieve cached event list response."""
        client = await self.get_client()
        if not client:
            return None

        key = self.make_key(filters)
        try:
            data = await client.get(key)
        except RedisError as e:
            logger.error("cache_get_error", key=key, error=str(e))
            return None

        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
        return None

    async def set_events(self, filters: EventFilters, data: dict) -> None:
        """Cache event list response with TTL."""
        client = await self.get_client()
        if not client:
            return

        key = self.make_key(filters)
        try:
            await client.setex(key, self.settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
            logger.debug("cache_set", key=key, ttl=self.settings.REDIS_CACHE_TTL)
        except RedisError as e:
            logger.error("cache_set_error", key=key, error=str(e))

    async def invalidate_events(self) -> None:
        """
        Invalidate all cached event listings.
        Uses SCAN to find and delete all keys matching the prefix.
        """
        client = await self.get_client()
        if not client:
            return

        try:
            deleted = 0
            async for key in client.scan_iter(match=EVENT_LIST_PREFIX + "*", count=100):
                await client.delete(key)
                deleted += 1
            logger.info("cache_invalidated", keys_deleted=deleted)
        except RedisError as e:
            logger.error("cache_invalidation_error", error=str(e))

    async def stats(self) -> dict:
        """Get Redis cache statistics for monitoring."""
        client = await self.get_client()
        if not client:
            return {"status": "disabled"}

        try:
            info = await client.info("stats")
            keyspace = await client.info("keyspace")
        except RedisError as e:
            return {"status": "error", "error": str(e)}

        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
            "keys": keyspace,
        }
