"""
Ledger summary cache.

Keeps the last computed EntitySummary per ledger in Redis so balance
badges and list screens do not refold whole histories. The cache is never
a source of truth: readers check it against the entity row and the ledger
size before trusting it, and Redis failures only cost a recomputation.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from bakery_ledger.app.core.config import settings
from bakery_ledger.app.domain.ledger.records import EntityKey, EntitySummary

logger = logging.getLogger("bakery_ledger.cache")


# Create async Redis client
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    """FastAPI dependency returning the shared Redis client."""
    return redis_client


async def ping_redis(client=None) -> bool:
    """True when Redis answers PING. Failures are reported, never raised."""
    try:
        return bool(await (client if client is not None else redis_client).ping())
    except RedisError as exc:
        logger.warning("Redis ping failed: %s", exc)
        return False


def cache_key(key: EntityKey) -> str:
    return f"ledger:summary:{key.entity_type.value}:{key.entity_id}"


class SummaryCache:

    def __init__(self, client=None, ttl_seconds: int = None, enabled: bool = None):
        self.client = client if client is not None else redis_client
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.summary_cache_ttl_seconds
        self.enabled = settings.summary_cache_enabled if enabled is None else enabled

    async def get(self, key: EntityKey) -> Optional[EntitySummary]:
        if not self.enabled:
            return None
        try:
            raw = await self.client.get(cache_key(key))
        except RedisError as exc:
            logger.warning("Summary cache read failed for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return EntitySummary.model_validate_json(raw)
        except ValueError:
            logger.warning("Discarding unreadable summary cache entry for %s", key)
            return None

    async def put(self, summary: EntitySummary) -> None:
        if not self.enabled:
            return
        key = EntityKey(entity_type=summary.entity_type, entity_id=summary.entity_id)
        try:
            await self.client.set(cache_key(key), summary.model_dump_json(), ex=self.ttl_seconds)
        except RedisError as exc:
            logger.warning("Summary cache write failed for %s: %s", key, exc)
            await self.invalidate(key)

    async def invalidate(self, key: EntityKey) -> None:
        if not self.enabled:
            return
        try:
            await self.client.delete(cache_key(key))
        except RedisError as exc:
            logger.error("Summary cache invalidation failed for %s: %s", key, exc)
