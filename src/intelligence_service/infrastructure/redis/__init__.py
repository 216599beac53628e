"""Redis-backed catalog snapshot cache with graceful degradation."""

from typing import Any

import orjson
import redis.asyncio as aioredis
import structlog

from intelligence_service.config import Settings

logger = structlog.get_logger()


async def connect_redis(settings: Settings) -> aioredis.Redis | None:
    """Open and ping an async Redis client; None when Redis is disabled or down."""
    if not settings.redis_enabled:
        return None
    client = aioredis.from_url(
        settings.redis_url,
        decode_responses=False,
        socket_connect_timeout=2,
        socket_timeout=2,
        retry_on_timeout=True,
    )
    try:
        await client.ping()
    except Exception as e:
        logger.warning("Redis unavailable, catalog caching disabled", error=str(e))
        await client.aclose()
        return None
    logger.info("Redis connection established")
    return client


class CatalogSnapshotCache:
    """Holds the most recent raw catalog snapshot. No-ops if Redis is unavailable.

    Cache failures are logged and treated as misses; they never fail a run.
    """

    def __init__(self, client: aioredis.Redis | None, key: str, ttl_seconds: int = 300):
        self.client = client
        self.key = key
        self.ttl_seconds = ttl_seconds

    async def load(self) -> list[dict[str, Any]] | None:
        if not self.client:
            return None
        try:
            data = await self.client.get(self.key)
            if data:
                return orjson.loads(data)
        except Exception as e:
            logger.warning("Catalog cache read failed", key=self.key, error=str(e))
        return None

    async def store(self, items: list[dict[str, Any]]) -> None:
        if not self.client:
            return
        try:
            await self.client.set(self.key, orjson.dumps(items), ex=self.ttl_seconds)
        except Exception as e:
            logger.warning("Catalog cache write failed", key=self.key, error=str(e))

    async def health_check(self) -> bool:
        if not self.client:
            return False
        try:
            return await self.client.ping()
        except Exception:
            return False
