import redis.asyncio as redis
from functools import lru_cache
from chaktrang.infra.config.settings import settings
from chaktrang.core.logger.logger import logger

@lru_cache()
def get_redis_pool():
    """Get Redis connection pool (cached)"""
    return redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        max_connections=settings.REDIS_MAX_CONNECTIONS
    )

def get_redis() -> redis.Redis:
    """Get a Redis client on the shared pool; connectivity is checked on first use"""
    pool = get_redis_pool()
    logger.info("Redis client created", extra={"max_connections": settings.REDIS_MAX_CONNECTIONS})
    return redis.Redis(connection_pool=pool)
