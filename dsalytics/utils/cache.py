"""
Redis cache utility for read-mostly reference data
"""
import redis
import json
import logging
from typing import Optional, Any
from dsalytics.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """
    Redis-backed JSON cache

    Caching is best effort: when Redis is disabled or unreachable every lookup
    misses and callers fall back to the source of truth.
    """

    def __init__(self, url: str, enabled: bool = True, default_ttl: int = 3600):
        self.default_ttl = default_ttl
        self.redis_client = None

        if not enabled:
            logger.info("Caching disabled by configuration")
            return

        try:
            self.redis_client = redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=5
            )
            self.redis_client.ping()
            logger.info("Redis connection established")
        except redis.RedisError as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None

    def get(self, key: str) -> Optional[Any]:
        """
        Get a decoded value from cache

        Returns:
            Cached value or None on miss / error
        """
        if not self.redis_client:
            return None

        try:
            value = self.redis_client.get(key)
        except redis.RedisError as e:
            logger.error(f"Cache get error: {str(e)}")
            return None

        if value is None:
            logger.debug(f"Cache miss: {key}")
            return None

        logger.debug(f"Cache hit: {key}")
        return json.loads(value)

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Store a JSON serializable value

        Returns:
            Success status
        """
        if not self.redis_client:
            return False

        ttl = ttl or self.default_ttl
        try:
            self.redis_client.setex(key, ttl, json.dumps(value))
        except redis.RedisError as e:
            logger.error(f"Cache set error: {str(e)}")
            return False

        logger.info(f"Cache set: {key} (TTL: {ttl}s)")
        return True

    def delete(self, key: str) -> bool:
        """Delete key from cache"""
        if not self.redis_client:
            return False

        try:
            self.redis_client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Cache delete error: {str(e)}")
            return False

        logger.info(f"Cache delete: {key}")
        return True


# Global instance
cache_service = CacheService(
    settings.REDIS_URL,
    enabled=settings.CACHE_ENABLED,
    default_ttl=settings.PROBLEM_CATALOG_CACHE_TTL
)
