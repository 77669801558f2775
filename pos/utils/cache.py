import json
import logging
from typing import Any, Iterable, Optional

import redis

from pos.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Create Redis client
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


class CacheService:
    """
    Redis cache service for catalog reads.

    Redis is an accelerator only: every failure is logged and reported as a
    cache miss so that sales keep working while Redis is down.
    """

    def __init__(self, client: redis.Redis = None, ttl: int = None):
        self.client = client or redis_client
        self.ttl = ttl or settings.CACHE_TTL

    def _make_key(self, prefix: str, key: str) -> str:
        """Create a namespaced cache key."""
        return f"pos:{prefix}:{key}"

    def get(self, prefix: str, key: str) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            prefix: Cache key prefix (e.g., 'product')
            key: Unique identifier

        Returns:
            Cached value or None if not found
        """
        cache_key = self._make_key(prefix, key)
        try:
            value = self.client.get(cache_key)
        except redis.RedisError as e:
            logger.debug(f"Cache get failed for {cache_key}: {e}")
            return None
        if not value:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning(f"Discarding corrupt cache entry {cache_key}")
            return None

    def set(self, prefix: str, key: str, value: Any, ttl: int = None) -> bool:
        """Set a JSON-serialisable value with TTL. Returns False on failure."""
        cache_key = self._make_key(prefix, key)
        try:
            serialized = json.dumps(value)
            self.client.setex(cache_key, ttl or self.ttl, serialized)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.debug(f"Cache set failed for {cache_key}: {e}")
            return False

    def delete(self, prefix: str, key: str) -> bool:
        cache_key = self._make_key(prefix, key)
        try:
            self.client.delete(cache_key)
            return True
        except redis.RedisError as e:
            logger.debug(f"Cache delete failed for {cache_key}: {e}")
            return False

    def delete_many(self, prefix: str, keys: Iterable[str]) -> int:
        """Delete several keys under one prefix in a single round trip."""
        cache_keys = [self._make_key(prefix, key) for key in keys]
        if not cache_keys:
            return 0
        try:
            return self.client.delete(*cache_keys)
        except redis.RedisError as e:
            logger.debug(f"Cache delete failed for {len(cache_keys)} keys: {e}")
            return 0


# Singleton cache service instance
cache_service = CacheService()
