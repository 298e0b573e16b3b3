"""
Redis cache client.

Caching is best effort: when Redis is disabled or unreachable every read is a
miss and every write is skipped, and the caller falls back to the database.
"""

import json
from typing import Any, Optional

import redis

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class RedisClient:
    """Lazily created, process-wide Redis connection."""

    _client: Optional[redis.Redis] = None

    @classmethod
    def get_client(cls) -> Optional[redis.Redis]:
        if not settings.CACHE_ENABLED:
            return None
        if cls._client is None:
            cls._client = redis.Redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=1,
                socket_timeout=1,
            )
        return cls._client

    @classmethod
    def ping(cls) -> bool:
        client = cls.get_client()
        if client is None:
            return False
        try:
            return bool(client.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    @classmethod
    def close(cls) -> None:
        if cls._client is not None:
            cls._client.close()
            cls._client = None

    @classmethod
    def get_json(cls, key: str) -> Optional[Any]:
        client = cls.get_client()
        if client is None:
            return None
        try:
            raw = client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        if raw is None:
            return None
        logger.debug(f"Cache hit for {key}")
        return json.loads(raw)

    @classmethod
    def set_json(cls, key: str, value: Any, ttl: int) -> None:
        client = cls.get_client()
        if client is None:
            return
        try:
            client.setex(key, ttl, json.dumps(value, default=str))
        except redis.RedisError as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    @classmethod
    def delete(cls, *keys: str) -> None:
        client = cls.get_client()
        if client is None or not keys:
            return
        try:
            client.delete(*keys)
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {keys}: {e}")


class CacheKeys:
    @staticmethod
    def department_summary(month: str, today: str) -> str:
        return f"attendance:departments:{month}:{today}"
