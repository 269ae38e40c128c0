"""Redis cache service implementation."""

import logging

import redis

from prescription_worker.exceptions import CacheServiceError
from prescription_worker.infrastructure.interfaces import CacheService

logger = logging.getLogger(__name__)


class RedisCacheService(CacheService):
    """
    Stores generated drafts in Redis under a service-wide key prefix.

    Entries expire after ``ttl_seconds`` so a cached draft only outlives the
    queue's retry window, not the recording's lifetime.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int, key_prefix: str = "doctorcare:"):
        self._client = client
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix

    def get(self, key: str) -> str | None:
        namespaced = self._key_prefix + key
        try:
            value = self._client.get(namespaced)
        except redis.RedisError as e:
            logger.exception("Redis get failed", extra={"key": namespaced})
            raise CacheServiceError(key, "get", cause=e) from e

        if value is None:
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        logger.info("Cache hit", extra={"key": namespaced})
        return value

    def set(self, key: str, value: str) -> None:
        if not value:
            return
        namespaced = self._key_prefix + key
        try:
            self._client.set(namespaced, value, ex=self._ttl_seconds)
        except redis.RedisError as e:
            logger.exception("Redis set failed", extra={"key": namespaced})
            raise CacheServiceError(key, "set", cause=e) from e
        logger.info("Cache set", extra={"key": namespaced, "ttl": self._ttl_seconds})
