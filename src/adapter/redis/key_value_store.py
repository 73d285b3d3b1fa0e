"""Redis implementation of KeyValueStore.

Each record is a plain Redis string under ``REDIS_KEY_PREFIX + key``.
Connection: cached asyncio client, reconnected when a ping fails.
"""

import logging
import os
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from domain.model.errors import StorageError

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv('REDIS_URL', '')
REDIS_KEY_PREFIX = os.getenv('REDIS_KEY_PREFIX', 'authapp:')


class RedisKeyValueStore:
    def __init__(self, url: str = REDIS_URL, prefix: str = REDIS_KEY_PREFIX, client: Optional[redis.Redis] = None):
        self.url = url
        self.prefix = prefix
        self._client_cache: Optional[redis.Redis] = client
        self._connection_attempted: bool = client is not None

    async def _get_client(self) -> redis.Redis:
        """Get Redis client with caching and reconnection logic."""
        if self._client_cache:
            try:
                await self._client_cache.ping()
                return self._client_cache
            except (RedisError, OSError):
                self._client_cache = None
                logger.debug("[REDIS] Cached client failed ping, attempting reconnection...")

        if not self.url:
            logger.error("[REDIS] REDIS_URL not configured")
            raise StorageError("Redis storage is not configured")

        try:
            client = redis.from_url(
                self.url,
                decode_responses=True,
                socket_connect_timeout=5,
            )
            await client.ping()
        except (RedisError, ValueError, OSError) as e:
            logger.error("[REDIS] Connection failed", extra={"error": str(e)[:200]})
            raise StorageError("Redis storage is unavailable") from e

        if not self._connection_attempted:
            logger.info("[REDIS] Connected successfully")
        self._connection_attempted = True
        self._client_cache = client
        return client

    def _key(self, key: str) -> str:
        return f'{self.prefix}{key}'

    # ── KeyValueStore implementation ─────────────────────────

    async def get(self, key: str) -> str | None:
        client = await self._get_client()
        try:
            return await client.get(self._key(key))
        except RedisError as e:
            logger.error("[REDIS] Failed to read record", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to read {key}") from e

    async def set(self, key: str, value: str) -> None:
        client = await self._get_client()
        try:
            await client.set(self._key(key), value)
        except RedisError as e:
            logger.error("[REDIS] Failed to write record", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to write {key}") from e

    async def remove(self, key: str) -> None:
        client = await self._get_client()
        try:
            await client.delete(self._key(key))
        except RedisError as e:
            logger.error("[REDIS] Failed to delete record", extra={"key": key, "error": str(e)})
            raise StorageError(f"Failed to delete {key}") from e

    async def close(self) -> None:
        if self._client_cache:
            await self._client_cache.aclose()
            self._client_cache = None
