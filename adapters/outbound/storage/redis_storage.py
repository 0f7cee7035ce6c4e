# Storage Redis con serialización JSON (un hash por conversación)

import json
import logging
from typing import Any, Optional

import redis.asyncio as redis

from config.settings import settings
from core.domain.errors import StorageError
from core.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)


class RedisStorage(StoragePort):
    """
    Storage de una conversación: hash `<prefix>:<conversationId>` con un
    campo por clave, así ids distintos nunca comparten claves.
    """

    def __init__(self, client: "redis.Redis", hash_key: str):
        self.client = client
        self.hash_key = hash_key

    async def get(self, key: str) -> Optional[Any]:
        try:
            data = await self.client.hget(self.hash_key, key)
        except Exception as e:
            logger.error(f"Redis get error ({self.hash_key}/{key}): {e}")
            raise StorageError(f"Storage read failed: {e}", key=key) from e
        if data is None:
            return None
        try:
            return json.loads(data)
        except ValueError as e:
            raise StorageError(f"Malformed stored value for '{key}': {e}", key=key) from e

    async def put(self, key: str, value: Any) -> None:
        try:
            await self.client.hset(self.hash_key, key, json.dumps(value))
        except Exception as e:
            logger.error(f"Redis set error ({self.hash_key}/{key}): {e}")
            raise StorageError(f"Storage write failed: {e}", key=key) from e


class RedisStorageBackend:
    """Cliente compartido; entrega un RedisStorage por conversación"""

    def __init__(self, url: str = None, prefix: str = None, client=None):
        self.url = url or settings.storage.redis_url
        self.prefix = prefix or settings.storage.key_prefix
        self.client = client or redis.from_url(self.url, decode_responses=True)
        logger.info(f"Storage Redis: {self.url} (prefijo '{self.prefix}')")

    def for_conversation(self, conversation_id: str) -> RedisStorage:
        return RedisStorage(self.client, f"{self.prefix}:{conversation_id}")

    async def is_connected(self) -> bool:
        try:
            return bool(await self.client.ping())
        except Exception:
            return False

    async def close(self):
        await self.client.aclose()
