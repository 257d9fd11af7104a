"""Key-value store used for the quote ledger and the distance cache"""
import logging
from typing import Optional, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from freightquote.core.errors import PersistenceFailure

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...


class RedisStore:
    """Opaque string values in Redis, without expiry.

    Redis errors are re-raised as ``PersistenceFailure``.
    """

    def __init__(self, redis: Redis):
        self.redis = redis

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self.redis.get(key)
        except RedisError as e:
            logger.error(f"Store read failed for {key}: {e}")
            raise PersistenceFailure("Quote storage is unavailable.") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self.redis.set(key, value)
        except RedisError as e:
            logger.error(f"Store write failed for {key}: {e}")
            raise PersistenceFailure("Quote storage is unavailable.") from e
