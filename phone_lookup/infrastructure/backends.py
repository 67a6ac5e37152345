"""Key/value backends the realtime cache tier can sit on."""

import asyncio
import logging
from typing import Dict, Optional, Protocol

from redis import asyncio as redis_asyncio

logger = logging.getLogger(__name__)

_DELETE_IF_UNCHANGED = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""


class KeyValueBackend(Protocol):
    """Minimal async key/value interface used by the cache tier."""

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value or ``None``."""

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, overwriting any previous value."""

    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    async def delete_if_unchanged(self, key: str, expected: str) -> bool:
        """Remove ``key`` only while it still holds ``expected``."""

    async def ping(self) -> bool:
        """Return ``True`` when the backend is reachable."""

    async def close(self) -> None:
        """Release connections."""


class MemoryBackend:
    """Process-local backend for single-instance deployments and tests."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def delete_if_unchanged(self, key: str, expected: str) -> bool:
        async with self._lock:
            if self._data.get(key) != expected:
                return False
            del self._data[key]
            return True

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class RedisBackend:
    """Backend stored in Redis through ``redis.asyncio``."""

    def __init__(self, redis_url: str, client: Optional["redis_asyncio.Redis"] = None) -> None:
        if client is None:
            client = redis_asyncio.from_url(redis_url, decode_responses=True)
        self.redis_url = redis_url
        self._redis = client
        logger.info("Realtime cache backed by Redis at %s", redis_url)

    async def get(self, key: str) -> Optional[str]:
        value = await self._redis.get(key)
        if isinstance(value, bytes):
            value = value.decode()
        return value

    async def set(self, key: str, value: str) -> None:
        await self._redis.set(key, value)

    async def delete(self, key: str) -> None:
        await self._redis.delete(key)

    async def delete_if_unchanged(self, key: str, expected: str) -> bool:
        # GET and DEL must run atomically on the server
        return bool(await self._redis.eval(_DELETE_IF_UNCHANGED, 1, key, expected))

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except Exception as exc:
            logger.warning("Redis ping failed: %s", exc)
            return False

    async def close(self) -> None:
        await self._redis.aclose()
