"""
Cache backends for the statistics reports
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple
import logging
import time

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class CacheBackend(ABC):
    """Abstract interface for string key/value stores with per-key expiry"""

    # Reported by /health
    kind: str

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored string, or None when missing or expired
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a value, overwriting any previous one.

        Args:
            key: Cache key
            value: Serialized value
            ttl_seconds: Seconds until the key expires
        """
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> None:
        """Remove keys; missing keys are ignored"""
        pass

    async def close(self) -> None:
        pass


class RedisCacheBackend(CacheBackend):
    kind = "redis"

    def __init__(self, url: str):
        self.url = url
        self.client = Redis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self.client.set(key, value, ex=ttl_seconds)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self.client.delete(*keys)

    async def close(self) -> None:
        await self.client.aclose()


class InMemoryCacheBackend(CacheBackend):
    """Process-local cache; expiry is checked lazily on read"""

    kind = "memory"

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, self.clock() + ttl_seconds)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)


def create_cache_backend(redis_url: Optional[str] = None) -> CacheBackend:
    """Redis when a URL is configured, otherwise the in-process cache"""
    if redis_url:
        logger.info(f"Statistics cache: Redis at {redis_url.split('@')[-1]}")
        return RedisCacheBackend(redis_url)
    logger.info("Statistics cache: in-process (REDIS_URL not set)")
    return InMemoryCacheBackend()
