"""
Topic-scoped cache for the statistics reports.

Every topic lives under stats:<topic> with its own TTL. Invalidating any
topic also drops the overview, since the overview embeds every other report.
"""
from enum import Enum
from typing import Any, Awaitable, Callable, Optional
import json
import logging

from storefront.statistics.backends import CacheBackend

logger = logging.getLogger(__name__)


class StatsTopic(str, Enum):
    USERS = "users"
    PRODUCTS = "products"
    PURCHASES = "purchases"
    REVIEWS = "reviews"
    WISHLIST = "wishlist"
    CATEGORIES = "categories"
    OVERVIEW = "overview"

    @property
    def key(self) -> str:
        return f"stats:{self.value}"


# Seconds
TOPIC_TTLS = {
    StatsTopic.USERS: 300,
    StatsTopic.PRODUCTS: 300,
    StatsTopic.PURCHASES: 180,
    StatsTopic.REVIEWS: 300,
    StatsTopic.WISHLIST: 300,
    StatsTopic.CATEGORIES: 600,
    StatsTopic.OVERVIEW: 240,
}


class StatisticsCache:
    def __init__(self, backend: CacheBackend):
        self.backend = backend

    async def get_or_set(self, key: str, factory: Callable[[], Awaitable[Any]], ttl_seconds: int) -> Any:
        cached = await self.backend.get(key)
        if cached is not None:
            return json.loads(cached)

        value = await factory()
        await self.backend.set(key, json.dumps(value), ttl_seconds)
        return value

    async def get(self, topic: StatsTopic) -> Optional[dict]:
        cached = await self.backend.get(topic.key)
        if cached is None:
            return None
        return json.loads(cached)

    async def set(self, topic: StatsTopic, report: dict) -> None:
        await self.backend.set(topic.key, json.dumps(report), TOPIC_TTLS[topic])

    async def invalidate(self, topic: StatsTopic) -> None:
        await self.backend.delete(topic.key, StatsTopic.OVERVIEW.key)
        logger.info(f"Invalidated statistics cache for {topic.value}")

    async def invalidate_all(self) -> None:
        await self.backend.delete(*(topic.key for topic in StatsTopic))
        logger.info("Invalidated all statistics caches")
