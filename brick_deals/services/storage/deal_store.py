"""Redis-backed storage of current deals.

Deals live in a hash keyed by ``{set_number}_{retailer}``. Two sorted sets
index the same keys: one scored by the last refresh time (recency queries and
pruning) and one scored by percent off (threshold queries).
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import redis.asyncio as redis

from brick_deals.config import settings
from brick_deals.models.price import Deal, observation_key
from brick_deals.services.storage.redis_client import commit_in_batches

logger = logging.getLogger(__name__)

DEFAULT_QUERY_LIMIT = 100


class DealStore:
    """Durable keyed storage of deal records."""

    def __init__(
        self,
        client: redis.Redis,
        *,
        prefix: str | None = None,
        batch_size: int | None = None,
    ) -> None:
        base = prefix if prefix is not None else settings.REDIS_KEY_PREFIX
        self._client = client
        self._key = f"{base}deals"
        self._by_updated = f"{base}deals:by_updated"
        self._by_percent = f"{base}deals:by_percent"
        self._batch_size = batch_size or settings.STORE_BATCH_SIZE

    async def upsert(self, deal: Deal) -> None:
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(self._key, deal.key, deal.model_dump_json())
            pipe.zadd(self._by_updated, {deal.key: deal.last_updated.timestamp()})
            pipe.zadd(self._by_percent, {deal.key: deal.percent_off})
            await pipe.execute()

    async def remove(self, set_number: str, retailer: str) -> bool:
        key = observation_key(set_number, retailer)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hdel(self._key, key)
            pipe.zrem(self._by_updated, key)
            pipe.zrem(self._by_percent, key)
            removed, _, _ = await pipe.execute()
        return bool(removed)

    async def get(self, set_number: str, retailer: str) -> Deal | None:
        raw = await self._client.hget(self._key, observation_key(set_number, retailer))
        if not raw:
            return None
        return Deal.model_validate_json(raw)

    async def query(
        self,
        min_discount: int = 0,
        theme: str | None = None,
        limit: int = DEFAULT_QUERY_LIMIT,
    ) -> list[Deal]:
        """Deals at or above ``min_discount``, best discount first."""

        keys = await self._client.zrevrangebyscore(self._by_percent, "+inf", min_discount)
        deals = await self._load(keys)
        if theme:
            deals = [deal for deal in deals if deal.theme == theme]
        return deals[:limit]

    async def recent(self, limit: int = DEFAULT_QUERY_LIMIT) -> list[Deal]:
        """Most recently refreshed deals first."""

        keys = await self._client.zrevrange(self._by_updated, 0, max(limit, 1) - 1)
        return await self._load(keys)

    async def count(self) -> int:
        return await self._client.hlen(self._key)

    async def prune_stale_deals(
        self,
        retention: timedelta = timedelta(hours=24),
        now: datetime | None = None,
    ) -> int:
        """Delete deals not refreshed within ``retention``.

        Deletion runs in fixed-size batches; a failing batch raises and leaves
        earlier deletions committed.
        """
        cutoff = (now or datetime.now(UTC)) - retention
        stale = await self._client.zrangebyscore(
            self._by_updated, "-inf", f"({cutoff.timestamp()}"
        )
        if not stale:
            logger.info("No old deals to clean")
            return 0

        def _apply(pipe, key: str) -> None:
            pipe.hdel(self._key, key)
            pipe.zrem(self._by_updated, key)
            pipe.zrem(self._by_percent, key)

        removed = await commit_in_batches(
            self._client,
            stale,
            _apply,
            batch_size=self._batch_size,
            label="deal-prune",
        )
        logger.info("Cleaned %d old deals", removed)
        return removed

    async def _load(self, keys: list[str]) -> list[Deal]:
        if not keys:
            return []
        raw_values = await self._client.hmget(self._key, keys)
        return [Deal.model_validate_json(raw) for raw in raw_values if raw]
