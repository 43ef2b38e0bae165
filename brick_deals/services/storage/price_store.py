"""Current price observations, one per (set, retailer)."""

from __future__ import annotations

import redis.asyncio as redis

from brick_deals.config import settings
from brick_deals.models.price import PriceObservation


class PriceStore:
    """Overwrites the observation for a key every cycle; no history is kept."""

    def __init__(self, client: redis.Redis, *, prefix: str | None = None) -> None:
        self._client = client
        self._key = f"{prefix if prefix is not None else settings.REDIS_KEY_PREFIX}prices"

    async def save(self, observation: PriceObservation) -> None:
        await self._client.hset(self._key, observation.key, observation.model_dump_json())

    async def list_for_set(self, set_number: str) -> list[PriceObservation]:
        observations = [
            PriceObservation.model_validate_json(raw)
            async for _field, raw in self._client.hscan_iter(
                self._key, match=f"{set_number}_*"
            )
        ]
        return sorted(observations, key=lambda item: item.last_updated, reverse=True)

    async def count(self) -> int:
        return await self._client.hlen(self._key)
