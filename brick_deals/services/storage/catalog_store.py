"""Redis-backed catalog of products keyed by set number."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

import redis.asyncio as redis

from brick_deals.config import settings
from brick_deals.models.product import Product
from brick_deals.services.storage.redis_client import commit_in_batches

logger = logging.getLogger(__name__)

MAX_ACTIVE_PRODUCTS = 500


class CatalogStore:
    """Durable keyed storage of catalog products."""

    def __init__(
        self,
        client: redis.Redis,
        *,
        prefix: str | None = None,
        batch_size: int | None = None,
    ) -> None:
        self._client = client
        self._key = f"{prefix if prefix is not None else settings.REDIS_KEY_PREFIX}catalog"
        self._batch_size = batch_size or settings.STORE_BATCH_SIZE

    async def save_catalog(self, products: Sequence[Product]) -> int:
        """Upsert products in fixed-size batches.

        Re-saving the same set numbers overwrites the existing records, so
        the operation is idempotent.
        """
        now = datetime.now(UTC)
        stamped = [product.model_copy(update={"last_updated": now}) for product in products]

        def _apply(pipe, product: Product) -> None:
            pipe.hset(self._key, product.set_number, product.model_dump_json())

        saved = await commit_in_batches(
            self._client,
            stamped,
            _apply,
            batch_size=self._batch_size,
            label="catalog",
        )
        logger.info("Saved %d sets to catalog", saved)
        return saved

    async def get(self, set_number: str) -> Product | None:
        raw = await self._client.hget(self._key, set_number)
        if not raw:
            return None
        return Product.model_validate_json(raw)

    async def list_active(self, limit: int = MAX_ACTIVE_PRODUCTS) -> list[Product]:
        """Return available or retiring products, ordered by set number."""

        raw_values = await self._client.hvals(self._key)
        products = [Product.model_validate_json(raw) for raw in raw_values]
        active = sorted(
            (product for product in products if product.is_active),
            key=lambda product: product.set_number,
        )
        return active[: min(limit, MAX_ACTIVE_PRODUCTS)]

    async def count(self) -> int:
        return await self._client.hlen(self._key)
