"""Catalog and price-and-deal refresh pipelines."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence
from datetime import timedelta

import redis.asyncio as redis

from brick_deals.config import settings
from brick_deals.models.pipeline import (
    CatalogRefreshSummary,
    PriceRefreshSummary,
    ThemeCount,
)
from brick_deals.models.price import ALL_RETAILERS, RetailerId
from brick_deals.models.product import Product
from brick_deals.services.catalog.ingestor import CatalogIngestor
from brick_deals.services.catalog.rebrickable_client import CatalogSource
from brick_deals.services.deals.derivation import DealDeriver
from brick_deals.services.notifications.fanout import NotificationFanout
from brick_deals.services.notifications.push_gateway import PushGateway
from brick_deals.services.pricing.generator import PriceGenerator
from brick_deals.services.storage.catalog_store import CatalogStore
from brick_deals.services.storage.deal_store import DealStore
from brick_deals.services.storage.price_store import PriceStore
from brick_deals.services.storage.subscriber_registry import SubscriberRegistry

logger = logging.getLogger(__name__)

TOP_THEMES_LIMIT = 15


class DealPipeline:
    """Runs ingest -> price generation -> deal derivation -> fanout -> prune.

    Execution is sequential. Every write is a keyed upsert, so a run that is
    cut off by its timeout can simply be rerun.
    """

    def __init__(
        self,
        *,
        catalog_store: CatalogStore,
        price_store: PriceStore,
        deal_store: DealStore,
        ingestor: CatalogIngestor,
        generator: PriceGenerator,
        fanout: NotificationFanout,
        retailers: Sequence[RetailerId] = ALL_RETAILERS,
        iteration_delay: float | None = None,
        retention: timedelta | None = None,
    ) -> None:
        self.catalog_store = catalog_store
        self.price_store = price_store
        self.deal_store = deal_store
        self.ingestor = ingestor
        self.generator = generator
        self.deriver = DealDeriver(deal_store)
        self.fanout = fanout
        self.retailers = tuple(retailers)
        self.iteration_delay = (
            settings.PRICE_ITERATION_DELAY_SECONDS
            if iteration_delay is None
            else iteration_delay
        )
        self.retention = retention or timedelta(hours=settings.DEAL_RETENTION_HOURS)

    async def refresh_catalog(self) -> CatalogRefreshSummary:
        """Fetch the catalog and save it; persistence failures propagate."""

        logger.info("Starting catalog update...")
        await self.ingestor.log_themes()
        products = await self.ingestor.ingest_catalog()
        if products:
            await self.catalog_store.save_catalog(products)
        logger.info("Catalog update complete. %d sets saved.", len(products))
        return CatalogRefreshSummary(
            total_sets=len(products),
            top_themes=_top_themes(products),
        )

    async def refresh_prices(
        self,
        product_limit: int | None = None,
        *,
        notify: bool = True,
    ) -> PriceRefreshSummary:
        """Price a bounded slice of the catalog against every retailer."""

        limit = product_limit or settings.PRICE_REFRESH_PRODUCT_LIMIT
        logger.info("Starting price update...")

        products = await self.catalog_store.list_active()
        logger.info("Found %d sets in catalog", len(products))
        if not products:
            logger.info("Catalog empty, fetching from catalog source...")
            products = await self.ingestor.ingest_catalog()
            if products:
                await self.catalog_store.save_catalog(products)

        summary = PriceRefreshSummary(catalog_size=len(products))
        batch = products[:limit]
        summary.products_processed = len(batch)

        for product in batch:
            for retailer in self.retailers:
                observation = self.generator.generate_price(product, retailer)
                await self.price_store.save(observation)
                summary.observations_saved += 1

                deal = await self.deriver.process(observation)
                if deal is not None:
                    summary.deals_found += 1
                    if notify:
                        summary.notifications_sent += await self.fanout.notify_hot_deal(deal)

                if self.iteration_delay:
                    await asyncio.sleep(self.iteration_delay)

        summary.deals_pruned = await self.deal_store.prune_stale_deals(self.retention)
        logger.info("Price update complete. Found %d deals.", summary.deals_found)
        return summary


def _top_themes(products: Sequence[Product]) -> list[ThemeCount]:
    counts = Counter(product.theme or "Other" for product in products)
    return [
        ThemeCount(name=name, count=count)
        for name, count in counts.most_common(TOP_THEMES_LIMIT)
    ]


def create_pipeline(
    client: redis.Redis,
    *,
    catalog_source: CatalogSource,
    gateway: PushGateway,
) -> DealPipeline:
    """Factory function wiring the stores and services around one Redis client."""
    return DealPipeline(
        catalog_store=CatalogStore(client),
        price_store=PriceStore(client),
        deal_store=DealStore(client),
        ingestor=CatalogIngestor(catalog_source),
        generator=PriceGenerator(),
        fanout=NotificationFanout(SubscriberRegistry(client), gateway),
    )
