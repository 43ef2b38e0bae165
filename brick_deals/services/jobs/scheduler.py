"""Recurring catalog and price refresh jobs."""

from __future__ import annotations

import argparse
import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from brick_deals.config import settings
from brick_deals.models.pipeline import CatalogRefreshSummary, PriceRefreshSummary
from brick_deals.services.catalog.rebrickable_client import create_catalog_source
from brick_deals.services.clients import close_clients
from brick_deals.services.jobs.base import ScheduledJob
from brick_deals.services.notifications.push_gateway import create_push_gateway
from brick_deals.services.pipeline import DealPipeline, create_pipeline
from brick_deals.services.storage.redis_client import get_redis_client

logger = logging.getLogger(__name__)


class CatalogRefreshJob(ScheduledJob):
    name = "catalog-refresh"

    def __init__(self, pipeline: DealPipeline, timeout_seconds: float | None = None):
        super().__init__(timeout_seconds or settings.CATALOG_JOB_TIMEOUT_SECONDS)
        self.pipeline = pipeline

    async def run(self) -> CatalogRefreshSummary:
        return await self.pipeline.refresh_catalog()


class PriceRefreshJob(ScheduledJob):
    name = "price-refresh"

    def __init__(
        self,
        pipeline: DealPipeline,
        timeout_seconds: float | None = None,
        product_limit: int | None = None,
    ):
        super().__init__(timeout_seconds or settings.PRICE_JOB_TIMEOUT_SECONDS)
        self.pipeline = pipeline
        self.product_limit = product_limit or settings.PRICE_REFRESH_PRODUCT_LIMIT

    async def run(self) -> PriceRefreshSummary:
        return await self.pipeline.refresh_prices(self.product_limit, notify=True)


def build_scheduler(pipeline: DealPipeline) -> AsyncIOScheduler:
    """Register both jobs; overlapping runs of the same job are skipped."""

    scheduler = AsyncIOScheduler()
    jobs = (
        (
            CatalogRefreshJob(pipeline),
            IntervalTrigger(hours=settings.CATALOG_REFRESH_HOURS),
        ),
        (
            PriceRefreshJob(pipeline),
            IntervalTrigger(minutes=settings.PRICE_REFRESH_MINUTES),
        ),
    )
    for job, trigger in jobs:
        scheduler.add_job(
            job.run_with_timeout,
            trigger=trigger,
            id=job.name,
            name=job.name,
            max_instances=1,
            misfire_grace_time=300,
            replace_existing=True,
        )
    return scheduler


async def run_scheduler(run_now: str | None = None) -> None:
    """Start the scheduler and block until cancelled."""

    catalog_source = create_catalog_source()
    gateway = create_push_gateway()
    redis_client = get_redis_client()
    pipeline = create_pipeline(
        redis_client,
        catalog_source=catalog_source,
        gateway=gateway,
    )

    if run_now == "catalog":
        await CatalogRefreshJob(pipeline).run_with_timeout()
    elif run_now == "prices":
        await PriceRefreshJob(pipeline).run_with_timeout()

    scheduler = build_scheduler(pipeline)
    scheduler.start()
    logger.info(
        "Scheduler started: catalog every %sh, prices every %smin",
        settings.CATALOG_REFRESH_HOURS,
        settings.PRICE_REFRESH_MINUTES,
    )
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        await close_clients(catalog_source, gateway, redis_client)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run the deal refresh scheduler")
    parser.add_argument(
        "--run-now",
        choices=["catalog", "prices"],
        help="Run one pipeline immediately before the schedule starts",
    )
    args = parser.parse_args()

    try:
        asyncio.run(run_scheduler(args.run_now))
    except KeyboardInterrupt:
        logger.info("Scheduler interrupted, shutting down")


if __name__ == "__main__":
    main()
