"""Fetches set metadata page by page and normalizes it into products."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from brick_deals.config import settings
from brick_deals.errors import UpstreamFetchError
from brick_deals.models.product import Availability, Product
from brick_deals.rounding import round_half_up
from brick_deals.services.catalog.rebrickable_client import CatalogSource
from brick_deals.services.catalog.themes import theme_name
from brick_deals.validation import sanitize_set_number

logger = logging.getLogger(__name__)

MIN_PIECES = 20
MINIFIG_MAX_PIECES = 50
PRICE_PER_PIECE = 0.11
MIN_BASELINE_PRICE = 20


def estimate_baseline_price(pieces: int) -> int:
    """Linear estimate from piece count, floored to a minimum price."""

    estimate = round_half_up(pieces * PRICE_PER_PIECE)
    return estimate if estimate > 0 else MIN_BASELINE_PRICE


def is_buildable(record: dict[str, Any]) -> bool:
    """Reject records without an image, tiny sets and minifigure packs."""

    pieces = record.get("num_parts") or 0
    if not record.get("set_img_url") or pieces < MIN_PIECES:
        return False
    name = (record.get("name") or "").lower()
    return not (pieces < MINIFIG_MAX_PIECES and "minifig" in name)


def normalize_record(record: dict[str, Any]) -> Product:
    pieces = record.get("num_parts") or 0
    set_number = record["set_num"]
    return Product(
        set_number=set_number,
        name=record.get("name") or set_number,
        price=estimate_baseline_price(pieces),
        image_url=record["set_img_url"],
        url=f"https://www.lego.com/en-us/product/{sanitize_set_number(set_number)}",
        theme=theme_name(record.get("theme_id")),
        theme_id=record.get("theme_id"),
        pieces=pieces,
        year=record.get("year"),
        availability=Availability.AVAILABLE,
    )


class CatalogIngestor:
    """Accumulates normalized products in memory; persistence is separate."""

    def __init__(
        self,
        source: CatalogSource,
        *,
        max_pages: int | None = None,
        page_size: int | None = None,
        page_delay: float | None = None,
    ) -> None:
        self.source = source
        self.max_pages = max_pages or settings.CATALOG_MAX_PAGES
        self.page_size = page_size or settings.CATALOG_PAGE_SIZE
        self.page_delay = (
            settings.CATALOG_PAGE_DELAY_SECONDS if page_delay is None else page_delay
        )

    async def ingest_catalog(
        self,
        year_range: tuple[int, int] | None = None,
        max_pages: int | None = None,
    ) -> list[Product]:
        """Paginate the source until exhausted, empty or the page limit.

        A failed page ends pagination early and the products gathered so far
        are returned; the caller decides whether a short result is fatal.
        """
        if year_range is None:
            current_year = datetime.now(UTC).year
            year_range = (current_year - 3, current_year + 1)
        min_year, max_year = year_range
        page_limit = max_pages or self.max_pages

        logger.info("Fetching sets from catalog source...")
        products: list[Product] = []
        page = 1

        while page <= page_limit:
            try:
                logger.info("Fetching catalog page %d...", page)
                data = await self.source.fetch_sets_page(
                    page,
                    min_year=min_year,
                    max_year=max_year,
                    page_size=self.page_size,
                )
            except UpstreamFetchError as exc:
                logger.error("Catalog page %d failed: %s", page, exc)
                break

            results = data.get("results") or []
            if not results:
                logger.info("No more results from catalog source")
                break

            for record in results:
                if not is_buildable(record):
                    continue
                try:
                    products.append(normalize_record(record))
                except (KeyError, ValueError) as exc:
                    logger.warning("Skipping malformed catalog record: %s", exc)

            logger.info(
                "Page %d: fetched %d sets, total so far: %d",
                page,
                len(results),
                len(products),
            )

            if not data.get("next"):
                logger.info("Reached last page of catalog results")
                break

            page += 1
            if self.page_delay:
                await asyncio.sleep(self.page_delay)

        logger.info("Total sets fetched from catalog source: %d", len(products))
        return products

    async def log_themes(self) -> int:
        """Fetch the theme list for diagnostics; failures never abort ingestion."""

        try:
            themes = await self.source.fetch_themes()
        except UpstreamFetchError as exc:
            logger.warning("Could not fetch themes: %s", exc)
            return 0
        logger.info("Fetched %d themes from catalog source", len(themes))
        return len(themes)
