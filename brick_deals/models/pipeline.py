"""Run summaries returned by the pipelines and manual triggers."""

from __future__ import annotations

from pydantic import Field

from brick_deals.models.product import CamelModel


class ThemeCount(CamelModel):
    name: str
    count: int


class CatalogRefreshSummary(CamelModel):
    total_sets: int = 0
    top_themes: list[ThemeCount] = Field(default_factory=list)


class PriceRefreshSummary(CamelModel):
    catalog_size: int = 0
    products_processed: int = 0
    observations_saved: int = 0
    deals_found: int = 0
    notifications_sent: int = 0
    deals_pruned: int = 0
