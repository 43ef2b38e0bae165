"""Deal derivation: discount math and the persistence gate."""

from __future__ import annotations

import logging

from brick_deals.config import settings
from brick_deals.models.price import Deal, PriceObservation
from brick_deals.rounding import round_cents, round_half_up
from brick_deals.services.storage.deal_store import DealStore

logger = logging.getLogger(__name__)


def compute_percent_off(original_price: float, current_price: float) -> int:
    """Percentage discount rounded to an integer, 0 when there is none."""

    if original_price <= 0 or current_price <= 0 or current_price >= original_price:
        return 0
    return round_half_up(100 * (original_price - current_price) / original_price)


def compute_savings(original_price: float, current_price: float) -> float:
    if original_price <= 0 or current_price <= 0 or current_price >= original_price:
        return 0.0
    return round_cents(original_price - current_price)


def derive_deal(
    observation: PriceObservation,
    min_discount: int | None = None,
) -> Deal | None:
    """Return a Deal when the observation is in stock and discounted enough."""

    threshold = settings.MIN_DEAL_DISCOUNT if min_discount is None else min_discount
    if not observation.in_stock:
        return None

    percent_off = compute_percent_off(observation.original_price, observation.current_price)
    if percent_off < threshold:
        return None

    return Deal(
        **observation.model_dump(),
        percent_off=percent_off,
        savings=compute_savings(observation.original_price, observation.current_price),
    )


class DealDeriver:
    """Derives deals and keeps the deal store in line with the latest cycle."""

    def __init__(self, store: DealStore, *, min_discount: int | None = None) -> None:
        self.store = store
        self.min_discount = (
            settings.MIN_DEAL_DISCOUNT if min_discount is None else min_discount
        )

    async def process(self, observation: PriceObservation) -> Deal | None:
        """Upsert the deal, or drop a previous one that no longer qualifies."""

        deal = derive_deal(observation, self.min_discount)
        if deal is None:
            await self.store.remove(observation.set_number, observation.retailer)
            return None

        await self.store.upsert(deal)
        return deal
