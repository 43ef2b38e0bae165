"""Tests for discount math and the deal persistence gate."""

from datetime import UTC, datetime

import pytest

from brick_deals.models.price import PriceObservation, RetailerId
from brick_deals.rounding import round_cents, round_half_up
from brick_deals.services.deals.derivation import (
    DealDeriver,
    compute_percent_off,
    compute_savings,
    derive_deal,
)
from brick_deals.services.storage.deal_store import DealStore


def _observation(current: float, original: float = 100.0, *, in_stock: bool = True, **extra):
    fields = {
        "set_number": "75192-1",
        "set_name": "Millennium Falcon",
        "retailer": RetailerId.AMAZON,
        "current_price": current,
        "original_price": original,
        "in_stock": in_stock,
        "last_updated": datetime.now(UTC),
        "theme": "Star Wars",
    }
    fields.update(extra)
    return PriceObservation(**fields)


@pytest.mark.unit
class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(2.5) == 3
        assert round_half_up(12.49) == 12

    def test_cents_half_up(self):
        assert round_cents(10.005) == 10.01
        assert round_cents(84.999) == 85.0


@pytest.mark.unit
class TestDiscountMath:
    def test_percent_off_rounds_to_integer(self):
        assert compute_percent_off(100.0, 75.0) == 25
        assert compute_percent_off(80.0, 70.0) == 13  # 12.5 rounds up

    def test_savings_rounded_to_cents(self):
        assert compute_savings(100.0, 75.0) == 25.0
        assert compute_savings(19.99, 13.33) == 6.66

    @pytest.mark.parametrize(
        ("original", "current"),
        [(100.0, 100.0), (100.0, 120.0), (0.0, 10.0), (100.0, 0.0)],
    )
    def test_no_discount_yields_zero(self, original, current):
        assert compute_percent_off(original, current) == 0
        assert compute_savings(original, current) == 0.0


@pytest.mark.unit
class TestDeriveDeal:
    def test_qualifying_observation_becomes_deal(self):
        deal = derive_deal(_observation(75.0))

        assert deal is not None
        assert deal.percent_off == 25
        assert deal.savings == 25.0
        assert deal.set_name == "Millennium Falcon"
        assert deal.key == "75192-1_amazon"

    def test_out_of_stock_is_never_a_deal(self):
        assert derive_deal(_observation(50.0, in_stock=False)) is None

    def test_threshold_is_inclusive(self):
        assert derive_deal(_observation(90.0)) is not None
        assert derive_deal(_observation(91.0)) is None

    def test_custom_threshold(self):
        assert derive_deal(_observation(75.0), min_discount=30) is None


@pytest.mark.asyncio
class TestDealDeriver:
    async def test_persists_qualifying_deal(self, redis_client):
        store = DealStore(redis_client)
        deriver = DealDeriver(store)

        deal = await deriver.process(_observation(60.0))

        assert deal is not None
        stored = await store.get("75192-1", RetailerId.AMAZON)
        assert stored is not None
        assert stored.percent_off == 40

    async def test_non_qualifying_observation_removes_previous_deal(self, redis_client):
        store = DealStore(redis_client)
        deriver = DealDeriver(store)
        await deriver.process(_observation(60.0))

        result = await deriver.process(_observation(99.0))

        assert result is None
        assert await store.get("75192-1", RetailerId.AMAZON) is None
        assert await store.count() == 0

    async def test_sold_out_removes_previous_deal(self, redis_client):
        store = DealStore(redis_client)
        deriver = DealDeriver(store)
        await deriver.process(_observation(60.0))

        await deriver.process(_observation(60.0, in_stock=False))

        assert await store.count() == 0
