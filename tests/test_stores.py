"""Tests for the Redis-backed catalog, price and deal stores."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from brick_deals.errors import PersistenceError
from brick_deals.models.price import RetailerId
from brick_deals.models.product import Availability
from brick_deals.services.pricing.generator import PriceGenerator
from brick_deals.services.storage.catalog_store import CatalogStore
from brick_deals.services.storage.deal_store import DealStore
from brick_deals.services.storage.price_store import PriceStore
from brick_deals.services.storage.redis_client import batched, commit_in_batches


@pytest.mark.unit
def test_batched_splits_into_fixed_chunks():
    chunks = list(batched(list(range(1000)), 450))

    assert [len(chunk) for chunk in chunks] == [450, 450, 100]


@pytest.mark.asyncio
class TestCatalogStore:
    async def test_save_is_idempotent(self, redis_client, make_product):
        store = CatalogStore(redis_client)
        products = [make_product(f"{60000 + i}-1") for i in range(5)]

        assert await store.save_catalog(products) == 5
        assert await store.save_catalog(products) == 5

        assert await store.count() == 5

    async def test_save_runs_in_batches(self, redis_client, make_product):
        store = CatalogStore(redis_client, batch_size=2)
        products = [make_product(f"{60000 + i}-1") for i in range(5)]

        with patch(
            "brick_deals.services.storage.catalog_store.commit_in_batches",
            wraps=commit_in_batches,
        ) as commit:
            saved = await store.save_catalog(products)

        assert saved == 5
        assert commit.call_args.kwargs["batch_size"] == 2
        assert await store.count() == 5

    async def test_save_stamps_last_updated(self, redis_client, make_product):
        store = CatalogStore(redis_client)
        stale = make_product(last_updated=datetime(2020, 1, 1, tzinfo=UTC))

        await store.save_catalog([stale])

        stored = await store.get(stale.set_number)
        assert stored is not None
        assert stored.last_updated > datetime(2024, 1, 1, tzinfo=UTC)

    async def test_list_active_filters_and_orders(self, redis_client, make_product):
        store = CatalogStore(redis_client)
        await store.save_catalog(
            [
                make_product("60380-1"),
                make_product("10294-1", availability=Availability.RETIRING_SOON),
                make_product("75192-1", availability=Availability.SOLD_OUT),
                make_product("21345-1", availability=Availability.COMING_SOON),
            ]
        )

        active = await store.list_active()

        assert [product.set_number for product in active] == ["10294-1", "60380-1"]

    async def test_failed_batch_raises_persistence_error(self, redis_client, make_product):
        store = CatalogStore(redis_client)

        with patch.object(
            redis_client, "pipeline", side_effect=RedisConnectionError("down")
        ):
            with pytest.raises(PersistenceError):
                await store.save_catalog([make_product()])


@pytest.mark.asyncio
class TestPriceStore:
    async def test_observations_are_overwritten_per_key(self, redis_client, make_product):
        store = PriceStore(redis_client)
        generator = PriceGenerator()
        product = make_product("75192-1")

        await store.save(generator.generate_price(product, RetailerId.AMAZON))
        await store.save(generator.generate_price(product, RetailerId.AMAZON))
        await store.save(generator.generate_price(product, RetailerId.LEGO))
        await store.save(generator.generate_price(make_product("60380-1"), RetailerId.LEGO))

        observations = await store.list_for_set("75192-1")

        assert await store.count() == 3
        assert {obs.retailer for obs in observations} == {RetailerId.AMAZON, RetailerId.LEGO}
        assert observations[0].last_updated >= observations[1].last_updated


@pytest.mark.asyncio
class TestDealStore:
    async def test_query_orders_by_discount_and_filters(self, redis_client, make_deal):
        store = DealStore(redis_client)
        await store.upsert(make_deal("75192-1", 45))
        await store.upsert(make_deal("60380-1", 15, theme="City"))
        await store.upsert(make_deal("10294-1", 30, retailer=RetailerId.WALMART))

        everything = await store.query()
        above_20 = await store.query(min_discount=20)
        city = await store.query(theme="City")

        assert [deal.percent_off for deal in everything] == [45, 30, 15]
        assert [deal.set_number for deal in above_20] == ["75192-1", "10294-1"]
        assert [deal.set_number for deal in city] == ["60380-1"]

    async def test_upsert_replaces_existing_key(self, redis_client, make_deal):
        store = DealStore(redis_client)
        await store.upsert(make_deal("75192-1", 45))
        await store.upsert(make_deal("75192-1", 20))

        assert await store.count() == 1
        assert (await store.get("75192-1", RetailerId.AMAZON)).percent_off == 20
        assert [deal.percent_off for deal in await store.query(min_discount=40)] == []

    async def test_recent_orders_by_refresh_time(self, redis_client, make_deal):
        store = DealStore(redis_client)
        now = datetime.now(UTC)
        await store.upsert(make_deal("75192-1", last_updated=now - timedelta(hours=2)))
        await store.upsert(make_deal("60380-1", last_updated=now))

        recent = await store.recent(limit=1)

        assert [deal.set_number for deal in recent] == ["60380-1"]

    async def test_remove_reports_whether_a_deal_existed(self, redis_client, make_deal):
        store = DealStore(redis_client)
        await store.upsert(make_deal())

        assert await store.remove("75192-1", RetailerId.AMAZON) is True
        assert await store.remove("75192-1", RetailerId.AMAZON) is False

    async def test_prune_removes_only_stale_deals(self, redis_client, make_deal):
        store = DealStore(redis_client, batch_size=1)
        now = datetime.now(UTC)
        await store.upsert(make_deal("75192-1", last_updated=now - timedelta(hours=25)))
        await store.upsert(make_deal("60380-1", last_updated=now - timedelta(hours=1)))

        removed = await store.prune_stale_deals(timedelta(hours=24), now=now)

        assert removed == 1
        assert await store.get("75192-1", RetailerId.AMAZON) is None
        assert await store.get("60380-1", RetailerId.AMAZON) is not None
        assert [deal.set_number for deal in await store.query()] == ["60380-1"]

    async def test_prune_with_nothing_stale_is_a_noop(self, redis_client, make_deal):
        store = DealStore(redis_client)
        await store.upsert(make_deal())

        assert await store.prune_stale_deals() == 0
        assert await store.count() == 1
