"""Pytest configuration and fixtures for the deal service."""

import asyncio
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient

from brick_deals.config import settings
from brick_deals.models.notification import DispatchReport
from brick_deals.models.price import Deal, RetailerId
from brick_deals.models.product import Availability, Product
from brick_deals.models.subscriber import Subscriber
from brick_deals.services.catalog.rebrickable_client import (
    CatalogSource,
    get_catalog_source,
)
from brick_deals.services.notifications.push_gateway import (
    PushGateway,
    get_push_gateway,
)
from brick_deals.services.storage.redis_client import get_redis_client


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


class StubGateway(PushGateway):
    """Records every dispatch instead of calling Expo."""

    def __init__(self) -> None:
        self.sent: list[tuple[list[str], object]] = []

    async def send(self, tokens, notification):
        await asyncio.sleep(0)
        self.sent.append((list(tokens), notification))
        return DispatchReport(
            batches_attempted=1, messages_sent=len(tokens)
        )

    async def aclose(self) -> None:
        pass


class StubCatalogSource(CatalogSource):
    """Serves canned pages of Rebrickable-shaped records."""

    def __init__(self, pages: list[list[dict]] | None = None) -> None:
        self.pages = pages or []
        self.requested: list[int] = []

    async def fetch_sets_page(self, page, *, min_year, max_year, page_size):
        await asyncio.sleep(0)
        self.requested.append(page)
        results = self.pages[page - 1] if page <= len(self.pages) else []
        return {
            "results": results,
            "next": "more" if page < len(self.pages) else None,
        }

    async def fetch_themes(self):
        return [{"id": 158, "name": "Star Wars"}]


def rebrickable_record(set_num: str, *, num_parts: int = 500, theme_id: int = 158, name=None):
    return {
        "set_num": set_num,
        "name": name or f"Set {set_num}",
        "year": 2024,
        "theme_id": theme_id,
        "num_parts": num_parts,
        "set_img_url": f"https://cdn.rebrickable.com/media/sets/{set_num}.jpg",
    }


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    """Remove pacing delays and run in development mode unless a test opts in."""
    monkeypatch.setattr(settings, "PRICE_ITERATION_DELAY_SECONDS", 0.0)
    monkeypatch.setattr(settings, "CATALOG_PAGE_DELAY_SECONDS", 0.0)
    monkeypatch.setattr(settings, "APP_API_KEY", "")


@pytest.fixture()
def make_product():
    def _make(set_number: str = "75192-1", **overrides) -> Product:
        fields = {
            "set_number": set_number,
            "name": f"Set {set_number}",
            "price": 100.0,
            "image_url": f"https://img.example.com/{set_number}.jpg",
            "theme": "Star Wars",
            "theme_id": 158,
            "pieces": 900,
            "year": 2024,
            "availability": Availability.AVAILABLE,
        }
        fields.update(overrides)
        return Product(**fields)

    return _make


@pytest.fixture()
def make_deal():
    def _make(set_number: str = "75192-1", percent_off: int = 45, **overrides) -> Deal:
        original = overrides.pop("original_price", 100.0)
        current = round(original * (1 - percent_off / 100), 2)
        fields = {
            "set_number": set_number,
            "set_name": f"Set {set_number}",
            "retailer": RetailerId.AMAZON,
            "current_price": current,
            "original_price": original,
            "url": "https://www.amazon.com/s?k=LEGO+75192",
            "in_stock": True,
            "last_updated": datetime.now(UTC),
            "theme": "Star Wars",
            "percent_off": percent_off,
            "savings": round(original - current, 2),
        }
        fields.update(overrides)
        return Deal(**fields)

    return _make


@pytest.fixture()
def make_subscriber():
    def _make(suffix: str = "abc123", **overrides) -> Subscriber:
        fields = {"token": f"ExponentPushToken[{suffix}]"}
        fields.update(overrides)
        return Subscriber(**fields)

    return _make


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    from brick_deals.main import app

    client = fakeredis.FakeRedis(decode_responses=True)
    app.dependency_overrides[get_redis_client] = lambda: client
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()
        app.dependency_overrides.pop(get_redis_client, None)


@pytest.fixture()
def gateway_stub():
    from brick_deals.main import app

    stub = StubGateway()
    app.dependency_overrides[get_push_gateway] = lambda: stub
    yield stub
    app.dependency_overrides.pop(get_push_gateway, None)


@pytest.fixture()
def catalog_source_stub():
    from brick_deals.main import app

    stub = StubCatalogSource(
        pages=[[rebrickable_record("75192-1"), rebrickable_record("60380-1", theme_id=52)]]
    )
    app.dependency_overrides[get_catalog_source] = lambda: stub
    yield stub
    app.dependency_overrides.pop(get_catalog_source, None)


@pytest_asyncio.fixture()
async def client(redis_client, gateway_stub, catalog_source_stub):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from brick_deals.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client
