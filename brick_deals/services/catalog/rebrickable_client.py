"""Catalog source abstractions and the Rebrickable implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from brick_deals.config import settings
from brick_deals.errors import UpstreamFetchError

logger = logging.getLogger(__name__)


class CatalogSource(ABC):
    """Abstract paginated source of set metadata."""

    @abstractmethod
    async def fetch_sets_page(
        self,
        page: int,
        *,
        min_year: int,
        max_year: int,
        page_size: int,
    ) -> dict[str, Any]:
        """Return one decoded page with ``results`` and ``next`` keys."""

    @abstractmethod
    async def fetch_themes(self) -> list[dict[str, Any]]:
        """Return the theme list known to the source."""

    async def aclose(self) -> None:
        return None


class RebrickableClient(CatalogSource):
    """Catalog source backed by the Rebrickable REST API."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            logger.warning("REBRICKABLE_API_KEY not configured - requests will be rejected")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"key {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def fetch_sets_page(
        self,
        page: int,
        *,
        min_year: int,
        max_year: int,
        page_size: int,
    ) -> dict[str, Any]:
        return await self._get(
            "/sets/",
            params={
                "min_year": min_year,
                "max_year": max_year,
                "page": page,
                "page_size": page_size,
                "ordering": "-year",
            },
        )

    async def fetch_themes(self) -> list[dict[str, Any]]:
        data = await self._get("/themes/", params={"page_size": 500})
        return data.get("results") or []

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamFetchError(f"Rebrickable request failed: {exc}") from exc

        if response.is_error:
            raise UpstreamFetchError(f"Rebrickable API error: {response.status_code}")

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFetchError("Rebrickable returned an undecodable body") from exc


def create_catalog_source() -> CatalogSource:
    """Factory function to create the configured catalog source."""
    return RebrickableClient(
        api_key=settings.REBRICKABLE_API_KEY,
        base_url=settings.REBRICKABLE_BASE_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


_catalog_source: CatalogSource | None = None


def get_catalog_source() -> CatalogSource:
    """FastAPI dependency returning the process-wide catalog source."""

    global _catalog_source
    if _catalog_source is None:
        _catalog_source = create_catalog_source()
    return _catalog_source
