"""Operational triggers that run the pipelines synchronously."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from brick_deals.api.dependencies import PipelineDependency
from brick_deals.api.security import ApiKeyRequired
from brick_deals.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"], dependencies=[ApiKeyRequired])


@router.post("/manualCatalogUpdate", summary="Fetch and save the catalog now")
async def manual_catalog_update(pipeline: PipelineDependency) -> dict:
    logger.info("Manual catalog update triggered")
    try:
        summary = await pipeline.refresh_catalog()
    except Exception:
        logger.exception("Manual catalog update failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Catalog update failed",
        )

    if summary.total_sets == 0:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch sets",
        )

    return {
        "success": True,
        "message": f"Catalog updated with {summary.total_sets} sets",
        **summary.model_dump(by_alias=True),
    }


@router.post("/manualPriceUpdate", summary="Run one price-and-deal cycle now")
async def manual_price_update(pipeline: PipelineDependency) -> dict:
    logger.info("Manual price update triggered")
    limit = settings.MANUAL_PRICE_PRODUCT_LIMIT
    try:
        summary = await pipeline.refresh_prices(limit, notify=False)
    except Exception:
        logger.exception("Manual update failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Price update failed",
        )

    return {
        "success": True,
        "message": (
            f"Updated prices for {summary.products_processed} sets. "
            f"Found {summary.deals_found} deals."
        ),
        **summary.model_dump(by_alias=True),
    }
