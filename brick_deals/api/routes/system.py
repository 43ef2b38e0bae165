"""System-level routes such as health checks."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, status

from brick_deals.api.dependencies import CatalogStoreDependency, DealStoreDependency
from brick_deals.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/healthCheck")
async def health_check(
    catalog_store: CatalogStoreDependency,
    deal_store: DealStoreDependency,
) -> dict:
    """Report catalog and deal counts along with the service version."""

    try:
        catalog_size = await catalog_store.count()
        deals_count = await deal_store.count()
    except Exception:
        logger.exception("Health check failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Health check failed",
        )

    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "catalog": {"size": catalog_size, "source": "Rebrickable API"},
        "deals": {"count": deals_count},
    }
