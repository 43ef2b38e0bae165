"""Read-only deal queries used by the mobile client."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from brick_deals.api.dependencies import DealStoreDependency, PriceStoreDependency
from brick_deals.errors import ValidationError
from brick_deals.models.price import Deal, PriceObservation
from brick_deals.validation import is_valid_set_number

router = APIRouter(tags=["deals"])


@router.get("/deals", response_model=list[Deal])
async def list_deals(
    store: DealStoreDependency,
    min_discount: Annotated[int, Query(alias="minDiscount", ge=0, le=100)] = 0,
    theme: Annotated[str | None, Query(max_length=100)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> list[Deal]:
    """Deals at or above ``minDiscount``, best discount first."""

    return await store.query(min_discount=min_discount, theme=theme, limit=limit)


@router.get("/deals/recent", response_model=list[Deal])
async def recent_deals(
    store: DealStoreDependency,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> list[Deal]:
    return await store.recent(limit)


@router.get("/sets/{set_number}/prices", response_model=list[PriceObservation])
async def set_prices(set_number: str, store: PriceStoreDependency) -> list[PriceObservation]:
    if not is_valid_set_number(set_number):
        raise ValidationError("Invalid set number")
    return await store.list_for_set(set_number)
