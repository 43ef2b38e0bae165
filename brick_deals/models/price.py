"""Price observation and deal models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import Field

from brick_deals.models.product import CamelModel


class RetailerId(StrEnum):
    LEGO = "lego"
    AMAZON = "amazon"
    WALMART = "walmart"
    TARGET = "target"
    BEST_BUY = "best_buy"
    KOHLS = "kohls"
    GAMESTOP = "gamestop"
    SHOP_DISNEY = "shop_disney"
    MACYS = "macys"
    BARNES_NOBLE = "barnes_noble"
    SAMS_CLUB = "sams_club"
    WALGREENS = "walgreens"


# The manufacturer storefront never discounts.
CANONICAL_RETAILER = RetailerId.LEGO

ALL_RETAILERS: tuple[RetailerId, ...] = tuple(RetailerId)


def observation_key(set_number: str, retailer: str) -> str:
    """Composite key shared by price observations and deals."""

    return f"{set_number}_{retailer}"


class PriceObservation(CamelModel):
    """One retailer's price and stock snapshot for one set."""

    set_number: str
    set_name: str
    retailer: RetailerId
    current_price: float = Field(..., gt=0)
    original_price: float = Field(..., gt=0)
    url: str = ""
    in_stock: bool
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
    theme: str | None = None
    theme_id: int | None = None
    image_url: str | None = None
    pieces: int | None = None

    @property
    def key(self) -> str:
        return observation_key(self.set_number, self.retailer)


class Deal(PriceObservation):
    """A price observation that cleared the minimum-discount and stock gate."""

    percent_off: int = Field(..., ge=0, le=100)
    savings: float = Field(..., ge=0)
