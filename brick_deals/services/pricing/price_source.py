"""Price source abstractions and the simulated placeholder implementation."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass

from brick_deals.models.price import CANONICAL_RETAILER
from brick_deals.models.product import Availability, Product
from brick_deals.rounding import round_cents

REGULAR_DISCOUNT_PROBABILITY = 0.7
REGULAR_DISCOUNT_RANGE = (10, 40)
DEEP_DISCOUNT_PROBABILITY = 0.1
DEEP_DISCOUNT_RANGE = (40, 60)
OUT_OF_STOCK_PROBABILITY = 0.15


@dataclass(frozen=True)
class Quote:
    price: float
    in_stock: bool


class PriceSource(ABC):
    """Abstract interface returning a retailer's current price for a product."""

    @abstractmethod
    def quote(self, product: Product, retailer: str) -> Quote:
        """Return the current price and stock status."""


class SimulatedPriceSource(PriceSource):
    """Synthesizes prices around the baseline until real retailer data exists.

    The canonical storefront always sells at baseline. Other retailers get a
    10-40% discount with probability 0.7; an independent 0.1 roll replaces it
    with a 40-60% discount.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def discount_for(self, retailer: str) -> int:
        if retailer == CANONICAL_RETAILER:
            return 0

        discount = 0
        if self._rng.random() < REGULAR_DISCOUNT_PROBABILITY:
            discount = self._rng.randint(*REGULAR_DISCOUNT_RANGE)
        if self._rng.random() < DEEP_DISCOUNT_PROBABILITY:
            discount = self._rng.randint(*DEEP_DISCOUNT_RANGE)
        return discount

    def quote(self, product: Product, retailer: str) -> Quote:
        discount = self.discount_for(retailer)
        price = round_cents(product.price * (1 - discount / 100))
        in_stock = (
            product.availability == Availability.AVAILABLE
            and self._rng.random() > OUT_OF_STOCK_PROBABILITY
        )
        return Quote(price=price, in_stock=in_stock)
