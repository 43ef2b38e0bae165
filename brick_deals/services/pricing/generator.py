"""Turns price quotes into persisted-shape price observations."""

from __future__ import annotations

from datetime import UTC, datetime

from brick_deals.models.price import PriceObservation, RetailerId
from brick_deals.models.product import Product
from brick_deals.services.pricing.price_source import PriceSource, SimulatedPriceSource
from brick_deals.services.pricing.retailers import retailer_url


class PriceGenerator:
    """Builds one observation per (product, retailer) from a price source."""

    def __init__(self, source: PriceSource | None = None) -> None:
        self.source = source or SimulatedPriceSource()

    def generate_price(self, product: Product, retailer: RetailerId) -> PriceObservation:
        quote = self.source.quote(product, retailer)
        return PriceObservation(
            set_number=product.set_number,
            set_name=product.name,
            retailer=retailer,
            current_price=quote.price,
            original_price=product.price,
            url=retailer_url(retailer, product.set_number),
            in_stock=quote.in_stock,
            last_updated=datetime.now(UTC),
            theme=product.theme,
            theme_id=product.theme_id,
            image_url=product.image_url,
            pieces=product.pieces,
        )
