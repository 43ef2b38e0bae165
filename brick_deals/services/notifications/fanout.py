"""Hot-deal notification fanout to matching subscribers."""

from __future__ import annotations

import logging

from brick_deals.config import settings
from brick_deals.models.notification import NotificationData, PushNotification
from brick_deals.models.price import Deal
from brick_deals.models.subscriber import Subscriber
from brick_deals.services.notifications.push_gateway import PushGateway
from brick_deals.services.storage.subscriber_registry import SubscriberRegistry

logger = logging.getLogger(__name__)


def subscriber_matches(subscriber: Subscriber, deal: Deal) -> bool:
    """Theme match OR set match, where an empty watch list matches everything.

    A subscriber watching only specific sets (no themes) therefore matches
    every deal, since the empty theme list counts as a theme match.
    """
    if deal.theme and subscriber.watched_themes:
        watching_theme = deal.theme in subscriber.watched_themes
    else:
        watching_theme = True

    if subscriber.watched_sets:
        watching_set = deal.set_number in subscriber.watched_sets
    else:
        watching_set = True

    return watching_theme or watching_set


def _amount(value: float) -> str:
    """Format a price without trailing zeros: 30.0 -> "30", 29.90 -> "29.9"."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def build_hot_deal_notification(deal: Deal) -> PushNotification:
    return PushNotification(
        title=f"{deal.percent_off}% OFF - Hot Deal!",
        body=(
            f"{deal.set_name} at {deal.retailer.upper()} - "
            f"Now ${_amount(deal.current_price)} (Save ${_amount(deal.savings)})"
        ),
        data=NotificationData(
            type="deal",
            set_number=deal.set_number,
            retailer=deal.retailer,
            percent_off=deal.percent_off,
        ),
    )


class NotificationFanout:
    """Finds eligible subscribers for a deal and dispatches the push."""

    def __init__(
        self,
        registry: SubscriberRegistry,
        gateway: PushGateway,
        *,
        threshold: int | None = None,
    ) -> None:
        self.registry = registry
        self.gateway = gateway
        self.threshold = settings.HOT_DEAL_THRESHOLD if threshold is None else threshold

    async def eligible_tokens(self, deal: Deal) -> list[str]:
        candidates = await self.registry.find_candidates(deal.percent_off)
        return [
            subscriber.token
            for subscriber in candidates
            if subscriber_matches(subscriber, deal)
        ]

    async def notify_hot_deal(self, deal: Deal) -> int:
        """Notify eligible subscribers; returns the number of tokens targeted."""

        if deal.percent_off < self.threshold:
            return 0

        tokens = await self.eligible_tokens(deal)
        if not tokens:
            logger.info("No eligible tokens for deal: %s", deal.set_number)
            return 0

        report = await self.gateway.send(tokens, build_hot_deal_notification(deal))
        logger.info(
            "Sent hot deal notification for %s to %d devices",
            deal.set_number,
            len(tokens),
            extra={
                "batches_attempted": report.batches_attempted,
                "batches_failed": report.batches_failed,
            },
        )
        return len(tokens)
