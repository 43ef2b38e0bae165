"""Registry of push endpoints and their notification preferences."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

import redis.asyncio as redis

from brick_deals.config import settings
from brick_deals.errors import NotFoundError, ValidationError
from brick_deals.models.subscriber import (
    DEFAULT_MIN_DISCOUNT_THRESHOLD,
    MAX_WATCHED_SETS,
    MAX_WATCHED_THEMES,
    NotificationPreferences,
    Platform,
    Subscriber,
)
from brick_deals.validation import (
    clamp_threshold,
    filter_set_numbers,
    is_valid_push_token,
)

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid push token format"


def _ensure_token(token: str | None) -> str:
    if not is_valid_push_token(token):
        raise ValidationError(INVALID_TOKEN_MESSAGE)
    return token  # type: ignore[return-value]


def _platform_or_default(platform: str | None) -> Platform:
    try:
        return Platform(platform)
    except ValueError:
        return Platform.IOS


class SubscriberRegistry:
    """Owns subscriber records; fanout only reads them."""

    def __init__(self, client: redis.Redis, *, prefix: str | None = None) -> None:
        self._client = client
        self._key = f"{prefix if prefix is not None else settings.REDIS_KEY_PREFIX}push_tokens"

    async def register(
        self,
        token: str | None,
        platform: str | None,
        preferences: NotificationPreferences | None = None,
    ) -> Subscriber:
        """Validate and upsert a registration; re-registering overwrites it."""

        token = _ensure_token(token)
        prefs = preferences or NotificationPreferences()

        subscriber = Subscriber(
            token=token,
            platform=_platform_or_default(platform),
            notifications_enabled=(
                prefs.notifications_enabled
                if prefs.notifications_enabled is not None
                else True
            ),
            min_discount_threshold=(
                clamp_threshold(prefs.min_discount_threshold)
                if prefs.min_discount_threshold is not None
                else DEFAULT_MIN_DISCOUNT_THRESHOLD
            ),
            watched_themes=(prefs.watched_themes or [])[:MAX_WATCHED_THEMES],
            watched_sets=filter_set_numbers(prefs.watched_sets or [], MAX_WATCHED_SETS),
        )
        await self._save(subscriber)
        logger.info("Registered push token for %s", subscriber.platform)
        return subscriber

    async def update_preferences(
        self,
        token: str | None,
        preferences: NotificationPreferences | None,
    ) -> Subscriber:
        """Apply only the fields present in ``preferences``."""

        token = _ensure_token(token)
        existing = await self.get(token)
        if existing is None:
            raise NotFoundError("Token not found")

        updates: dict = {"last_updated": datetime.now(UTC)}
        prefs = preferences or NotificationPreferences()
        if prefs.notifications_enabled is not None:
            updates["notifications_enabled"] = prefs.notifications_enabled
        if prefs.min_discount_threshold is not None:
            updates["min_discount_threshold"] = clamp_threshold(prefs.min_discount_threshold)
        if prefs.watched_themes is not None:
            updates["watched_themes"] = prefs.watched_themes[:MAX_WATCHED_THEMES]
        if prefs.watched_sets is not None:
            updates["watched_sets"] = filter_set_numbers(prefs.watched_sets, MAX_WATCHED_SETS)

        updated = existing.model_copy(update=updates)
        await self._save(updated)
        logger.info("Updated notification preferences")
        return updated

    async def unregister(self, token: str | None) -> None:
        token = _ensure_token(token)
        await self._client.hdel(self._key, token)
        logger.info("Unregistered push token")

    async def get(self, token: str) -> Subscriber | None:
        raw = await self._client.hget(self._key, token)
        if not raw:
            return None
        return Subscriber.model_validate_json(raw)

    async def find_candidates(self, percent_off: int) -> list[Subscriber]:
        """Enabled subscribers whose threshold the discount clears."""

        raw_values = await self._client.hvals(self._key)
        subscribers = [Subscriber.model_validate_json(raw) for raw in raw_values]
        return [
            subscriber
            for subscriber in subscribers
            if subscriber.notifications_enabled
            and subscriber.min_discount_threshold <= percent_off
        ]

    async def count(self) -> int:
        return await self._client.hlen(self._key)

    async def _save(self, subscriber: Subscriber) -> None:
        await self._client.hset(self._key, subscriber.token, subscriber.model_dump_json())
