"""Tests for push-token registration and preference handling."""

import pytest

from brick_deals.errors import NotFoundError, ValidationError
from brick_deals.models.subscriber import NotificationPreferences, Platform
from brick_deals.services.storage.subscriber_registry import SubscriberRegistry
from brick_deals.validation import clamp_threshold, is_valid_push_token, is_valid_set_number

TOKEN = "ExponentPushToken[abc123]"


@pytest.mark.unit
class TestValidation:
    @pytest.mark.parametrize("token", [TOKEN, "ExponentPushToken[a_b-C9]"])
    def test_accepts_expo_tokens(self, token):
        assert is_valid_push_token(token)

    @pytest.mark.parametrize("token", ["bad-token", "", None, "ExponentPushToken[]", 42])
    def test_rejects_malformed_tokens(self, token):
        assert not is_valid_push_token(token)

    @pytest.mark.parametrize("value", ["75192", "75192-1", "1234", "123456-9"])
    def test_accepts_set_numbers(self, value):
        assert is_valid_set_number(value)

    @pytest.mark.parametrize("value", ["123", "1234567", "75192-12", "abc", ""])
    def test_rejects_set_numbers(self, value):
        assert not is_valid_set_number(value)


@pytest.mark.asyncio
class TestSubscriberRegistry:
    async def test_register_applies_defaults(self, redis_client):
        registry = SubscriberRegistry(redis_client)

        subscriber = await registry.register(TOKEN, None)

        assert subscriber.platform == Platform.IOS
        assert subscriber.notifications_enabled is True
        assert subscriber.min_discount_threshold == 20
        assert subscriber.watched_themes == []
        assert await registry.count() == 1

    async def test_register_rejects_bad_token(self, redis_client):
        registry = SubscriberRegistry(redis_client)

        with pytest.raises(ValidationError):
            await registry.register("bad-token", "ios")

        assert await registry.count() == 0

    async def test_register_clamps_and_truncates(self, redis_client):
        registry = SubscriberRegistry(redis_client)
        prefs = NotificationPreferences(
            min_discount_threshold=150,
            watched_themes=[f"Theme {i}" for i in range(60)],
            watched_sets=["75192-1", "not-a-set"] + [str(10000 + i) for i in range(120)],
        )

        subscriber = await registry.register(TOKEN, "android", prefs)

        assert subscriber.platform == Platform.ANDROID
        assert subscriber.min_discount_threshold == 100
        assert len(subscriber.watched_themes) == 50
        assert len(subscriber.watched_sets) == 100
        assert subscriber.watched_sets[0] == "75192-1"
        assert "not-a-set" not in subscriber.watched_sets

    async def test_negative_threshold_clamps_to_zero(self, redis_client):
        registry = SubscriberRegistry(redis_client)

        subscriber = await registry.register(
            TOKEN, "ios", NotificationPreferences(min_discount_threshold=-5)
        )

        assert subscriber.min_discount_threshold == 0

    async def test_re_register_overwrites(self, redis_client):
        registry = SubscriberRegistry(redis_client)
        await registry.register(TOKEN, "ios", NotificationPreferences(min_discount_threshold=50))

        await registry.register(TOKEN, "android")

        stored = await registry.get(TOKEN)
        assert stored.platform == Platform.ANDROID
        assert stored.min_discount_threshold == 20
        assert await registry.count() == 1

    async def test_update_only_touches_present_fields(self, redis_client):
        registry = SubscriberRegistry(redis_client)
        await registry.register(
            TOKEN,
            "ios",
            NotificationPreferences(min_discount_threshold=35, watched_themes=["City"]),
        )

        updated = await registry.update_preferences(
            TOKEN, NotificationPreferences(notifications_enabled=False)
        )

        assert updated.notifications_enabled is False
        assert updated.min_discount_threshold == 35
        assert updated.watched_themes == ["City"]

    async def test_update_unknown_token_is_not_found(self, redis_client):
        registry = SubscriberRegistry(redis_client)

        with pytest.raises(NotFoundError):
            await registry.update_preferences(TOKEN, NotificationPreferences())

    async def test_unregister_is_idempotent(self, redis_client):
        registry = SubscriberRegistry(redis_client)
        await registry.register(TOKEN, "ios")

        await registry.unregister(TOKEN)
        await registry.unregister(TOKEN)

        assert await registry.get(TOKEN) is None

    async def test_find_candidates_respects_threshold_and_opt_out(self, redis_client):
        registry = SubscriberRegistry(redis_client)
        await registry.register(
            "ExponentPushToken[low]", "ios", NotificationPreferences(min_discount_threshold=30)
        )
        await registry.register(
            "ExponentPushToken[high]", "ios", NotificationPreferences(min_discount_threshold=60)
        )
        await registry.register(
            "ExponentPushToken[off]",
            "ios",
            NotificationPreferences(notifications_enabled=False, min_discount_threshold=0),
        )

        candidates = await registry.find_candidates(45)

        assert [subscriber.token for subscriber in candidates] == ["ExponentPushToken[low]"]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [(20.5, 21), (20.49, 20), (0.5, 1), (-3, 0), (100.4, 100), (150, 100)],
)
def test_clamp_threshold_rounds_half_up(value, expected):
    assert clamp_threshold(value) == expected
