"""Push subscriber models and request schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from brick_deals.models.product import CamelModel

DEFAULT_MIN_DISCOUNT_THRESHOLD = 20
MAX_WATCHED_THEMES = 50
MAX_WATCHED_SETS = 100


class Platform(StrEnum):
    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class Subscriber(CamelModel):
    """A registered push endpoint and its notification preferences."""

    token: str
    platform: Platform = Platform.IOS
    notifications_enabled: bool = True
    min_discount_threshold: int = Field(DEFAULT_MIN_DISCOUNT_THRESHOLD, ge=0, le=100)
    watched_themes: list[str] = Field(default_factory=list, max_length=MAX_WATCHED_THEMES)
    watched_sets: list[str] = Field(default_factory=list, max_length=MAX_WATCHED_SETS)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))


class NotificationPreferences(CamelModel):
    """Partial preferences sent by the client; unset fields are left untouched."""

    notifications_enabled: bool | None = None
    min_discount_threshold: float | None = Field(
        None,
        description="Clamped to [0, 100] before it is stored",
    )
    watched_themes: list[str] | None = None
    watched_sets: list[str] | None = Field(
        None,
        description="Set numbers failing the syntax check are dropped",
    )

    @field_validator("notifications_enabled", mode="before")
    @classmethod
    def coerce_enabled(cls, value: Any) -> bool | None:
        return None if value is None else bool(value)

    @field_validator("min_discount_threshold", mode="before")
    @classmethod
    def numeric_threshold(cls, value: Any) -> float | None:
        # Strings and booleans are ignored rather than coerced.
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        return value

    @field_validator("watched_themes", "watched_sets", mode="before")
    @classmethod
    def string_list(cls, value: Any) -> list[str] | None:
        if not isinstance(value, list):
            return None
        return [item for item in value if isinstance(item, str)]


class RegisterTokenRequest(CamelModel):
    token: str | None = None
    platform: str | None = None
    preferences: NotificationPreferences | None = None

    @field_validator("preferences", mode="before")
    @classmethod
    def preferences_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict | NotificationPreferences) else None

    @field_validator("platform", mode="before")
    @classmethod
    def platform_text(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


class UpdatePreferencesRequest(CamelModel):
    token: str | None = None
    preferences: NotificationPreferences | None = None

    @field_validator("preferences", mode="before")
    @classmethod
    def preferences_object(cls, value: Any) -> Any:
        return value if isinstance(value, dict | NotificationPreferences) else None


class TokenRequest(CamelModel):
    token: str | None = None


class OperationResponse(CamelModel):
    success: bool = True
    message: str
