"""Models for push notifications sent through the Expo gateway."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from brick_deals.models.product import CamelModel


class NotificationData(CamelModel):
    type: Literal["deal", "price_drop", "back_in_stock"] = "deal"
    set_number: str
    retailer: str
    percent_off: int


class PushNotification(BaseModel):
    title: str
    body: str
    data: NotificationData

    def to_messages(self, tokens: list[str]) -> list[dict]:
        """Build one Expo message per token."""

        data = self.data.model_dump(by_alias=True)
        return [
            {
                "to": token,
                "sound": "default",
                "title": self.title,
                "body": self.body,
                "data": data,
                "badge": 1,
                "priority": "high",
            }
            for token in tokens
        ]


class DispatchReport(BaseModel):
    """Outcome of a best-effort fanout across gateway batches."""

    batches_attempted: int = Field(0, ge=0)
    batches_failed: int = Field(0, ge=0)
    messages_sent: int = Field(0, ge=0)
