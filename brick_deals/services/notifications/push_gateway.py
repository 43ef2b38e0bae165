"""Push gateway abstractions and the Expo implementation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

import httpx

from brick_deals.config import settings
from brick_deals.models.notification import DispatchReport, PushNotification
from brick_deals.services.storage.redis_client import batched

logger = logging.getLogger(__name__)


class PushGateway(ABC):
    """Abstract push delivery interface."""

    @abstractmethod
    async def send(
        self, tokens: Sequence[str], notification: PushNotification
    ) -> DispatchReport:
        """Deliver the notification to every token, best effort."""


class ExpoPushGateway(PushGateway):
    """Sends messages to the Expo push API in gateway-sized batches."""

    def __init__(
        self,
        *,
        endpoint: str,
        batch_size: int = 100,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._batch_size = batch_size
        self._client = httpx.AsyncClient(
            headers={
                "Accept": "application/json",
                "Accept-Encoding": "gzip, deflate",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def send(
        self, tokens: Sequence[str], notification: PushNotification
    ) -> DispatchReport:
        """Post batches sequentially; a failed batch is logged and skipped."""

        report = DispatchReport()
        if not tokens:
            logger.info("No push tokens to send to")
            return report

        messages = notification.to_messages(list(tokens))
        for batch in batched(messages, self._batch_size):
            report.batches_attempted += 1
            try:
                response = await self._client.post(self._endpoint, json=list(batch))
            except httpx.HTTPError as exc:
                report.batches_failed += 1
                logger.error("Failed to send push notifications: %s", exc)
                continue

            if response.is_error:
                report.batches_failed += 1
                logger.error("Expo push error: %s", response.status_code)
                continue

            report.messages_sent += len(batch)
            logger.info(
                "Sent %d notifications",
                len(batch),
                extra={"gateway_response": response.text[:500]},
            )

        return report

    async def aclose(self) -> None:
        await self._client.aclose()


def create_push_gateway() -> ExpoPushGateway:
    """Factory function to create the Expo push gateway."""
    return ExpoPushGateway(
        endpoint=settings.EXPO_PUSH_URL,
        batch_size=settings.PUSH_BATCH_SIZE,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )


_push_gateway: PushGateway | None = None


def get_push_gateway() -> PushGateway:
    """FastAPI dependency returning the process-wide push gateway."""

    global _push_gateway
    if _push_gateway is None:
        _push_gateway = create_push_gateway()
    return _push_gateway
