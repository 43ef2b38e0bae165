"""Per-client request limiting backed by Redis counters."""

from __future__ import annotations

import logging

import redis.asyncio as redis

from brick_deals.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window counter keyed by endpoint scope and client identity.

    Counters live in Redis with a TTL equal to the window, so every API
    instance sharing the Redis database enforces the same budget.
    """

    def __init__(
        self,
        client: redis.Redis,
        *,
        max_requests: int | None = None,
        window_seconds: int | None = None,
        prefix: str | None = None,
    ) -> None:
        self._client = client
        self.max_requests = max_requests or settings.RATE_LIMIT_MAX_REQUESTS
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS
        self._prefix = f"{prefix if prefix is not None else settings.REDIS_KEY_PREFIX}ratelimit:"

    async def hit(self, scope: str, client_id: str) -> bool:
        """Count one request; return False once the window budget is spent."""

        key = f"{self._prefix}{scope}:{client_id}"
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.ttl(key)
            count, ttl = await pipe.execute()
        # A counter left without a TTL would never reset.
        if ttl < 0:
            await self._client.expire(key, self.window_seconds)
        allowed = count <= self.max_requests
        if not allowed:
            logger.warning(
                "Rate limit exceeded",
                extra={"scope": scope, "client": client_id, "count": count},
            )
        return allowed
