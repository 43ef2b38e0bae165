"""Request guards: admin API key and per-client rate limiting."""

from __future__ import annotations

import logging
import secrets
from typing import Annotated

from fastapi import Depends, Header, Request

from brick_deals.api.dependencies import RedisDependency
from brick_deals.config import settings
from brick_deals.errors import RateLimitExceeded, Unauthorized
from brick_deals.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def require_api_key(
    x_api_key: Annotated[str | None, Header()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Accept ``X-API-Key`` or ``Authorization: Bearer``.

    With no APP_API_KEY configured every caller is let through.
    """
    if not settings.api_key_configured:
        logger.warning("APP_API_KEY not configured - running in development mode")
        return

    provided = x_api_key
    if not provided and authorization:
        provided = authorization.removeprefix("Bearer ").strip()

    if not provided or not secrets.compare_digest(
        provided.encode(), settings.APP_API_KEY.encode()
    ):
        raise Unauthorized()


def rate_limited(scope: str):
    """Build a dependency that counts the request against ``scope``."""

    async def _check(request: Request, client: RedisDependency) -> None:
        limiter = RateLimiter(client)
        if not await limiter.hit(scope, client_ip(request)):
            raise RateLimitExceeded()

    return Depends(_check)


ApiKeyRequired = Depends(require_api_key)
