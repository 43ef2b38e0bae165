"""Redis connection and batched-write helpers shared by the stores."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from typing import TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from brick_deals.config import settings
from brick_deals.errors import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            health_check_interval=30,
        )
    return _redis_client


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


async def commit_in_batches(
    client: redis.Redis,
    items: Sequence[T],
    apply: Callable[[redis.client.Pipeline, T], None],
    *,
    batch_size: int,
    label: str,
) -> int:
    """Apply ``apply`` to every item, one MULTI/EXEC transaction per batch.

    Batches are independent: if batch N fails, batches 1..N-1 stay committed
    and a ``PersistenceError`` is raised. Callers rely on keyed upserts being
    idempotent to make a retried run converge.
    """
    committed = 0
    for number, chunk in enumerate(batched(items, batch_size), start=1):
        try:
            async with client.pipeline(transaction=True) as pipe:
                for item in chunk:
                    apply(pipe, item)
                await pipe.execute()
        except RedisError as exc:
            logger.error(
                "%s batch %d failed after %d records committed: %s",
                label,
                number,
                committed,
                exc,
            )
            raise PersistenceError(f"{label} batch {number} failed") from exc
        committed += len(chunk)
        logger.info("Saved %s batch %d (%d records)", label, number, len(chunk))
    return committed
