"""Shutdown helper for the outbound clients."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


async def close_clients(*clients) -> int:
    """Close every client independently; returns how many failed to close."""

    failures = 0
    for client in clients:
        try:
            await client.aclose()
        except Exception:
            failures += 1
            logger.exception("Failed closing %s on shutdown", type(client).__name__)
    return failures
