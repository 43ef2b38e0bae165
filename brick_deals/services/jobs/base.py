"""Base scheduled-job functionality."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ScheduledJob(ABC):
    """Abstract base class for recurring pipeline jobs."""

    name: str = "job"

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    async def run(self) -> BaseModel:
        """Execute one invocation and return its summary."""

    async def run_with_timeout(self) -> BaseModel:
        """Run once within the timeout budget.

        Failures and timeouts are logged and re-raised so the scheduler
        records the run as failed.
        """
        started = time.monotonic()
        logger.info("Job %s started", self.name)
        try:
            summary = await asyncio.wait_for(self.run(), timeout=self.timeout_seconds)
        except TimeoutError:
            logger.error(
                "Job %s exceeded its %ss budget and was cut off",
                self.name,
                self.timeout_seconds,
            )
            raise
        except Exception:
            logger.exception("Job %s failed", self.name)
            raise

        logger.info(
            "Job %s finished",
            self.name,
            extra={
                "duration_seconds": round(time.monotonic() - started, 2),
                "summary": summary.model_dump(),
            },
        )
        return summary
