# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Retry with linear backoff and jitter for transient failures."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from src.config import Settings
from src.services.errors import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how long to wait between attempts."""

    attempts: int = 3
    base_delay: float = 0.2
    jitter: float = 0.2

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            attempts=settings.retry_attempts,
            base_delay=settings.retry_base_delay,
            jitter=settings.retry_jitter,
        )

    def backoff(self, attempt: int, rng: random.Random) -> float:
        """Delay after the given failed attempt (1-based), in seconds."""
        return self.base_delay * attempt + rng.uniform(0, self.jitter)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    rng: random.Random | None = None,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation``, retrying TransientError up to ``policy.attempts`` times.

    Validation and not-found errors are raised immediately. Cancellation
    propagates without further attempts. When the attempts are used up the
    last TransientError is re-raised.
    """
    policy = policy or RetryPolicy()
    rng = rng or random.Random()
    attempt = 1
    while True:
        try:
            return await operation()
        except TransientError as e:
            if attempt >= policy.attempts:
                logger.warning(f"Giving up after {attempt} attempts: {e}")
                raise
            delay = policy.backoff(attempt, rng)
            logger.warning(
                f"Attempt {attempt}/{policy.attempts} failed ({e}), "
                f"retrying in {delay:.2f}s"
            )
            await sleep(delay)
            attempt += 1
