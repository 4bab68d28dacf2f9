"""Bounded retry with capped exponential backoff for async external calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryObserver = Callable[[int, BaseException, float], None]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 30.0
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)

    def delay_for(self, attempt: int) -> float:
        """Delay before the retry that follows failed ``attempt`` (1-based)."""
        return min(self.base_delay_seconds * (2 ** (attempt - 1)), self.max_delay_seconds)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        on_retry: Optional[RetryObserver] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> T:
        """Run ``operation`` until it succeeds or attempts are exhausted.

        The final error is re-raised unchanged. Errors outside ``retry_on``
        propagate immediately.
        """
        attempts = max(1, int(self.max_attempts))
        for attempt in range(1, attempts + 1):
            try:
                return await operation()
            except self.retry_on as exc:
                if attempt >= attempts:
                    raise
                delay = self.delay_for(attempt)
                if on_retry is not None:
                    on_retry(attempt, exc, delay)
                else:
                    logger.warning("Retry %d after %.1fs: %s", attempt, delay, exc)
                await sleep(delay)
        raise RuntimeError("unreachable")


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay_seconds: float = 1.0,
    max_delay_seconds: float = 30.0,
    on_retry: Optional[RetryObserver] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    policy = RetryPolicy(
        max_attempts=max_attempts,
        base_delay_seconds=base_delay_seconds,
        max_delay_seconds=max_delay_seconds,
    )
    return await policy.run(operation, on_retry=on_retry, sleep=sleep)
