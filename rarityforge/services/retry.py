"""
Retry policy for metadata fetches.

The policy is a plain value: it decides how many attempts are made and how
long to wait between them. Sleeping is injected so tests can run with a
fake clock.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

SleepFunc = Callable[[float], Awaitable[None]]

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.2
DEFAULT_FACTOR = 2.0


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff policy.

    Attributes:
        max_attempts: Total attempts per item, including the first
        base_delay: Seconds to wait after the first failed attempt
        factor: Multiplier applied to the delay after each failure
        jitter: Upper bound (seconds) of uniform random delay added to each wait
        sleep: Coroutine used to wait; asyncio.sleep by default
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay: float = DEFAULT_BASE_DELAY
    factor: float = DEFAULT_FACTOR
    jitter: float = 0.0
    sleep: SleepFunc = field(default=asyncio.sleep, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.base_delay < 0 or self.jitter < 0:
            raise ValueError("Retry delays must be non-negative")

    def delay_for(self, attempt: int) -> float:
        """
        Seconds to wait after a failed attempt.

        Args:
            attempt: Zero-based number of the attempt that just failed

        Returns:
            base_delay * factor**attempt, plus jitter if configured
        """
        delay = self.base_delay * (self.factor**attempt)
        if self.jitter:
            delay += random.uniform(0.0, self.jitter)
        return delay

    def should_retry(self, attempt: int) -> bool:
        """True if another attempt follows the given zero-based attempt."""
        return attempt + 1 < self.max_attempts

    async def wait(self, attempt: int) -> None:
        """Sleep for the backoff following a failed attempt."""
        await self.sleep(self.delay_for(attempt))
