"""
Shared rate-limit coordination for GitHub API calls.

Every request made through one gateway goes through the same coordinator, so when
one candidate's query hits an exhausted quota all the others pause too instead of
hammering the API with their own independent retries.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RateLimitCoordinator:
    """Concurrency cap plus a shared "blocked until" deadline."""

    def __init__(
        self,
        max_concurrency: int = 4,
        max_attempts: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        max_reset_wait: float = 15 * 60,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ):
        if max_concurrency < 1 or max_attempts < 1:
            raise ValueError("max_concurrency and max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.max_reset_wait = max_reset_wait
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._sleep = sleep
        self._clock = clock
        self._blocked_until = 0.0

    @property
    def blocked_until(self) -> float:
        return self._blocked_until

    def now(self) -> float:
        return self._clock()

    async def wait_for_quota(self):
        """Sleep until the shared deadline has passed."""
        # Re-check after waking: another task may have pushed the deadline further.
        while True:
            delay = self._blocked_until - self._clock()
            if delay <= 0:
                return
            await self._sleep(delay)

    @asynccontextmanager
    async def slot(self):
        """Wait for quota, then hold one of the concurrent request slots."""
        async with self._semaphore:
            await self.wait_for_quota()
            yield

    def backoff_delay(self, reset_at: Optional[float], attempt: int) -> float:
        """
        Seconds to wait before retrying.

        Exponential backoff capped at max_delay, stretched to the reset time
        reported by GitHub when that is later. Never zero, so a reset time that
        has already passed (clock skew) still backs off.
        """
        backoff = min(self.base_delay * (2 ** attempt), self.max_delay)
        if reset_at is not None:
            return max(reset_at - self._clock(), backoff)
        return backoff

    def report_exhausted(self, reset_at: Optional[float], attempt: int) -> float:
        """
        Record that the quota is exhausted and block every caller until it resets.

        Returns:
            The delay (seconds) before the next request may be sent
        """
        delay = self.backoff_delay(reset_at, attempt)
        self._blocked_until = max(self._blocked_until, self._clock() + delay)
        logger.warning(
            f"GitHub rate limit hit (attempt {attempt + 1}/{self.max_attempts}), "
            f"pausing all requests for {delay:.1f}s"
        )
        return delay
