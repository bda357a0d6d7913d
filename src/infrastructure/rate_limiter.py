"""
Sliding-window rate limiter for outbound price API calls.

One instance is shared by every request in the process; it is created by
the container and injected into the CoinGecko client.
"""

import asyncio
import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable

from src.domain.exceptions import LocalRateLimitedError
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Admission:
    """Outcome of an admission check."""

    allowed: bool
    retry_after: int = 0  # Seconds until a slot frees up (rejections only)


class SlidingWindowRateLimiter:
    """
    Admit at most ``max_calls`` calls in any trailing ``window_seconds``.

    Expired timestamps are pruned lazily on each check. Prune, check and
    record happen under one lock so concurrent callers cannot over-admit.
    """

    def __init__(
        self,
        max_calls: int = 30,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the limiter.

        Args:
            max_calls: Maximum admissions inside the window
            window_seconds: Trailing window length
            clock: Monotonic time source in seconds (injectable for tests)
        """
        if max_calls < 1:
            raise ValueError("max_calls must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_calls = max_calls
        self.window_seconds = window_seconds
        self._clock = clock
        self._admitted: deque[float] = deque()
        self._lock = asyncio.Lock()

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._admitted and self._admitted[0] <= cutoff:
            self._admitted.popleft()

    async def admit(self) -> Admission:
        """
        Check and record one outbound call.

        Returns:
            Admission allowed, or rejected with retry-after seconds.
        """
        async with self._lock:
            now = self._clock()
            self._prune(now)

            if len(self._admitted) >= self.max_calls:
                wait = self._admitted[0] + self.window_seconds - now
                retry_after = max(1, math.ceil(wait))
                logger.warning(
                    "Rate limit reached, rejecting outbound call",
                    in_window=len(self._admitted),
                    retry_after=retry_after,
                )
                return Admission(allowed=False, retry_after=retry_after)

            self._admitted.append(now)
            return Admission(allowed=True)

    async def acquire(self) -> None:
        """
        Admit one call or raise.

        Raises:
            LocalRateLimitedError: If the window is full.
        """
        admission = await self.admit()
        if not admission.allowed:
            raise LocalRateLimitedError(admission.retry_after)

    @property
    def remaining(self) -> int:
        """Admissions still available in the current window (approximate, unlocked)."""
        now = self._clock()
        cutoff = now - self.window_seconds
        used = sum(1 for ts in self._admitted if ts > cutoff)
        return max(0, self.max_calls - used)
