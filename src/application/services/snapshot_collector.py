"""
Snapshot Collector - Paced sequential price fetches for many coins.

Detail lookups are issued one at a time, each starting at least
``pacing_interval`` seconds after the previous one, so a batch stays under
the rate limiter's admission threshold. Results land in a caller-owned
SnapshotBatch as they arrive, so a batch interrupted by a timeout or
cancellation still holds every snapshot fetched so far.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from src.domain.entities.market_snapshot import MarketSnapshot
from src.domain.exceptions import RATE_LIMIT_ERRORS, CoinNotFoundError, CoinSightError
from src.domain.ports.market_data_port import MarketDataPort
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SnapshotBatch:
    """Snapshots collected for a set of coins, possibly partial."""

    snapshots: dict[str, MarketSnapshot] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)  # Coins without a snapshot
    errors: dict[str, str] = field(default_factory=dict)  # coin id -> error code
    stopped_reason: Optional[str] = None  # "rate_limited", "timeout", "cancelled"
    retry_after: Optional[int] = None

    @property
    def is_partial(self) -> bool:
        """Check if any requested coin is without a snapshot."""
        return bool(self.missing) or self.stopped_reason is not None

    def mark_unfetched(self, coin_ids: Iterable[str]) -> None:
        """Record coins never reached (stopped early) as missing."""
        for coin_id in coin_ids:
            if coin_id not in self.snapshots and coin_id not in self.missing:
                self.missing.append(coin_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "missingCoinIds": self.missing,
            "errors": self.errors,
            "partial": self.is_partial,
            "stoppedReason": self.stopped_reason,
            "retryAfter": self.retry_after,
        }


class SnapshotCollector:
    """
    Fetch coin details sequentially with a fixed pacing interval.

    Stops early on a rate-limit rejection (local or upstream); every coin
    not yet fetched is then recorded as missing. Unknown coins and
    transient upstream failures skip that coin only.
    """

    def __init__(
        self,
        market_data_port: MarketDataPort,
        pacing_interval: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the collector.

        Args:
            market_data_port: Source of coin details
            pacing_interval: Minimum seconds between the starts of two fetches
            sleep: Async sleep (injectable for tests)
            clock: Monotonic time source
        """
        self.market_data = market_data_port
        self.pacing_interval = max(0.0, pacing_interval)
        self._sleep = sleep
        self._clock = clock

    async def collect(
        self,
        coin_ids: Iterable[str],
        batch: Optional[SnapshotBatch] = None,
    ) -> SnapshotBatch:
        """
        Collect snapshots for the given coins.

        Args:
            coin_ids: Canonical coin ids; duplicates are fetched once
            batch: Optional batch to fill (keeps partial results if the
                caller cancels this coroutine)

        Returns:
            The filled SnapshotBatch.
        """
        batch = batch if batch is not None else SnapshotBatch()
        pending = list(dict.fromkeys(coin_ids))
        next_start: Optional[float] = None

        for position, coin_id in enumerate(pending):
            if next_start is not None:
                delay = next_start - self._clock()
                if delay > 0:
                    await self._sleep(delay)
            next_start = self._clock() + self.pacing_interval

            try:
                batch.snapshots[coin_id] = await self.market_data.fetch_coin_detail(coin_id)
            except RATE_LIMIT_ERRORS as e:
                batch.stopped_reason = "rate_limited"
                batch.retry_after = e.retry_after
                batch.errors[coin_id] = e.code
                batch.mark_unfetched(pending[position:])
                logger.warning(
                    "Rate limited while collecting prices, stopping early",
                    fetched=len(batch.snapshots),
                    skipped=len(pending) - position,
                    retry_after=e.retry_after,
                )
                break
            except CoinNotFoundError as e:
                batch.errors[coin_id] = e.code
                batch.missing.append(coin_id)
            except CoinSightError as e:
                batch.errors[coin_id] = e.code
                batch.missing.append(coin_id)
                logger.warning("Price fetch failed", coin_id=coin_id, error=e.code)

        logger.debug(
            "Collected snapshots",
            requested=len(pending),
            fetched=len(batch.snapshots),
            missing=len(batch.missing),
        )
        return batch
