"""
Portfolio Valuation Use Case - Values a user's holdings at live prices.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

from src.application.services.snapshot_collector import SnapshotBatch, SnapshotCollector
from src.domain.entities.portfolio import PortfolioHolding, PortfolioStats
from src.domain.ports.storage_port import UserStorePort
from src.domain.services.valuation import valuate
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PortfolioReport:
    """Valuation plus information about which prices were unavailable."""

    user_id: str
    stats: PortfolioStats
    batch: SnapshotBatch

    @property
    def is_partial(self) -> bool:
        """Check if some holdings were valued without a live price."""
        return bool(self.stats.unpriced_coin_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.stats.to_dict(),
            **self.batch.to_dict(),
            "partial": self.is_partial,
        }


class PortfolioValuationUseCase:
    """
    Load holdings, fetch their prices with pacing, and value them.

    Price collection runs under an optional time budget. When the budget
    runs out, or the caller cancels, the prices gathered so far are used
    for a best-effort valuation.
    """

    def __init__(
        self,
        store: UserStorePort,
        collector: SnapshotCollector,
        timeout_seconds: Optional[float] = None,
    ):
        self.store = store
        self.collector = collector
        self.timeout_seconds = timeout_seconds

    async def execute(
        self,
        user_id: str,
        batch: Optional[SnapshotBatch] = None,
    ) -> PortfolioReport:
        """
        Value the user's portfolio.

        Args:
            user_id: Current user
            batch: Optional caller-owned batch; after a cancellation it
                still holds the snapshots fetched so far

        Returns:
            PortfolioReport with stats and missing prices.

        Raises:
            UserNotFoundError: If the user has no record.
            asyncio.CancelledError: Re-raised after marking ``batch`` as
                cancelled; pass the same batch to ``value_collected`` for
                the partial valuation.
        """
        record = await self.store.get_user(user_id)
        holdings = list(record.portfolio)
        batch = batch if batch is not None else SnapshotBatch()
        coin_ids = [holding.coin_id for holding in holdings]

        try:
            await asyncio.wait_for(
                self.collector.collect(coin_ids, batch),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            batch.stopped_reason = "timeout"
            batch.mark_unfetched(coin_ids)
            logger.warning(
                "Price collection timed out, valuing partial data",
                user_id=user_id,
                fetched=len(batch.snapshots),
                timeout=self.timeout_seconds,
            )
        except asyncio.CancelledError:
            batch.stopped_reason = "cancelled"
            batch.mark_unfetched(coin_ids)
            raise

        return self._report(user_id, holdings, batch)

    async def value_collected(self, user_id: str, batch: SnapshotBatch) -> PortfolioReport:
        """
        Value the user's portfolio using only the snapshots already in ``batch``.

        Used after a cancelled ``execute`` to get the best-effort valuation
        without fetching any more prices.
        """
        record = await self.store.get_user(user_id)
        holdings = list(record.portfolio)
        batch.mark_unfetched(holding.coin_id for holding in holdings)
        return self._report(user_id, holdings, batch)

    def _report(self, user_id: str, holdings: list[PortfolioHolding], batch: SnapshotBatch) -> PortfolioReport:
        stats = valuate(holdings, batch.snapshots)

        logger.info(
            "Portfolio valued",
            user_id=user_id,
            holdings=len(holdings),
            total_invested=stats.total_invested,
            total_current_value=stats.total_current_value,
            unpriced=len(stats.unpriced_coin_ids),
        )
        return PortfolioReport(user_id=user_id, stats=stats, batch=batch)
