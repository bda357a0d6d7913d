"""
Watchlist Overview Use Case - Watchlist entries joined with live prices.
"""

from dataclasses import dataclass
from typing import Any

from src.application.services.snapshot_collector import SnapshotBatch, SnapshotCollector
from src.domain.entities.user import WatchlistEntry
from src.domain.ports.storage_port import UserStorePort


@dataclass
class WatchlistOverview:
    entries: list[WatchlistEntry]
    batch: SnapshotBatch

    def to_dict(self) -> dict[str, Any]:
        items = []
        for entry in self.entries:
            snapshot = self.batch.snapshots.get(entry.coin_id)
            items.append({
                **entry.to_dict(),
                "snapshot": snapshot.to_dict() if snapshot else None,
            })
        return {"items": items, **self.batch.to_dict()}


class WatchlistOverviewUseCase:
    """Fetch prices for every watched coin with pacing."""

    def __init__(self, store: UserStorePort, collector: SnapshotCollector):
        self.store = store
        self.collector = collector

    async def execute(self, user_id: str) -> WatchlistOverview:
        record = await self.store.get_user(user_id)
        batch = await self.collector.collect(entry.coin_id for entry in record.watchlist)
        return WatchlistOverview(entries=record.watchlist, batch=batch)
