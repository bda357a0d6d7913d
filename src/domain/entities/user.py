"""
User entities - Watchlist and the per-user record holding both lists.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from src.domain.entities.portfolio import PortfolioHolding


@dataclass
class WatchlistEntry:
    """A coin the user follows."""

    coin_id: str
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {"coinId": self.coin_id, "addedAt": self.added_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WatchlistEntry":
        added_at = data.get("addedAt")
        return cls(
            coin_id=data["coinId"],
            added_at=(
                datetime.fromisoformat(added_at)
                if added_at
                else datetime.now(timezone.utc)
            ),
        )


@dataclass
class UserRecord:
    """Stored state of one user: watchlist (a set) and portfolio (ordered)."""

    user_id: str
    watchlist: list[WatchlistEntry] = field(default_factory=list)
    portfolio: list[PortfolioHolding] = field(default_factory=list)
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_watching(self, coin_id: str) -> bool:
        """Check if the coin is already on the watchlist."""
        return any(entry.coin_id == coin_id for entry in self.watchlist)

    def find_holding(self, coin_id: str) -> Optional[PortfolioHolding]:
        """Get the holding for a specific coin."""
        for holding in self.portfolio:
            if holding.coin_id == coin_id:
                return holding
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert record to dictionary for storage."""
        return {
            "userId": self.user_id,
            "watchlist": [entry.to_dict() for entry in self.watchlist],
            "portfolio": [holding.to_dict() for holding in self.portfolio],
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        """Create record from stored dictionary, skipping entries without a coin id."""
        updated_at = data.get("updatedAt")
        return cls(
            user_id=data["userId"],
            watchlist=[
                WatchlistEntry.from_dict(item)
                for item in data.get("watchlist", [])
                if item.get("coinId")
            ],
            portfolio=[
                PortfolioHolding.from_dict(item)
                for item in data.get("portfolio", [])
                if item.get("coinId")
            ],
            updated_at=(
                datetime.fromisoformat(updated_at)
                if updated_at
                else datetime.now(timezone.utc)
            ),
        )
