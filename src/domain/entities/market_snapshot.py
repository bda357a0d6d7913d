"""
Market snapshot entity - Point-in-time market data for one coin.

Snapshots are never persisted; they are re-fetched on every request.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


def _to_float(value: Any) -> Optional[float]:
    """Convert provider numbers to float, keeping missing values as None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _usd(value: Any) -> Optional[float]:
    """Extract the USD figure from a per-currency mapping."""
    if isinstance(value, dict):
        return _to_float(value.get("usd"))
    return _to_float(value)


@dataclass
class MarketSnapshot:
    """Market data for a single coin as reported by the price provider."""

    coin_id: str  # Canonical provider id (e.g., bitcoin)
    name: str
    symbol: str
    current_price_usd: Optional[float] = None
    market_cap_usd: Optional[float] = None
    market_cap_rank: Optional[int] = None
    volume_24h_usd: Optional[float] = None
    price_change_pct_1h: Optional[float] = None
    price_change_pct_24h: Optional[float] = None
    price_change_pct_7d: Optional[float] = None
    price_change_pct_30d: Optional[float] = None
    circulating_supply: Optional[float] = None
    total_supply: Optional[float] = None
    max_supply: Optional[float] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    last_updated: Optional[str] = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_price(self) -> bool:
        """Check if the snapshot carries a usable USD price."""
        return self.current_price_usd is not None

    @classmethod
    def from_markets_item(cls, data: dict[str, Any]) -> "MarketSnapshot":
        """
        Create snapshot from a ``/coins/markets`` list item.

        Args:
            data: One element of the markets response.

        Returns:
            MarketSnapshot instance.
        """
        rank = data.get("market_cap_rank")
        return cls(
            coin_id=data.get("id", ""),
            name=data.get("name", ""),
            symbol=(data.get("symbol") or "").upper(),
            current_price_usd=_to_float(data.get("current_price")),
            market_cap_usd=_to_float(data.get("market_cap")),
            market_cap_rank=int(rank) if isinstance(rank, (int, float)) else None,
            volume_24h_usd=_to_float(data.get("total_volume")),
            price_change_pct_1h=_to_float(data.get("price_change_percentage_1h_in_currency")),
            price_change_pct_24h=_to_float(
                data.get("price_change_percentage_24h_in_currency",
                         data.get("price_change_percentage_24h"))
            ),
            price_change_pct_7d=_to_float(data.get("price_change_percentage_7d_in_currency")),
            price_change_pct_30d=_to_float(data.get("price_change_percentage_30d_in_currency")),
            circulating_supply=_to_float(data.get("circulating_supply")),
            total_supply=_to_float(data.get("total_supply")),
            max_supply=_to_float(data.get("max_supply")),
            image_url=data.get("image") if isinstance(data.get("image"), str) else None,
            last_updated=data.get("last_updated"),
        )

    @classmethod
    def from_coin_detail(cls, data: dict[str, Any]) -> "MarketSnapshot":
        """
        Create snapshot from a ``/coins/{id}`` detail payload.

        Args:
            data: Coin detail response with nested ``market_data``.

        Returns:
            MarketSnapshot instance.
        """
        market = data.get("market_data") or {}
        image = data.get("image") or {}
        description = data.get("description") or {}
        rank = data.get("market_cap_rank", market.get("market_cap_rank"))

        return cls(
            coin_id=data.get("id", ""),
            name=data.get("name", ""),
            symbol=(data.get("symbol") or "").upper(),
            current_price_usd=_usd(market.get("current_price")),
            market_cap_usd=_usd(market.get("market_cap")),
            market_cap_rank=int(rank) if isinstance(rank, (int, float)) else None,
            volume_24h_usd=_usd(market.get("total_volume")),
            price_change_pct_1h=_usd(market.get("price_change_percentage_1h_in_currency")),
            price_change_pct_24h=_to_float(market.get("price_change_percentage_24h")),
            price_change_pct_7d=_to_float(market.get("price_change_percentage_7d")),
            price_change_pct_30d=_to_float(market.get("price_change_percentage_30d")),
            circulating_supply=_to_float(market.get("circulating_supply")),
            total_supply=_to_float(market.get("total_supply")),
            max_supply=_to_float(market.get("max_supply")),
            image_url=image.get("large") if isinstance(image, dict) else None,
            description=(description.get("en") or None) if isinstance(description, dict) else None,
            last_updated=data.get("last_updated", market.get("last_updated")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert snapshot to API dictionary."""
        return {
            "id": self.coin_id,
            "name": self.name,
            "symbol": self.symbol,
            "image": self.image_url,
            "currentPriceUsd": self.current_price_usd,
            "marketCapUsd": self.market_cap_usd,
            "marketCapRank": self.market_cap_rank,
            "volume24hUsd": self.volume_24h_usd,
            "priceChangePct": {
                "1h": self.price_change_pct_1h,
                "24h": self.price_change_pct_24h,
                "7d": self.price_change_pct_7d,
                "30d": self.price_change_pct_30d,
            },
            "circulatingSupply": self.circulating_supply,
            "totalSupply": self.total_supply,
            "maxSupply": self.max_supply,
            "description": self.description,
            "lastUpdated": self.last_updated,
            "fetchedAt": self.fetched_at.isoformat(),
        }
