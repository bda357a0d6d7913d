"""
Price history and trending entities.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass
class PricePoint:
    """One sample of a price series."""

    timestamp: datetime
    price_usd: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "priceUsd": self.price_usd,
        }


@dataclass
class PriceHistory:
    """USD price series for one coin over the last ``days`` days."""

    coin_id: str
    days: int
    prices: list[PricePoint] = field(default_factory=list)

    @property
    def change_pct(self) -> Optional[float]:
        """Percent change from the first to the last sample."""
        if len(self.prices) < 2 or self.prices[0].price_usd == 0:
            return None
        first, last = self.prices[0].price_usd, self.prices[-1].price_usd
        return (last - first) / first * 100

    @classmethod
    def from_market_chart(cls, coin_id: str, days: int, data: dict[str, Any]) -> "PriceHistory":
        """
        Create history from a ``/coins/{id}/market_chart`` payload.

        Args:
            coin_id: Canonical coin id
            days: Requested range
            data: Payload whose ``prices`` is a list of ``[ms_timestamp, price]``

        Raises:
            ValueError: If a sample is not a numeric pair.
        """
        points = []
        for sample in data.get("prices") or []:
            if not isinstance(sample, (list, tuple)) or len(sample) != 2:
                raise ValueError(f"bad price sample: {sample!r}")
            timestamp_ms, price = sample
            if price is None:
                continue
            points.append(
                PricePoint(
                    timestamp=datetime.fromtimestamp(float(timestamp_ms) / 1000, tz=timezone.utc),
                    price_usd=float(price),
                )
            )
        return cls(coin_id=coin_id, days=days, prices=points)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.coin_id,
            "days": self.days,
            "changePct": self.change_pct,
            "prices": [point.to_dict() for point in self.prices],
        }


@dataclass
class TrendingCoin:
    """A coin from the provider's trending searches list."""

    coin_id: str
    name: str
    symbol: str
    market_cap_rank: Optional[int] = None
    thumb_url: Optional[str] = None
    score: Optional[int] = None

    @classmethod
    def from_trending_item(cls, item: dict[str, Any]) -> "TrendingCoin":
        """Create from the ``item`` object of a ``/search/trending`` coin."""
        rank = item.get("market_cap_rank")
        score = item.get("score")
        return cls(
            coin_id=str(item["id"]),
            name=str(item.get("name") or ""),
            symbol=str(item.get("symbol") or "").upper(),
            market_cap_rank=int(rank) if isinstance(rank, (int, float)) else None,
            thumb_url=item.get("thumb") if isinstance(item.get("thumb"), str) else None,
            score=score if isinstance(score, int) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.coin_id,
            "name": self.name,
            "symbol": self.symbol,
            "marketCapRank": self.market_cap_rank,
            "thumb": self.thumb_url,
            "score": self.score,
        }
