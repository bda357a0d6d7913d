"""
Portfolio entities - Holdings and valuation results.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


@dataclass
class PortfolioHolding:
    """A position the user holds in one coin."""

    coin_id: str  # Canonical provider id
    amount: float  # Units held, always > 0
    purchase_price: float  # USD per unit, always > 0
    purchase_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def invested(self) -> float:
        """Cost basis of the position (amount × purchase_price)."""
        return self.amount * self.purchase_price

    def to_dict(self) -> dict[str, Any]:
        """Convert holding to dictionary."""
        return {
            "coinId": self.coin_id,
            "amount": self.amount,
            "purchasePrice": self.purchase_price,
            "purchaseDate": self.purchase_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PortfolioHolding":
        """Create holding from dictionary."""
        purchase_date = data.get("purchaseDate")
        return cls(
            coin_id=data["coinId"],
            amount=float(data["amount"]),
            purchase_price=float(data["purchasePrice"]),
            purchase_date=(
                datetime.fromisoformat(purchase_date)
                if purchase_date
                else datetime.now(timezone.utc)
            ),
        )


@dataclass
class HoldingValuation:
    """Valuation of one holding against the latest price."""

    index: int
    coin_id: str
    amount: float
    purchase_price: float
    invested: float
    current_price: Optional[float]  # None when no price could be fetched
    current_value: float
    gain_loss: float

    @property
    def is_priced(self) -> bool:
        """Check if a live price was available for this holding."""
        return self.current_price is not None

    @property
    def gain_loss_pct(self) -> float:
        """Gain/loss relative to invested amount."""
        if self.invested > 0:
            return self.gain_loss / self.invested * 100
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert valuation row to dictionary."""
        return {
            "index": self.index,
            "coinId": self.coin_id,
            "amount": self.amount,
            "purchasePrice": self.purchase_price,
            "invested": self.invested,
            "currentPrice": self.current_price,
            "currentValue": self.current_value,
            "gainLoss": self.gain_loss,
            "gainLossPct": self.gain_loss_pct,
        }


@dataclass
class PortfolioStats:
    """Aggregate valuation of a portfolio."""

    total_invested: float = 0.0
    total_current_value: float = 0.0
    holdings: list[HoldingValuation] = field(default_factory=list)

    @property
    def total_gain_loss(self) -> float:
        """Current value minus invested."""
        return self.total_current_value - self.total_invested

    @property
    def total_gain_loss_pct(self) -> float:
        """Gain/loss percentage over the total invested amount."""
        if self.total_invested > 0:
            return self.total_gain_loss / self.total_invested * 100
        return 0.0

    @property
    def unpriced_coin_ids(self) -> list[str]:
        """Coins whose holdings were valued without a live price."""
        seen: list[str] = []
        for row in self.holdings:
            if not row.is_priced and row.coin_id not in seen:
                seen.append(row.coin_id)
        return seen

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "totalInvested": self.total_invested,
            "totalCurrentValue": self.total_current_value,
            "totalGainLoss": self.total_gain_loss,
            "totalGainLossPct": self.total_gain_loss_pct,
            "holdings": [row.to_dict() for row in self.holdings],
        }
