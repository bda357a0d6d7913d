"""
Portfolio valuation - Merges holdings with live prices.

Pure and side-effect free: prices are fetched by the caller.
"""

from typing import Mapping, Optional, Sequence

from src.domain.entities.market_snapshot import MarketSnapshot
from src.domain.entities.portfolio import HoldingValuation, PortfolioHolding, PortfolioStats


def valuate(
    holdings: Sequence[PortfolioHolding],
    snapshots: Mapping[str, Optional[MarketSnapshot]],
) -> PortfolioStats:
    """
    Compute invested cost, current value and gain/loss of a portfolio.

    A holding without a priced snapshot still counts toward the invested
    total but contributes zero current value.

    Args:
        holdings: Portfolio holdings in stored order
        snapshots: Latest snapshot per canonical coin id (missing or None = no price)

    Returns:
        PortfolioStats with per-holding rows and totals.
    """
    stats = PortfolioStats()

    for index, holding in enumerate(holdings):
        snapshot = snapshots.get(holding.coin_id)
        price = snapshot.current_price_usd if snapshot is not None and snapshot.has_price else None

        invested = holding.amount * holding.purchase_price
        current_value = holding.amount * price if price is not None else 0.0

        stats.holdings.append(
            HoldingValuation(
                index=index,
                coin_id=holding.coin_id,
                amount=holding.amount,
                purchase_price=holding.purchase_price,
                invested=invested,
                current_price=price,
                current_value=current_value,
                gain_loss=current_value - invested,
            )
        )
        stats.total_invested += invested
        stats.total_current_value += current_value

    return stats
