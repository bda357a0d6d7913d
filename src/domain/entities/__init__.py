"""
Domain entities - Core business objects.
"""

from src.domain.entities.coin import COIN_ID_ALIASES, normalize_coin_id
from src.domain.entities.market_chart import PricePoint, PriceHistory, TrendingCoin
from src.domain.entities.market_snapshot import MarketSnapshot
from src.domain.entities.portfolio import HoldingValuation, PortfolioHolding, PortfolioStats
from src.domain.entities.user import UserRecord, WatchlistEntry

__all__ = [
    "COIN_ID_ALIASES",
    "normalize_coin_id",
    "MarketSnapshot",
    "PricePoint",
    "PriceHistory",
    "TrendingCoin",
    "HoldingValuation",
    "PortfolioHolding",
    "PortfolioStats",
    "UserRecord",
    "WatchlistEntry",
]
