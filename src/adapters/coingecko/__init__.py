"""
CoinGecko adapter package.
"""

from src.adapters.coingecko.client import CoinGeckoClient
from src.adapters.coingecko.market_data_adapter import CoinGeckoMarketDataAdapter

__all__ = [
    "CoinGeckoClient",
    "CoinGeckoMarketDataAdapter",
]
