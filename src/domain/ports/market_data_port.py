"""
Market Data Port - Interface for fetching live coin prices.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities.market_chart import PriceHistory, TrendingCoin
from src.domain.entities.market_snapshot import MarketSnapshot


class MarketDataPort(ABC):
    """
    Port interface for market data operations.

    Every call is admitted by the rate limiter before going upstream.

    Implementations:
        - CoinGeckoMarketDataAdapter: Fetches data from the CoinGecko API
    """

    @abstractmethod
    async def fetch_top_coins(self, limit: Optional[int] = None) -> list[MarketSnapshot]:
        """
        Fetch the top coins ordered by market cap descending.

        Args:
            limit: Number of coins to return (default from settings)

        Returns:
            List of MarketSnapshot.

        Raises:
            LocalRateLimitedError, UpstreamRateLimitedError, UpstreamTimeoutError,
            UpstreamMalformedError, UpstreamError
        """
        ...

    @abstractmethod
    async def fetch_coin_detail(self, raw_id: str) -> MarketSnapshot:
        """
        Fetch detailed market data for one coin.

        Args:
            raw_id: User-supplied coin id or ticker; normalized before use.

        Returns:
            MarketSnapshot for the coin.

        Raises:
            CoinNotFoundError: Provider has no such coin.
            LocalRateLimitedError, UpstreamRateLimitedError, UpstreamTimeoutError,
            UpstreamMalformedError, UpstreamError
        """
        ...

    @abstractmethod
    async def fetch_market_chart(self, raw_id: str, days: int = 30) -> PriceHistory:
        """
        Fetch the USD price history of one coin.

        Args:
            raw_id: User-supplied coin id or ticker; normalized before use.
            days: History range in days (clamped by the implementation)

        Raises:
            CoinNotFoundError: Provider has no such coin.
        """
        ...

    @abstractmethod
    async def fetch_trending(self) -> list[TrendingCoin]:
        """Fetch the coins currently trending in provider searches."""
        ...

    @abstractmethod
    async def verify_coin_exists(self, coin_id: str) -> bool:
        """
        Best-effort existence check.

        Args:
            coin_id: Canonical coin id

        Returns:
            False only when the provider confirms the coin does not exist;
            True otherwise, including when the check itself failed.
        """
        ...
