"""
CoinGecko Market Data Adapter - Implements MarketDataPort.
"""

from typing import Optional

from src.adapters.coingecko.client import CoinGeckoClient
from src.domain.entities.coin import normalize_coin_id
from src.domain.entities.market_chart import PriceHistory, TrendingCoin
from src.domain.entities.market_snapshot import MarketSnapshot
from src.domain.exceptions import (
    CoinNotFoundError,
    CoinSightError,
    UpstreamError,
    UpstreamMalformedError,
)
from src.domain.ports.market_data_port import MarketDataPort
from src.infrastructure.config import Settings
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CoinGeckoMarketDataAdapter(MarketDataPort):
    """
    CoinGecko implementation of MarketDataPort.

    Normalizes coin ids, validates response shapes and converts payloads
    into MarketSnapshot entities.
    """

    MAX_PER_PAGE = 250  # CoinGecko limit
    MAX_CHART_DAYS = 365  # Public API history limit

    # Nested detail sections read by MarketSnapshot.from_coin_detail
    DETAIL_SECTIONS = ("market_data", "image", "description")

    # Keep detail payloads small: prices only
    DETAIL_PARAMS = {
        "localization": "false",
        "tickers": "false",
        "market_data": "true",
        "community_data": "false",
        "developer_data": "false",
    }

    def __init__(self, client: CoinGeckoClient, settings: Settings):
        """
        Initialize adapter.

        Args:
            client: CoinGecko HTTP client
            settings: Application settings
        """
        self.client = client
        self.settings = settings

    async def fetch_top_coins(self, limit: Optional[int] = None) -> list[MarketSnapshot]:
        """Fetch the top coins by market cap."""
        per_page = limit if limit is not None else self.settings.top_coins_limit
        per_page = min(max(1, per_page), self.MAX_PER_PAGE)

        data = await self.client.get(
            "/coins/markets",
            params={
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": per_page,
                "page": 1,
                "sparkline": "false",
                "price_change_percentage": "1h,24h,7d,30d",
            },
        )

        if not isinstance(data, list):
            raise UpstreamMalformedError(
                f"expected a list of coins, got {type(data).__name__}"
            )
        if not all(isinstance(item, dict) for item in data):
            raise UpstreamMalformedError("coin list contains non-object items")

        try:
            snapshots = [MarketSnapshot.from_markets_item(item) for item in data]
        except (AttributeError, TypeError, ValueError, OverflowError) as e:
            raise UpstreamMalformedError(f"coin list could not be read: {e}") from e
        logger.info("Fetched top coins", count=len(snapshots))
        return snapshots

    async def fetch_coin_detail(self, raw_id: str) -> MarketSnapshot:
        """Fetch detail for one coin after resolving aliases."""
        coin_id = normalize_coin_id(raw_id)
        if not coin_id:
            raise CoinNotFoundError(requested_id=raw_id, suggested_id=coin_id)

        try:
            data = await self.client.get(f"/coins/{coin_id}", params=self.DETAIL_PARAMS)
        except UpstreamError as e:
            if e.status == 404:
                logger.info("Coin not found", requested_id=raw_id, coin_id=coin_id)
                raise CoinNotFoundError(requested_id=raw_id, suggested_id=coin_id) from e
            raise

        if not isinstance(data, dict) or not data.get("id"):
            raise UpstreamMalformedError("coin detail is not an object with an id")
        for section in self.DETAIL_SECTIONS:
            if data.get(section) is not None and not isinstance(data[section], dict):
                raise UpstreamMalformedError(
                    f"coin detail '{section}' is {type(data[section]).__name__}, expected an object"
                )

        try:
            return MarketSnapshot.from_coin_detail(data)
        except (AttributeError, TypeError, ValueError, OverflowError) as e:
            logger.warning("Unreadable coin detail", coin_id=coin_id, error=str(e))
            raise UpstreamMalformedError(f"coin detail could not be read: {e}") from e

    async def fetch_market_chart(self, raw_id: str, days: int = 30) -> PriceHistory:
        """Fetch the USD price history of one coin."""
        coin_id = normalize_coin_id(raw_id)
        if not coin_id:
            raise CoinNotFoundError(requested_id=raw_id, suggested_id=coin_id)
        days = min(max(1, days), self.MAX_CHART_DAYS)

        try:
            data = await self.client.get(
                f"/coins/{coin_id}/market_chart",
                params={"vs_currency": "usd", "days": days},
            )
        except UpstreamError as e:
            if e.status == 404:
                raise CoinNotFoundError(requested_id=raw_id, suggested_id=coin_id) from e
            raise

        if not isinstance(data, dict) or not isinstance(data.get("prices"), list):
            raise UpstreamMalformedError("market chart has no price list")

        try:
            history = PriceHistory.from_market_chart(coin_id, days, data)
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise UpstreamMalformedError(f"market chart could not be read: {e}") from e

        logger.debug("Fetched market chart", coin_id=coin_id, days=days, points=len(history.prices))
        return history

    async def fetch_trending(self) -> list[TrendingCoin]:
        """Fetch the provider's trending coins."""
        data = await self.client.get("/search/trending")

        coins = data.get("coins") if isinstance(data, dict) else None
        if not isinstance(coins, list):
            raise UpstreamMalformedError("trending response has no coin list")

        trending = []
        for entry in coins:
            item = entry.get("item") if isinstance(entry, dict) else None
            if not isinstance(item, dict) or not item.get("id"):
                raise UpstreamMalformedError("trending entry is not an object with an id")
            trending.append(TrendingCoin.from_trending_item(item))

        logger.info("Fetched trending coins", count=len(trending))
        return trending

    async def verify_coin_exists(self, coin_id: str) -> bool:
        """Check a coin exists; only a confirmed 404 returns False."""
        coin_id = normalize_coin_id(coin_id)
        if not coin_id:
            return False

        try:
            await self.client.get(
                f"/coins/{coin_id}",
                params=self.DETAIL_PARAMS,
                timeout=self.settings.verify_timeout_seconds,
            )
        except UpstreamError as e:
            if e.status == 404:
                return False
            logger.warning(
                "Could not verify coin, allowing write",
                coin_id=coin_id,
                error=e.code,
                status=e.status,
            )
        except CoinSightError as e:
            logger.warning("Could not verify coin, allowing write", coin_id=coin_id, error=e.code)
        return True
