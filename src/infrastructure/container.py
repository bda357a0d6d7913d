"""
Dependency injection container for the application.
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from src.adapters.auth.jwt_identity import JWTIdentityAdapter
from src.adapters.coingecko.client import CoinGeckoClient
from src.adapters.coingecko.market_data_adapter import CoinGeckoMarketDataAdapter
from src.adapters.dynamodb.user_repository import DynamoDBUserStore
from src.adapters.storage.json_user_store import JSONUserStore
from src.application.services.holdings_service import HoldingsService
from src.application.services.snapshot_collector import SnapshotCollector
from src.application.use_cases.portfolio_valuation import PortfolioValuationUseCase
from src.application.use_cases.watchlist_overview import WatchlistOverviewUseCase
from src.domain.ports.identity_port import IdentityPort
from src.domain.ports.market_data_port import MarketDataPort
from src.domain.ports.storage_port import UserStorePort
from src.infrastructure.config import Settings
from src.infrastructure.rate_limiter import SlidingWindowRateLimiter


@dataclass
class Container:
    """
    Dependency injection container.

    Provides configured instances of all application components.
    """

    settings: Settings

    # Infrastructure
    rate_limiter: SlidingWindowRateLimiter

    # Adapters
    coingecko_client: CoinGeckoClient
    market_data_adapter: MarketDataPort
    user_store: UserStorePort  # Can be JSON or DynamoDB
    identity: IdentityPort

    # Services
    holdings_service: HoldingsService
    snapshot_collector: SnapshotCollector

    # Use cases
    portfolio_valuation: PortfolioValuationUseCase
    watchlist_overview: WatchlistOverviewUseCase


_container: Optional[Container] = None


async def create_container(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    user_store: Optional[UserStorePort] = None,
) -> Container:
    """
    Create and configure the dependency container.

    Args:
        settings: Optional settings override
        transport: Optional httpx transport for the price API (tests)
        user_store: Optional store override (tests)

    Returns:
        Configured Container instance.
    """
    global _container

    if settings is None:
        from src.infrastructure.config import get_settings
        settings = get_settings()

    # One limiter per process, shared by every outbound call
    rate_limiter = SlidingWindowRateLimiter(
        max_calls=settings.rate_limit_max_calls,
        window_seconds=settings.rate_limit_window_seconds,
    )

    coingecko_client = CoinGeckoClient(settings, rate_limiter, transport=transport)
    market_data_adapter = CoinGeckoMarketDataAdapter(coingecko_client, settings)

    # Create storage adapter based on configuration
    if user_store is None:
        if settings.storage_type.lower() == "dynamodb":
            dynamodb_store = DynamoDBUserStore(settings)
            await dynamodb_store.initialize_table()
            user_store = dynamodb_store
        else:
            user_store = JSONUserStore(settings.json_storage_path)

    identity = JWTIdentityAdapter(
        secret_key=settings.jwt_secret,
        user_claim=settings.jwt_user_claim,
    )

    holdings_service = HoldingsService(
        store=user_store,
        market_data_port=market_data_adapter,
        verify_existence=settings.verify_coin_existence,
        weighted_cost_basis=settings.uses_weighted_cost_basis,
    )
    snapshot_collector = SnapshotCollector(
        market_data_port=market_data_adapter,
        pacing_interval=settings.pacing_interval_seconds,
    )

    portfolio_valuation = PortfolioValuationUseCase(
        store=user_store,
        collector=snapshot_collector,
        timeout_seconds=settings.valuation_timeout_seconds,
    )
    watchlist_overview = WatchlistOverviewUseCase(
        store=user_store,
        collector=snapshot_collector,
    )

    _container = Container(
        settings=settings,
        rate_limiter=rate_limiter,
        coingecko_client=coingecko_client,
        market_data_adapter=market_data_adapter,
        user_store=user_store,
        identity=identity,
        holdings_service=holdings_service,
        snapshot_collector=snapshot_collector,
        portfolio_valuation=portfolio_valuation,
        watchlist_overview=watchlist_overview,
    )

    return _container


async def cleanup_container() -> None:
    """Clean up container resources."""
    global _container

    if _container is not None:
        await _container.coingecko_client.close()
        _container = None
