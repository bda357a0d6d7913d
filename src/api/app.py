"""
API application factory.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.errors import register_exception_handlers
from src.api.middleware import RequestLoggingMiddleware
from src.api.routes import crypto_routes, health_routes, portfolio_routes
from src.infrastructure.config import Settings, get_settings
from src.infrastructure.container import Container, cleanup_container, create_container
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


def create_app(
    container: Optional[Container] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Pre-built container (tests); otherwise one is created on startup
        settings: Settings used when the container is created on startup

    Returns:
        Configured FastAPI app.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_container = container is None
        app.state.container = container or await create_container(settings or get_settings())
        logger.info("Starting CoinSight API", storage=app.state.container.settings.storage_type)
        try:
            yield
        finally:
            if owns_container:
                await cleanup_container()
            logger.info("Shutting down CoinSight API")

    app = FastAPI(
        title="CoinSight API",
        version="1.0.0",
        description="Crypto watchlist, portfolio and market data gateway",
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After", "X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(crypto_routes.router, prefix="/crypto", tags=["crypto"])
    app.include_router(portfolio_routes.router, prefix="/portfolio", tags=["portfolio"])
    app.include_router(health_routes.router, tags=["health"])

    return app
