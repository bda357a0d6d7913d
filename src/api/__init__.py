"""
HTTP API - FastAPI application exposing market data, watchlist and portfolio.
"""

from src.api.app import create_app

__all__ = ["create_app"]
