"""
Domain ports - Interface definitions for hexagonal architecture.
"""

from src.domain.ports.identity_port import IdentityPort
from src.domain.ports.market_data_port import MarketDataPort
from src.domain.ports.storage_port import UserStorePort

__all__ = [
    "IdentityPort",
    "MarketDataPort",
    "UserStorePort",
]
