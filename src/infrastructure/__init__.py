"""
Infrastructure layer - Configuration, logging and rate limiting.
"""

from src.infrastructure.config import Settings, get_settings
from src.infrastructure.logging import get_logger, setup_logging
from src.infrastructure.rate_limiter import Admission, SlidingWindowRateLimiter

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "Admission",
    "SlidingWindowRateLimiter",
]
