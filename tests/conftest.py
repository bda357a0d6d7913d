"""
Shared test fixtures.
"""

import pytest

from fakes import FakeCoinGecko, InMemoryUserStore
from src.infrastructure.config import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret="test-secret-0123456789abcdefghijklmnop",
        json_storage_path=str(tmp_path / "users.json"),
        pacing_interval_seconds=0.0,
        transport_retry_attempts=2,
        valuation_timeout_seconds=None,
    )


@pytest.fixture
def fake_coingecko() -> FakeCoinGecko:
    return FakeCoinGecko()


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()
