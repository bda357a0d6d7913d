"""
Application configuration using Pydantic Settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # CoinGecko API Configuration
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL",
    )
    coingecko_api_key: Optional[str] = Field(
        default=None,
        description="CoinGecko demo API key (optional, for higher rate limits)",
    )
    coingecko_user_agent: str = Field(
        default="CoinSight/1.0",
        description="User-Agent header sent to CoinGecko",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for market data requests",
    )
    verify_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for coin existence checks",
    )
    transport_retry_attempts: int = Field(
        default=3,
        description="Attempts for requests failing before any response arrives",
    )
    default_retry_after_seconds: int = Field(
        default=60,
        description="Retry-after used when a 429 carries no usable hint",
    )

    # Rate Limiter Configuration
    rate_limit_max_calls: int = Field(
        default=30,
        description="Maximum outbound calls admitted per window",
    )
    rate_limit_window_seconds: float = Field(
        default=60.0,
        description="Length of the trailing admission window",
    )

    # Market Data Configuration
    top_coins_limit: int = Field(
        default=50,
        description="Number of coins returned by the top coins lookup",
    )
    pacing_interval_seconds: float = Field(
        default=1.0,
        description="Delay between sequential coin detail fetches",
    )
    valuation_timeout_seconds: Optional[float] = Field(
        default=45.0,
        description="Budget for collecting prices for a valuation (None = unbounded)",
    )

    # Holdings Configuration
    verify_coin_existence: bool = Field(
        default=True,
        description="Check coins exist upstream before adding them",
    )
    cost_basis_mode: str = Field(
        default="weighted",
        description="Merge rule for repeated buys: 'weighted' or 'simple'",
    )

    # AWS Configuration
    aws_access_key_id: Optional[str] = Field(
        default=None,
        description="AWS access key ID",
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None,
        description="AWS secret access key",
    )
    aws_region: str = Field(
        default="ap-southeast-1",
        description="AWS region",
    )

    # Storage Configuration
    storage_type: str = Field(
        default="json",
        description="Storage type: 'json' for local file or 'dynamodb' for DynamoDB",
    )
    json_storage_path: str = Field(
        default="data/users.json",
        description="Path to JSON storage file (for local development)",
    )

    # DynamoDB Configuration (used when storage_type='dynamodb')
    dynamodb_table_name: str = Field(
        default="coinsight_users",
        description="DynamoDB table name for user watchlists and portfolios",
    )
    dynamodb_endpoint_url: str = Field(
        default="http://localhost:8000",
        description="DynamoDB endpoint URL (for local development)",
    )
    use_local_dynamodb: bool = Field(
        default=True,
        description="Use local DynamoDB instance",
    )

    # Authentication Configuration
    jwt_secret: str = Field(default="", description="Secret used to verify bearer tokens")
    jwt_user_claim: str = Field(
        default="userId",
        description="Token claim holding the user id",
    )

    # Application Configuration
    api_host: str = Field(default="0.0.0.0", description="API bind host")
    api_port: int = Field(default=5000, description="API bind port")
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(
        default=False,
        description="Output logs as JSON",
    )

    @property
    def uses_weighted_cost_basis(self) -> bool:
        """Check if merged holdings use an amount-weighted purchase price."""
        return self.cost_basis_mode.lower() != "simple"

    def validate_required(self) -> list[str]:
        """
        Validate that required settings are present.

        Returns:
            List of missing required settings.
        """
        missing = []

        if not self.jwt_secret:
            missing.append("JWT_SECRET")

        return missing


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
