"""
Application settings loaded from environment variables.

Uses pydantic-settings for automatic loading from .env file.
All settings have sensible defaults for development mode.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ACCEPTED_QUOTES = frozenset(
    {"SOL", "USDC", "USDT", "ETH", "WETH", "BNB", "WBNB", "MATIC", "AVAX"}
)


class Settings(BaseSettings):
    """
    Application configuration.

    All values are loaded from environment variables.
    Copy .env.example to .env and fill in your values.

    Attributes:
        telegram_bot_token: Bot token from @BotFather (required)
        environment: Runtime environment (development/production)
        use_mock_services: Use mock listing provider instead of real APIs
        log_level: Logging verbosity
        birdeye_api_key: Enables metadata enrichment (optional)
        helius_api_key: Enables holder concentration (optional)
        provider_timeout_seconds: Bounded wait for each market-data call
        trending_cache_ttl: Seconds a trending result stays fresh
        page_cache_ttl: Seconds a feed buffer stays fresh
        metadata_cache_ttl: Seconds enrichment metadata stays fresh
        quote_debounce_seconds: Quiet period before a quote is requested
    """

    # Required
    telegram_bot_token: str

    # Environment
    environment: Literal["development", "production"] = "development"
    use_mock_services: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Upstream endpoints
    dexscreener_base_url: str = "https://api.dexscreener.com"
    geckoterminal_base_url: str = "https://api.geckoterminal.com/api/v2"
    birdeye_base_url: str = "https://public-api.birdeye.so"
    helius_rpc_url: str = "https://mainnet.helius-rpc.com"
    jupiter_base_url: str = "https://lite-api.jup.ag/swap/v1"
    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"

    # API Keys (empty = provider skipped)
    birdeye_api_key: str = ""
    helius_api_key: str = ""

    # Provider calls
    provider_timeout_seconds: float = Field(default=6.0, gt=0)
    provider_max_attempts: int = Field(default=2, ge=1)
    provider_retry_backoff_seconds: float = Field(default=0.5, ge=0)

    # Cache TTLs (seconds)
    trending_cache_ttl: float = 60
    page_cache_ttl: float = 60
    metadata_cache_ttl: float = 30 * 60
    activity_cache_ttl: float = 30
    holders_cache_ttl: float = 5 * 60

    # Feed shaping
    accepted_quote_symbols: frozenset[str] = DEFAULT_ACCEPTED_QUOTES
    trending_size: int = Field(default=5, ge=1)
    page_size: int = Field(default=20, ge=1)
    feed_corpus_size: int = Field(default=60, ge=1)
    min_market_cap: float = Field(default=0.0, ge=0)
    enrichment_limit: int = Field(default=5, ge=0)
    max_feed_sessions: int = Field(default=1000, ge=1)

    # Quotes
    quote_debounce_seconds: float = Field(default=0.5, ge=0)
    default_slippage_percent: float = 1.0
    min_slippage_bps: int = 10
    max_slippage_bps: int = 2000

    # Execution
    submit_max_attempts: int = Field(default=3, ge=1)
    confirm_timeout_seconds: float = Field(default=60.0, gt=0)

    # Pydantic settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Case-insensitive env var names
        case_sensitive=False,
        # Don't fail if .env doesn't exist
        env_ignore_empty=True,
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache to avoid re-reading .env file on every call.
    Settings are loaded once and reused throughout the application.

    Returns:
        Settings instance with all configuration values.
    """
    return Settings()
