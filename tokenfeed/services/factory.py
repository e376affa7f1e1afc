"""
Service factory for dependency injection.

Creates and configures all services based on application settings.
Switches between mock and real listing providers automatically.

This is the single point of service creation - all services
should be created through this factory.
"""

import logging

from tokenfeed.config.settings import Settings
from tokenfeed.core.models import Quote, TradeSide
from tokenfeed.core.protocols import (
    ActivityProvider,
    HolderDataProvider,
    LedgerConnection,
    ListingProvider,
    MetadataProvider,
    SwapProvider,
    WalletSigner,
)
from tokenfeed.services.cache import TTLCache
from tokenfeed.services.market_data.activity import PairActivityProvider
from tokenfeed.services.market_data.aggregator import MarketDataAggregator
from tokenfeed.services.market_data.birdeye import BirdeyeProvider
from tokenfeed.services.market_data.dexscreener import DexScreenerProvider
from tokenfeed.services.market_data.geckoterminal import GeckoTerminalProvider
from tokenfeed.services.market_data.holders import HeliusHolderProvider
from tokenfeed.services.market_data.mock_provider import MockListingProvider
from tokenfeed.services.swap.decimals import SOL_MINT, DecimalsResolver
from tokenfeed.services.swap.execution import SwapExecution
from tokenfeed.services.swap.jupiter import JupiterSwapProvider
from tokenfeed.services.swap.ledger import SolanaRpcLedger
from tokenfeed.services.swap.quote_pipeline import QuotePipeline

logger = logging.getLogger(__name__)


class ServiceFactory:
    """
    Factory for creating application services.

    Reads configuration and creates appropriate service implementations:
    - Mock listings for development (USE_MOCK_SERVICES=true)
    - Real upstream APIs otherwise
    - Optional providers only when their API key is configured

    Shared collaborators (cache, ledger, decimals resolver, swap provider)
    are created lazily and reused.

    Usage:
        factory = ServiceFactory(settings)
        aggregator = factory.create_aggregator()
    """

    def __init__(self, settings: Settings):
        """
        Initialize factory with application settings.

        Args:
            settings: Application configuration
        """
        self._settings = settings
        self._cache: TTLCache | None = None
        self._ledger: LedgerConnection | None = None
        self._decimals: DecimalsResolver | None = None
        self._swap_provider: SwapProvider | None = None
        self._log_mode()

    def _log_mode(self) -> None:
        """Log the current mode for debugging."""
        mode = "MOCK" if self._settings.use_mock_services else "PRODUCTION"
        logger.info(f"ServiceFactory initialized in {mode} mode")

    # =========================================================================
    # Market data
    # =========================================================================

    def create_listing_providers(self) -> list[ListingProvider]:
        """
        Create listing providers in priority order.

        Returns:
            [MockListingProvider] in mock mode, otherwise
            [DexScreenerProvider, GeckoTerminalProvider]
        """
        if self._settings.use_mock_services:
            logger.debug("Creating MockListingProvider")
            return [MockListingProvider()]

        timeout = self._settings.provider_timeout_seconds
        logger.debug("Creating DexScreenerProvider, GeckoTerminalProvider")
        return [
            DexScreenerProvider(base_url=self._settings.dexscreener_base_url, timeout=timeout),
            GeckoTerminalProvider(base_url=self._settings.geckoterminal_base_url, timeout=timeout),
        ]

    def create_metadata_provider(self) -> MetadataProvider | None:
        """Create Birdeye enrichment, or None without an API key / in mock mode."""
        if self._settings.use_mock_services or not self._settings.birdeye_api_key:
            logger.debug("Metadata enrichment disabled")
            return None

        return BirdeyeProvider(
            api_key=self._settings.birdeye_api_key,
            base_url=self._settings.birdeye_base_url,
            timeout=self._settings.provider_timeout_seconds,
        )

    def create_activity_provider(self) -> ActivityProvider | None:
        """Create the pair activity provider (None in mock mode)."""
        if self._settings.use_mock_services:
            return None

        return PairActivityProvider(
            base_url=self._settings.dexscreener_base_url,
            timeout=self._settings.provider_timeout_seconds,
        )

    def create_holder_provider(self) -> HolderDataProvider | None:
        """Create the Helius holder provider, or None without an API key."""
        if self._settings.use_mock_services or not self._settings.helius_api_key:
            logger.debug("Holder concentration disabled")
            return None

        return HeliusHolderProvider(
            api_key=self._settings.helius_api_key,
            base_url=self._settings.helius_rpc_url,
            timeout=self._settings.provider_timeout_seconds,
        )

    def create_cache(self) -> TTLCache:
        """Get the shared TTL cache."""
        if self._cache is None:
            self._cache = TTLCache()
        return self._cache

    def create_aggregator(self) -> MarketDataAggregator:
        """
        Create the market data aggregator.

        This is the primary service used by the feed handlers.
        Creates all dependencies automatically.

        Returns:
            MarketDataAggregator ready for use
        """
        settings = self._settings
        logger.info("Creating MarketDataAggregator with all dependencies")

        return MarketDataAggregator(
            self.create_listing_providers(),
            self.create_cache(),
            metadata_provider=self.create_metadata_provider(),
            activity_provider=self.create_activity_provider(),
            holder_provider=self.create_holder_provider(),
            accepted_quotes=settings.accepted_quote_symbols,
            trending_size=settings.trending_size,
            page_size=settings.page_size,
            corpus_size=settings.feed_corpus_size,
            min_market_cap=settings.min_market_cap,
            enrichment_limit=settings.enrichment_limit,
            timeout=settings.provider_timeout_seconds,
            max_attempts=settings.provider_max_attempts,
            retry_backoff=settings.provider_retry_backoff_seconds,
            trending_ttl=settings.trending_cache_ttl,
            page_ttl=settings.page_cache_ttl,
            metadata_ttl=settings.metadata_cache_ttl,
            activity_ttl=settings.activity_cache_ttl,
            holders_ttl=settings.holders_cache_ttl,
            max_sessions=settings.max_feed_sessions,
        )

    # =========================================================================
    # Swap
    # =========================================================================

    def create_swap_provider(self) -> SwapProvider:
        """Get the shared Jupiter provider."""
        if self._swap_provider is None:
            logger.debug("Creating JupiterSwapProvider")
            self._swap_provider = JupiterSwapProvider(base_url=self._settings.jupiter_base_url)
        return self._swap_provider

    def create_ledger(self) -> LedgerConnection:
        """Get the shared Solana RPC connection."""
        if self._ledger is None:
            logger.debug("Creating SolanaRpcLedger")
            self._ledger = SolanaRpcLedger(rpc_url=self._settings.solana_rpc_url)
        return self._ledger

    def create_decimals_resolver(self) -> DecimalsResolver:
        """Get the shared decimals resolver (memoizes lookups)."""
        if self._decimals is None:
            self._decimals = DecimalsResolver(self.create_ledger(), native_mint=SOL_MINT)
        return self._decimals

    def create_quote_pipeline(
        self,
        token_mint: str,
        side: TradeSide = TradeSide.BUY,
        slippage_percent: float | None = None,
        on_change=None,
    ) -> QuotePipeline:
        """
        Create a quote pipeline for one trade form.

        Raises:
            ValidationError: Slippage out of range
        """
        settings = self._settings
        return QuotePipeline(
            self.create_swap_provider(),
            self.create_decimals_resolver(),
            token_mint,
            side,
            native_mint=SOL_MINT,
            debounce=settings.quote_debounce_seconds,
            slippage_percent=(
                settings.default_slippage_percent if slippage_percent is None else slippage_percent
            ),
            min_slippage_bps=settings.min_slippage_bps,
            max_slippage_bps=settings.max_slippage_bps,
            on_change=on_change,
        )

    def create_execution(
        self,
        quote: Quote | None,
        wallet: WalletSigner,
        allow_estimated_decimals: bool = False,
    ) -> SwapExecution:
        """Create an execution for one accepted quote."""
        return SwapExecution(
            quote,
            self.create_swap_provider(),
            wallet,
            self.create_ledger(),
            allow_estimated_decimals=allow_estimated_decimals,
            submit_max_attempts=self._settings.submit_max_attempts,
            confirm_timeout=self._settings.confirm_timeout_seconds,
        )
