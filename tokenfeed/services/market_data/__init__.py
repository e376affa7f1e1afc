"""Market data: provider adapters, normalizer and aggregator."""

from tokenfeed.services.market_data.activity import PairActivityProvider
from tokenfeed.services.market_data.aggregator import MarketDataAggregator, ProviderOutcome
from tokenfeed.services.market_data.birdeye import BirdeyeProvider
from tokenfeed.services.market_data.dexscreener import DexScreenerProvider
from tokenfeed.services.market_data.geckoterminal import GeckoTerminalProvider
from tokenfeed.services.market_data.holders import HeliusHolderProvider
from tokenfeed.services.market_data.mock_provider import MockListingProvider
from tokenfeed.services.market_data.normalizer import normalize

__all__ = [
    "BirdeyeProvider",
    "DexScreenerProvider",
    "GeckoTerminalProvider",
    "HeliusHolderProvider",
    "MarketDataAggregator",
    "MockListingProvider",
    "PairActivityProvider",
    "ProviderOutcome",
    "normalize",
]
