"""
Pytest configuration and fixtures.

Provides reusable test fixtures for:
- Controllable clock and cache
- Sample raw provider payloads
- Canonical tokens
- Fake listing providers for the aggregator
"""

from collections.abc import Callable

import pytest

from tokenfeed.core.exceptions import ProviderError
from tokenfeed.core.models import CanonicalToken, FeedKind, Network
from tokenfeed.services.cache import TTLCache

# =============================================================================
# Clock / Cache Fixtures
# =============================================================================


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    """Empty cache driven by the fake clock."""
    return TTLCache(clock=clock)


# =============================================================================
# Fake Providers
# =============================================================================


class FakeListingProvider:
    """
    ListingProvider returning canned records.

    Set `error` to make every call raise; `calls` counts invocations.
    """

    def __init__(
        self,
        provider_id: str = "dexscreener",
        records: list[dict] | None = None,
        error: Exception | None = None,
    ):
        self.provider_id = provider_id
        self.records = records or []
        self.error = error
        self.calls: list[tuple[Network | None, FeedKind]] = []

    async def fetch(self, network: Network | None, kind: FeedKind) -> list[dict]:
        self.calls.append((network, kind))
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def fake_provider() -> type[FakeListingProvider]:
    """The FakeListingProvider class (instantiate per test)."""
    return FakeListingProvider


@pytest.fixture
def failing_provider() -> FakeListingProvider:
    """Provider that always answers 500."""
    return FakeListingProvider(
        provider_id="dexscreener",
        error=ProviderError("dexscreener", 500, "boom"),
    )


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def make_dex_pair() -> Callable[..., dict]:
    """Factory for raw DexScreener pair dicts."""

    def _make(
        pair_address: str = "PAIR1",
        symbol: str = "ABC",
        base_address: str | None = None,
        chain: str = "solana",
        quote: str = "SOL",
        price: str | None = "0.0123",
        liquidity: float | None = 100.0,
        **overrides,
    ) -> dict:
        pair = {
            "chainId": chain,
            "dexId": "raydium",
            "url": f"https://dexscreener.com/{chain}/{pair_address}",
            "pairAddress": pair_address,
            "baseToken": {
                "address": base_address or f"{symbol}-mint",
                "name": f"{symbol} Token",
                "symbol": symbol,
            },
            "quoteToken": {"address": f"{quote}-mint", "name": quote, "symbol": quote},
            "priceUsd": price,
            "txns": {"h24": {"buys": 10, "sells": 5}},
            "volume": {"h24": 5_000},
            "priceChange": {"h24": 12.5},
            "liquidity": {"usd": liquidity},
            "fdv": 2_000_000,
            "marketCap": 1_500_000,
            "pairCreatedAt": 1_700_000_000_000,
            "info": {
                "imageUrl": None,
                "websites": [{"label": "Website", "url": "https://abc.example"}],
                "socials": [{"type": "twitter", "url": "https://x.com/abc"}],
            },
        }
        pair.update(overrides)
        return pair

    return _make


@pytest.fixture
def make_token() -> Callable[..., CanonicalToken]:
    """Factory for CanonicalToken with sensible defaults."""

    def _make(
        pair_id: str = "PAIR1",
        symbol: str = "ABC",
        liquidity: float = 1_000.0,
        chain: Network = Network.SOLANA,
        **overrides,
    ) -> CanonicalToken:
        fields = {
            "pair_id": pair_id,
            "base_address": f"{symbol}-mint",
            "base_symbol": symbol,
            "base_name": f"{symbol} Token",
            "quote_symbol": "SOL",
            "price_usd": 1.0,
            "liquidity_usd": liquidity,
            "chain": chain,
            "avatar_url": "https://img.example/placeholder.svg",
            "source": "dexscreener",
        }
        fields.update(overrides)
        return CanonicalToken(**fields)

    return _make


@pytest.fixture
def valid_solana_address() -> str:
    """Valid Solana token address (USDC)."""
    return "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


@pytest.fixture
def another_valid_address() -> str:
    """Another valid Solana address (wrapped SOL)."""
    return "So11111111111111111111111111111111111111112"


@pytest.fixture
def invalid_addresses() -> list[str]:
    """List of invalid addresses for testing."""
    return [
        "",  # Empty
        "   ",  # Whitespace
        "abc",  # Too short
        "0x742d35Cc6634C0532925a3b844Bc9e7595f5bEb2",  # Ethereum
        "So11111111111111111111111111111111111111112!",  # Invalid char
        "O0Il" * 11,  # Invalid base58 chars
    ]
