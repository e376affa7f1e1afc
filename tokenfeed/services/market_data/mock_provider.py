"""
Mock listing provider for development.

Generates realistic-looking DexScreener-shaped pairs without making API calls.
Uses deterministic random generation so the same request yields the same feed.
"""

import hashlib
import random
import time

from tokenfeed.core.models import FeedKind, Network

# Base58 alphabet, used to fabricate plausible addresses
_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

# Quote asset per chain
NATIVE_QUOTES = {
    Network.SOLANA: "SOL",
    Network.ETHEREUM: "WETH",
    Network.BSC: "WBNB",
    Network.BASE: "WETH",
    Network.POLYGON: "MATIC",
    Network.ARBITRUM: "WETH",
    Network.AVALANCHE: "AVAX",
}


class MockListingProvider:
    """
    Mock implementation of ListingProvider protocol.

    Generates fake but realistic pairs for development and testing.
    The same (network, kind) always returns the same pairs.

    Usage:
        provider = MockListingProvider()
        pairs = await provider.fetch(Network.SOLANA, FeedKind.TRENDING)
    """

    provider_id = "mock"

    # Realistic token name/symbol pairs for mocking
    MOCK_TOKENS = [
        ("Bonk", "BONK"),
        ("Dogwifhat", "WIF"),
        ("Jupiter", "JUP"),
        ("Raydium", "RAY"),
        ("Marinade", "MNDE"),
        ("Orca", "ORCA"),
        ("Pyth", "PYTH"),
        ("Jito", "JTO"),
        ("Tensor", "TNSR"),
        ("Helium", "HNT"),
        ("Pepe", "PEPE"),
        ("Popcat", "POPCAT"),
    ]

    PAIRS_PER_KIND = {
        FeedKind.TRENDING: 12,
        FeedKind.FEED: 60,
    }

    def __init__(self, clock=time.time):
        self._clock = clock

    async def fetch(self, network: Network | None, kind: FeedKind) -> list[dict]:
        """
        Generate mock pairs.

        Args:
            network: Chain to generate for (None = mixed chains)
            kind: Trending or feed

        Returns:
            Raw pair dicts in DexScreener shape
        """
        # Create deterministic seed from the request
        key = f"{network.value if network else 'all'}:{kind.value}"
        seed = int(hashlib.md5(key.encode()).hexdigest(), 16) % (2**32)
        rng = random.Random(seed)

        chains = [network] if network else list(Network)
        return [
            self._make_pair(rng, rng.choice(chains), index)
            for index in range(self.PAIRS_PER_KIND[kind])
        ]

    def _make_pair(self, rng: random.Random, chain: Network, index: int) -> dict:
        name, symbol = self.MOCK_TOKENS[index % len(self.MOCK_TOKENS)]
        if index >= len(self.MOCK_TOKENS):
            symbol = f"{symbol}{index // len(self.MOCK_TOKENS)}"
            name = f"{name} {index // len(self.MOCK_TOKENS)}"

        price = rng.uniform(0.000001, 5)
        liquidity = rng.uniform(1_000, 2_000_000)
        market_cap = liquidity * rng.uniform(2, 40)
        age_hours = rng.uniform(1, 24 * 90)
        quote = NATIVE_QUOTES[chain]

        return {
            "chainId": chain.value,
            "dexId": "raydium" if chain == Network.SOLANA else "uniswap",
            "url": None,
            "pairAddress": self._address(rng),
            "baseToken": {"address": self._address(rng), "name": name, "symbol": symbol},
            "quoteToken": {"address": self._address(rng), "name": quote, "symbol": quote},
            "priceUsd": f"{price:.8f}",
            "txns": {"h24": {"buys": rng.randint(5, 10_000), "sells": rng.randint(5, 10_000)}},
            "volume": {"h24": round(liquidity * rng.uniform(0.1, 3), 2)},
            "priceChange": {"h24": round(rng.uniform(-60, 250), 2)},
            "liquidity": {"usd": round(liquidity, 2)},
            "fdv": round(market_cap * 1.1, 2),
            "marketCap": round(market_cap, 2),
            "pairCreatedAt": int((self._clock() - age_hours * 3600) * 1000),
            "info": {"imageUrl": None, "websites": [], "socials": []},
        }

    @staticmethod
    def _address(rng: random.Random) -> str:
        return "".join(rng.choice(_ALPHABET) for _ in range(44))
