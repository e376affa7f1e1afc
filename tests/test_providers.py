"""
Tests for market-data provider adapters.

Tests cover:
- DexScreener two-step lookup (list -> pairs)
- GeckoTerminal pool/token bundling
- Birdeye metadata extraction
- Pair activity lookup
- Error contract: non-2xx -> ProviderError, timeout -> ProviderTimeout,
  malformed envelope -> empty list
"""

import asyncio
import re

import pytest
from aioresponses import aioresponses

from tokenfeed.core.exceptions import ProviderError, ProviderTimeout
from tokenfeed.core.models import FeedKind, Network
from tokenfeed.services.market_data.activity import PairActivityProvider
from tokenfeed.services.market_data.birdeye import BIRDEYE_API_URL, BirdeyeProvider
from tokenfeed.services.market_data.dexscreener import (
    DEXSCREENER_API_URL,
    DexScreenerProvider,
)
from tokenfeed.services.market_data.geckoterminal import (
    GECKOTERMINAL_API_URL,
    GeckoTerminalProvider,
    gecko_id_from_resource,
    network_from_gecko_id,
)

TRENDING_LIST_URL = f"{DEXSCREENER_API_URL}/token-boosts/top/v1"


@pytest.fixture
def dexscreener() -> DexScreenerProvider:
    return DexScreenerProvider(timeout=1.0)


@pytest.fixture
def gecko() -> GeckoTerminalProvider:
    return GeckoTerminalProvider(timeout=1.0)


@pytest.fixture
def gecko_payload() -> dict:
    """trending_pools response with included tokens."""
    return {
        "data": [
            {
                "id": "solana_POOL1",
                "type": "pool",
                "attributes": {"address": "POOL1", "base_token_price_usd": "1.5"},
                "relationships": {
                    "base_token": {"data": {"id": "solana_BASE1", "type": "token"}},
                    "quote_token": {"data": {"id": "solana_SOLMINT", "type": "token"}},
                    "dex": {"data": {"id": "raydium", "type": "dex"}},
                },
            },
            "not-a-pool",
        ],
        "included": [
            {
                "id": "solana_BASE1",
                "type": "token",
                "attributes": {"address": "BASE1", "name": "Base", "symbol": "BASE"},
            },
            {
                "id": "solana_SOLMINT",
                "type": "token",
                "attributes": {"address": "SOLMINT", "name": "Wrapped SOL", "symbol": "SOL"},
            },
            {"id": "raydium", "type": "dex", "attributes": {"name": "Raydium"}},
        ],
    }


class TestDexScreenerProvider:
    """Tests for DexScreenerProvider."""

    @pytest.mark.asyncio
    async def test_resolves_listed_tokens_to_pairs(
        self,
        dexscreener: DexScreenerProvider,
        make_dex_pair,
    ) -> None:
        """Listed addresses on the requested chain are resolved to pairs."""
        pair = make_dex_pair()
        with aioresponses() as m:
            m.get(
                TRENDING_LIST_URL,
                payload=[
                    {"chainId": "solana", "tokenAddress": "AAA"},
                    {"chainId": "ethereum", "tokenAddress": "0xB"},
                    {"chainId": "solana", "tokenAddress": "AAA"},
                    "junk",
                ],
            )
            m.get(f"{DEXSCREENER_API_URL}/tokens/v1/solana/AAA", payload=[pair, "junk"])

            result = await dexscreener.fetch(Network.SOLANA, FeedKind.TRENDING)

        assert result == [pair]

    @pytest.mark.asyncio
    async def test_feed_uses_profiles_endpoint(
        self,
        dexscreener: DexScreenerProvider,
        make_dex_pair,
    ) -> None:
        pair = make_dex_pair(chain="bsc", quote="WBNB")
        with aioresponses() as m:
            m.get(
                f"{DEXSCREENER_API_URL}/token-profiles/latest/v1",
                payload=[{"chainId": "bsc", "tokenAddress": "0xC"}],
            )
            m.get(f"{DEXSCREENER_API_URL}/tokens/v1/bsc/0xC", payload={"pairs": [pair]})

            result = await dexscreener.fetch(Network.BSC, FeedKind.FEED)

        assert result == [pair]

    @pytest.mark.asyncio
    async def test_nothing_listed_for_chain(self, dexscreener: DexScreenerProvider) -> None:
        with aioresponses() as m:
            m.get(TRENDING_LIST_URL, payload=[{"chainId": "ethereum", "tokenAddress": "0xB"}])

            result = await dexscreener.fetch(Network.SOLANA, FeedKind.TRENDING)

        assert result == []

    @pytest.mark.asyncio
    async def test_malformed_envelope_is_empty(self, dexscreener: DexScreenerProvider) -> None:
        with aioresponses() as m:
            m.get(TRENDING_LIST_URL, payload={"unexpected": True})

            result = await dexscreener.fetch(None, FeedKind.TRENDING)

        assert result == []

    @pytest.mark.asyncio
    async def test_server_error(self, dexscreener: DexScreenerProvider) -> None:
        with aioresponses() as m:
            m.get(TRENDING_LIST_URL, status=503, body="unavailable")

            with pytest.raises(ProviderError) as exc_info:
                await dexscreener.fetch(Network.SOLANA, FeedKind.TRENDING)

        assert exc_info.value.status == 503
        assert exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_client_error_not_retryable(self, dexscreener: DexScreenerProvider) -> None:
        with aioresponses() as m:
            m.get(TRENDING_LIST_URL, status=404)

            with pytest.raises(ProviderError) as exc_info:
                await dexscreener.fetch(Network.SOLANA, FeedKind.TRENDING)

        assert exc_info.value.is_retryable is False

    @pytest.mark.asyncio
    async def test_timeout(self, dexscreener: DexScreenerProvider) -> None:
        with aioresponses() as m:
            m.get(TRENDING_LIST_URL, exception=asyncio.TimeoutError())

            with pytest.raises(ProviderTimeout):
                await dexscreener.fetch(Network.SOLANA, FeedKind.TRENDING)

    @pytest.mark.asyncio
    async def test_invalid_json(self, dexscreener: DexScreenerProvider) -> None:
        with aioresponses() as m:
            m.get(TRENDING_LIST_URL, body="<html>not json</html>")

            with pytest.raises(ProviderError):
                await dexscreener.fetch(Network.SOLANA, FeedKind.TRENDING)


class TestGeckoTerminalProvider:
    """Tests for GeckoTerminalProvider."""

    @pytest.mark.asyncio
    async def test_bundles_pool_with_tokens(
        self,
        gecko: GeckoTerminalProvider,
        gecko_payload: dict,
    ) -> None:
        url = re.compile(
            rf"^{re.escape(GECKOTERMINAL_API_URL)}/networks/solana/trending_pools(\?.*)?$"
        )
        with aioresponses() as m:
            m.get(url, payload=gecko_payload)

            result = await gecko.fetch(Network.SOLANA, FeedKind.TRENDING)

        assert len(result) == 1
        record = result[0]
        assert record["pool"]["attributes"]["address"] == "POOL1"
        assert record["base_token"]["symbol"] == "BASE"
        assert record["quote_token"]["symbol"] == "SOL"
        assert record["dex_id"] == "raydium"
        assert record["network"] == "solana"

    @pytest.mark.asyncio
    async def test_global_list_infers_network(
        self,
        gecko: GeckoTerminalProvider,
        gecko_payload: dict,
    ) -> None:
        url = re.compile(rf"^{re.escape(GECKOTERMINAL_API_URL)}/networks/new_pools(\?.*)?$")
        with aioresponses() as m:
            m.get(url, payload=gecko_payload)

            result = await gecko.fetch(None, FeedKind.FEED)

        assert result[0]["network"] == "solana"

    @pytest.mark.asyncio
    async def test_rate_limited(self, gecko: GeckoTerminalProvider) -> None:
        url = re.compile(rf"^{re.escape(GECKOTERMINAL_API_URL)}/networks/eth/trending_pools.*")
        with aioresponses() as m:
            m.get(url, status=429)

            with pytest.raises(ProviderError) as exc_info:
                await gecko.fetch(Network.ETHEREUM, FeedKind.TRENDING)

        assert exc_info.value.status == 429
        assert exc_info.value.is_retryable

    def test_network_id_mapping(self) -> None:
        assert network_from_gecko_id("polygon_pos") == Network.POLYGON
        assert network_from_gecko_id("unknown") is None
        assert gecko_id_from_resource("polygon_pos_0xabc") == "polygon_pos"
        assert gecko_id_from_resource("nope_0xabc") is None


class TestBirdeyeProvider:
    """Tests for BirdeyeProvider."""

    @pytest.mark.asyncio
    async def test_extracts_metadata(self) -> None:
        provider = BirdeyeProvider(api_key="test-key", timeout=1.0)
        url = re.compile(rf"^{re.escape(BIRDEYE_API_URL)}/defi/token_overview.*")
        payload = {
            "success": True,
            "data": {
                "name": "Bonk",
                "logoURI": "https://cdn.example/bonk.png",
                "extensions": {"website": "https://bonk.example", "twitter": "https://x.com/bonk"},
            },
        }
        with aioresponses() as m:
            m.get(url, payload=payload)

            result = await provider.fetch_metadata("BonkMint", Network.SOLANA)

        assert result["image_url"] == "https://cdn.example/bonk.png"
        assert result["website"] == "https://bonk.example"
        assert result["twitter"] == "https://x.com/bonk"
        assert result["telegram"] is None

    @pytest.mark.asyncio
    async def test_unsuccessful_response(self) -> None:
        provider = BirdeyeProvider(api_key="test-key", timeout=1.0)
        url = re.compile(rf"^{re.escape(BIRDEYE_API_URL)}/defi/token_overview.*")
        with aioresponses() as m:
            m.get(url, payload={"success": False, "data": None})

            with pytest.raises(ProviderError):
                await provider.fetch_metadata("BonkMint", Network.SOLANA)


class TestPairActivityProvider:
    """Tests for PairActivityProvider."""

    @pytest.mark.asyncio
    async def test_reads_counts(self, make_dex_pair) -> None:
        provider = PairActivityProvider(timeout=1.0)
        with aioresponses() as m:
            m.get(
                f"{DEXSCREENER_API_URL}/latest/dex/pairs/solana/PAIR1",
                payload={"pairs": [make_dex_pair()]},
            )

            activity = await provider.fetch_activity(Network.SOLANA, "PAIR1")

        assert activity.buys_24h == 10
        assert activity.sells_24h == 5
        assert activity.volume_24h == 5_000

    @pytest.mark.asyncio
    async def test_pair_not_found(self) -> None:
        provider = PairActivityProvider(timeout=1.0)
        with aioresponses() as m:
            m.get(f"{DEXSCREENER_API_URL}/latest/dex/pairs/solana/GONE", payload={"pairs": None})

            with pytest.raises(ProviderError):
                await provider.fetch_activity(Network.SOLANA, "GONE")
