"""
Tests for HeliusHolderProvider.

Tests cover:
- Successful RPC responses
- Partial data handling
- Error handling
- Holder concentration calculation
"""

import pytest
from aioresponses import CallbackResult, aioresponses

from tokenfeed.core.exceptions import ProviderError
from tokenfeed.services.market_data.holders import HELIUS_RPC_URL, HeliusHolderProvider

RPC_URL = f"{HELIUS_RPC_URL}/?api-key=test-api-key"
MINT = "TestToken11111111111111111111111111111111"


@pytest.fixture
def helius_provider() -> HeliusHolderProvider:
    """HeliusHolderProvider with test API key."""
    return HeliusHolderProvider(api_key="test-api-key", timeout=1.0)


@pytest.fixture
def supply_result() -> dict:
    """getTokenSupply result: 1M tokens."""
    return {"value": {"amount": "1000000000000", "decimals": 6, "uiAmount": 1_000_000.0}}


@pytest.fixture
def holders_result() -> dict:
    """getTokenLargestAccounts result."""
    amounts = [500_000, 200_000, 100_000, 50_000, 50_000, 25_000, 25_000, 20_000, 15_000, 15_000]
    return {
        "value": [
            {"address": f"holder{i}", "uiAmount": float(amount)}
            for i, amount in enumerate(amounts, start=1)
        ]
    }


def rpc_router(results: dict, status: int = 200):
    """aioresponses callback answering by JSON-RPC method name."""

    def _callback(url, **kwargs):
        method = kwargs["json"]["method"]
        result = results.get(method)
        if isinstance(result, Exception):
            return CallbackResult(status=500, body="error")
        if result is None:
            return CallbackResult(payload={"jsonrpc": "2.0", "id": "1", "error": {"code": -32602}})
        return CallbackResult(status=status, payload={"jsonrpc": "2.0", "id": "1", "result": result})

    return _callback


class TestHeliusHolderProviderSuccess:
    """Tests for successful RPC responses."""

    @pytest.mark.asyncio
    async def test_calculates_concentration(
        self,
        helius_provider: HeliusHolderProvider,
        supply_result: dict,
        holders_result: dict,
    ) -> None:
        """Top holder percentages are computed against supply."""
        callback = rpc_router(
            {"getTokenSupply": supply_result, "getTokenLargestAccounts": holders_result}
        )
        with aioresponses() as m:
            m.post(RPC_URL, callback=callback, repeat=True)

            snapshot = await helius_provider.fetch_holders(MINT)

        assert snapshot.mint == MINT
        assert snapshot.holders_sampled == 10
        assert snapshot.top1_percent == 50.0
        assert snapshot.top5_percent == 90.0
        assert snapshot.top10_percent == 100.0


class TestHeliusHolderProviderPartial:
    """Tests for partial failures."""

    @pytest.mark.asyncio
    async def test_supply_failure_leaves_percentages_unknown(
        self,
        helius_provider: HeliusHolderProvider,
        holders_result: dict,
    ) -> None:
        callback = rpc_router(
            {"getTokenSupply": RuntimeError(), "getTokenLargestAccounts": holders_result}
        )
        with aioresponses() as m:
            m.post(RPC_URL, callback=callback, repeat=True)

            snapshot = await helius_provider.fetch_holders(MINT)

        assert snapshot.holders_sampled == 10
        assert snapshot.top10_percent is None

    @pytest.mark.asyncio
    async def test_few_holders(
        self,
        helius_provider: HeliusHolderProvider,
        supply_result: dict,
    ) -> None:
        """With fewer than 5 holders, top5 is unknown and top10 uses all."""
        holders = {"value": [{"uiAmount": 100_000.0}, {"uiAmount": 50_000.0}]}
        callback = rpc_router(
            {"getTokenSupply": supply_result, "getTokenLargestAccounts": holders}
        )
        with aioresponses() as m:
            m.post(RPC_URL, callback=callback, repeat=True)

            snapshot = await helius_provider.fetch_holders(MINT)

        assert snapshot.top1_percent == 10.0
        assert snapshot.top5_percent is None
        assert snapshot.top10_percent == 15.0


class TestHeliusHolderProviderErrors:
    """Tests for error handling."""

    @pytest.mark.asyncio
    async def test_both_calls_fail(self, helius_provider: HeliusHolderProvider) -> None:
        callback = rpc_router({})
        with aioresponses() as m:
            m.post(RPC_URL, callback=callback, repeat=True)

            with pytest.raises(ProviderError):
                await helius_provider.fetch_holders(MINT)


class TestHolderConcentration:
    """Tests for the concentration calculation."""

    def test_zero_supply(self, helius_provider: HeliusHolderProvider) -> None:
        assert helius_provider._calculate_holder_concentration([{"uiAmount": 1.0}], 0) == {}

    def test_unsorted_input(self, helius_provider: HeliusHolderProvider) -> None:
        holders = [{"uiAmount": 10.0}, {"uiAmount": 40.0}]

        result = helius_provider._calculate_holder_concentration(holders, 100.0)

        assert result["top1"] == 40.0
        assert result["top10"] == 50.0
