"""
Tests for QuotePipeline.

Tests cover:
- Debouncing (only the last edit in a quiet period is quoted)
- Base-unit conversion with on-chain decimals
- Out-of-order responses are discarded
- Invalid amounts and slippage never reach the router
- Error notices and estimated decimals
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from tokenfeed.core.exceptions import QuoteError, TransientLedgerError, ValidationError
from tokenfeed.core.models import Quote, QuoteState, TradeSide
from tokenfeed.services.swap.decimals import SOL_MINT, DecimalsResolver
from tokenfeed.services.swap.quote_pipeline import (
    QuotePipeline,
    parse_amount,
    slippage_to_bps,
    to_base_units,
)

TOKEN_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
DEBOUNCE = 0.02


def quote_for(input_mint: str, output_mint: str, amount: int, slippage_bps: int) -> Quote:
    """Router stub: output is twice the input."""
    out_amount = amount * 2
    return Quote(
        input_mint=input_mint,
        output_mint=output_mint,
        in_amount=amount,
        out_amount=out_amount,
        min_out_amount=out_amount * (10_000 - slippage_bps) // 10_000,
        slippage_bps=slippage_bps,
    )


@pytest.fixture
def ledger() -> AsyncMock:
    """Ledger reporting 6 decimals for every non-native mint."""
    ledger = AsyncMock()
    ledger.get_parsed_account_info.return_value = {
        "data": {"parsed": {"info": {"decimals": 6}}}
    }
    return ledger


@pytest.fixture
def swap_provider() -> AsyncMock:
    provider = AsyncMock()
    provider.get_quote.side_effect = quote_for
    return provider


@pytest.fixture
def pipeline(swap_provider: AsyncMock, ledger: AsyncMock) -> QuotePipeline:
    return QuotePipeline(swap_provider, DecimalsResolver(ledger), TOKEN_MINT, debounce=DEBOUNCE)


class TestAmountHelpers:
    """Tests for parsing and unit conversion."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("0.5", Decimal("0.5")), ("1,25", Decimal("1.25")), (" 3 ", Decimal("3"))],
    )
    def test_parse_valid(self, text: str, expected: Decimal) -> None:
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "0", "-1", "NaN", "Infinity"])
    def test_parse_invalid(self, text: str) -> None:
        assert parse_amount(text) is None

    def test_base_units_floor(self) -> None:
        assert to_base_units(Decimal("0.5"), 9) == 500_000_000
        assert to_base_units(Decimal("1.0000019"), 6) == 1_000_001

    @pytest.mark.parametrize(("percent", "bps"), [(0.1, 10), (1, 100), (20, 2000)])
    def test_slippage_in_range(self, percent: float, bps: int) -> None:
        assert slippage_to_bps(percent) == bps

    @pytest.mark.parametrize("percent", [0.05, 20.5, float("nan")])
    def test_slippage_out_of_range(self, percent: float) -> None:
        with pytest.raises(ValidationError):
            slippage_to_bps(percent)


class TestDebounce:
    """Tests for request coalescing."""

    @pytest.mark.asyncio
    async def test_rapid_edits_issue_one_request(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        """Typing "1", "12", "123" quotes 123 once."""
        for text in ("1", "12", "123"):
            pipeline.set_amount(text)

        await pipeline.wait_idle()

        swap_provider.get_quote.assert_awaited_once_with(
            SOL_MINT, TOKEN_MINT, 123_000_000_000, 100
        )

    @pytest.mark.asyncio
    async def test_buy_converts_with_native_decimals(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        pipeline.set_amount("0.5")
        await pipeline.wait_idle()

        args = swap_provider.get_quote.await_args.args
        assert args[2] == 500_000_000
        view = pipeline.state.view
        assert view.estimated_output == 1_000.0
        assert view.decimals_out == 6

    @pytest.mark.asyncio
    async def test_sell_converts_with_token_decimals(
        self,
        swap_provider: AsyncMock,
        ledger: AsyncMock,
    ) -> None:
        pipeline = QuotePipeline(
            swap_provider,
            DecimalsResolver(ledger),
            TOKEN_MINT,
            TradeSide.SELL,
            debounce=DEBOUNCE,
        )

        pipeline.set_amount("2.5")
        await pipeline.wait_idle()

        swap_provider.get_quote.assert_awaited_once_with(TOKEN_MINT, SOL_MINT, 2_500_000, 100)

    @pytest.mark.asyncio
    async def test_close_cancels_pending_edit(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        pipeline.set_amount("1")

        await pipeline.close()
        await asyncio.sleep(DEBOUNCE * 2)

        swap_provider.get_quote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_slippage_change_requotes(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        pipeline.set_amount("1")
        await pipeline.wait_idle()

        pipeline.set_slippage(2.5)
        await pipeline.wait_idle()

        assert swap_provider.get_quote.await_count == 2
        assert swap_provider.get_quote.await_args.args[3] == 250
        assert pipeline.state.view.quote.slippage_bps == 250


class TestOrdering:
    """Tests for superseded responses."""

    @pytest.mark.asyncio
    async def test_late_response_is_discarded(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        release_first = asyncio.Event()

        async def slow_first(input_mint, output_mint, amount, slippage_bps):
            if amount == 1_000_000_000:
                await release_first.wait()
            return quote_for(input_mint, output_mint, amount, slippage_bps)

        swap_provider.get_quote.side_effect = slow_first

        pipeline.set_amount("1")
        await asyncio.sleep(DEBOUNCE * 3)
        pipeline.set_amount("2")
        await asyncio.sleep(DEBOUNCE * 3)

        assert pipeline.state.view.quote.in_amount == 2_000_000_000

        release_first.set()
        await pipeline.wait_idle()

        assert swap_provider.get_quote.await_count == 2
        assert pipeline.state.view.quote.in_amount == 2_000_000_000

    @pytest.mark.asyncio
    async def test_invalid_edit_invalidates_inflight(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        release = asyncio.Event()

        async def slow(input_mint, output_mint, amount, slippage_bps):
            await release.wait()
            return quote_for(input_mint, output_mint, amount, slippage_bps)

        swap_provider.get_quote.side_effect = slow

        pipeline.set_amount("1")
        await asyncio.sleep(DEBOUNCE * 3)
        pipeline.set_amount("")
        release.set()
        await pipeline.wait_idle()

        assert pipeline.state.view is None
        assert pipeline.state.busy is False


class TestValidationAndErrors:
    """Tests for input validation and error reporting."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "abc", "0", "-3"])
    async def test_invalid_amount_issues_no_request(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
        text: str,
    ) -> None:
        pipeline.set_amount(text)
        await pipeline.wait_idle()

        swap_provider.get_quote.assert_not_awaited()
        assert pipeline.state.view is None

    @pytest.mark.asyncio
    async def test_invalid_amount_clears_previous_quote(self, pipeline: QuotePipeline) -> None:
        pipeline.set_amount("1")
        await pipeline.wait_idle()
        assert pipeline.state.view is not None

        pipeline.set_amount("0")

        assert pipeline.state.view is None

    @pytest.mark.asyncio
    async def test_dust_amount_reports_notice(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        pipeline.set_amount("0.0000000001")
        await pipeline.wait_idle()

        swap_provider.get_quote.assert_not_awaited()
        assert pipeline.state.notice == "Amount is too small."

    def test_out_of_range_slippage_rejected(self, pipeline: QuotePipeline) -> None:
        with pytest.raises(ValidationError):
            pipeline.set_slippage(25)

        assert pipeline.slippage_bps == 100

    def test_initial_slippage_validated(self, swap_provider: AsyncMock, ledger: AsyncMock) -> None:
        with pytest.raises(ValidationError):
            QuotePipeline(
                swap_provider,
                DecimalsResolver(ledger),
                TOKEN_MINT,
                slippage_percent=0,
            )

    @pytest.mark.asyncio
    async def test_router_error_becomes_notice(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        swap_provider.get_quote.side_effect = QuoteError()

        pipeline.set_amount("1")
        await pipeline.wait_idle()

        assert pipeline.state.view is None
        assert pipeline.state.busy is False
        assert pipeline.state.notice == QuoteError().message

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_notice(
        self,
        pipeline: QuotePipeline,
        swap_provider: AsyncMock,
    ) -> None:
        swap_provider.get_quote.side_effect = RuntimeError("boom")

        pipeline.set_amount("1")
        await pipeline.wait_idle()

        assert pipeline.state.notice is not None
        assert pipeline.state.busy is False

    @pytest.mark.asyncio
    async def test_estimated_decimals_flagged(
        self,
        pipeline: QuotePipeline,
        ledger: AsyncMock,
    ) -> None:
        ledger.get_parsed_account_info.side_effect = TransientLedgerError()

        pipeline.set_amount("1")
        await pipeline.wait_idle()

        view = pipeline.state.view
        assert view.quote.decimals_estimated is True
        assert view.requires_confirmation is True

    @pytest.mark.asyncio
    async def test_on_change_sees_busy_then_result(
        self,
        swap_provider: AsyncMock,
        ledger: AsyncMock,
    ) -> None:
        states: list[QuoteState] = []
        pipeline = QuotePipeline(
            swap_provider,
            DecimalsResolver(ledger),
            TOKEN_MINT,
            debounce=DEBOUNCE,
            on_change=states.append,
        )

        pipeline.set_amount("1")
        await pipeline.wait_idle()

        assert states[0].busy is True
        assert states[-1].busy is False
        assert states[-1].view is not None
