"""
Tests for Telegram command handlers.

Handlers are called directly with mocked messages and injected services.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from tokenfeed.core.exceptions import ValidationError
from tokenfeed.core.models import FeedPage, FeedStatus, Network, QuoteState
from tokenfeed.handlers.feed_handler import handle_feed, handle_network, handle_trending
from tokenfeed.handlers.quote_handler import handle_quote
from tokenfeed.templates.messages import FEED_UNAVAILABLE, INVALID_ADDRESS, USAGE_QUOTE


def make_message(chat_id: int = 42) -> MagicMock:
    message = MagicMock()
    message.chat.id = chat_id
    message.answer = AsyncMock()
    message.bot.send_chat_action = AsyncMock()
    return message


def make_command(args: str | None) -> MagicMock:
    command = MagicMock()
    command.args = args
    return command


@pytest.fixture
def aggregator() -> MagicMock:
    aggregator = MagicMock()
    aggregator.fetch_trending = AsyncMock(
        return_value=FeedPage(network=Network.SOLANA, status=FeedStatus.UNAVAILABLE)
    )
    aggregator.fetch_page = AsyncMock(
        return_value=FeedPage(network=Network.SOLANA, status=FeedStatus.EMPTY)
    )
    return aggregator


class TestFeedHandlers:
    """Tests for /network, /trending and /feed."""

    @pytest.mark.asyncio
    async def test_network_switch_resets_feed(self, aggregator: MagicMock) -> None:
        message = make_message()
        chat_networks: dict[int, Network] = {}

        await handle_network(message, make_command("eth"), aggregator, chat_networks)

        assert chat_networks[42] == Network.ETHEREUM
        aggregator.reset_feed.assert_called_once_with(Network.ETHEREUM, session="42")
        assert "ethereum" in message.answer.call_args[0][0]

    @pytest.mark.asyncio
    async def test_network_unknown(self, aggregator: MagicMock) -> None:
        with pytest.raises(ValidationError):
            await handle_network(make_message(), make_command("tron"), aggregator, {})

    @pytest.mark.asyncio
    async def test_trending_uses_chat_network(self, aggregator: MagicMock) -> None:
        message = make_message()

        await handle_trending(message, aggregator, {42: Network.BSC})

        aggregator.fetch_trending.assert_awaited_once_with(Network.BSC)
        assert message.answer.call_args[0][0] == FEED_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_feed_pages_per_chat(self, aggregator: MagicMock) -> None:
        message = make_message(chat_id=7)

        await handle_feed(message, aggregator, {})

        aggregator.fetch_page.assert_awaited_once_with(Network.SOLANA, session="7")


class TestQuoteHandler:
    """Tests for /quote."""

    @pytest.mark.asyncio
    async def test_usage_without_args(self) -> None:
        message = make_message()

        await handle_quote(message, make_command(None), MagicMock())

        message.answer.assert_awaited_once_with(USAGE_QUOTE)

    @pytest.mark.asyncio
    async def test_rejects_bad_mint(self) -> None:
        message = make_message()
        factory = MagicMock()

        await handle_quote(message, make_command("0xabc 1"), factory)

        message.answer.assert_awaited_once_with(INVALID_ADDRESS)
        factory.create_quote_pipeline.assert_not_called()

    @pytest.mark.asyncio
    async def test_runs_pipeline(self, valid_solana_address: str) -> None:
        message = make_message()
        pipeline = MagicMock()
        pipeline.wait_idle = AsyncMock()
        pipeline.close = AsyncMock()
        pipeline.state = QuoteState(notice="No route found")
        factory = MagicMock()
        factory.create_quote_pipeline.return_value = pipeline

        await handle_quote(message, make_command(f"{valid_solana_address} 0.5 2"), factory)

        assert factory.create_quote_pipeline.call_args.kwargs["slippage_percent"] == 2.0
        pipeline.set_amount.assert_called_once_with("0.5")
        pipeline.close.assert_awaited_once()
        assert message.answer.call_args[0][0] == "No route found"

    @pytest.mark.asyncio
    async def test_bad_slippage(self, valid_solana_address: str) -> None:
        with pytest.raises(ValidationError):
            await handle_quote(
                make_message(),
                make_command(f"{valid_solana_address} 0.5 lots"),
                MagicMock(),
            )
