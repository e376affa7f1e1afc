"""
Feed handlers.

Handles:
- /network <name> - select the chat's network and restart its feed
- /trending - trending list for the chat's network
- /feed - next page of the chat's feed

Each chat pages its feed independently (the chat id is the cursor session).
"""

import logging

from aiogram import Router
from aiogram.enums import ChatAction
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from tokenfeed.core.models import Network
from tokenfeed.services.market_data.aggregator import MarketDataAggregator
from tokenfeed.templates.messages import NETWORK_SELECTED, USAGE_NETWORK
from tokenfeed.utils.formatters import format_feed_page
from tokenfeed.utils.validators import parse_network

logger = logging.getLogger(__name__)

router = Router(name="feed")

DEFAULT_NETWORK = Network.SOLANA


def _chat_network(message: Message, chat_networks: dict[int, Network]) -> Network:
    return chat_networks.get(message.chat.id, DEFAULT_NETWORK)


@router.message(Command("network"))
async def handle_network(
    message: Message,
    command: CommandObject,
    aggregator: MarketDataAggregator,
    chat_networks: dict[int, Network],
) -> None:
    """
    Handle /network command.

    Raises:
        ValidationError: Unknown network (answered by ErrorHandlerMiddleware)
    """
    if not command.args:
        supported = ", ".join(network.value for network in Network)
        await message.answer(USAGE_NETWORK.format(networks=supported))
        return

    network = parse_network(command.args)
    chat_networks[message.chat.id] = network
    aggregator.reset_feed(network, session=str(message.chat.id))

    logger.info(f"Chat {message.chat.id} switched to {network.value}")
    await message.answer(NETWORK_SELECTED.format(network=network.value))


@router.message(Command("trending"))
async def handle_trending(
    message: Message,
    aggregator: MarketDataAggregator,
    chat_networks: dict[int, Network],
) -> None:
    """Handle /trending command."""
    network = _chat_network(message, chat_networks)

    await message.bot.send_chat_action(
        chat_id=message.chat.id,
        action=ChatAction.TYPING,
    )

    page = await aggregator.fetch_trending(network)
    await message.answer(
        format_feed_page(page, title="Trending"),
        disable_web_page_preview=True,
    )


@router.message(Command("feed"))
async def handle_feed(
    message: Message,
    aggregator: MarketDataAggregator,
    chat_networks: dict[int, Network],
) -> None:
    """
    Handle /feed command.

    Each call shows the next page; an exhausted feed is refilled.
    """
    network = _chat_network(message, chat_networks)

    await message.bot.send_chat_action(
        chat_id=message.chat.id,
        action=ChatAction.TYPING,
    )

    page = await aggregator.fetch_page(network, session=str(message.chat.id))
    await message.answer(
        format_feed_page(page, title="Feed"),
        disable_web_page_preview=True,
    )
