"""
Quote preview handler.

Handles /quote <mint> <SOL amount> [slippage %].
Main workflow:
1. Parse and validate arguments
2. Run a buy quote through a QuotePipeline
3. Format and send the preview

Execution is not offered here: the bot has no wallet.
"""

import logging

from aiogram import Router
from aiogram.enums import ChatAction
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from tokenfeed.core.exceptions import ValidationError
from tokenfeed.core.models import TradeSide
from tokenfeed.services.factory import ServiceFactory
from tokenfeed.services.swap.quote_pipeline import parse_amount
from tokenfeed.templates.messages import INVALID_ADDRESS, INVALID_AMOUNT, USAGE_QUOTE
from tokenfeed.utils.formatters import format_quote
from tokenfeed.utils.validators import validate_solana_address

logger = logging.getLogger(__name__)

router = Router(name="quote")


@router.message(Command("quote"))
async def handle_quote(
    message: Message,
    command: CommandObject,
    factory: ServiceFactory,
) -> None:
    """
    Handle /quote command.

    Args:
        message: Incoming Telegram message
        command: Parsed command arguments
        factory: Injected service factory
    """
    args = (command.args or "").split()
    if len(args) not in (2, 3):
        await message.answer(USAGE_QUOTE)
        return

    mint, amount_text = args[0], args[1]

    is_valid, error = validate_solana_address(mint)
    if not is_valid:
        logger.debug(f"Invalid mint: {error}")
        await message.answer(INVALID_ADDRESS)
        return

    if parse_amount(amount_text) is None:
        await message.answer(INVALID_AMOUNT)
        return

    slippage_percent = None
    if len(args) == 3:
        try:
            slippage_percent = float(args[2].rstrip("%"))
        except ValueError:
            raise ValidationError(
                message="Slippage must be a number, e.g. 1 for 1%.",
                technical_message=f"Bad slippage argument: {args[2]!r}",
            ) from None

    await message.bot.send_chat_action(
        chat_id=message.chat.id,
        action=ChatAction.TYPING,
    )

    # Slippage range errors surface as ValidationError via middleware
    pipeline = factory.create_quote_pipeline(
        mint,
        TradeSide.BUY,
        slippage_percent=slippage_percent,
    )
    try:
        pipeline.set_amount(amount_text)
        await pipeline.wait_idle()
        state = pipeline.state
    finally:
        await pipeline.close()

    await message.answer(format_quote(state, spend=f"{amount_text} SOL", output_symbol=mint[:6]))
