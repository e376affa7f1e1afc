"""
Error reply middleware.

Turns an exception escaping a handler into at most one chat reply.

Handlers only raise for bad input; market data failures are absorbed by
the aggregator and quote failures become pipeline notices. Anything else
reaching this point is reported as a fault:
- ValidationError / PreconditionError: the error's own text (WARNING)
- Telegram refused delivery (bot blocked, chat gone): no reply (INFO)
- Other TokenFeedError: its text, logged as a leak (ERROR)
- Anything else: ERROR_GENERIC, logged with traceback
"""

import logging
from collections.abc import Awaitable, Callable
from html import escape
from typing import Any

from aiogram import BaseMiddleware
from aiogram.exceptions import TelegramForbiddenError
from aiogram.types import Update

from tokenfeed.core.exceptions import PreconditionError, TokenFeedError, ValidationError
from tokenfeed.templates.messages import ERROR_GENERIC

logger = logging.getLogger(__name__)

# Errors caused by what the user typed
INPUT_ERRORS = (ValidationError, PreconditionError)


class ErrorHandlerMiddleware(BaseMiddleware):
    """
    Answers a failed update once and never re-raises.

    Error texts are plain strings; they are escaped because the bot
    sends HTML.

    Usage:
        dp.update.middleware(ErrorHandlerMiddleware())
    """

    async def __call__(
        self,
        handler: Callable[[Update, dict[str, Any]], Awaitable[Any]],
        event: Update,
        data: dict[str, Any],
    ) -> Any:
        try:
            return await handler(event, data)
        except TelegramForbiddenError as e:
            logger.info(f"Cannot reply in {self._chat_of(event)}: {e}")
        except Exception as e:
            reply = self._reply_for(e)
            await self._answer(event, reply)
        return None

    def _reply_for(self, error: Exception) -> str:
        """Pick the reply text and log the error at its family's level."""
        if isinstance(error, INPUT_ERRORS):
            logger.warning(f"Rejected input: {error.technical_message}")
            return escape(error.message)

        if isinstance(error, TokenFeedError):
            logger.error(f"{type(error).__name__} reached a handler: {error.technical_message}")
            return escape(error.message) if error.message else ERROR_GENERIC

        logger.error(f"Unexpected error: {type(error).__name__}: {error}", exc_info=error)
        return ERROR_GENERIC

    async def _answer(self, event: Update, text: str) -> None:
        if event.message is None:
            return
        try:
            await event.message.answer(text)
        except Exception as e:
            logger.error(f"Failed to send error reply to {self._chat_of(event)}: {e}")

    @staticmethod
    def _chat_of(event: Update) -> str:
        return f"chat={event.message.chat.id}" if event.message else "chat=?"
