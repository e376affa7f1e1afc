"""
Logging middleware for aiogram.

Logs every incoming update with the chat, user and command it carries,
and how long the handlers took to process it.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from aiogram import BaseMiddleware
from aiogram.types import Update

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseMiddleware):
    """
    Middleware that logs all incoming updates.

    Logs:
    - Chat and user id
    - Command name and arguments (truncated)
    - Processing time

    Usage:
        dp.update.middleware(LoggingMiddleware())
    """

    MAX_ARGS_LENGTH = 80  # Truncate long command arguments in logs

    async def __call__(
        self,
        handler: Callable[[Update, dict[str, Any]], Awaitable[Any]],
        event: Update,
        data: dict[str, Any],
    ) -> Any:
        """
        Process update and log information.

        Args:
            handler: Next handler in chain
            event: Incoming update
            data: Handler data

        Returns:
            Handler result
        """
        start_time = time.monotonic()
        context = f"{self._describe_origin(event)} | {self._describe_content(event)}"

        logger.info(f"Incoming: {context}")

        try:
            result = await handler(event, data)
        except Exception as e:
            elapsed = (time.monotonic() - start_time) * 1000
            logger.error(f"Failed after {elapsed:.0f}ms: {context} | {type(e).__name__}: {e}")
            raise

        elapsed = (time.monotonic() - start_time) * 1000  # ms
        logger.info(f"Handled in {elapsed:.0f}ms: {context}")
        return result

    def _describe_origin(self, event: Update) -> str:
        """Chat and user ids of the update."""
        chat_id = None
        user = None

        if event.message:
            chat_id = event.message.chat.id
            user = event.message.from_user
        elif event.callback_query:
            user = event.callback_query.from_user
            if event.callback_query.message:
                chat_id = event.callback_query.message.chat.id

        user_part = f"user={user.id}" if user else "user=unknown"
        return f"chat={chat_id} {user_part}"

    def _describe_content(self, event: Update) -> str:
        """Command and (truncated) arguments, or the update kind."""
        if event.message and event.message.text:
            command, _, args = event.message.text.partition(" ")
            if not command.startswith("/"):
                return "type=text"
            if len(args) > self.MAX_ARGS_LENGTH:
                args = args[: self.MAX_ARGS_LENGTH] + "..."
            return f"command={command} args={args!r}" if args else f"command={command}"

        if event.callback_query:
            return f"callback={event.callback_query.data}"

        return "type=other"
