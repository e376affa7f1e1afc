"""Message templates."""

from tokenfeed.templates.messages import (
    ERROR_GENERIC,
    FEED_CACHED_NOTE,
    FEED_EMPTY,
    FEED_STALE_NOTE,
    FEED_UNAVAILABLE,
    HELP,
    INVALID_ADDRESS,
    INVALID_AMOUNT,
    NETWORK_SELECTED,
    QUOTE_ESTIMATED_NOTE,
    QUOTE_NO_RESULT,
    USAGE_NETWORK,
    USAGE_QUOTE,
    WELCOME,
)

__all__ = [
    "WELCOME",
    "HELP",
    "NETWORK_SELECTED",
    "FEED_EMPTY",
    "FEED_UNAVAILABLE",
    "FEED_STALE_NOTE",
    "FEED_CACHED_NOTE",
    "QUOTE_ESTIMATED_NOTE",
    "QUOTE_NO_RESULT",
    "USAGE_NETWORK",
    "USAGE_QUOTE",
    "INVALID_ADDRESS",
    "INVALID_AMOUNT",
    "ERROR_GENERIC",
]
