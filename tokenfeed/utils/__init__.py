"""Utility functions."""

from tokenfeed.utils.formatters import (
    format_compact_number,
    format_feed_page,
    format_price,
    format_quote,
)
from tokenfeed.utils.validators import parse_network, validate_solana_address

__all__ = [
    "validate_solana_address",
    "parse_network",
    "format_compact_number",
    "format_price",
    "format_feed_page",
    "format_quote",
]
