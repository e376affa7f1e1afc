"""
Output formatters for Telegram messages.

Converts feed pages and quotes into user-friendly Telegram messages.
Uses HTML formatting for better readability.
"""

from html import escape

from tokenfeed.core.models import (
    CanonicalToken,
    FeedPage,
    FeedStatus,
    QuoteState,
)
from tokenfeed.templates.messages import (
    FEED_CACHED_NOTE,
    FEED_EMPTY,
    FEED_STALE_NOTE,
    FEED_UNAVAILABLE,
    QUOTE_ESTIMATED_NOTE,
    QUOTE_NO_RESULT,
)

# Emoji for 24h price direction
CHANGE_EMOJI = {
    True: "🟢",
    False: "🔴",
}

NEW_BADGE = "🆕"


def format_compact_number(num: float) -> str:
    """
    Format a number with K/M/B suffixes.

    Examples:
        >>> format_compact_number(1_234_567)
        '1.23M'
        >>> format_compact_number(0)
        '0'
    """
    if num == 0:
        return "0"

    abs_num = abs(num)
    if abs_num >= 1e9:
        return f"{num / 1e9:.2f}B"
    if abs_num >= 1e6:
        return f"{num / 1e6:.2f}M"
    if abs_num >= 1e3:
        return f"{num / 1e3:.2f}K"
    return f"{num:.2f}"


def format_currency(num: float) -> str:
    """Compact USD amount, e.g. $1.23M."""
    return f"${format_compact_number(num)}"


def format_price(price: float) -> str:
    """
    Format a USD price with precision matching its magnitude.

    Examples:
        >>> format_price(0.00001234)
        '$0.00001234'
        >>> format_price(152.5)
        '$152.50'
    """
    if price == 0:
        return "$0.00"
    if price < 0.01:
        return f"${price:.8f}"
    if price < 1:
        return f"${price:.6f}"
    if price < 100:
        return f"${price:.4f}"
    return f"${price:.2f}"


def format_change(change: float) -> str:
    """Signed 24h change with direction emoji."""
    return f"{CHANGE_EMOJI[change >= 0]} {change:+.2f}%"


def format_token_line(index: int, token: CanonicalToken) -> str:
    """
    Format one token as a compact feed line.

    Args:
        index: 1-based position on the page
        token: Token to render

    Returns:
        Two-line HTML snippet
    """
    badge = f" {NEW_BADGE}" if token.is_new else ""
    symbol = escape(token.base_symbol)
    quote = escape(token.quote_symbol)
    name = escape(token.base_name)

    title = f"<b>{index}. {symbol}</b>/{quote}{badge}"
    if token.links.chart_url:
        title = f'<a href="{escape(token.links.chart_url)}">{title}</a>'

    return (
        f"{title} {name}\n"
        f"   {format_price(token.price_usd)} {format_change(token.price_change_24h)} | "
        f"Liq {format_currency(token.liquidity_usd)} | "
        f"Vol {format_currency(token.volume_24h)} | "
        f"MC {format_currency(token.market_cap)}"
    )


def format_feed_page(page: FeedPage, title: str, start_index: int = 1) -> str:
    """
    Format a feed page as a Telegram message.

    Empty and unavailable pages get distinct messages so users can tell
    "nothing matches" from "try again later".

    Args:
        page: Page from the aggregator
        title: Heading (e.g. "Trending")
        start_index: Number of the first token

    Returns:
        Formatted HTML string for Telegram
    """
    network = page.network.value if page.network else "all chains"

    if page.status == FeedStatus.UNAVAILABLE:
        return FEED_UNAVAILABLE

    if not page.tokens:
        return FEED_EMPTY.format(network=escape(network))

    lines = [
        format_token_line(start_index + offset, token)
        for offset, token in enumerate(page.tokens)
    ]

    message = f"<b>{escape(title)} · {escape(network)}</b>\n\n" + "\n\n".join(lines)

    if page.status == FeedStatus.STALE:
        message += f"\n\n{FEED_STALE_NOTE}"
    elif page.status == FeedStatus.CACHED:
        message += f"\n\n{FEED_CACHED_NOTE}"

    return message


def format_quote(state: QuoteState, spend: str, output_symbol: str) -> str:
    """
    Format the quote pipeline state.

    Args:
        state: Pipeline state after the request settled
        spend: Human-readable spent amount, e.g. "0.5 SOL"
        output_symbol: Symbol of the received asset

    Returns:
        Formatted HTML string for Telegram
    """
    view = state.view
    if view is None:
        return escape(state.notice) if state.notice else QUOTE_NO_RESULT

    quote = view.quote
    out_symbol = escape(output_symbol)

    message = f"""
<b>Swap preview</b>

Spend: {escape(spend)}
Receive: ~{view.estimated_output:,.6g} {out_symbol}
Minimum received: {view.minimum_received:,.6g} {out_symbol}
Price impact: {view.price_impact_pct:.2f}%
Slippage: {quote.slippage_bps / 100:g}%
""".strip()

    if view.requires_confirmation:
        message += f"\n\n{QUOTE_ESTIMATED_NOTE}"

    return message
