"""
Message templates for Telegram bot.

All user-facing messages are defined here for easy localization
and consistent messaging. Uses HTML formatting for Telegram.

Template naming convention:
- WELCOME, HELP - informational messages
- FEED_*, QUOTE_* - status messages for feed and quote replies
- ERROR_* - error messages
- INVALID_* / USAGE_* - validation error messages
"""

# =============================================================================
# Informational Messages
# =============================================================================

WELCOME = """
Hi! I'm <b>TokenFeed</b>

I track trending tokens across DEXes and quote swaps on Solana.

/trending - top tokens right now
/feed - scroll the live feed
/network solana - switch chain
/quote &lt;mint&gt; &lt;SOL amount&gt; - preview a buy
""".strip()

HELP = """
<b>How to use TokenFeed:</b>

1. Pick a chain: <code>/network solana</code>
2. See what's hot: /trending
3. Keep scrolling: /feed (each call shows the next page)
4. Preview a buy: <code>/quote &lt;mint&gt; 0.5 1</code>
   (spend 0.5 SOL with 1% slippage)

<b>Supported chains:</b>
{networks}

<b>Data sources:</b>
• DexScreener, GeckoTerminal (listings)
• Jupiter (swap quotes)

<i>Disclaimer: TokenFeed does not give financial advice.
Prices are indicative and may lag the market.</i>
""".strip()

NETWORK_SELECTED = """
Network set to <b>{network}</b>. The feed starts from the top.
""".strip()

# =============================================================================
# Feed Status Messages
# =============================================================================

FEED_EMPTY = """
No tokens match on <b>{network}</b> right now.
""".strip()

FEED_UNAVAILABLE = """
Market data is temporarily unavailable.

Try again in a minute.
""".strip()

FEED_STALE_NOTE = "<i>Showing last known data, live sources are not responding.</i>"

FEED_CACHED_NOTE = "<i>Showing recent cached data.</i>"

# =============================================================================
# Quote Messages
# =============================================================================

QUOTE_ESTIMATED_NOTE = """
<b>Warning:</b> token decimals could not be verified.
Amounts may be off. Double-check before swapping.
""".strip()

QUOTE_NO_RESULT = """
Could not get a quote for this trade.
""".strip()

# =============================================================================
# Validation Error Messages
# =============================================================================

USAGE_NETWORK = """
Usage: <code>/network &lt;name&gt;</code>

Supported: {networks}
""".strip()

USAGE_QUOTE = """
Usage: <code>/quote &lt;mint&gt; &lt;SOL amount&gt; [slippage %]</code>

<i>Example:</i> <code>/quote DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263 0.5 1</code>
""".strip()

INVALID_ADDRESS = """
That doesn't look like a Solana token address.

<i>Example:</i> <code>EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v</code>
""".strip()

INVALID_AMOUNT = """
Amount must be a positive number, e.g. <code>0.5</code>.
""".strip()

# =============================================================================
# Error Messages
# =============================================================================

ERROR_GENERIC = """
Something went wrong. Please try again later.
""".strip()
