"""
Listing normalizer.

Converts one raw provider record into a CanonicalToken, or None when the
record is unusable. Never raises on bad input.

Responsibilities:
1. Strict parse against the provider's raw schema
2. Map provider fields to the canonical shape
3. Resolve chain ids to Network
4. Derive avatar, freshness flag and market cap fallback

NO filtering by liquidity or quote asset (that's the aggregator's job).
"""

import hashlib
import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError as PydanticValidationError

from tokenfeed.core.models import CanonicalToken, Network, TokenLinks
from tokenfeed.services.market_data.geckoterminal import network_from_gecko_id
from tokenfeed.services.market_data.schemas import (
    DexInfo,
    DexScreenerPair,
    GeckoPoolRecord,
)

logger = logging.getLogger(__name__)

# Pairs younger than this are flagged as new
NEW_PAIR_WINDOW = timedelta(hours=24)

PLACEHOLDER_AVATAR_URL = "https://api.dicebear.com/7.x/shapes/svg"

PLACEHOLDER_COLORS = (
    "00d084",
    "4ade80",
    "fbbf24",
    "ef4444",
    "f97316",
    "a855f7",
    "3b82f6",
    "ec4899",
)


def placeholder_avatar(symbol: str) -> str:
    """
    Deterministic fallback image for a symbol.

    The md5 of the upper-cased symbol picks the background colour,
    so one symbol always gets the same art and neighbours differ.
    """
    seed = symbol.upper()
    digest = int(hashlib.md5(seed.encode()).hexdigest(), 16)
    color = PLACEHOLDER_COLORS[digest % len(PLACEHOLDER_COLORS)]
    return f"{PLACEHOLDER_AVATAR_URL}?seed={seed}&backgroundColor={color}"


def canonical_address(address: str, chain: Network) -> str:
    """
    Address form used for dedup keys.

    EVM hex addresses are case-insensitive and providers disagree on
    checksum casing, so they are lowercased. Solana base58 is left as is.
    """
    if chain != Network.SOLANA and address.startswith("0x"):
        return address.lower()
    return address


def _valid_price(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value >= 0


def _market_cap(market_cap: float | None, fdv: float | None) -> float:
    for candidate in (market_cap, fdv):
        if candidate is not None and math.isfinite(candidate) and candidate > 0:
            return candidate
    return 0.0


def _is_new(created_at: datetime | None, now: datetime) -> bool:
    return created_at is not None and now - created_at < NEW_PAIR_WINDOW


def _image(url: str | None) -> str | None:
    # GeckoTerminal uses "missing.png" for tokens without art
    if not url or "missing" in url:
        return None
    return url


def _dex_links(info: DexInfo | None, chart_url: str | None) -> TokenLinks:
    if info is None:
        return TokenLinks(chart_url=chart_url)

    website = info.websites[0].url if info.websites else None
    twitter = None
    telegram = None
    for social in info.socials:
        kind = (social.type or social.platform or "").lower()
        target = social.url or social.handle
        if kind in ("twitter", "x") and twitter is None:
            twitter = target
        elif kind == "telegram" and telegram is None:
            telegram = target

    return TokenLinks(
        website=website,
        twitter=twitter,
        telegram=telegram,
        chart_url=chart_url,
    )


def _from_dexscreener(raw: dict, provider_id: str, now: datetime) -> CanonicalToken | None:
    pair = DexScreenerPair.model_validate(raw)

    if not _valid_price(pair.price_usd):
        logger.debug(f"Skip {pair.pair_address}: bad price {pair.price_usd!r}")
        return None

    try:
        chain = Network(pair.chain_id)
    except ValueError:
        logger.debug(f"Skip {pair.pair_address}: unknown chain {pair.chain_id}")
        return None

    created_at = pair.pair_created_at

    image_url = _image(pair.info.image_url if pair.info else None)
    symbol = pair.base_token.symbol

    return CanonicalToken(
        pair_id=canonical_address(pair.pair_address, chain),
        base_address=canonical_address(pair.base_token.address, chain),
        base_symbol=symbol,
        base_name=pair.base_token.name or symbol,
        quote_symbol=pair.quote_token.symbol.upper(),
        price_usd=pair.price_usd,
        price_change_24h=pair.price_change.h24,
        volume_24h=pair.volume.h24,
        liquidity_usd=pair.liquidity.usd,
        market_cap=_market_cap(pair.market_cap, pair.fdv),
        chain=chain,
        dex_id=pair.dex_id,
        created_at=created_at,
        image_url=image_url,
        avatar_url=image_url or placeholder_avatar(symbol),
        is_new=_is_new(created_at, now),
        links=_dex_links(pair.info, pair.url),
        buys_24h=pair.txns.h24.buys,
        sells_24h=pair.txns.h24.sells,
        source=provider_id,
    )


def _from_geckoterminal(raw: dict, provider_id: str, now: datetime) -> CanonicalToken | None:
    record = GeckoPoolRecord.model_validate(raw)
    attrs = record.pool.attributes

    if not _valid_price(attrs.base_token_price_usd):
        logger.debug(f"Skip {attrs.address}: bad price {attrs.base_token_price_usd!r}")
        return None

    chain = network_from_gecko_id(record.network)
    if chain is None:
        logger.debug(f"Skip {attrs.address}: unknown network {record.network}")
        return None

    created_at = attrs.pool_created_at
    if created_at is not None and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)

    image_url = _image(record.base_token.image_url)
    symbol = record.base_token.symbol

    return CanonicalToken(
        pair_id=canonical_address(attrs.address, chain),
        base_address=canonical_address(record.base_token.address, chain),
        base_symbol=symbol,
        base_name=record.base_token.name or symbol,
        quote_symbol=record.quote_token.symbol.upper(),
        price_usd=attrs.base_token_price_usd,
        price_change_24h=attrs.price_change_percentage.h24,
        volume_24h=attrs.volume_usd.h24,
        liquidity_usd=attrs.reserve_in_usd,
        market_cap=_market_cap(attrs.market_cap_usd, attrs.fdv_usd),
        chain=chain,
        dex_id=record.dex_id,
        created_at=created_at,
        image_url=image_url,
        avatar_url=image_url or placeholder_avatar(symbol),
        is_new=_is_new(created_at, now),
        links=TokenLinks(
            chart_url=f"https://www.geckoterminal.com/{record.network}/pools/{attrs.address}",
        ),
        buys_24h=attrs.transactions.h24.buys,
        sells_24h=attrs.transactions.h24.sells,
        source=provider_id,
    )


# Raw payload shape per provider id
RAW_FORMATS: dict[str, Callable[[dict, str, datetime], CanonicalToken | None]] = {
    "dexscreener": _from_dexscreener,
    "mock": _from_dexscreener,
    "geckoterminal": _from_geckoterminal,
}


def normalize(
    raw: dict,
    provider_id: str,
    *,
    now: datetime | None = None,
) -> CanonicalToken | None:
    """
    Normalize one raw record.

    Args:
        raw: Provider-specific record
        provider_id: Id of the adapter that produced it
        now: Reference time for the freshness flag (default: current UTC)

    Returns:
        CanonicalToken, or None if the record must be skipped
    """
    parser = RAW_FORMATS.get(provider_id)
    if parser is None:
        logger.warning(f"No normalizer registered for provider {provider_id}")
        return None

    try:
        return parser(raw, provider_id, now or datetime.now(UTC))
    except PydanticValidationError as e:
        logger.debug(f"Skip {provider_id} record: {e.error_count()} validation errors")
        return None
