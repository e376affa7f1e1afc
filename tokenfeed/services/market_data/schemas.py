"""
Pydantic schemas for raw provider payloads.

These models describe the subset of each upstream payload the normalizer
reads. They are deliberately tolerant of extra fields and of `null` in
numeric counters, but strict about identity fields (addresses, symbols):
a record missing those fails validation and is skipped.
"""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, Field, field_validator


def _none_to_zero(value: object) -> object:
    return 0 if value is None else value


# Counters and USD amounts that upstreams sometimes send as null
Count = Annotated[int, BeforeValidator(_none_to_zero)]
Amount = Annotated[float, BeforeValidator(_none_to_zero)]


# =============================================================================
# DexScreener (also the shape produced by MockListingProvider)
# =============================================================================


class DexToken(BaseModel):
    address: str = Field(min_length=1)
    name: str = ""
    symbol: str = Field(min_length=1)


class DexTxnWindow(BaseModel):
    buys: Count = 0
    sells: Count = 0


class DexTxns(BaseModel):
    h24: DexTxnWindow = Field(default_factory=DexTxnWindow)


class DexVolume(BaseModel):
    h24: Amount = 0.0


class DexPriceChange(BaseModel):
    h24: Amount = 0.0


class DexLiquidity(BaseModel):
    usd: Amount = 0.0


class DexWebsite(BaseModel):
    url: str
    label: str | None = None


class DexSocial(BaseModel):
    type: str | None = None
    platform: str | None = None
    url: str | None = None
    handle: str | None = None


class DexInfo(BaseModel):
    image_url: str | None = Field(default=None, alias="imageUrl")
    websites: list[DexWebsite] = Field(default_factory=list)
    socials: list[DexSocial] = Field(default_factory=list)


class DexScreenerPair(BaseModel):
    """One pair from /tokens/v1 or /latest/dex/pairs."""

    chain_id: str = Field(alias="chainId")
    dex_id: str | None = Field(default=None, alias="dexId")
    url: str | None = None
    pair_address: str = Field(alias="pairAddress", min_length=1)
    base_token: DexToken = Field(alias="baseToken")
    quote_token: DexToken = Field(alias="quoteToken")
    price_usd: float | None = Field(default=None, alias="priceUsd")
    txns: DexTxns = Field(default_factory=DexTxns)
    volume: DexVolume = Field(default_factory=DexVolume)
    price_change: DexPriceChange = Field(default_factory=DexPriceChange, alias="priceChange")
    liquidity: DexLiquidity = Field(default_factory=DexLiquidity)
    fdv: float | None = None
    market_cap: float | None = Field(default=None, alias="marketCap")

    pair_created_at: datetime | None = Field(default=None, alias="pairCreatedAt")
    """Sent as unix epoch milliseconds; 0 means unknown"""

    info: DexInfo | None = None

    model_config = {"populate_by_name": True}

    @field_validator("pair_created_at", mode="before")
    @classmethod
    def parse_epoch_millis(cls, value: object) -> datetime | None:
        if value is None or value == 0:
            return None
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValueError("pairCreatedAt must be epoch milliseconds")
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError) as e:
            raise ValueError(f"pairCreatedAt out of range: {value}") from e


# =============================================================================
# GeckoTerminal (pool bundled with its included tokens)
# =============================================================================


class GeckoToken(BaseModel):
    address: str = Field(min_length=1)
    name: str = ""
    symbol: str = Field(min_length=1)
    image_url: str | None = None


class GeckoWindow(BaseModel):
    h24: Amount = 0.0


class GeckoTxnWindow(BaseModel):
    buys: Count = 0
    sells: Count = 0


class GeckoTransactions(BaseModel):
    h24: GeckoTxnWindow = Field(default_factory=GeckoTxnWindow)


class GeckoPoolAttributes(BaseModel):
    address: str = Field(min_length=1)
    name: str = ""
    base_token_price_usd: float | None = None
    fdv_usd: float | None = None
    market_cap_usd: float | None = None
    price_change_percentage: GeckoWindow = Field(default_factory=GeckoWindow)
    transactions: GeckoTransactions = Field(default_factory=GeckoTransactions)
    volume_usd: GeckoWindow = Field(default_factory=GeckoWindow)
    reserve_in_usd: Amount = 0.0
    pool_created_at: datetime | None = None


class GeckoPool(BaseModel):
    id: str
    attributes: GeckoPoolAttributes


class GeckoPoolRecord(BaseModel):
    """Record produced by GeckoTerminalProvider."""

    pool: GeckoPool
    base_token: GeckoToken
    quote_token: GeckoToken
    dex_id: str | None = None
    network: str | None = None
