"""
Pydantic models for TokenFeed application.

All data structures shared between the aggregator, the swap pipeline
and the rendering layer are defined here.
Models provide:
- Type safety
- Automatic validation of invariants (non-negative prices, slippage bounds)
- JSON serialization/deserialization
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class Network(str, Enum):
    """
    Supported chains.

    Values match DexScreener chain ids, which are used as the canonical form.
    """

    SOLANA = "solana"
    ETHEREUM = "ethereum"
    BSC = "bsc"
    BASE = "base"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"
    AVALANCHE = "avalanche"


class FeedKind(str, Enum):
    """Which listing an adapter should serve."""

    TRENDING = "trending"
    """Small, freshness-oriented list"""

    FEED = "feed"
    """Larger corpus for the infinite-scroll feed"""


class FeedStatus(str, Enum):
    """
    Where a feed page came from.

    Lets the renderer tell "nothing exists" apart from "try again later".
    """

    FRESH = "fresh"
    BUFFERED = "buffered"
    CACHED = "cached"
    STALE = "stale"
    EMPTY = "empty"
    UNAVAILABLE = "unavailable"


class TokenLinks(BaseModel):
    """Social and reference links for a token (all optional)."""

    website: str | None = None
    twitter: str | None = None
    telegram: str | None = None
    chart_url: str | None = None

    model_config = {"frozen": True}


class CanonicalToken(BaseModel):
    """
    Normalized token/pair record.

    This is the unified shape produced from every market-data provider.
    One record describes one trading pair; `pair_id` is the dedup key.
    """

    pair_id: str = Field(min_length=1)
    """Pair/pool address on its venue"""

    base_address: str
    base_symbol: str = Field(min_length=1)
    base_name: str

    quote_symbol: str
    """Symbol of the asset pricing the base (SOL, USDC, ...)"""

    price_usd: float = Field(ge=0)
    price_change_24h: float = 0.0
    volume_24h: float = Field(default=0.0, ge=0)
    liquidity_usd: float = Field(default=0.0, ge=0)

    market_cap: float = Field(default=0.0, ge=0)
    """Market cap, or FDV when the provider has no market cap"""

    chain: Network
    dex_id: str | None = None
    created_at: datetime | None = None

    image_url: str | None = None
    """Image supplied by a provider (None = none supplied)"""

    avatar_url: str
    """Image to display: provider image or deterministic placeholder"""

    is_new: bool = False
    """Pair created less than 24h ago"""

    links: TokenLinks = Field(default_factory=TokenLinks)
    buys_24h: int = Field(default=0, ge=0)
    sells_24h: int = Field(default=0, ge=0)

    source: str
    """Provider id the record was normalized from"""

    model_config = {"frozen": True}


class FeedCursor(BaseModel):
    """
    Pagination state for one feed (one network selection).

    Immutable value: `advance` returns the page and the next cursor.
    A reset is simply a new cursor with an empty buffer.
    """

    network: Network | None = None
    buffered_tokens: tuple[CanonicalToken, ...] = ()
    offset: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _offset_within_buffer(self) -> "FeedCursor":
        if self.offset > len(self.buffered_tokens):
            raise ValueError(
                f"offset {self.offset} exceeds buffer of {len(self.buffered_tokens)}"
            )
        return self

    @property
    def has_unread(self) -> bool:
        """True when the buffer still holds tokens not yet paged out."""
        return len(self.buffered_tokens) > self.offset

    def advance(self, size: int) -> tuple[list[CanonicalToken], "FeedCursor"]:
        """
        Slice the next page from the buffer.

        Args:
            size: Page size

        Returns:
            Tuple of (page, cursor positioned after the page)
        """
        end = min(self.offset + size, len(self.buffered_tokens))
        page = list(self.buffered_tokens[self.offset:end])
        return page, self.model_copy(update={"offset": end})

    def refill(self, tokens: list[CanonicalToken]) -> "FeedCursor":
        """Replace the buffer and rewind to the start."""
        return FeedCursor(network=self.network, buffered_tokens=tuple(tokens))


class FeedPage(BaseModel):
    """A page of tokens handed to the rendering layer."""

    network: Network | None = None
    tokens: list[CanonicalToken] = Field(default_factory=list)
    status: FeedStatus

    @property
    def is_retryable(self) -> bool:
        """Empty because upstreams failed, not because nothing exists."""
        return self.status == FeedStatus.UNAVAILABLE


class PairActivity(BaseModel):
    """24h trading activity for one pair."""

    pair_id: str
    buys_24h: int = Field(default=0, ge=0)
    sells_24h: int = Field(default=0, ge=0)
    volume_24h: float = Field(default=0.0, ge=0)
    price_usd: float | None = None


class HolderSnapshot(BaseModel):
    """Holder concentration for a Solana mint (None = unknown)."""

    mint: str
    holders_sampled: int = Field(ge=0)
    top1_percent: float | None = None
    top5_percent: float | None = None
    top10_percent: float | None = None


class TokenDetails(BaseModel):
    """Token plus optional activity and holder data for a detail view."""

    token: CanonicalToken
    activity: PairActivity | None = None
    holders: HolderSnapshot | None = None


class TradeSide(str, Enum):
    """Buy spends the native asset, sell receives it."""

    BUY = "buy"
    SELL = "sell"


class Quote(BaseModel):
    """
    Route quote from the swap router.

    All amounts are integers in base units of their asset.
    """

    input_mint: str
    output_mint: str
    in_amount: int = Field(ge=0)
    out_amount: int = Field(ge=0)
    min_out_amount: int = Field(ge=0)

    slippage_bps: int = Field(ge=10, le=2000)
    """Allowed slippage, 10 bps (0.1%) to 2000 bps (20%)"""

    price_impact_pct: float = 0.0
    """Price impact as a fraction, as returned by the router"""

    route: list[dict[str, Any]] = Field(default_factory=list)

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original router payload, needed to build the transaction"""

    decimals_estimated: bool = False
    """A decimals lookup fell back to the default; user must confirm"""

    @model_validator(mode="after")
    def _min_out_not_above_out(self) -> "Quote":
        if self.min_out_amount > self.out_amount:
            raise ValueError("min_out_amount exceeds out_amount")
        return self


class QuoteView(BaseModel):
    """Display values derived from an accepted quote."""

    quote: Quote
    decimals_out: int = Field(ge=0)
    estimated_output: float
    price_impact_pct: float
    """Percent (quote fraction * 100)"""
    minimum_received: float

    @classmethod
    def from_quote(cls, quote: Quote, decimals_out: int) -> "QuoteView":
        """Recompute derived figures for a quote."""
        scale = 10**decimals_out
        return cls(
            quote=quote,
            decimals_out=decimals_out,
            estimated_output=quote.out_amount / scale,
            price_impact_pct=quote.price_impact_pct * 100,
            minimum_received=quote.min_out_amount / scale,
        )

    @property
    def requires_confirmation(self) -> bool:
        """Decimals were guessed; amounts may be off by orders of magnitude."""
        return self.quote.decimals_estimated


class QuoteState(BaseModel):
    """What the trade UI observes from the quote pipeline."""

    view: QuoteView | None = None
    busy: bool = False
    notice: str | None = None
    """Transient user-visible message (last error)"""


class ExecutionStatus(str, Enum):
    """Swap execution states."""

    IDLE = "idle"
    BUILDING = "building"
    SIMULATING = "simulating"
    AWAITING_SIGNATURE = "awaiting_signature"
    SUBMITTING = "submitting"
    CONFIRMING = "confirming"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionStatus.CONFIRMED, ExecutionStatus.FAILED)


class FailureReason(str, Enum):
    """Why an execution ended in FAILED."""

    BUILD_ERROR = "build_error"
    SIMULATION_ERROR = "simulation_error"
    USER_REJECTED = "user_rejected"
    SUBMIT_ERROR = "submit_error"
    CONFIRMATION_TIMEOUT = "confirmation_timeout"


class ExecutionResult(BaseModel):
    """Terminal outcome surfaced to the trade UI."""

    status: ExecutionStatus
    signature: str | None = None
    """Set on success, and on timeout so the user can verify manually"""

    reason: FailureReason | None = None
    message: str | None = None
    submit_attempts: int = Field(default=0, ge=0)
