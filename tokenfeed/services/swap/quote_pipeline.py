"""
Debounced quote pipeline.

Turns trade-form edits (amount text, slippage percent) into live route
quotes for one token.

Responsibilities:
1. Validate the amount and slippage before anything is requested
2. Debounce edits: only the last change in a quiet period is quoted
3. Convert human amounts to base units using on-chain decimals
4. Discard responses that a newer request has superseded
5. Expose the current QuoteState to the trade UI

Requests already in flight are never cancelled by new edits; their
responses are simply ignored when they arrive out of date.
"""

import asyncio
import logging
import math
from collections.abc import Callable
from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from tokenfeed.core.exceptions import TokenFeedError, ValidationError
from tokenfeed.core.models import QuoteState, QuoteView, TradeSide
from tokenfeed.core.protocols import SwapProvider
from tokenfeed.services.swap.decimals import SOL_MINT, DecimalsResolver

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE = 0.5
MIN_SLIPPAGE_BPS = 10
MAX_SLIPPAGE_BPS = 2000


def parse_amount(text: str) -> Decimal | None:
    """
    Parse a user-typed amount.

    Returns:
        Positive finite Decimal, or None when the text is not one
    """
    try:
        amount = Decimal(text.strip().replace(",", "."))
    except (InvalidOperation, AttributeError):
        return None

    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def to_base_units(amount: Decimal, decimals: int) -> int:
    """floor(amount * 10**decimals)"""
    return int((amount * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_FLOOR))


def slippage_to_bps(
    percent: float,
    min_bps: int = MIN_SLIPPAGE_BPS,
    max_bps: int = MAX_SLIPPAGE_BPS,
) -> int:
    """
    Convert a slippage percent to basis points.

    Raises:
        ValidationError: Outside the allowed range
    """
    if not isinstance(percent, (int, float)) or not math.isfinite(percent):
        raise ValidationError(
            message="Slippage must be a number.",
            technical_message=f"Non-numeric slippage: {percent!r}",
        )

    bps = round(percent * 100)
    if not min_bps <= bps <= max_bps:
        raise ValidationError(
            message=f"Slippage must be between {min_bps / 100:g}% and {max_bps / 100:g}%.",
            technical_message=f"Slippage {percent}% -> {bps} bps out of range",
        )
    return bps


class QuotePipeline:
    """
    Live quotes for one token and trade side.

    Buy spends the native asset to get the token; sell is the reverse.

    Usage:
        pipeline = QuotePipeline(swap_provider, resolver, token_mint)
        pipeline.set_amount("0.5")
        await pipeline.wait_idle()
        view = pipeline.state.view
    """

    def __init__(
        self,
        swap_provider: SwapProvider,
        decimals: DecimalsResolver,
        token_mint: str,
        side: TradeSide = TradeSide.BUY,
        *,
        native_mint: str = SOL_MINT,
        debounce: float = DEFAULT_DEBOUNCE,
        slippage_percent: float = 1.0,
        min_slippage_bps: int = MIN_SLIPPAGE_BPS,
        max_slippage_bps: int = MAX_SLIPPAGE_BPS,
        on_change: Callable[[QuoteState], None] | None = None,
    ):
        """
        Initialize pipeline.

        Args:
            swap_provider: Router to quote against
            decimals: Decimals resolver
            token_mint: Token being traded
            side: Buy or sell
            native_mint: Native asset mint (wrapped SOL)
            debounce: Quiet period before a request is issued (seconds)
            slippage_percent: Initial slippage
            on_change: Called with the new state after every visible change

        Raises:
            ValidationError: Initial slippage out of range
        """
        self._swap = swap_provider
        self._decimals = decimals
        self._token_mint = token_mint
        self._side = side
        self._native_mint = native_mint
        self._debounce = debounce
        self._min_bps = min_slippage_bps
        self._max_bps = max_slippage_bps
        self._on_change = on_change

        self._slippage_bps = slippage_to_bps(slippage_percent, min_slippage_bps, max_slippage_bps)
        self._amount: Decimal | None = None
        self._generation = 0
        self._timer: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self._state = QuoteState()

    @property
    def state(self) -> QuoteState:
        return self._state

    @property
    def slippage_bps(self) -> int:
        return self._slippage_bps

    @property
    def input_mint(self) -> str:
        return self._native_mint if self._side == TradeSide.BUY else self._token_mint

    @property
    def output_mint(self) -> str:
        return self._token_mint if self._side == TradeSide.BUY else self._native_mint

    def set_amount(self, text: str) -> None:
        """
        Update the amount.

        An invalid amount clears the quote and issues no request.
        """
        self._amount = parse_amount(text)

        if self._amount is None:
            self._cancel_timer()
            # Invalidate anything in flight
            self._generation += 1
            self._update(view=None, busy=False)
            return

        self._schedule()

    def set_slippage(self, percent: float) -> None:
        """
        Update slippage and re-quote the current amount.

        Raises:
            ValidationError: Outside 0.1%-20%
        """
        self._slippage_bps = slippage_to_bps(percent, self._min_bps, self._max_bps)
        if self._amount is not None:
            self._schedule()

    async def wait_idle(self) -> None:
        """Wait until no debounce timer or request is pending."""
        while self._timer is not None or self._inflight:
            pending = [task for task in (self._timer, *self._inflight) if task is not None]
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        """Cancel pending work; no further state changes are published."""
        self._generation += 1
        tasks = [task for task in (self._timer, *self._inflight) if task is not None]
        self._timer = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # =========================================================================
    # Internals
    # =========================================================================

    def _schedule(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.create_task(self._after_quiet_period())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _after_quiet_period(self) -> None:
        await asyncio.sleep(self._debounce)

        # Past the quiet period: this task is now an in-flight request
        current = asyncio.current_task()
        self._timer = None
        if current is not None:
            self._inflight.add(current)
            current.add_done_callback(self._inflight.discard)

        self._generation += 1
        await self._request(self._generation, self._amount, self._slippage_bps)

    async def _request(self, generation: int, amount: Decimal | None, slippage_bps: int) -> None:
        if amount is None:
            return

        self._update(busy=True)

        try:
            decimals_in = await self._decimals.resolve(self.input_mint)
            base_units = to_base_units(amount, decimals_in.value)
            if base_units <= 0:
                raise ValidationError(
                    message="Amount is too small.",
                    technical_message=f"{amount} rounds to 0 base units",
                )

            quote = await self._swap.get_quote(
                self.input_mint,
                self.output_mint,
                base_units,
                slippage_bps,
            )
            decimals_out = await self._decimals.resolve(self.output_mint)

        except TokenFeedError as e:
            if generation != self._generation:
                return
            logger.warning(f"Quote failed: {e.technical_message}")
            self._update(view=None, busy=False, notice=e.message)
            return

        except Exception as e:
            if generation != self._generation:
                return
            logger.exception(f"Unexpected quote error: {e}")
            self._update(view=None, busy=False, notice="Could not get a quote. Please try again.")
            return

        if generation != self._generation:
            logger.debug(f"Discarding superseded quote (generation {generation})")
            return

        if decimals_in.estimated or decimals_out.estimated:
            quote = quote.model_copy(update={"decimals_estimated": True})

        self._update(
            view=QuoteView.from_quote(quote, decimals_out.value),
            busy=False,
            notice=None,
        )

    def _update(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        if self._on_change is not None:
            self._on_change(self._state)
