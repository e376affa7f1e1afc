"""
Jupiter swap provider.

Liquidity-routing service adapter:
- GET  /quote  -> best route for an amount
- POST /swap   -> unsigned versioned transaction (base64) for a quote

Responsibilities:
1. Request quotes and validate them into Quote models
2. Request a serialized transaction for an accepted quote
3. Translate upstream failures into QuoteError / BuildError
"""

import base64
import binascii
import logging

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from tokenfeed.core.exceptions import BuildError, ProviderError, QuoteError
from tokenfeed.core.models import Quote
from tokenfeed.services.market_data.http import request_json

logger = logging.getLogger(__name__)

# Jupiter API endpoint
JUPITER_API_URL = "https://lite-api.jup.ag/swap/v1"

# Default timeout for router calls (seconds)
DEFAULT_TIMEOUT = 10.0


class JupiterSwapProvider:
    """
    Real implementation of SwapProvider using the Jupiter API.

    No API key required on the lite endpoint.
    """

    provider_id = "jupiter"

    def __init__(
        self,
        base_url: str = JUPITER_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize Jupiter provider.

        Args:
            base_url: API root (the /quote and /swap endpoints live under it)
            timeout: Request timeout in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> Quote:
        """
        Request a route quote.

        Args:
            input_mint: Mint being spent
            output_mint: Mint being received
            amount: Input amount in base units
            slippage_bps: Allowed slippage in basis points

        Returns:
            Validated Quote (raw payload kept for building)

        Raises:
            QuoteError: No route, upstream failure or malformed response
        """
        logger.info(
            f"Requesting quote: {amount} {input_mint[:8]} -> {output_mint[:8]} "
            f"({slippage_bps} bps)"
        )

        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": str(slippage_bps),
            "onlyDirectRoutes": "false",
            "asLegacyTransaction": "false",
        }

        try:
            async with aiohttp.ClientSession() as session:
                data = await request_json(
                    session,
                    "GET",
                    f"{self._base_url}/quote",
                    provider=self.provider_id,
                    timeout=self._timeout,
                    params=params,
                    headers={"Accept": "application/json"},
                )
        except ProviderError as e:
            raise QuoteError(technical_message=f"Quote request failed: {e}") from e

        if not isinstance(data, dict) or "error" in data or not data.get("outAmount"):
            error = data.get("error") if isinstance(data, dict) else data
            raise QuoteError(technical_message=f"Invalid quote response: {error}")

        return self._parse_quote(data, slippage_bps)

    async def build_swap_transaction(self, quote: Quote, user_public_key: str) -> bytes:
        """
        Serialize an unsigned transaction for the quote.

        Args:
            quote: Accepted quote
            user_public_key: Wallet that will sign and pay fees

        Returns:
            Transaction bytes

        Raises:
            BuildError: Router could not build the transaction
        """
        body = {
            "quoteResponse": quote.raw,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
            "prioritizationFeeLamports": "auto",
        }

        try:
            async with aiohttp.ClientSession() as session:
                data = await request_json(
                    session,
                    "POST",
                    f"{self._base_url}/swap",
                    provider=self.provider_id,
                    timeout=self._timeout,
                    json=body,
                )
        except ProviderError as e:
            raise BuildError(technical_message=f"Swap build failed: {e}") from e

        encoded = data.get("swapTransaction") if isinstance(data, dict) else None
        if not isinstance(encoded, str) or not encoded:
            raise BuildError(technical_message="Swap response has no swapTransaction")

        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise BuildError(technical_message=f"swapTransaction is not base64: {e}") from e

    def _parse_quote(self, data: dict, slippage_bps: int) -> Quote:
        """Convert a /quote payload into a Quote."""
        try:
            return Quote(
                input_mint=data["inputMint"],
                output_mint=data["outputMint"],
                in_amount=int(data["inAmount"]),
                out_amount=int(data["outAmount"]),
                min_out_amount=int(data.get("otherAmountThreshold") or data["outAmount"]),
                slippage_bps=int(data.get("slippageBps", slippage_bps)),
                price_impact_pct=float(data.get("priceImpactPct") or 0),
                route=data.get("routePlan") or [],
                raw=data,
            )
        except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
            raise QuoteError(technical_message=f"Malformed quote: {e}") from e
