"""
Helius holder provider.

Fetches holder concentration for a Solana mint from Helius RPC.

Responsibilities:
1. Fetch supply via getTokenSupply
2. Fetch largest holders via getTokenLargestAccounts
3. Compute top1/top5/top10 concentration
4. Handle partial failures gracefully

NO risk scoring.
"""

import asyncio
import logging

import aiohttp

from tokenfeed.core.exceptions import ProviderError
from tokenfeed.core.models import HolderSnapshot
from tokenfeed.services.market_data.http import DEFAULT_TIMEOUT, request_json

logger = logging.getLogger(__name__)

# Helius API endpoint
HELIUS_RPC_URL = "https://mainnet.helius-rpc.com"


class HeliusHolderProvider:
    """
    Real implementation of HolderDataProvider using Helius RPC.

    Uses:
    - getTokenSupply (RPC) for total supply in UI units
    - getTokenLargestAccounts (RPC) for the top 20 holders
    """

    provider_id = "helius"

    def __init__(
        self,
        api_key: str,
        base_url: str = HELIUS_RPC_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize Helius provider.

        Args:
            api_key: Helius API key
            base_url: RPC root
            timeout: Request timeout in seconds
        """
        self._timeout = timeout
        self._url = f"{base_url.rstrip('/')}/?api-key={api_key}"

    async def fetch_holders(self, mint: str) -> HolderSnapshot:
        """
        Fetch holder concentration for a mint.

        Args:
            mint: Solana token mint address

        Returns:
            HolderSnapshot (percentages None when supply is unknown)

        Raises:
            ProviderError: If both RPC calls fail
        """
        logger.info(f"Fetching holders from Helius: {mint[:8]}...")

        async with aiohttp.ClientSession() as session:
            supply, holders = await asyncio.gather(
                self._rpc(session, "getTokenSupply", [mint]),
                self._rpc(session, "getTokenLargestAccounts", [mint]),
                return_exceptions=True,
            )

        # Handle partial failures
        if isinstance(supply, Exception):
            logger.warning(f"Failed to fetch supply: {supply}")
            supply = None

        if isinstance(holders, Exception):
            logger.warning(f"Failed to fetch holders: {holders}")
            holders = None

        if supply is None and holders is None:
            raise ProviderError(
                self.provider_id,
                None,
                f"Both Helius calls failed for {mint}",
            )

        ui_supply = self._ui_amount(supply.get("value")) if isinstance(supply, dict) else 0.0
        accounts = holders.get("value") if isinstance(holders, dict) else None
        if not isinstance(accounts, list):
            accounts = []

        concentrations = self._calculate_holder_concentration(accounts, ui_supply)

        return HolderSnapshot(
            mint=mint,
            holders_sampled=len(accounts),
            top1_percent=concentrations.get("top1"),
            top5_percent=concentrations.get("top5"),
            top10_percent=concentrations.get("top10"),
        )

    async def _rpc(
        self,
        session: aiohttp.ClientSession,
        method: str,
        params: list,
    ) -> dict:
        """Call one JSON-RPC method and return its `result`."""
        payload = {"jsonrpc": "2.0", "id": "1", "method": method, "params": params}
        data = await request_json(
            session,
            "POST",
            self._url,
            provider=self.provider_id,
            timeout=self._timeout,
            json=payload,
        )

        if not isinstance(data, dict) or "error" in data:
            error = data.get("error") if isinstance(data, dict) else data
            raise ProviderError(self.provider_id, 200, f"{method} error: {error}")

        result = data.get("result")
        if not isinstance(result, dict):
            raise ProviderError(self.provider_id, 200, f"{method} returned no result")
        return result

    @staticmethod
    def _ui_amount(value: object) -> float:
        if not isinstance(value, dict):
            return 0.0
        try:
            return float(value.get("uiAmount") or 0)
        except (TypeError, ValueError):
            return 0.0

    def _calculate_holder_concentration(
        self,
        holders: list,
        ui_supply: float,
    ) -> dict:
        """
        Calculate holder concentration percentages.

        Args:
            holders: Holder accounts from getTokenLargestAccounts
            ui_supply: Total supply in UI units

        Returns:
            Dict with top1, top5, top10 percentages
        """
        if not holders or ui_supply <= 0:
            return {}

        amounts = sorted(
            (self._ui_amount(h) for h in holders if isinstance(h, dict)),
            reverse=True,
        )

        result = {}

        if len(amounts) >= 1:
            result["top1"] = round(amounts[0] / ui_supply * 100, 2)

        if len(amounts) >= 5:
            result["top5"] = round(sum(amounts[:5]) / ui_supply * 100, 2)

        # If less than 10 holders, use all of them
        result["top10"] = round(sum(amounts[:10]) / ui_supply * 100, 2)

        return result
