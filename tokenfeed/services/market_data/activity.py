"""
Pair activity provider.

Reads 24h buy/sell counts and volume for one pair from the
DexScreener pairs endpoint: /latest/dex/pairs/{chainId}/{pairAddress}.
"""

import logging

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from tokenfeed.core.exceptions import ProviderError
from tokenfeed.core.models import Network, PairActivity
from tokenfeed.services.market_data.dexscreener import DEXSCREENER_API_URL
from tokenfeed.services.market_data.http import (
    DEFAULT_TIMEOUT,
    extract_records,
    request_json,
)
from tokenfeed.services.market_data.schemas import DexScreenerPair

logger = logging.getLogger(__name__)


class PairActivityProvider:
    """Real implementation of ActivityProvider backed by DexScreener."""

    provider_id = "dexscreener-activity"

    def __init__(
        self,
        base_url: str = DEXSCREENER_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def fetch_activity(self, network: Network, pair_id: str) -> PairActivity:
        """
        Fetch 24h activity for a pair.

        Raises:
            ProviderError: Upstream failure or pair not found
        """
        async with aiohttp.ClientSession() as session:
            payload = await request_json(
                session,
                "GET",
                f"{self._base_url}/latest/dex/pairs/{network.value}/{pair_id}",
                provider=self.provider_id,
                timeout=self._timeout,
            )

        records = extract_records(payload, "pairs")
        if not records and isinstance(payload, dict) and isinstance(payload.get("pair"), dict):
            records = [payload["pair"]]

        if not records:
            raise ProviderError(self.provider_id, 404, f"Pair not found: {pair_id}")

        try:
            pair = DexScreenerPair.model_validate(records[0])
        except PydanticValidationError as e:
            raise ProviderError(
                self.provider_id,
                200,
                f"Malformed pair payload for {pair_id}: {e.error_count()} errors",
            ) from e

        return PairActivity(
            pair_id=pair_id,
            buys_24h=pair.txns.h24.buys,
            sells_24h=pair.txns.h24.sells,
            volume_24h=pair.volume.h24,
            price_usd=pair.price_usd,
        )
