"""
Birdeye metadata provider.

Enrichment source for token logos and social links.
Requires an API key; without one the factory does not create it
and the aggregator simply skips enrichment.
"""

import logging

import aiohttp

from tokenfeed.core.exceptions import ProviderError
from tokenfeed.core.models import Network
from tokenfeed.services.market_data.http import DEFAULT_TIMEOUT, request_json

logger = logging.getLogger(__name__)

# Birdeye API endpoint
BIRDEYE_API_URL = "https://public-api.birdeye.so"


class BirdeyeProvider:
    """
    Real implementation of MetadataProvider using Birdeye token_overview.

    Birdeye chain names match canonical Network values.
    """

    provider_id = "birdeye"

    def __init__(
        self,
        api_key: str,
        base_url: str = BIRDEYE_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize Birdeye provider.

        Args:
            api_key: Birdeye API key
            base_url: API root
            timeout: Request timeout in seconds
        """
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def fetch_metadata(self, address: str, network: Network) -> dict:
        """
        Fetch logo and links for one token.

        Args:
            address: Token address
            network: Chain the token lives on

        Returns:
            Dict with keys name, image_url, website, twitter, telegram
            (values may be None)

        Raises:
            ProviderError: Upstream failure or unsuccessful response
        """
        logger.debug(f"Fetching Birdeye metadata: {address[:8]}...")

        async with aiohttp.ClientSession() as session:
            payload = await request_json(
                session,
                "GET",
                f"{self._base_url}/defi/token_overview",
                provider=self.provider_id,
                timeout=self._timeout,
                params={"address": address},
                headers={
                    "Accept": "application/json",
                    "X-API-KEY": self._api_key,
                    "x-chain": network.value,
                },
            )

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict) or payload.get("success") is False:
            raise ProviderError(
                self.provider_id,
                200,
                f"Birdeye returned no data for {address}",
            )

        extensions = data.get("extensions")
        if not isinstance(extensions, dict):
            extensions = {}

        return {
            "name": data.get("name"),
            "image_url": data.get("logoURI"),
            "website": extensions.get("website"),
            "twitter": extensions.get("twitter"),
            "telegram": extensions.get("telegram"),
        }
