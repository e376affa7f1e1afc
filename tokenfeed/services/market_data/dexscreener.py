"""
DexScreener listing provider.

Primary listing/trending source. Two-step lookup:
1. A token list endpoint names interesting tokens
   - trending: /token-boosts/top/v1
   - feed:     /token-profiles/latest/v1
2. Those token addresses are resolved to their pairs via
   /tokens/v1/{chainId}/{addresses}

Responsibilities:
1. Call the endpoints with a bounded wait
2. Drop records that are not JSON objects
3. Return raw pair dicts (DexScreener shape)

NO normalization, NO retries.
"""

import asyncio
import logging

import aiohttp

from tokenfeed.core.models import FeedKind, Network
from tokenfeed.services.market_data.http import (
    DEFAULT_TIMEOUT,
    extract_records,
    request_json,
)

logger = logging.getLogger(__name__)

# DexScreener API endpoint
DEXSCREENER_API_URL = "https://api.dexscreener.com"

# /tokens/v1 accepts at most 30 comma-separated addresses
MAX_ADDRESSES_PER_CALL = 30

LIST_PATHS = {
    FeedKind.TRENDING: "/token-boosts/top/v1",
    FeedKind.FEED: "/token-profiles/latest/v1",
}

SUPPORTED_CHAINS = {network.value for network in Network}


class DexScreenerProvider:
    """
    Real implementation of ListingProvider using the DexScreener API.

    No API key required.
    """

    provider_id = "dexscreener"

    def __init__(
        self,
        base_url: str = DEXSCREENER_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize DexScreener provider.

        Args:
            base_url: API root
            timeout: Request timeout in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def fetch(self, network: Network | None, kind: FeedKind) -> list[dict]:
        """
        Fetch raw pairs for the listed tokens.

        Args:
            network: Chain to keep (None = every supported chain)
            kind: Which token list to start from

        Returns:
            Raw DexScreener pair dicts
        """
        logger.info(f"Fetching DexScreener {kind.value} for {network.value if network else 'all'}")

        async with aiohttp.ClientSession() as session:
            listed = await request_json(
                session,
                "GET",
                f"{self._base_url}{LIST_PATHS[kind]}",
                provider=self.provider_id,
                timeout=self._timeout,
            )

            by_chain = self._group_addresses(extract_records(listed), network)
            if not by_chain:
                return []

            results = await asyncio.gather(
                *(
                    self._fetch_pairs(session, chain, addresses)
                    for chain, addresses in by_chain.items()
                )
            )

        pairs = [pair for chunk in results for pair in chunk]
        logger.debug(f"DexScreener returned {len(pairs)} pairs")
        return pairs

    async def _fetch_pairs(
        self,
        session: aiohttp.ClientSession,
        chain: str,
        addresses: list[str],
    ) -> list[dict]:
        """Resolve token addresses on one chain to their pairs."""
        joined = ",".join(addresses[:MAX_ADDRESSES_PER_CALL])
        payload = await request_json(
            session,
            "GET",
            f"{self._base_url}/tokens/v1/{chain}/{joined}",
            provider=self.provider_id,
            timeout=self._timeout,
        )
        return extract_records(payload, "pairs")

    def _group_addresses(
        self,
        listed: list[dict],
        network: Network | None,
    ) -> dict[str, list[str]]:
        """
        Group listed token addresses by chain, keeping list order.

        Unsupported chains and duplicates are dropped.
        """
        grouped: dict[str, list[str]] = {}
        for item in listed:
            chain = item.get("chainId")
            address = item.get("tokenAddress")
            if not isinstance(chain, str) or not isinstance(address, str):
                continue
            if chain not in SUPPORTED_CHAINS:
                continue
            if network is not None and chain != network.value:
                continue

            addresses = grouped.setdefault(chain, [])
            if address not in addresses:
                addresses.append(address)

        return grouped
