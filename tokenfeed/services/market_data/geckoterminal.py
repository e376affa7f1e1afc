"""
GeckoTerminal listing provider.

Secondary pool-discovery source. No API key required.
- trending: /networks/{network}/trending_pools
- feed:     /networks/{network}/new_pools

Pools reference their tokens through JSON:API relationships; the tokens
themselves arrive in the `included` section. Each raw record returned here
bundles a pool with its resolved base/quote token attributes.
"""

import logging

import aiohttp

from tokenfeed.core.models import FeedKind, Network
from tokenfeed.services.market_data.http import (
    DEFAULT_TIMEOUT,
    extract_records,
    request_json,
)

logger = logging.getLogger(__name__)

# GeckoTerminal API endpoint
GECKOTERMINAL_API_URL = "https://api.geckoterminal.com/api/v2"

# Canonical network -> GeckoTerminal network id
GECKO_NETWORK_IDS = {
    Network.SOLANA: "solana",
    Network.ETHEREUM: "eth",
    Network.BSC: "bsc",
    Network.BASE: "base",
    Network.POLYGON: "polygon_pos",
    Network.ARBITRUM: "arbitrum",
    Network.AVALANCHE: "avax",
}

LIST_ENDPOINTS = {
    FeedKind.TRENDING: "trending_pools",
    FeedKind.FEED: "new_pools",
}


def network_from_gecko_id(gecko_id: str | None) -> Network | None:
    """Map a GeckoTerminal network id back to a canonical Network."""
    for network, candidate in GECKO_NETWORK_IDS.items():
        if candidate == gecko_id:
            return network
    return None


def gecko_id_from_resource(resource_id: str | None) -> str | None:
    """
    Recover the network id from a resource id like "polygon_pos_0xabc".

    Network ids may themselves contain underscores, so match known prefixes.
    """
    if not resource_id:
        return None
    for candidate in sorted(GECKO_NETWORK_IDS.values(), key=len, reverse=True):
        if resource_id.startswith(f"{candidate}_"):
            return candidate
    return None


class GeckoTerminalProvider:
    """
    Real implementation of ListingProvider using the GeckoTerminal API.
    """

    provider_id = "geckoterminal"

    def __init__(
        self,
        base_url: str = GECKOTERMINAL_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize GeckoTerminal provider.

        Args:
            base_url: API root
            timeout: Request timeout in seconds
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def fetch(self, network: Network | None, kind: FeedKind) -> list[dict]:
        """
        Fetch pools with their tokens resolved.

        Args:
            network: Chain to list (None = global list)
            kind: Trending pools or newly created pools

        Returns:
            Raw records: {"pool", "base_token", "quote_token", "network"}
        """
        endpoint = LIST_ENDPOINTS[kind]
        if network is None:
            url = f"{self._base_url}/networks/{endpoint}"
        else:
            url = f"{self._base_url}/networks/{GECKO_NETWORK_IDS[network]}/{endpoint}"

        logger.info(f"Fetching GeckoTerminal {endpoint} for {network.value if network else 'all'}")

        async with aiohttp.ClientSession() as session:
            payload = await request_json(
                session,
                "GET",
                url,
                provider=self.provider_id,
                timeout=self._timeout,
                params={"include": "base_token,quote_token,dex"},
                headers={"Accept": "application/json"},
            )

        pools = extract_records(payload, "data")
        included = self._index_included(payload)
        requested = GECKO_NETWORK_IDS[network] if network else None

        records = [self._bundle(pool, included, requested) for pool in pools]
        logger.debug(f"GeckoTerminal returned {len(records)} pools")
        return records

    def _index_included(self, payload: object) -> dict[str, dict]:
        """Index included token attributes by resource id."""
        index: dict[str, dict] = {}
        for item in extract_records(payload, "included"):
            item_id = item.get("id")
            attributes = item.get("attributes")
            if item.get("type") == "token" and isinstance(item_id, str) and isinstance(attributes, dict):
                index[item_id] = attributes
        return index

    def _bundle(
        self,
        pool: dict,
        included: dict[str, dict],
        requested_network: str | None,
    ) -> dict:
        """Attach resolved token attributes and network id to a pool."""
        relationships = pool.get("relationships")
        if not isinstance(relationships, dict):
            relationships = {}

        def related_id(name: str) -> str | None:
            rel = relationships.get(name)
            data = rel.get("data") if isinstance(rel, dict) else None
            value = data.get("id") if isinstance(data, dict) else None
            return value if isinstance(value, str) else None

        base_id = related_id("base_token")
        quote_id = related_id("quote_token")

        network_id = (
            related_id("network")
            or requested_network
            or gecko_id_from_resource(base_id)
            or gecko_id_from_resource(pool.get("id") if isinstance(pool.get("id"), str) else None)
        )

        return {
            "pool": pool,
            "base_token": included.get(base_id) if base_id else None,
            "quote_token": included.get(quote_id) if quote_id else None,
            "dex_id": related_id("dex"),
            "network": network_id,
        }
