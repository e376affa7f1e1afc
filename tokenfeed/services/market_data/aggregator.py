"""
Market data aggregator service.

Combines listings from several providers into one ranked, deduplicated feed.

This service:
1. Queries all listing providers in parallel, isolating failures
2. Retries transient provider failures (timeouts, 429, 5xx)
3. Normalizes, deduplicates, filters and ranks the results
4. Caches results and falls back to them when every provider fails
5. Pages the feed through per-session FeedCursors
6. Enriches tokens with metadata, activity and holder data

It does NOT:
- Render anything (that's the handlers' job)
- Quote or execute swaps (that's the swap package's job)
"""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Collection, Sequence
from dataclasses import dataclass, field
from typing import Any

from tokenfeed.config.settings import DEFAULT_ACCEPTED_QUOTES
from tokenfeed.core.exceptions import ProviderError, ProviderTimeout
from tokenfeed.core.models import (
    CanonicalToken,
    FeedCursor,
    FeedKind,
    FeedPage,
    FeedStatus,
    Network,
    TokenDetails,
    TokenLinks,
)
from tokenfeed.core.protocols import (
    ActivityProvider,
    HolderDataProvider,
    ListingProvider,
    MetadataProvider,
)
from tokenfeed.services.cache import TTLCache
from tokenfeed.services.market_data.normalizer import normalize

logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"

# Paging sessions kept before the least recently used one is forgotten
DEFAULT_MAX_SESSIONS = 1000


@dataclass
class ProviderOutcome:
    """Result of one bounded-attempt provider call."""

    provider_id: str
    listings: list[dict] = field(default_factory=list)
    error: Exception | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class _FeedSession:
    """Cursor of one paging consumer and the lock serializing its refills."""

    cursor: FeedCursor | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def _scope(network: Network | None) -> str:
    return network.value if network else "all"


class MarketDataAggregator:
    """
    Aggregates token listings from an ordered list of providers.

    Provider order matters: on equal liquidity the record from the
    earlier provider is kept.

    Usage:
        aggregator = MarketDataAggregator([DexScreenerProvider(), GeckoTerminalProvider()], TTLCache())
        page = await aggregator.fetch_trending(Network.SOLANA)
    """

    def __init__(
        self,
        providers: Sequence[ListingProvider],
        cache: TTLCache,
        *,
        metadata_provider: MetadataProvider | None = None,
        activity_provider: ActivityProvider | None = None,
        holder_provider: HolderDataProvider | None = None,
        accepted_quotes: Collection[str] = DEFAULT_ACCEPTED_QUOTES,
        trending_size: int = 5,
        page_size: int = 20,
        corpus_size: int = 60,
        min_market_cap: float = 0.0,
        enrichment_limit: int = 5,
        timeout: float = 6.0,
        max_attempts: int = 2,
        retry_backoff: float = 0.5,
        trending_ttl: float = 60,
        page_ttl: float = 60,
        metadata_ttl: float = 30 * 60,
        activity_ttl: float = 30,
        holders_ttl: float = 5 * 60,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        """
        Initialize aggregator.

        Args:
            providers: Listing providers, in priority order
            cache: Shared TTL cache (only the aggregator writes to it)
            metadata_provider: Optional logo/socials enrichment source
            activity_provider: Optional pair activity source
            holder_provider: Optional holder concentration source (Solana)
            accepted_quotes: Quote symbols a pair must be priced in
            trending_size: Tokens per trending list
            page_size: Tokens per feed page
            corpus_size: Tokens fetched per feed refill
            min_market_cap: Minimum market cap (0 disables the filter)
            enrichment_limit: Max tokens enriched per trending result
            timeout: Bounded wait per provider attempt (seconds)
            max_attempts: Attempts per provider call
            retry_backoff: Linear backoff step between attempts (seconds)
            max_sessions: Paging sessions remembered; the least recently
                used one restarts from the first page when evicted
        """
        self._providers = list(providers)
        self._cache = cache
        self._metadata_provider = metadata_provider
        self._activity_provider = activity_provider
        self._holder_provider = holder_provider

        self._accepted_quotes = {symbol.upper() for symbol in accepted_quotes}
        self._trending_size = trending_size
        self._page_size = page_size
        self._corpus_size = corpus_size
        self._min_market_cap = min_market_cap
        self._enrichment_limit = enrichment_limit

        self._timeout = timeout
        self._max_attempts = max(1, max_attempts)
        self._retry_backoff = retry_backoff

        self._trending_ttl = trending_ttl
        self._page_ttl = page_ttl
        self._metadata_ttl = metadata_ttl
        self._activity_ttl = activity_ttl
        self._holders_ttl = holders_ttl

        self._max_sessions = max(1, max_sessions)
        self._sessions: OrderedDict[tuple[str, str], _FeedSession] = OrderedDict()

    # =========================================================================
    # Public API
    # =========================================================================

    async def fetch_trending(self, network: Network | None) -> FeedPage:
        """
        Get the trending list for a network.

        Never raises provider errors: on total failure the last cached
        result is served, or an `unavailable` page.

        Args:
            network: Chain to list (None = all chains)

        Returns:
            FeedPage with at most `trending_size` tokens
        """
        key = f"trending:{_scope(network)}"
        tokens = await self._collect(network, FeedKind.TRENDING, self._trending_size)

        if tokens is None:
            logger.warning(f"All providers failed for {key}, using cache")
            return self._page_from_cache(key, network, self._trending_size)

        tokens = await self._enrich(tokens)
        self._cache.set(key, tokens, self._trending_ttl)

        status = FeedStatus.FRESH if tokens else FeedStatus.EMPTY
        logger.info(f"Trending {_scope(network)}: {len(tokens)} tokens ({status.value})")
        return FeedPage(network=network, tokens=tokens, status=status)

    async def fetch_page(
        self,
        network: Network | None,
        reset: bool = False,
        *,
        session: str = DEFAULT_SESSION,
    ) -> FeedPage:
        """
        Get the next feed page.

        Pages are served from the cursor buffer while it has unread tokens;
        an exhausted buffer is refilled from the providers.

        Args:
            network: Chain to page (None = all chains)
            reset: Start again from the first page
            session: Independent consumer id (e.g. a chat id)

        Returns:
            FeedPage with at most `page_size` tokens
        """
        feed = self._session((session, _scope(network)))

        async with feed.lock:
            cursor = None if reset else feed.cursor
            if cursor is None:
                cursor = FeedCursor(network=network)

            if cursor.has_unread:
                page, cursor = cursor.advance(self._page_size)
                feed.cursor = cursor
                return FeedPage(network=network, tokens=page, status=FeedStatus.BUFFERED)

            cache_key = f"page:{_scope(network)}"
            tokens = await self._collect(network, FeedKind.FEED, self._corpus_size)

            if tokens is None:
                logger.warning(f"All providers failed for {cache_key}, using cache")
                cached = self._cache.peek(cache_key)
                if cached is None:
                    feed.cursor = cursor
                    return FeedPage(network=network, status=FeedStatus.UNAVAILABLE)

                tokens, valid = cached
                status = FeedStatus.CACHED if valid else FeedStatus.STALE
            else:
                self._cache.set(cache_key, tokens, self._page_ttl)
                status = FeedStatus.FRESH if tokens else FeedStatus.EMPTY

            page, cursor = cursor.refill(tokens).advance(self._page_size)
            feed.cursor = cursor

        logger.info(f"Feed {_scope(network)} [{session}]: refilled {len(tokens)} tokens ({status.value})")
        return FeedPage(network=network, tokens=page, status=status)

    def reset_feed(self, network: Network | None, *, session: str = DEFAULT_SESSION) -> None:
        """Forget a session's cursor so its next page starts from the top."""
        self._sessions.pop((session, _scope(network)), None)

    def _session(self, key: tuple[str, str]) -> _FeedSession:
        """Get or create a paging session, evicting the least recently used."""
        feed = self._sessions.get(key)
        if feed is None:
            feed = self._sessions[key] = _FeedSession()
        self._sessions.move_to_end(key)

        while len(self._sessions) > self._max_sessions:
            oldest_key, oldest = next(iter(self._sessions.items()))
            if oldest.lock.locked():
                break
            del self._sessions[oldest_key]
            logger.debug(f"Evicted feed session {oldest_key}")

        return feed

    async def fetch_token_details(self, token: CanonicalToken) -> TokenDetails:
        """
        Gather pair activity and (on Solana) holder concentration.

        Failures yield None parts; this never raises provider errors.
        """
        activity_call = None
        holders_call = None

        if self._activity_provider is not None:
            provider = self._activity_provider
            activity_call = self._cached(
                f"activity:{token.chain.value}:{token.pair_id}",
                self._activity_ttl,
                lambda: provider.fetch_activity(token.chain, token.pair_id),
            )

        if self._holder_provider is not None and token.chain == Network.SOLANA:
            holder_provider = self._holder_provider
            holders_call = self._cached(
                f"holders:{token.base_address}",
                self._holders_ttl,
                lambda: holder_provider.fetch_holders(token.base_address),
            )

        activity, holders = await asyncio.gather(
            activity_call or self._nothing(),
            holders_call or self._nothing(),
            return_exceptions=True,
        )

        # Handle partial failures
        if isinstance(activity, Exception):
            logger.warning(f"Activity unavailable for {token.pair_id}: {activity}")
            activity = None

        if isinstance(holders, Exception):
            logger.warning(f"Holders unavailable for {token.base_address}: {holders}")
            holders = None

        if activity is not None:
            token = token.model_copy(
                update={"buys_24h": activity.buys_24h, "sells_24h": activity.sells_24h}
            )

        return TokenDetails(token=token, activity=activity, holders=holders)

    # =========================================================================
    # Collection pipeline
    # =========================================================================

    async def _collect(
        self,
        network: Network | None,
        kind: FeedKind,
        limit: int,
    ) -> list[CanonicalToken] | None:
        """
        Fetch, normalize, dedupe, filter and rank.

        Returns:
            Ranked tokens (possibly empty), or None if every provider failed
        """
        outcomes = await asyncio.gather(
            *(self._call_provider(provider, network, kind) for provider in self._providers)
        )

        successes = [outcome for outcome in outcomes if outcome.ok]
        if not successes:
            return None

        # Normalize in provider order, dedupe by pair
        by_pair: dict[str, CanonicalToken] = {}
        for outcome in successes:
            for raw in outcome.listings:
                token = normalize(raw, outcome.provider_id)
                if token is None:
                    continue
                existing = by_pair.get(token.pair_id)
                if existing is None or token.liquidity_usd > existing.liquidity_usd:
                    by_pair[token.pair_id] = token

        eligible = [token for token in by_pair.values() if self._accepts(token, network)]

        # Stable sort: equal liquidity keeps first-seen order
        eligible.sort(key=lambda token: token.liquidity_usd, reverse=True)

        # Best pair per base asset
        ranked: list[CanonicalToken] = []
        seen_assets: set[tuple[Network, str]] = set()
        for token in eligible:
            asset = (token.chain, token.base_address)
            if asset in seen_assets:
                continue
            seen_assets.add(asset)
            ranked.append(token)

        logger.debug(
            f"Collected {kind.value} {_scope(network)}: {len(by_pair)} pairs, "
            f"{len(eligible)} eligible, {len(ranked)} assets"
        )
        return ranked[:limit]

    def _accepts(self, token: CanonicalToken, network: Network | None) -> bool:
        if network is not None and token.chain != network:
            return False
        if token.quote_symbol not in self._accepted_quotes:
            return False
        if token.liquidity_usd <= 0:
            return False
        return token.market_cap >= self._min_market_cap

    async def _call_provider(
        self,
        provider: ListingProvider,
        network: Network | None,
        kind: FeedKind,
    ) -> ProviderOutcome:
        """
        Call one provider with bounded attempts.

        Only timeouts, 429 and 5xx are retried. Never raises.
        """
        provider_id = provider.provider_id
        error: Exception | None = None

        for attempt in range(1, self._max_attempts + 1):
            try:
                listings = await asyncio.wait_for(
                    provider.fetch(network, kind),
                    timeout=self._timeout,
                )
                return ProviderOutcome(provider_id, listings=listings, attempts=attempt)

            except TimeoutError:
                error = ProviderTimeout(provider_id, self._timeout)

            except ProviderError as e:
                error = e

            except Exception as e:
                # Unexpected adapter bug: isolate it like any other failure
                logger.exception(f"Unexpected error from {provider_id}: {e}")
                return ProviderOutcome(provider_id, error=e, attempts=attempt)

            logger.warning(f"{provider_id} attempt {attempt}/{self._max_attempts} failed: {error}")

            if not error.is_retryable or attempt == self._max_attempts:
                return ProviderOutcome(provider_id, error=error, attempts=attempt)

            await asyncio.sleep(self._retry_backoff * attempt)

        return ProviderOutcome(provider_id, error=error, attempts=self._max_attempts)

    def _page_from_cache(self, key: str, network: Network | None, limit: int) -> FeedPage:
        cached = self._cache.peek(key)
        if cached is None:
            return FeedPage(network=network, status=FeedStatus.UNAVAILABLE)

        tokens, valid = cached
        status = FeedStatus.CACHED if valid else FeedStatus.STALE
        return FeedPage(network=network, tokens=list(tokens)[:limit], status=status)

    # =========================================================================
    # Enrichment
    # =========================================================================

    async def _enrich(self, tokens: list[CanonicalToken]) -> list[CanonicalToken]:
        """Fill in images and links for tokens that came without an image."""
        if self._metadata_provider is None or self._enrichment_limit <= 0:
            return tokens

        targets = [i for i, token in enumerate(tokens) if token.image_url is None]
        targets = targets[: self._enrichment_limit]
        if not targets:
            return tokens

        provider = self._metadata_provider
        results = await asyncio.gather(
            *(
                self._cached(
                    f"meta:{tokens[i].chain.value}:{tokens[i].base_address}",
                    self._metadata_ttl,
                    lambda token=tokens[i]: provider.fetch_metadata(token.base_address, token.chain),
                )
                for i in targets
            ),
            return_exceptions=True,
        )

        enriched = list(tokens)
        for i, metadata in zip(targets, results, strict=True):
            if isinstance(metadata, Exception):
                logger.warning(f"Metadata unavailable for {tokens[i].base_symbol}: {metadata}")
                continue
            enriched[i] = self._apply_metadata(tokens[i], metadata)

        return enriched

    @staticmethod
    def _apply_metadata(token: CanonicalToken, metadata: dict) -> CanonicalToken:
        image_url = metadata.get("image_url") or None
        links = TokenLinks(
            website=token.links.website or metadata.get("website"),
            twitter=token.links.twitter or metadata.get("twitter"),
            telegram=token.links.telegram or metadata.get("telegram"),
            chart_url=token.links.chart_url,
        )
        return token.model_copy(
            update={
                "image_url": image_url,
                "avatar_url": image_url or token.avatar_url,
                "links": links,
            }
        )

    async def _cached(
        self,
        key: str,
        ttl: float,
        fetch: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Serve a valid cache entry or fetch (bounded) and store."""
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        value = await asyncio.wait_for(fetch(), timeout=self._timeout)
        self._cache.set(key, value, ttl)
        return value

    @staticmethod
    async def _nothing() -> None:
        return None
