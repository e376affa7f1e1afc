"""
Protocol definitions (interfaces) for external services.

Using typing.Protocol instead of ABC because:
1. Supports duck typing (no inheritance required)
2. Lighter weight
3. Better for dependency injection
4. Easier to mock in tests

Each protocol defines the contract that implementations must follow.
"""

from typing import Any, Protocol, runtime_checkable

from tokenfeed.core.models import (
    FeedKind,
    HolderSnapshot,
    Network,
    PairActivity,
    Quote,
)


@runtime_checkable
class ListingProvider(Protocol):
    """
    Protocol for token-listing/pricing providers.

    Implementations wrap one upstream API:
    - DexScreener (primary listing/trending)
    - GeckoTerminal (pool discovery)
    - MockListingProvider (development)

    Records are returned in the provider's own shape;
    the normalizer converts them to CanonicalToken.
    """

    provider_id: str

    async def fetch(self, network: Network | None, kind: FeedKind) -> list[dict]:
        """
        Fetch raw listings.

        Args:
            network: Chain to list (None = all chains the provider covers)
            kind: Trending list or larger feed corpus

        Returns:
            Raw provider records (malformed records already dropped)

        Raises:
            ProviderError: Upstream answered with non-2xx
            ProviderTimeout: Upstream did not answer in time
        """
        ...


@runtime_checkable
class MetadataProvider(Protocol):
    """Protocol for token-metadata enrichment (logo, socials)."""

    provider_id: str

    async def fetch_metadata(self, address: str, network: Network) -> dict:
        """
        Fetch metadata for one token.

        Returns:
            Dict with optional keys: name, image_url, website, twitter, telegram

        Raises:
            ProviderError: Upstream failure
        """
        ...


@runtime_checkable
class ActivityProvider(Protocol):
    """Protocol for 24h pair activity (transaction counts)."""

    async def fetch_activity(self, network: Network, pair_id: str) -> PairActivity:
        """Fetch activity for one pair."""
        ...


@runtime_checkable
class HolderDataProvider(Protocol):
    """Protocol for holder concentration data."""

    async def fetch_holders(self, mint: str) -> HolderSnapshot:
        """Fetch holder concentration for one mint."""
        ...


@runtime_checkable
class SwapProvider(Protocol):
    """
    Protocol for the liquidity-routing service (Jupiter).

    Quotes a route and serializes a transaction for an accepted quote.
    """

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

        Raises:
            QuoteError: No route or malformed response
        """
        ...

    async def build_swap_transaction(self, quote: Quote, user_public_key: str) -> bytes:
        """
        Serialize an unsigned transaction for the quote.

        Raises:
            BuildError: Router could not build the transaction
        """
        ...


@runtime_checkable
class WalletSigner(Protocol):
    """
    Protocol for the wallet-connection service.

    The wallet UI lives outside this package; only signing is consumed.
    """

    connected: bool
    public_key: str | None

    async def sign_transaction(self, transaction: bytes) -> bytes:
        """
        Ask the user to sign.

        Raises:
            UserRejected: User declined
        """
        ...

    async def disconnect(self) -> None:
        ...


@runtime_checkable
class LedgerConnection(Protocol):
    """
    Protocol for the ledger (Solana RPC) connection.

    Implemented by SolanaRpcLedger.
    """

    async def simulate_transaction(self, transaction: bytes) -> dict[str, Any]:
        """Dry-run; returns the RPC `value` object (`err`, `logs`, ...)."""
        ...

    async def send_raw_transaction(self, transaction: bytes) -> str:
        """
        Broadcast a signed transaction and return its signature.

        Raises:
            TransientLedgerError: Network-level failure (retryable)
            LedgerRejectedError: Node rejected the transaction
        """
        ...

    async def confirm_transaction(self, signature: str, commitment: str = "confirmed") -> bool:
        """
        Wait until the signature reaches the commitment level.

        Raises:
            TransactionFailedError: Transaction failed on-chain
        """
        ...

    async def get_balance(self, public_key: str) -> int:
        """Native balance in base units (lamports)."""
        ...

    async def get_parsed_account_info(self, address: str) -> dict[str, Any] | None:
        """jsonParsed account info `value`, or None if the account is missing."""
        ...
