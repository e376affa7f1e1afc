"""
Core module - models, protocols, and exceptions.

This module contains the fundamental building blocks of the application:
- Data models (Pydantic)
- Protocol definitions (interfaces)
- Custom exceptions
"""

from tokenfeed.core.exceptions import (
    BuildError,
    ConfirmationTimeout,
    LedgerRejectedError,
    PreconditionError,
    ProviderError,
    ProviderTimeout,
    QuoteError,
    SimulationError,
    SubmitError,
    TokenFeedError,
    TransactionFailedError,
    TransientLedgerError,
    UserRejected,
    ValidationError,
)
from tokenfeed.core.models import (
    CanonicalToken,
    ExecutionResult,
    ExecutionStatus,
    FailureReason,
    FeedCursor,
    FeedKind,
    FeedPage,
    FeedStatus,
    Network,
    Quote,
    QuoteState,
    QuoteView,
    TradeSide,
)
from tokenfeed.core.protocols import (
    LedgerConnection,
    ListingProvider,
    MetadataProvider,
    SwapProvider,
    WalletSigner,
)

__all__ = [
    # Exceptions
    "TokenFeedError",
    "ValidationError",
    "ProviderError",
    "ProviderTimeout",
    "QuoteError",
    "PreconditionError",
    "BuildError",
    "SimulationError",
    "UserRejected",
    "SubmitError",
    "ConfirmationTimeout",
    "TransientLedgerError",
    "LedgerRejectedError",
    "TransactionFailedError",
    # Models
    "Network",
    "FeedKind",
    "FeedStatus",
    "CanonicalToken",
    "FeedCursor",
    "FeedPage",
    "TradeSide",
    "Quote",
    "QuoteView",
    "QuoteState",
    "ExecutionStatus",
    "FailureReason",
    "ExecutionResult",
    # Protocols
    "ListingProvider",
    "MetadataProvider",
    "SwapProvider",
    "WalletSigner",
    "LedgerConnection",
]
