"""
Custom exceptions for TokenFeed application.

Exception hierarchy:
    TokenFeedError (base)
    ├── ValidationError - Invalid user input (amount, slippage, address)
    ├── ProviderError - Upstream market-data API returned non-2xx
    │   └── ProviderTimeout - Upstream did not answer in time
    ├── QuoteError - Router returned no usable quote
    ├── PreconditionError - Swap cannot start (no wallet / no quote)
    ├── BuildError - Router could not build the swap transaction
    ├── SimulationError - Transaction would fail on-chain
    ├── UserRejected - Wallet refused to sign
    ├── SubmitError - Broadcast failed
    ├── ConfirmationTimeout - Outcome unknown, signature must be surfaced
    └── LedgerError - Ledger (RPC) transport failures
        ├── TransientLedgerError - Network-level, safe to retry
        ├── LedgerRejectedError - Node refused the request, never retried
        └── TransactionFailedError - Landed on-chain with an error

Each exception carries a user-friendly message that can be shown to users,
and optionally a technical message for logging.
"""


class TokenFeedError(Exception):
    """
    Base exception for all TokenFeed errors.

    Attributes:
        message: User-friendly error message (can be shown to users)
        technical_message: Detailed message for logs (optional)
    """

    def __init__(
        self,
        message: str = "Something went wrong. Please try again later.",
        technical_message: str | None = None,
    ):
        self.message = message
        self.technical_message = technical_message or message
        super().__init__(self.technical_message)

    def __str__(self) -> str:
        return self.technical_message


class ValidationError(TokenFeedError):
    """
    Raised when user input validation fails.

    Examples:
        - Amount is not a positive number
        - Slippage outside 0.1%-20%
        - Invalid Solana mint address
        - Unknown network
    """

    def __init__(
        self,
        message: str = "Invalid input.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class ProviderError(TokenFeedError):
    """
    Raised by a market-data adapter when its upstream answers with a non-2xx
    status or an unreadable body.

    Absorbed by the aggregator; never reaches the rendering layer.
    """

    def __init__(
        self,
        provider: str,
        status: int | None = None,
        technical_message: str | None = None,
    ):
        self.provider = provider
        self.status = status
        super().__init__(
            "Market data is temporarily unavailable.",
            technical_message or f"{provider} returned {status}",
        )

    @property
    def is_retryable(self) -> bool:
        """Rate limiting and server errors are worth another attempt."""
        return self.status is None or self.status == 429 or self.status >= 500


class ProviderTimeout(ProviderError):
    """Raised when an upstream does not answer within the bounded wait."""

    def __init__(self, provider: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            provider,
            status=None,
            technical_message=f"{provider} timeout after {timeout}s",
        )


class QuoteError(TokenFeedError):
    """Raised when the swap router returns no route or a malformed quote."""

    def __init__(
        self,
        message: str = "No route found for this trade right now.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class PreconditionError(TokenFeedError):
    """Raised synchronously when a swap is started without wallet or quote."""

    def __init__(
        self,
        message: str = "Connect a wallet and get a quote first.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class BuildError(TokenFeedError):
    """Raised when the router cannot serialize a transaction for the quote."""

    def __init__(
        self,
        message: str = "Could not prepare the swap transaction.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class SimulationError(TokenFeedError):
    """
    Raised when the transaction dry-run reports an error.

    The transaction must never be sent after this.
    """

    def __init__(
        self,
        message: str = "This swap would fail on-chain and was not sent.",
        technical_message: str | None = None,
        logs: list[str] | None = None,
    ):
        self.logs = logs or []
        super().__init__(message, technical_message)


class UserRejected(TokenFeedError):
    """Raised by a wallet when the user declines to sign."""

    def __init__(
        self,
        message: str = "Signature request was rejected.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class SubmitError(TokenFeedError):
    """Raised when broadcasting fails after the allowed attempts."""

    def __init__(
        self,
        message: str = "Could not submit the transaction.",
        technical_message: str | None = None,
        signature: str | None = None,
    ):
        self.signature = signature
        super().__init__(message, technical_message)


class ConfirmationTimeout(TokenFeedError):
    """
    Raised when confirmation did not arrive in time.

    The transaction may still land: callers must show the signature
    so the user can look it up manually.
    """

    def __init__(
        self,
        signature: str,
        timeout: float,
    ):
        self.signature = signature
        self.timeout = timeout
        super().__init__(
            f"Confirmation is taking longer than expected. "
            f"Check transaction {signature} in an explorer.",
            f"Confirmation timeout after {timeout}s for {signature}",
        )


class LedgerError(TokenFeedError):
    """Base class for ledger (RPC) failures."""

    def __init__(
        self,
        message: str = "Network is temporarily unavailable.",
        technical_message: str | None = None,
    ):
        super().__init__(message, technical_message)


class TransientLedgerError(LedgerError):
    """Network-level failure (timeout, connection reset, 5xx). Retryable."""


class LedgerRejectedError(LedgerError):
    """
    The node answered with an error (preflight failure, invalid transaction,
    forbidden, bad request). Not retryable.
    """

    def __init__(
        self,
        message: str = "Transaction was rejected by the network.",
        technical_message: str | None = None,
        code: int | None = None,
    ):
        self.code = code
        super().__init__(message, technical_message)


class TransactionFailedError(LedgerError):
    """A confirmed status reported an execution error for the signature."""

    def __init__(
        self,
        signature: str,
        error: object,
    ):
        self.signature = signature
        self.error = error
        super().__init__(
            "The transaction failed on-chain.",
            f"Transaction {signature} failed: {error}",
        )
