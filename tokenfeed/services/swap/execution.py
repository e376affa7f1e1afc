"""
Swap execution state machine.

Idle -> Building -> Simulating -> AwaitingSignature -> Submitting
     -> Confirming -> Confirmed | Failed

Every failure is terminal and classified by FailureReason.
A transaction that fails simulation is never offered for signing, and
a signed transaction is never abandoned by cancelling the caller.
"""

import asyncio
import logging
from dataclasses import dataclass

from tokenfeed.core.exceptions import (
    BuildError,
    ConfirmationTimeout,
    LedgerError,
    LedgerRejectedError,
    PreconditionError,
    SimulationError,
    SubmitError,
    TokenFeedError,
    TransactionFailedError,
    TransientLedgerError,
    UserRejected,
)
from tokenfeed.core.models import (
    ExecutionResult,
    ExecutionStatus,
    FailureReason,
    Quote,
)
from tokenfeed.core.protocols import LedgerConnection, SwapProvider, WalletSigner

logger = logging.getLogger(__name__)

DEFAULT_SUBMIT_ATTEMPTS = 3
DEFAULT_CONFIRM_TIMEOUT = 60.0


@dataclass(frozen=True)
class Transition:
    """One recorded state change."""

    status: ExecutionStatus
    reason: FailureReason | None = None
    detail: str | None = None


class SwapExecution:
    """
    Runs one swap to a terminal state.

    One instance per swap attempt; instances share no state and
    cannot be restarted.

    Usage:
        execution = SwapExecution(quote, swap_provider, wallet, ledger)
        result = await execution.run()
    """

    def __init__(
        self,
        quote: Quote | None,
        swap_provider: SwapProvider,
        wallet: WalletSigner,
        ledger: LedgerConnection,
        *,
        allow_estimated_decimals: bool = False,
        submit_max_attempts: int = DEFAULT_SUBMIT_ATTEMPTS,
        confirm_timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        retry_delay: float = 0.5,
    ):
        """
        Initialize execution.

        Args:
            quote: Accepted quote
            swap_provider: Router that builds the transaction
            wallet: Signer
            ledger: Connection used to simulate, submit and confirm
            allow_estimated_decimals: User acknowledged guessed decimals
            submit_max_attempts: Broadcast attempts on transient failures
            confirm_timeout: Max seconds to wait for confirmation
            retry_delay: Linear backoff step between broadcast attempts
        """
        self._quote = quote
        self._swap = swap_provider
        self._wallet = wallet
        self._ledger = ledger
        self._allow_estimated = allow_estimated_decimals
        self._submit_max_attempts = max(1, submit_max_attempts)
        self._confirm_timeout = confirm_timeout
        self._retry_delay = retry_delay

        self._status = ExecutionStatus.IDLE
        self._history: list[Transition] = []
        self._signature: str | None = None
        self._submit_attempts = 0
        self._result: ExecutionResult | None = None

    @property
    def status(self) -> ExecutionStatus:
        return self._status

    @property
    def history(self) -> list[Transition]:
        return list(self._history)

    @property
    def result(self) -> ExecutionResult | None:
        return self._result

    async def run(self) -> ExecutionResult:
        """
        Execute the swap.

        Returns:
            Terminal ExecutionResult (Confirmed or Failed)

        Raises:
            PreconditionError: Wallet/quote missing or already started
                (raised before any state change)
        """
        self._check_preconditions()
        public_key = self._wallet.public_key

        self._transition(ExecutionStatus.BUILDING)
        try:
            transaction = await self._swap.build_swap_transaction(self._quote, public_key)
        except BuildError as e:
            return self._fail(FailureReason.BUILD_ERROR, e)
        except Exception as e:
            return self._fail(
                FailureReason.BUILD_ERROR,
                BuildError(technical_message=f"Build failed: {type(e).__name__}: {e}"),
            )

        self._transition(ExecutionStatus.SIMULATING)
        try:
            await self._simulate(transaction)
        except SimulationError as e:
            return self._fail(FailureReason.SIMULATION_ERROR, e)

        # Once a signature is requested the outcome must be observed
        # even if the caller goes away.
        return await asyncio.shield(self._sign_and_send(transaction))

    def _check_preconditions(self) -> None:
        if self._status != ExecutionStatus.IDLE:
            raise PreconditionError(
                message="This swap has already been started.",
                technical_message=f"run() called in state {self._status.value}",
            )

        if not self._wallet.connected or not self._wallet.public_key:
            raise PreconditionError(
                message="Connect a wallet first.",
                technical_message="Wallet not connected",
            )

        if self._quote is None:
            raise PreconditionError(
                message="Get a quote first.",
                technical_message="No quote",
            )

        if self._quote.decimals_estimated and not self._allow_estimated:
            raise PreconditionError(
                message="Token decimals could not be verified. Confirm the amounts to continue.",
                technical_message="Quote uses estimated decimals without acknowledgement",
            )

    async def _simulate(self, transaction: bytes) -> None:
        try:
            result = await self._ledger.simulate_transaction(transaction)
        except Exception as e:
            raise SimulationError(technical_message=f"Simulation call failed: {e}") from e

        if result.get("err") is not None:
            raise SimulationError(
                technical_message=f"Simulation error: {result['err']}",
                logs=result.get("logs") or [],
            )

    async def _sign_and_send(self, transaction: bytes) -> ExecutionResult:
        self._transition(ExecutionStatus.AWAITING_SIGNATURE)
        try:
            signed = await self._wallet.sign_transaction(transaction)
        except UserRejected as e:
            return self._fail(FailureReason.USER_REJECTED, e)
        except Exception as e:
            # Wallet fault, not a refusal; same terminal reason
            logger.warning(f"Wallet signing failed: {type(e).__name__}: {e}")
            return self._fail(
                FailureReason.USER_REJECTED,
                UserRejected(
                    message="The wallet could not sign the transaction.",
                    technical_message=f"Signing failed: {type(e).__name__}: {e}",
                ),
            )

        self._transition(ExecutionStatus.SUBMITTING)
        try:
            self._signature = await self._submit(signed)
        except SubmitError as e:
            return self._fail(FailureReason.SUBMIT_ERROR, e)

        self._transition(ExecutionStatus.CONFIRMING, detail=self._signature)
        try:
            await asyncio.wait_for(
                self._ledger.confirm_transaction(self._signature, "confirmed"),
                timeout=self._confirm_timeout,
            )
        except TimeoutError:
            return self._fail(
                FailureReason.CONFIRMATION_TIMEOUT,
                ConfirmationTimeout(self._signature, self._confirm_timeout),
            )
        except TransactionFailedError as e:
            return self._fail(
                FailureReason.SUBMIT_ERROR,
                SubmitError(
                    message=e.message,
                    technical_message=e.technical_message,
                    signature=self._signature,
                ),
            )
        except LedgerError as e:
            # The ledger could not tell us; the transaction may still land
            logger.warning(f"Confirmation lookup failed for {self._signature}: {e.technical_message}")
            return self._fail(
                FailureReason.CONFIRMATION_TIMEOUT,
                ConfirmationTimeout(self._signature, self._confirm_timeout),
            )

        self._transition(ExecutionStatus.CONFIRMED, detail=self._signature)
        self._result = ExecutionResult(
            status=ExecutionStatus.CONFIRMED,
            signature=self._signature,
            submit_attempts=self._submit_attempts,
        )
        return self._result

    async def _submit(self, signed: bytes) -> str:
        """
        Broadcast with bounded retries for transient failures only.

        Raises:
            SubmitError: Rejected, or attempts exhausted
        """
        for attempt in range(1, self._submit_max_attempts + 1):
            self._submit_attempts = attempt
            try:
                return await self._ledger.send_raw_transaction(signed)

            except LedgerRejectedError as e:
                raise SubmitError(
                    message="The network rejected the transaction.",
                    technical_message=e.technical_message,
                ) from e

            except TransientLedgerError as e:
                logger.warning(
                    f"Submit attempt {attempt}/{self._submit_max_attempts} failed: {e}"
                )
                if attempt == self._submit_max_attempts:
                    raise SubmitError(
                        technical_message=f"Submit failed after {attempt} attempts: {e}",
                    ) from e
                await asyncio.sleep(self._retry_delay * attempt)

        raise SubmitError(technical_message="No submit attempts made")

    def _transition(
        self,
        status: ExecutionStatus,
        reason: FailureReason | None = None,
        detail: str | None = None,
    ) -> None:
        logger.info(f"Swap {self._status.value} -> {status.value}" + (f" ({detail})" if detail else ""))
        self._status = status
        self._history.append(Transition(status, reason, detail))

    def _fail(self, reason: FailureReason, error: TokenFeedError) -> ExecutionResult:
        signature = getattr(error, "signature", None) or self._signature
        self._transition(ExecutionStatus.FAILED, reason, error.technical_message)
        logger.warning(f"Swap failed ({reason.value}): {error.technical_message}")
        self._result = ExecutionResult(
            status=ExecutionStatus.FAILED,
            signature=signature,
            reason=reason,
            message=error.message,
            submit_attempts=self._submit_attempts,
        )
        return self._result
