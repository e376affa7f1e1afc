"""
Solana ledger connection over JSON-RPC.

Implements LedgerConnection with plain aiohttp calls:
- simulateTransaction  (dry-run before asking for a signature)
- sendTransaction      (broadcast, base64 encoded)
- getSignatureStatuses (confirmation polling)
- getBalance, getAccountInfo (jsonParsed)

Failure classification:
- transport problems, 429 and 5xx -> TransientLedgerError (retryable)
- JSON-RPC errors and other non-2xx -> LedgerRejectedError
- a confirmed status carrying `err` -> TransactionFailedError
"""

import asyncio
import base64
import logging
from typing import Any

import aiohttp

from tokenfeed.core.exceptions import (
    LedgerError,
    LedgerRejectedError,
    ProviderError,
    TransactionFailedError,
    TransientLedgerError,
)
from tokenfeed.services.market_data.http import request_json

logger = logging.getLogger(__name__)

SOLANA_RPC_URL = "https://api.mainnet-beta.solana.com"

# Commitment levels in increasing order of finality
COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")


class SolanaRpcLedger:
    """
    Real implementation of LedgerConnection.

    Usage:
        ledger = SolanaRpcLedger("https://api.mainnet-beta.solana.com")
        signature = await ledger.send_raw_transaction(signed_tx)
        await ledger.confirm_transaction(signature)
    """

    def __init__(
        self,
        rpc_url: str = SOLANA_RPC_URL,
        timeout: float = 10.0,
        poll_interval: float = 1.0,
    ):
        """
        Initialize RPC connection settings.

        Args:
            rpc_url: JSON-RPC endpoint
            timeout: Per-request timeout in seconds
            poll_interval: Seconds between confirmation polls
        """
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._poll_interval = poll_interval

    async def simulate_transaction(self, transaction: bytes) -> dict[str, Any]:
        """Dry-run a transaction; returns the `value` object (`err`, `logs`)."""
        result = await self._rpc(
            "simulateTransaction",
            [
                self._encode(transaction),
                {
                    "encoding": "base64",
                    "sigVerify": False,
                    "replaceRecentBlockhash": True,
                    "commitment": "processed",
                },
            ],
        )
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, dict):
            raise LedgerRejectedError(technical_message=f"Unexpected simulation result: {result}")
        return value

    async def send_raw_transaction(self, transaction: bytes) -> str:
        """
        Broadcast a signed transaction.

        Returns:
            Transaction signature

        Raises:
            TransientLedgerError: Network-level failure
            LedgerRejectedError: Node rejected the transaction
        """
        result = await self._rpc(
            "sendTransaction",
            [
                self._encode(transaction),
                {
                    "encoding": "base64",
                    "skipPreflight": False,
                    "preflightCommitment": "confirmed",
                    "maxRetries": 3,
                },
            ],
        )
        if not isinstance(result, str) or not result:
            raise LedgerRejectedError(technical_message=f"Unexpected send result: {result}")

        logger.info(f"Transaction sent: {result}")
        return result

    async def confirm_transaction(self, signature: str, commitment: str = "confirmed") -> bool:
        """
        Poll until the signature reaches `commitment`.

        Polls indefinitely; callers bound the wait. A failed poll says
        nothing about the transaction, so it is logged and polled again.

        Raises:
            TransactionFailedError: Transaction failed on-chain
        """
        target = COMMITMENT_LEVELS.index(commitment)

        while True:
            try:
                result = await self._rpc(
                    "getSignatureStatuses",
                    [[signature], {"searchTransactionHistory": False}],
                )
            except LedgerError as e:
                logger.warning(f"Status poll failed for {signature[:8]}: {e}")
                result = None

            statuses = result.get("value") if isinstance(result, dict) else None
            status = statuses[0] if isinstance(statuses, list) and statuses else None

            if isinstance(status, dict):
                if status.get("err") is not None:
                    raise TransactionFailedError(signature, status["err"])

                reached = status.get("confirmationStatus")
                if reached in COMMITMENT_LEVELS and COMMITMENT_LEVELS.index(reached) >= target:
                    logger.info(f"Transaction {signature[:8]} reached {reached}")
                    return True

            await asyncio.sleep(self._poll_interval)

    async def get_balance(self, public_key: str) -> int:
        """Native balance in lamports."""
        result = await self._rpc("getBalance", [public_key])
        return int(result["value"])

    async def get_parsed_account_info(self, address: str) -> dict[str, Any] | None:
        """jsonParsed account info, or None if the account does not exist."""
        result = await self._rpc("getAccountInfo", [address, {"encoding": "jsonParsed"}])
        value = result.get("value") if isinstance(result, dict) else None
        return value if isinstance(value, dict) else None

    async def _rpc(self, method: str, params: list) -> Any:
        """
        Call one JSON-RPC method.

        Returns:
            The `result` member

        Raises:
            TransientLedgerError: Transport failure, timeout, 429 or 5xx
            LedgerRejectedError: JSON-RPC error object or other non-2xx
        """
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        try:
            async with aiohttp.ClientSession() as session:
                data = await request_json(
                    session,
                    "POST",
                    self._rpc_url,
                    provider="solana-rpc",
                    timeout=self._timeout,
                    json=payload,
                )
        except ProviderError as e:
            if e.is_retryable:
                raise TransientLedgerError(technical_message=f"{method}: {e}") from e
            raise LedgerRejectedError(technical_message=f"{method}: {e}") from e

        if not isinstance(data, dict):
            raise LedgerRejectedError(technical_message=f"{method}: malformed response")

        error = data.get("error")
        if error is not None:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message") if isinstance(error, dict) else error
            raise LedgerRejectedError(
                technical_message=f"{method} error {code}: {message}",
                code=code,
            )

        return data.get("result")

    @staticmethod
    def _encode(transaction: bytes) -> str:
        return base64.b64encode(transaction).decode("ascii")
