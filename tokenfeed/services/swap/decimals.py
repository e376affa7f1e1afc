"""
Token decimals lookup.

The native asset (wrapped SOL) always has 9 decimals. Other mints are read
from the ledger's parsed mint account; when that fails the lossy default of
6 is used and the caller is told the value is an estimate.
"""

import logging
from dataclasses import dataclass

from tokenfeed.core.exceptions import LedgerError
from tokenfeed.core.protocols import LedgerConnection

logger = logging.getLogger(__name__)

SOL_MINT = "So11111111111111111111111111111111111111112"
SOL_DECIMALS = 9
DEFAULT_DECIMALS = 6


@dataclass(frozen=True)
class Decimals:
    """Resolved decimals and whether they are a fallback guess."""

    value: int
    estimated: bool = False


class DecimalsResolver:
    """
    Resolve mint decimals through a LedgerConnection.

    Successful lookups are memoized for the resolver's lifetime
    (mint decimals never change). Fallbacks are not memoized.
    """

    def __init__(self, ledger: LedgerConnection, native_mint: str = SOL_MINT):
        self._ledger = ledger
        self._native_mint = native_mint
        self._known: dict[str, int] = {native_mint: SOL_DECIMALS}

    async def resolve(self, mint: str) -> Decimals:
        """
        Get decimals for a mint.

        Args:
            mint: Token mint address

        Returns:
            Decimals (estimated=True when the default was used)
        """
        if mint in self._known:
            return Decimals(self._known[mint])

        try:
            account = await self._ledger.get_parsed_account_info(mint)
            decimals = account["data"]["parsed"]["info"]["decimals"]
            if not isinstance(decimals, int) or decimals < 0:
                raise TypeError(f"decimals is {decimals!r}")
        except (LedgerError, KeyError, TypeError) as e:
            logger.warning(
                f"Decimals lookup failed for {mint[:8]}, defaulting to {DEFAULT_DECIMALS}: {e}"
            )
            return Decimals(DEFAULT_DECIMALS, estimated=True)

        self._known[mint] = decimals
        return Decimals(decimals)
