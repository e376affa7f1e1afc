"""Swap: router adapter, ledger connection, quote pipeline and execution."""

from tokenfeed.services.swap.decimals import SOL_MINT, Decimals, DecimalsResolver
from tokenfeed.services.swap.execution import SwapExecution, Transition
from tokenfeed.services.swap.jupiter import JupiterSwapProvider
from tokenfeed.services.swap.ledger import SolanaRpcLedger
from tokenfeed.services.swap.quote_pipeline import (
    QuotePipeline,
    parse_amount,
    slippage_to_bps,
    to_base_units,
)

__all__ = [
    "SOL_MINT",
    "Decimals",
    "DecimalsResolver",
    "JupiterSwapProvider",
    "QuotePipeline",
    "SolanaRpcLedger",
    "SwapExecution",
    "Transition",
    "parse_amount",
    "slippage_to_bps",
    "to_base_units",
]
