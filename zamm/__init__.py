"""
ZAMM pricing, slippage and multi-hop routing engine.

Pure integer functions that quote swaps against the Coinchan constant-product
pools, bound them with slippage, route coin-to-coin swaps through ETH and
assemble the calls that execute a route as one atomic batch.
"""

from .pool_key import derive_key, derive_pool_id, encode_pool_key
from .quote import quote_in, quote_out
from .router import (
    estimate_coin_to_coin,
    estimate_coin_to_coin_exact_out,
    quote_direct,
    quote_direct_exact_out,
)
from .slippage import apply_slippage
from .planner import TransactionPlanner
from .types import (
    Call,
    MultiHopQuote,
    PoolKey,
    Quote,
    Reserves,
    Route,
    SwapLeg,
    TransactionPlan,
)

__all__ = [
    "derive_key",
    "derive_pool_id",
    "encode_pool_key",
    "quote_out",
    "quote_in",
    "apply_slippage",
    "estimate_coin_to_coin",
    "estimate_coin_to_coin_exact_out",
    "quote_direct",
    "quote_direct_exact_out",
    "TransactionPlanner",
    "Call",
    "MultiHopQuote",
    "PoolKey",
    "Quote",
    "Reserves",
    "Route",
    "SwapLeg",
    "TransactionPlan",
]
