"""
Quote routing for direct and coin-to-coin swaps.

Every Coinchan pool pairs a coin with ETH, so a coin-to-coin swap has no
direct pool and is always routed through ETH in exactly two legs:

    source coin --(source pool)--> ETH --(target pool)--> target coin

Leg 1 executes on chain before leg 2 spends its output, so leg 2 is planned
with a slippage-margined estimate of the ETH leg 1 will really deliver.
There is no generalized path finding; ETH is the only intermediary.
"""

from typing import Optional, Tuple

from coinchan.utils import get_logger

from .constants import DEFAULT_SLIPPAGE_BPS, DEFAULT_SWAP_FEE_BPS
from .quote import quote_in, quote_out
from .slippage import apply_slippage
from .types import MultiHopQuote, Quote, Reserves

logger = get_logger(__name__)


def reserves_for_direction(reserves: Reserves, zero_for_one: bool) -> Tuple[int, int]:
    """
    Order a pool's reserves as (reserve_in, reserve_out) for a swap direction.

    zero_for_one=True sells ETH (reserve0) for the coin (reserve1).
    """
    if zero_for_one:
        return reserves.reserve0, reserves.reserve1
    return reserves.reserve1, reserves.reserve0


def quote_direct(
    amount_in: int,
    reserves: Reserves,
    zero_for_one: bool,
    fee_bps: int = DEFAULT_SWAP_FEE_BPS,
    tolerance_bps: int = DEFAULT_SLIPPAGE_BPS,
) -> Quote:
    """
    Quote an exact-input swap against a single ETH/coin pool.

    Args:
        amount_in: Amount sold
        reserves: Current pool reserves
        zero_for_one: True to sell ETH for the coin, False to sell the coin
        fee_bps: Pool fee in basis points
        tolerance_bps: Slippage tolerance for the minimum output

    Returns:
        Quote; amount_out == 0 if the swap cannot be quoted
    """
    reserve_in, reserve_out = reserves_for_direction(reserves, zero_for_one)
    amount_out = quote_out(amount_in, reserve_in, reserve_out, fee_bps)
    if amount_out == 0:
        return Quote.unquotable(amount_in)
    return Quote(
        amount_in=amount_in,
        amount_out=amount_out,
        min_amount_out=apply_slippage(amount_out, tolerance_bps),
    )


def quote_direct_exact_out(
    amount_out: int,
    reserves: Reserves,
    zero_for_one: bool,
    fee_bps: int = DEFAULT_SWAP_FEE_BPS,
    tolerance_bps: int = DEFAULT_SLIPPAGE_BPS,
) -> Quote:
    """
    Quote the input required for a desired output from a single pool.

    The swap itself is still submitted exact-in, so the returned quote
    carries the forward output for the computed input (never below the
    desired amount) and its slippage bound.
    """
    reserve_in, reserve_out = reserves_for_direction(reserves, zero_for_one)
    amount_in = quote_in(amount_out, reserve_in, reserve_out, fee_bps)
    if amount_in == 0:
        return Quote.unquotable()
    return quote_direct(amount_in, reserves, zero_for_one, fee_bps, tolerance_bps)


def estimate_coin_to_coin(
    amount_in: int,
    source_reserves: Reserves,
    target_reserves: Reserves,
    fee_bps: int = DEFAULT_SWAP_FEE_BPS,
    tolerance_bps: int = DEFAULT_SLIPPAGE_BPS,
) -> MultiHopQuote:
    """
    Estimate the output of a coin-to-coin swap routed through ETH.

    Args:
        amount_in: Source coin amount sold
        source_reserves: Reserves of the source coin's pool (ETH, source coin)
        target_reserves: Reserves of the target coin's pool (ETH, target coin)
        fee_bps: Pool fee in basis points (applied on both legs)
        tolerance_bps: Slippage tolerance, applied to each leg independently

    Returns:
        MultiHopQuote; all amounts are 0 when either leg cannot be quoted

    Example:
        >>> q = estimate_coin_to_coin(
        ...     10_000, Reserves(500_000, 2_000_000), Reserves(800_000, 1_500_000)
        ... )
        >>> (q.intermediate_amount, q.amount_out, q.min_amount_out)
        (2437, 4510, 4464)
    """
    # Leg 1: sell the source coin into its own pool for ETH
    eth_out = quote_out(
        amount_in, source_reserves.reserve1, source_reserves.reserve0, fee_bps
    )
    if eth_out == 0:
        logger.debug(f"Coin-to-coin leg 1 unquotable for amount_in={amount_in}")
        return MultiHopQuote.unquotable(amount_in)

    safe_eth_out = apply_slippage(eth_out, tolerance_bps)

    # Leg 2: buy the target coin with the margined ETH
    final_out = quote_out(
        safe_eth_out, target_reserves.reserve0, target_reserves.reserve1, fee_bps
    )
    if final_out == 0:
        logger.debug(
            f"Coin-to-coin leg 2 unquotable for intermediate ETH={safe_eth_out}"
        )
        return MultiHopQuote.unquotable(amount_in)

    quote = MultiHopQuote(
        amount_in=amount_in,
        amount_out=final_out,
        min_amount_out=apply_slippage(final_out, tolerance_bps),
        intermediate_amount=safe_eth_out,
    )
    logger.debug(
        f"Coin-to-coin: {amount_in} -> {eth_out} ETH (margined {safe_eth_out}) "
        f"-> {final_out} (min {quote.min_amount_out})"
    )
    return quote


def estimate_coin_to_coin_exact_out(
    amount_out: int,
    source_reserves: Reserves,
    target_reserves: Reserves,
    fee_bps: int = DEFAULT_SWAP_FEE_BPS,
    tolerance_bps: int = DEFAULT_SLIPPAGE_BPS,
) -> Optional[MultiHopQuote]:
    """
    Exact-output quoting of a two-leg route is not offered.

    The margined intermediate hop has no closed-form inverse, so rather than
    approximate one this always returns None; callers must drive coin-to-coin
    swaps from the input amount.
    """
    logger.debug(
        f"Exact-output coin-to-coin quote requested for {amount_out}; unsupported"
    )
    return None

