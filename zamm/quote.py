"""
Constant-product swap math for ZAMM pools.

Implements the x*y=k invariant with the fee taken out of the input, using
exact integer arithmetic that mirrors the contract:

    amountInWithFee = amountIn * (10000 - fee)
    amountOut = amountInWithFee * reserveOut / (reserveIn * 10000 + amountInWithFee)

Degenerate inputs (zero amounts, empty pools, unreachable outputs) return 0
instead of raising, so callers can pass user-controlled values directly and
treat 0 as "no valid quote".
"""

from typing import Tuple

from .constants import FEE_DENOMINATOR


def quote_out(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """
    Calculate output amount for an exact-input swap.

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token
        reserve_out: Reserve of output token
        fee_bps: Pool fee in basis points

    Returns:
        Output amount, rounded down; 0 if the swap cannot be quoted

    Example:
        >>> quote_out(1000, 1_000_000, 1_000_000, 100)
        989
    """
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0

    amount_in_with_fee = amount_in * (FEE_DENOMINATOR - fee_bps)
    if amount_in_with_fee <= 0:
        return 0

    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * FEE_DENOMINATOR + amount_in_with_fee
    return numerator // denominator


def quote_in(amount_out: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """
    Calculate the input needed to receive an exact output amount.

    The trailing +1 rounds up: quote_out truncates, so an input computed
    from a desired output must be rounded up or feeding it back through
    quote_out could deliver one unit short.

    Args:
        amount_out: Desired output amount
        reserve_in: Reserve of input token
        reserve_out: Reserve of output token
        fee_bps: Pool fee in basis points

    Returns:
        Required input amount; 0 if the output is unreachable
        (amount_out >= reserve_out) or the pool is empty
    """
    if (
        amount_out <= 0
        or reserve_in <= 0
        or reserve_out <= 0
        or amount_out >= reserve_out
    ):
        return 0

    fee_factor = FEE_DENOMINATOR - fee_bps
    if fee_factor <= 0:
        return 0

    numerator = reserve_in * amount_out * FEE_DENOMINATOR
    denominator = (reserve_out - amount_out) * fee_factor
    return numerator // denominator + 1


def optimal_liquidity(
    amount0_desired: int, amount1_desired: int, reserve0: int, reserve1: int
) -> Tuple[int, int]:
    """
    Amounts a constant-product pool actually takes when adding liquidity.

    One side is used in full and the other is scaled down to the current
    reserve ratio, rounding down, as the contract does. An empty pool takes
    both desired amounts.

    Example:
        >>> optimal_liquidity(1000, 989, 1_001_000, 999_011)
        (990, 989)
    """
    if reserve0 <= 0 or reserve1 <= 0:
        return amount0_desired, amount1_desired

    amount1_optimal = amount0_desired * reserve1 // reserve0
    if amount1_optimal <= amount1_desired:
        return amount0_desired, amount1_optimal
    return amount1_desired * reserve0 // reserve1, amount1_desired
