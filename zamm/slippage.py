"""
Slippage bounds for ZAMM swaps.

Turns an expected output into the minimum output a swap will accept, which
the contract enforces at execution time.
"""

from .constants import DEFAULT_SLIPPAGE_BPS, FEE_DENOMINATOR


def apply_slippage(amount: int, tolerance_bps: int = DEFAULT_SLIPPAGE_BPS) -> int:
    """
    Apply a slippage tolerance to an amount, rounding down.

    Tolerance is clamped to [0, 10000]: 0 returns the amount unchanged and
    10000 returns 0.

    Example:
        >>> apply_slippage(10_000, 100)  # 1%
        9900
    """
    if amount <= 0:
        return 0
    tolerance_bps = max(0, min(tolerance_bps, FEE_DENOMINATOR))
    return amount * (FEE_DENOMINATOR - tolerance_bps) // FEE_DENOMINATOR


def tolerance_for_min_out(expected: int, min_amount_out: int) -> int:
    """
    Effective tolerance in whole basis points between an expected output
    and the minimum accepted, rounded down. Returns 0 for empty quotes.
    """
    if expected <= 0:
        return 0
    shortfall = max(0, expected - max(min_amount_out, 0))
    return shortfall * FEE_DENOMINATOR // expected
