"""
Core data types for ZAMM quoting and transaction planning.

All amounts are plain ints in the token's smallest unit. Every type is
immutable and created fresh per quote or swap request.
"""

from dataclasses import dataclass, field
from typing import Any, Tuple

from eth_abi import encode
from web3 import Web3

from coinchan.exceptions import InvalidRouteError

from .abi import ZAMM_ABI, function_selector
from .constants import BASE_ASSET_ID

PoolId = int


@dataclass(frozen=True)
class PoolKey:
    """
    Canonical descriptor of one ETH/coin pool.

    Attributes:
        id0: Id of token0 (always 0, ETH)
        id1: Coin id inside the Coins contract
        token0: ETH sentinel address
        token1: Coins contract address
        swap_fee: Pool fee in basis points
    """

    id0: int
    id1: int
    token0: str
    token1: str
    swap_fee: int

    def as_tuple(self) -> Tuple[int, int, str, str, int]:
        """Field values in struct order, ready for ABI encoding."""
        return (self.id0, self.id1, self.token0, self.token1, self.swap_fee)


@dataclass(frozen=True)
class Reserves:
    """
    Pool balances as read from chain.

    Attributes:
        reserve0: ETH reserve (wei)
        reserve1: Coin reserve (coin units)
    """

    reserve0: int
    reserve1: int

    @classmethod
    def empty(cls) -> "Reserves":
        return cls(0, 0)

    @property
    def is_empty(self) -> bool:
        return self.reserve0 <= 0 or self.reserve1 <= 0


@dataclass(frozen=True)
class Quote:
    """
    Result of quoting a direct (single pool) swap.

    A zero amount_out means no valid quote exists for the inputs.
    """

    amount_in: int
    amount_out: int
    min_amount_out: int

    @classmethod
    def unquotable(cls, amount_in: int = 0) -> "Quote":
        return cls(amount_in=amount_in, amount_out=0, min_amount_out=0)

    @property
    def is_quotable(self) -> bool:
        return self.amount_out > 0


@dataclass(frozen=True)
class MultiHopQuote:
    """
    Result of quoting a coin -> ETH -> coin swap.

    Attributes:
        amount_in: Source coin sold into leg 1
        amount_out: Expected destination coin out of leg 2
        min_amount_out: Slippage-bounded amount_out, the user's only guarantee
        intermediate_amount: Safety-margined ETH fed into leg 2
    """

    amount_in: int
    amount_out: int
    min_amount_out: int
    intermediate_amount: int

    @classmethod
    def unquotable(cls, amount_in: int = 0) -> "MultiHopQuote":
        return cls(
            amount_in=amount_in, amount_out=0, min_amount_out=0, intermediate_amount=0
        )

    @property
    def is_quotable(self) -> bool:
        return self.amount_out > 0


@dataclass(frozen=True)
class SwapLeg:
    """
    One pool trade. zero_for_one=True sells ETH (token0) for the coin.
    """

    pool_key: PoolKey
    zero_for_one: bool

    @property
    def coin_id(self) -> int:
        return self.pool_key.id1

    @property
    def token_in_id(self) -> int:
        return BASE_ASSET_ID if self.zero_for_one else self.pool_key.id1

    @property
    def token_out_id(self) -> int:
        return self.pool_key.id1 if self.zero_for_one else BASE_ASSET_ID


@dataclass(frozen=True)
class Route:
    """
    Ordered legs of a swap: one leg for a direct swap, or exactly two legs
    (coin -> ETH, ETH -> other coin) for a coin-to-coin swap. ETH is the
    only permitted intermediary.
    """

    legs: Tuple[SwapLeg, ...]

    def __post_init__(self):
        legs = tuple(self.legs)
        object.__setattr__(self, "legs", legs)

        if len(legs) == 1:
            return
        if len(legs) != 2:
            raise InvalidRouteError(
                f"Routes must have 1 or 2 legs, got {len(legs)}",
                {"legs": len(legs)},
            )

        first, second = legs
        if first.zero_for_one or not second.zero_for_one:
            raise InvalidRouteError(
                "Two-leg routes must sell a coin for ETH, then ETH for a coin"
            )
        if first.coin_id == second.coin_id:
            raise InvalidRouteError(
                f"Source and target coin are both {first.coin_id}",
                {"coin_id": first.coin_id},
            )

    @property
    def is_multi_hop(self) -> bool:
        return len(self.legs) == 2

    def __len__(self) -> int:
        return len(self.legs)


@dataclass(frozen=True)
class Call:
    """
    One contract call in a transaction plan.

    Attributes:
        target: Contract address the call is made on
        function: Function name
        input_types: Canonical ABI input types, in order
        args: Argument values matching input_types
        value: Wei attached to the call
    """

    target: str
    function: str
    input_types: Tuple[str, ...]
    args: Tuple[Any, ...]
    value: int = 0

    @property
    def signature(self) -> str:
        return f"{self.function}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.signature)[:4])

    def encode(self) -> bytes:
        """Calldata: selector followed by the ABI-encoded arguments."""
        return self.selector + encode(list(self.input_types), list(self.args))


@dataclass(frozen=True)
class TransactionPlan:
    """
    Ordered calls to submit as a single atomic transaction.

    A single call is sent as-is; several calls are wrapped in the AMM's
    ``multicall(bytes[])`` so they succeed or revert together.
    """

    target: str
    calls: Tuple[Call, ...]
    deadline: int
    value: int = 0
    description: str = field(default="", compare=False)

    def __post_init__(self):
        object.__setattr__(self, "calls", tuple(self.calls))

    def __len__(self) -> int:
        return len(self.calls)

    @property
    def is_batch(self) -> bool:
        return len(self.calls) > 1

    def encode(self) -> bytes:
        """Calldata for the whole plan."""
        if not self.is_batch:
            return self.calls[0].encode()
        payload = [c.encode() for c in self.calls]
        return function_selector(ZAMM_ABI, "multicall") + encode(["bytes[]"], [payload])
