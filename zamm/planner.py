"""
Transaction planning for ZAMM swaps.

Turns a route and its slippage-bounded quote into the ordered calls that
execute it. A direct swap is a single ``swapExactIn``. A coin-to-coin swap
is five calls submitted through ``multicall`` so they succeed or revert
together:

1. swap source coin -> ETH into the AMM itself, no minimum (leg 2 consumes it)
2. swap the margined ETH -> target coin to the user, with the final minimum
3. recover leftover source coin to the user
4. recover leftover ETH to the user (the margin kept back in step 2)
5. recover leftover target coin to the user

The same deadline is attached to every swap in a plan. Rollback on partial
failure is the execution environment's job; the planner only builds calls.
"""

from typing import Callable, List, Optional, Union

from web3 import Web3

from coinchan.exceptions import UnquotableSwapError, ValidationError
from coinchan.utils import get_current_timestamp, get_logger

from .abi import COINS_ABI, SINGLE_LIQUIDITY_ETH_ABI, ZAMM_ABI, function_input_types
from .constants import (
    BASE_ASSET_ID,
    COINS_ADDRESS,
    DEFAULT_DEADLINE_SEC,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_SWAP_FEE_BPS,
    NATIVE_ASSET_ADDRESS,
    SINGLE_LIQUIDITY_ETH_ADDRESS,
    ZAMM_ADDRESS,
)
from .pool_key import derive_key, pool_id_hex
from .quote import optimal_liquidity
from .router import quote_direct
from .slippage import apply_slippage, tolerance_for_min_out
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

logger = get_logger(__name__)


class TransactionPlanner:
    """
    Builds call plans for direct swaps, coin-to-coin swaps and single-sided
    ETH liquidity.

    Attributes:
        amm_address: ZAMM contract (swap target and multicall entry point)
        coins_address: Coins contract holding every launched coin
        single_liquidity_address: Helper contract for single-sided ETH liquidity
        deadline_sec: Seconds from planning time until the plan expires
        swap_fee_bps: Fee tier of the pools being traded
    """

    def __init__(
        self,
        amm_address: str = ZAMM_ADDRESS,
        coins_address: str = COINS_ADDRESS,
        single_liquidity_address: str = SINGLE_LIQUIDITY_ETH_ADDRESS,
        deadline_sec: int = DEFAULT_DEADLINE_SEC,
        swap_fee_bps: int = DEFAULT_SWAP_FEE_BPS,
        clock: Callable[[], float] = get_current_timestamp,
    ):
        self.amm_address = _checksum(amm_address, "amm_address")
        self.coins_address = _checksum(coins_address, "coins_address")
        self.single_liquidity_address = _checksum(
            single_liquidity_address, "single_liquidity_address"
        )
        self.deadline_sec = deadline_sec
        self.swap_fee_bps = swap_fee_bps
        self._clock = clock

    @classmethod
    def from_config(cls, config, clock: Callable[[], float] = get_current_timestamp):
        """Create a planner from a loaded ZammConfig."""
        return cls(
            amm_address=config.amm_address,
            coins_address=config.coins_address,
            single_liquidity_address=config.single_liquidity_address,
            deadline_sec=config.deadline_sec,
            swap_fee_bps=config.swap_fee_bps,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Routes and deadlines
    # ------------------------------------------------------------------

    def pool_key(self, coin_id: int) -> PoolKey:
        return derive_key(coin_id, self.swap_fee_bps, self.coins_address)

    def direct_route(self, coin_id: int, zero_for_one: bool) -> Route:
        """One-leg route through the coin's ETH pool."""
        return Route((SwapLeg(self.pool_key(coin_id), zero_for_one),))

    def coin_to_coin_route(self, source_coin_id: int, target_coin_id: int) -> Route:
        """Two-leg route source coin -> ETH -> target coin."""
        return Route(
            (
                SwapLeg(self.pool_key(source_coin_id), zero_for_one=False),
                SwapLeg(self.pool_key(target_coin_id), zero_for_one=True),
            )
        )

    def deadline(self) -> int:
        """Unix timestamp after which the plan is rejected on chain."""
        return int(self._clock()) + self.deadline_sec

    # ------------------------------------------------------------------
    # Swap plans
    # ------------------------------------------------------------------

    def plan_route(
        self,
        route: Route,
        quote: Union[Quote, MultiHopQuote],
        receiver: str,
    ) -> TransactionPlan:
        """
        Build the plan for a route.

        Args:
            route: One- or two-leg route
            quote: Quote for a direct route, MultiHopQuote for a two-leg route
            receiver: Address that ends up with the output and any leftovers

        Returns:
            TransactionPlan with 1 call (direct) or 5 calls (coin-to-coin)

        Raises:
            UnquotableSwapError: If the quote has no output
            ValidationError: If the quote type does not fit the route
        """
        receiver = _checksum(receiver, "receiver")

        if not quote.is_quotable:
            raise UnquotableSwapError(
                "Cannot plan a swap whose quote has no output",
                amount_in=quote.amount_in,
            )

        if route.is_multi_hop:
            if not isinstance(quote, MultiHopQuote):
                raise ValidationError(
                    "Two-leg routes need a MultiHopQuote",
                    {"quote_type": type(quote).__name__},
                )
            return self._plan_two_legs(route, quote, receiver)

        if not isinstance(quote, Quote):
            raise ValidationError(
                "Direct routes need a Quote", {"quote_type": type(quote).__name__}
            )
        return self._plan_one_leg(route.legs[0], quote, receiver)

    def plan_direct_swap(
        self,
        coin_id: int,
        zero_for_one: bool,
        quote: Quote,
        receiver: str,
    ) -> TransactionPlan:
        """Plan an ETH->coin (zero_for_one=True) or coin->ETH swap."""
        return self.plan_route(self.direct_route(coin_id, zero_for_one), quote, receiver)

    def plan_coin_to_coin_swap(
        self,
        source_coin_id: int,
        target_coin_id: int,
        quote: MultiHopQuote,
        receiver: str,
    ) -> TransactionPlan:
        """Plan a coin->ETH->coin swap from an estimate_coin_to_coin quote."""
        route = self.coin_to_coin_route(source_coin_id, target_coin_id)
        return self.plan_route(route, quote, receiver)

    def _plan_one_leg(
        self, leg: SwapLeg, quote: Quote, receiver: str
    ) -> TransactionPlan:
        deadline = self.deadline()
        # Selling ETH pays the input as msg.value
        value = quote.amount_in if leg.zero_for_one else 0

        swap = self._swap_call(
            leg.pool_key,
            quote.amount_in,
            quote.min_amount_out,
            leg.zero_for_one,
            receiver,
            deadline,
            value=value,
        )
        side = "buy" if leg.zero_for_one else "sell"
        logger.info(
            f"Planned direct {side} of coin {leg.coin_id}: in={quote.amount_in} "
            f"min_out={quote.min_amount_out} deadline={deadline}"
        )
        return TransactionPlan(
            target=self.amm_address,
            calls=(swap,),
            deadline=deadline,
            value=value,
            description=f"{side} coin {leg.coin_id}",
        )

    def _plan_two_legs(
        self, route: Route, quote: MultiHopQuote, receiver: str
    ) -> TransactionPlan:
        source_leg, target_leg = route.legs
        deadline = self.deadline()

        calls: List[Call] = [
            # Leg 1 pays the AMM itself; leg 2 spends it within the batch
            self._swap_call(
                source_leg.pool_key,
                quote.amount_in,
                0,
                False,
                self.amm_address,
                deadline,
            ),
            self._swap_call(
                target_leg.pool_key,
                quote.intermediate_amount,
                quote.min_amount_out,
                True,
                receiver,
                deadline,
            ),
            self._recover_call(
                source_leg.pool_key.token1, source_leg.coin_id, receiver
            ),
            self._recover_call(NATIVE_ASSET_ADDRESS, BASE_ASSET_ID, receiver),
            self._recover_call(
                target_leg.pool_key.token1, target_leg.coin_id, receiver
            ),
        ]

        logger.info(
            f"Planned coin {source_leg.coin_id} -> ETH -> coin {target_leg.coin_id}: "
            f"in={quote.amount_in} eth={quote.intermediate_amount} "
            f"min_out={quote.min_amount_out} "
            f"(guard {tolerance_for_min_out(quote.amount_out, quote.min_amount_out)} bps) "
            f"deadline={deadline}"
        )
        logger.debug(
            f"Pools: source={pool_id_hex(source_leg.pool_key)} "
            f"target={pool_id_hex(target_leg.pool_key)}"
        )
        return TransactionPlan(
            target=self.amm_address,
            calls=tuple(calls),
            deadline=deadline,
            value=0,
            description=f"coin {source_leg.coin_id} -> coin {target_leg.coin_id}",
        )

    # ------------------------------------------------------------------
    # Auxiliary plans
    # ------------------------------------------------------------------

    def plan_operator_approval(self) -> Call:
        """
        Approve the AMM as operator on the Coins contract.

        Needed once per owner before any coin can be sold into a pool.
        """
        return Call(
            target=self.coins_address,
            function="setOperator",
            input_types=function_input_types(COINS_ABI, "setOperator"),
            args=(self.amm_address, True),
        )

    def plan_single_sided_liquidity(
        self,
        coin_id: int,
        eth_amount: int,
        reserves: Reserves,
        receiver: str,
        tolerance_bps: int = DEFAULT_SLIPPAGE_BPS,
    ) -> TransactionPlan:
        """
        Provide liquidity to a coin's pool with ETH only.

        The helper contract swaps half of the ETH for the coin, then adds the
        remaining ETH and the bought coin as liquidity. The pool only takes
        the amounts matching its post-swap ratio, so both liquidity minimums
        are slippage-bounded from what the add uses against those reserves,
        not from the desired amounts.

        Raises:
            UnquotableSwapError: If half of eth_amount cannot be swapped
        """
        receiver = _checksum(receiver, "receiver")
        swap_half = eth_amount // 2
        swap_quote = quote_direct(
            swap_half, reserves, True, self.swap_fee_bps, tolerance_bps
        )
        if not swap_quote.is_quotable:
            raise UnquotableSwapError(
                f"Cannot swap {swap_half} wei into coin {coin_id}",
                amount_in=swap_half,
            )

        # The full swap input stays in the pool, fee included
        eth_used, coin_used = optimal_liquidity(
            eth_amount - swap_half,
            swap_quote.amount_out,
            reserves.reserve0 + swap_half,
            reserves.reserve1 - swap_quote.amount_out,
        )

        deadline = self.deadline()
        key = self.pool_key(coin_id)
        call = Call(
            target=self.single_liquidity_address,
            function="addSingleLiqETH",
            input_types=function_input_types(SINGLE_LIQUIDITY_ETH_ABI, "addSingleLiqETH"),
            args=(
                key.as_tuple(),
                swap_quote.min_amount_out,
                apply_slippage(eth_used, tolerance_bps),
                apply_slippage(coin_used, tolerance_bps),
                receiver,
                deadline,
            ),
            value=eth_amount,
        )
        logger.info(
            f"Planned single-sided liquidity for coin {coin_id}: eth={eth_amount} "
            f"min_coin={swap_quote.min_amount_out} deadline={deadline}"
        )
        return TransactionPlan(
            target=self.single_liquidity_address,
            calls=(call,),
            deadline=deadline,
            value=eth_amount,
            description=f"single-sided liquidity coin {coin_id}",
        )

    # ------------------------------------------------------------------
    # Call builders
    # ------------------------------------------------------------------

    def _swap_call(
        self,
        key: PoolKey,
        amount_in: int,
        amount_out_min: int,
        zero_for_one: bool,
        to: str,
        deadline: int,
        value: int = 0,
    ) -> Call:
        return Call(
            target=self.amm_address,
            function="swapExactIn",
            input_types=function_input_types(ZAMM_ABI, "swapExactIn"),
            args=(key.as_tuple(), amount_in, amount_out_min, zero_for_one, to, deadline),
            value=value,
        )

    def _recover_call(self, token: str, token_id: int, to: str) -> Call:
        return Call(
            target=self.amm_address,
            function="recoverTransientBalance",
            input_types=function_input_types(ZAMM_ABI, "recoverTransientBalance"),
            args=(token, token_id, to),
        )


def _checksum(address: Optional[str], field: str) -> str:
    if not address:
        raise ValidationError(f"{field} is required")
    try:
        return Web3.to_checksum_address(address)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {field}: {address}", {field: address}) from e
