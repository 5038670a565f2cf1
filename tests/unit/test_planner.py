"""
Unit tests for zamm/planner.py

Checks the call layout of direct and coin-to-coin plans, the shared
deadline, and the auxiliary approval and liquidity plans.
"""

import pytest
from eth_abi import decode
from web3 import Web3

from coinchan.exceptions import UnquotableSwapError, ValidationError
from zamm.abi import COINS_ABI, ZAMM_ABI, function_selector
from zamm.config import ZammConfig
from zamm.constants import (
    COINS_ADDRESS,
    NATIVE_ASSET_ADDRESS,
    SINGLE_LIQUIDITY_ETH_ADDRESS,
    ZAMM_ADDRESS,
)
from zamm.planner import TransactionPlanner
from zamm.pool_key import derive_key
from zamm.quote import quote_out
from zamm.router import estimate_coin_to_coin, quote_direct
from zamm.types import MultiHopQuote, Quote, Reserves, Route, SwapLeg

NOW = 1_700_000_000
RECEIVER = "0x1111111111111111111111111111111111111111"
AMM = Web3.to_checksum_address(ZAMM_ADDRESS)
COINS = Web3.to_checksum_address(COINS_ADDRESS)


@pytest.fixture
def planner():
    return TransactionPlanner(clock=lambda: NOW)


@pytest.fixture
def coin_quote():
    return estimate_coin_to_coin(
        10_000, Reserves(500_000, 2_000_000), Reserves(800_000, 1_500_000)
    )


class TestDeadline:
    def test_default_ttl(self, planner):
        assert planner.deadline() == NOW + 1200

    def test_fractional_clock_truncated(self):
        planner = TransactionPlanner(clock=lambda: NOW + 0.9, deadline_sec=60)
        assert planner.deadline() == NOW + 60


class TestDirectPlans:
    def test_buy_pays_input_as_value(self, planner):
        quote = Quote(1000, 989, 979)
        plan = planner.plan_direct_swap(5, True, quote, RECEIVER)

        assert len(plan) == 1
        assert plan.target == AMM
        assert plan.value == 1000
        assert plan.deadline == NOW + 1200

        call = plan.calls[0]
        assert call.function == "swapExactIn"
        assert call.value == 1000
        key, amount_in, min_out, zero_for_one, to, deadline = call.args
        assert key == planner.pool_key(5).as_tuple()
        assert (amount_in, min_out, zero_for_one) == (1000, 979, True)
        assert to == RECEIVER
        assert deadline == NOW + 1200

    def test_sell_sends_no_value(self, planner):
        quote = quote_direct(1000, Reserves(2_000_000, 1_000_000), False)
        assert quote.amount_out == 1978

        plan = planner.plan_direct_swap(5, False, quote, RECEIVER)
        assert plan.value == 0
        assert plan.calls[0].args[3] is False
        assert plan.calls[0].args[2] == quote.min_amount_out

    def test_direct_plan_encodes_without_multicall(self, planner):
        plan = planner.plan_direct_swap(5, True, Quote(1000, 989, 979), RECEIVER)
        data = plan.encode()
        assert data[:4] == function_selector(ZAMM_ABI, "swapExactIn")

    def test_unquotable_raises(self, planner):
        with pytest.raises(UnquotableSwapError) as exc_info:
            planner.plan_direct_swap(5, True, Quote.unquotable(1000), RECEIVER)
        assert exc_info.value.amount_in == 1000

    def test_rejects_multi_hop_quote_on_direct_route(self, planner, coin_quote):
        with pytest.raises(ValidationError):
            planner.plan_route(planner.direct_route(5, True), coin_quote, RECEIVER)


class TestCoinToCoinPlans:
    def test_five_calls_in_order(self, planner, coin_quote):
        plan = planner.plan_coin_to_coin_swap(3, 4, coin_quote, RECEIVER)

        assert len(plan) == 5
        assert plan.value == 0
        assert [c.function for c in plan.calls] == [
            "swapExactIn",
            "swapExactIn",
            "recoverTransientBalance",
            "recoverTransientBalance",
            "recoverTransientBalance",
        ]
        assert all(c.target == AMM for c in plan.calls)

    def test_leg_one_pays_amm_without_minimum(self, planner, coin_quote):
        plan = planner.plan_coin_to_coin_swap(3, 4, coin_quote, RECEIVER)
        key, amount_in, min_out, zero_for_one, to, _ = plan.calls[0].args

        assert key == planner.pool_key(3).as_tuple()
        assert amount_in == 10_000
        assert min_out == 0
        assert zero_for_one is False
        assert to == AMM

    def test_leg_two_spends_intermediate(self, planner, coin_quote):
        plan = planner.plan_coin_to_coin_swap(3, 4, coin_quote, RECEIVER)
        key, amount_in, min_out, zero_for_one, to, _ = plan.calls[1].args

        assert key == planner.pool_key(4).as_tuple()
        assert amount_in == coin_quote.intermediate_amount == 2437
        assert min_out == coin_quote.min_amount_out == 4464
        assert zero_for_one is True
        assert to == RECEIVER

    def test_recovers_all_three_assets(self, planner, coin_quote):
        plan = planner.plan_coin_to_coin_swap(3, 4, coin_quote, RECEIVER)
        assert [c.args for c in plan.calls[2:]] == [
            (COINS, 3, RECEIVER),
            (NATIVE_ASSET_ADDRESS, 0, RECEIVER),
            (COINS, 4, RECEIVER),
        ]

    def test_recovers_from_the_legs_coins_contract(self, planner, coin_quote):
        other_coins = "0x" + "22" * 20
        route = Route(
            (
                SwapLeg(derive_key(3, coins_address=other_coins), False),
                SwapLeg(derive_key(4, coins_address=other_coins), True),
            )
        )
        plan = planner.plan_route(route, coin_quote, RECEIVER)

        checksummed = Web3.to_checksum_address(other_coins)
        assert [c.args for c in plan.calls[2:]] == [
            (checksummed, 3, RECEIVER),
            (NATIVE_ASSET_ADDRESS, 0, RECEIVER),
            (checksummed, 4, RECEIVER),
        ]

    def test_shared_deadline(self, planner, coin_quote):
        plan = planner.plan_coin_to_coin_swap(3, 4, coin_quote, RECEIVER)
        assert plan.calls[0].args[5] == plan.calls[1].args[5] == plan.deadline

    def test_multicall_encoding(self, planner, coin_quote):
        plan = planner.plan_coin_to_coin_swap(3, 4, coin_quote, RECEIVER)
        data = plan.encode()

        assert data[:4] == function_selector(ZAMM_ABI, "multicall")
        (payload,) = decode(["bytes[]"], data[4:])
        assert len(payload) == 5
        assert list(payload) == [c.encode() for c in plan.calls]

    def test_unquotable_raises(self, planner):
        with pytest.raises(UnquotableSwapError):
            planner.plan_coin_to_coin_swap(
                3, 4, MultiHopQuote.unquotable(10_000), RECEIVER
            )

    def test_rejects_single_hop_quote(self, planner):
        with pytest.raises(ValidationError):
            planner.plan_coin_to_coin_swap(3, 4, Quote(10, 9, 8), RECEIVER)

    def test_invalid_receiver(self, planner, coin_quote):
        with pytest.raises(ValidationError):
            planner.plan_coin_to_coin_swap(3, 4, coin_quote, "not-an-address")
        with pytest.raises(ValidationError):
            planner.plan_coin_to_coin_swap(3, 4, coin_quote, "")


class TestAuxiliaryPlans:
    def test_operator_approval(self, planner):
        call = planner.plan_operator_approval()
        assert call.target == COINS
        assert call.function == "setOperator"
        assert call.args == (AMM, True)
        assert call.encode()[:4] == function_selector(COINS_ABI, "setOperator")

    def test_single_sided_liquidity(self, planner):
        plan = planner.plan_single_sided_liquidity(
            9, 2000, Reserves(1_000_000, 1_000_000), RECEIVER
        )
        assert len(plan) == 1
        assert plan.target == Web3.to_checksum_address(SINGLE_LIQUIDITY_ETH_ADDRESS)
        assert plan.value == 2000

        call = plan.calls[0]
        assert call.function == "addSingleLiqETH"
        assert call.value == 2000
        key, amount_out_min, amount0_min, amount1_min, to, deadline = call.args
        assert key == planner.pool_key(9).as_tuple()
        assert amount_out_min == 979
        assert amount0_min == 980
        assert amount1_min == 979
        assert to == RECEIVER
        assert deadline == NOW + 1200

    def test_single_sided_minimums_follow_post_swap_ratio(self, planner):
        # 100 wei buys 98 coins; the add then takes 98 wei, not 100
        plan = planner.plan_single_sided_liquidity(
            9, 200, Reserves(1_000_000, 1_000_000), RECEIVER, tolerance_bps=100
        )
        _, amount_out_min, amount0_min, amount1_min, _, _ = plan.calls[0].args
        assert (amount_out_min, amount0_min, amount1_min) == (97, 97, 97)

    @pytest.mark.parametrize(
        "eth_amount,reserves,tolerance_bps",
        [
            (200, Reserves(1_000_000, 1_000_000), 100),
            (2000, Reserves(1_000_000, 1_000_000), 100),
            (2 * 10**18, Reserves(10**21, 10**24), 50),
            (10**18 + 1, Reserves(3 * 10**20, 7 * 10**22), 30),
            (50_000, Reserves(400_000, 90_000), 0),
            (10**17, Reserves(10**24, 10**18), 500),
        ],
    )
    def test_single_sided_minimums_are_met_by_the_add(
        self, planner, eth_amount, reserves, tolerance_bps
    ):
        """Replay the helper's swap then add; every minimum must hold."""
        plan = planner.plan_single_sided_liquidity(
            9, eth_amount, reserves, RECEIVER, tolerance_bps=tolerance_bps
        )
        _, amount_out_min, amount0_min, amount1_min, _, _ = plan.calls[0].args

        swap_in = eth_amount // 2
        coins = quote_out(swap_in, reserves.reserve0, reserves.reserve1, 100)
        assert coins >= amount_out_min

        eth_left = eth_amount - swap_in
        pool_eth = reserves.reserve0 + swap_in
        pool_coins = reserves.reserve1 - coins
        coins_taken = eth_left * pool_coins // pool_eth
        if coins_taken <= coins:
            eth_taken = eth_left
        else:
            eth_taken = coins * pool_eth // pool_coins
            coins_taken = coins

        assert eth_taken >= amount0_min
        assert coins_taken >= amount1_min

    def test_single_sided_liquidity_empty_pool(self, planner):
        with pytest.raises(UnquotableSwapError):
            planner.plan_single_sided_liquidity(9, 2000, Reserves.empty(), RECEIVER)


class TestConstruction:
    def test_from_config(self):
        config = ZammConfig({"deadline_sec": 300, "swap_fee_bps": 30})
        planner = TransactionPlanner.from_config(config, clock=lambda: NOW)
        assert planner.deadline() == NOW + 300
        assert planner.pool_key(1).swap_fee == 30

    def test_invalid_amm_address(self):
        with pytest.raises(ValidationError):
            TransactionPlanner(amm_address="0x1234")
