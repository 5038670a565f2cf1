"""
Unit tests for zamm/pool_key.py

The pool id must be derived exactly as the contract does: keccak256 of the
ABI-encoded (id0, id1, token0, token1, swapFee) struct.
"""

import dataclasses

import pytest
from web3 import Web3

from coinchan.exceptions import InvalidPoolKeyError, ValidationError
from zamm.constants import COINS_ADDRESS, NATIVE_ASSET_ADDRESS
from zamm.pool_key import derive_key, derive_pool_id, encode_pool_key, pool_id_hex
from zamm.types import PoolKey


class TestDeriveKey:
    """Test PoolKey construction."""

    def test_eth_is_token0(self):
        key = derive_key(42)
        assert key == PoolKey(
            id0=0,
            id1=42,
            token0=NATIVE_ASSET_ADDRESS,
            token1=Web3.to_checksum_address(COINS_ADDRESS),
            swap_fee=100,
        )

    def test_custom_fee(self):
        assert derive_key(7, 30).swap_fee == 30

    def test_equality_covers_all_fields(self):
        assert derive_key(5) == derive_key(5)
        assert derive_key(5) != derive_key(6)
        assert derive_key(5) != derive_key(5, 30)
        assert derive_key(5) != derive_key(5, coins_address="0x" + "22" * 20)

    def test_immutable(self):
        key = derive_key(5)
        with pytest.raises(dataclasses.FrozenInstanceError):
            key.id1 = 6

    @pytest.mark.parametrize("coin_id", [0, -1])
    def test_rejects_base_asset_alias(self, coin_id):
        with pytest.raises(InvalidPoolKeyError) as exc_info:
            derive_key(coin_id)
        assert exc_info.value.coin_id == coin_id
        assert isinstance(exc_info.value, ValidationError)

    @pytest.mark.parametrize("coin_id", [True, "5", 1.0])
    def test_rejects_non_int_coin_id(self, coin_id):
        with pytest.raises(InvalidPoolKeyError):
            derive_key(coin_id)

    @pytest.mark.parametrize("fee", [-1, 10000, 20000])
    def test_rejects_fee_out_of_range(self, fee):
        with pytest.raises(InvalidPoolKeyError) as exc_info:
            derive_key(1, fee)
        assert exc_info.value.fee_bps == fee


class TestPoolId:
    """Test PoolId derivation."""

    def test_encoding_layout(self):
        """Five 32-byte words in struct order."""
        coin_id = 0x1234
        encoded = encode_pool_key(derive_key(coin_id, 100))
        words = [encoded[i : i + 32] for i in range(0, len(encoded), 32)]

        assert len(encoded) == 160
        assert words[0] == bytes(32)
        assert words[1] == coin_id.to_bytes(32, "big")
        assert words[2] == bytes(32)
        assert words[3] == bytes(12) + bytes.fromhex(COINS_ADDRESS[2:])
        assert words[4] == (100).to_bytes(32, "big")

    def test_pool_id_is_keccak_of_encoding(self):
        key = derive_key(9)
        expected = int.from_bytes(Web3.keccak(encode_pool_key(key)), "big")
        assert derive_pool_id(key) == expected

    @pytest.mark.parametrize(
        "coin_id,fee,expected",
        [
            (1, 100, 0xEB50B839EF244A5543A8AE377852AC7191D6D74924326D621D4184E416A9F19E),
            (42, 100, 0x31DBFF17A0808249FE93F16A997E23E04927D5A849F723D4011BE421079A41E4),
            (1, 30, 0x25ADF00221CE2FB9B113D2AE842C728351BF1AE3E98252A81CFC944AA7387622),
        ],
    )
    def test_known_pool_ids(self, coin_id, fee, expected):
        assert derive_pool_id(derive_key(coin_id, fee)) == expected

    def test_pool_id_is_deterministic_and_distinct(self):
        assert derive_pool_id(derive_key(3)) == derive_pool_id(derive_key(3))
        ids = {derive_pool_id(derive_key(c)) for c in range(1, 50)}
        assert len(ids) == 49
        assert derive_pool_id(derive_key(3)) != derive_pool_id(derive_key(3, 30))

    def test_pool_id_fits_uint256(self):
        pool_id = derive_pool_id(derive_key(1))
        assert 0 <= pool_id < 2**256

    def test_pool_id_hex(self):
        key = derive_key(1)
        hex_id = pool_id_hex(key)
        assert hex_id.startswith("0x")
        assert len(hex_id) == 66
        assert int(hex_id, 16) == derive_pool_id(key)
        assert hex_id == (
            "0xeb50b839ef244a5543a8ae377852ac7191d6d74924326d621d4184e416a9f19e"
        )
