"""
Pool key and pool id derivation for ETH/coin pools.

The pool id is the keccak256 of the ABI-encoded PoolKey struct
(id0, id1, token0, token1, swapFee). It must match the contract's own
derivation exactly: any drift yields an id that matches no pool, and the
reserve read silently comes back empty.
"""

from eth_abi import encode
from web3 import Web3

from coinchan.exceptions import InvalidPoolKeyError
from coinchan.utils import get_logger

from .constants import (
    BASE_ASSET_ID,
    COINS_ADDRESS,
    DEFAULT_SWAP_FEE_BPS,
    FEE_DENOMINATOR,
    NATIVE_ASSET_ADDRESS,
    POOL_KEY_ABI_TYPES,
)
from .types import PoolId, PoolKey

logger = get_logger(__name__)


def derive_key(
    coin_id: int,
    fee_bps: int = DEFAULT_SWAP_FEE_BPS,
    coins_address: str = COINS_ADDRESS,
) -> PoolKey:
    """
    Build the PoolKey of the ETH/coin pool for a coin.

    ETH is always token0 and the coin always token1.

    Args:
        coin_id: Coin id inside the Coins contract (must be >= 1)
        fee_bps: Pool fee in basis points
        coins_address: Address of the Coins (ERC6909) contract

    Returns:
        PoolKey for the pool

    Raises:
        InvalidPoolKeyError: If coin_id would alias ETH or the fee is out of range
    """
    if isinstance(coin_id, bool) or not isinstance(coin_id, int):
        raise InvalidPoolKeyError(
            f"coin_id must be an int, got {type(coin_id).__name__}", coin_id=None
        )
    if coin_id <= BASE_ASSET_ID:
        # id 0 is ETH itself; an ETH/ETH pool cannot exist
        raise InvalidPoolKeyError(
            f"coin_id must be >= 1, got {coin_id}", coin_id=coin_id, fee_bps=fee_bps
        )
    if isinstance(fee_bps, bool) or not isinstance(fee_bps, int):
        raise InvalidPoolKeyError(
            f"fee_bps must be an int, got {type(fee_bps).__name__}", coin_id=coin_id
        )
    if not 0 <= fee_bps < FEE_DENOMINATOR:
        raise InvalidPoolKeyError(
            f"fee_bps must be in [0, {FEE_DENOMINATOR}), got {fee_bps}",
            coin_id=coin_id,
            fee_bps=fee_bps,
        )

    return PoolKey(
        id0=BASE_ASSET_ID,
        id1=coin_id,
        token0=NATIVE_ASSET_ADDRESS,
        token1=Web3.to_checksum_address(coins_address),
        swap_fee=fee_bps,
    )


def encode_pool_key(key: PoolKey) -> bytes:
    """ABI-encode a PoolKey as five 32-byte words in struct order."""
    return encode(list(POOL_KEY_ABI_TYPES), list(key.as_tuple()))


def derive_pool_id(key: PoolKey) -> PoolId:
    """
    Derive the on-chain pool id of a PoolKey.

    Returns:
        keccak256(abi.encode(key)) as a uint256, the argument of ZAMM.pools()
    """
    pool_id = int.from_bytes(Web3.keccak(encode_pool_key(key)), "big")
    logger.debug(f"Pool id for coin {key.id1} (fee {key.swap_fee} bps): {pool_id:#066x}")
    return pool_id


def pool_id_hex(key: PoolKey) -> str:
    """Pool id as 0x-prefixed 32-byte hex, for logs and explorers."""
    return f"{derive_pool_id(key):#066x}"
