"""
ZAMM state reader.

Reads pool reserves and operator approvals over RPC. A pool that does not
exist reads back as zero reserves, which the pricing core treats as
unquotable; only transport failures raise.
"""

import asyncio
import time
from typing import Optional

from web3 import Web3

from coinchan.exceptions import ConfigurationError, NetworkError
from coinchan.utils import get_logger

from ..abi import COINS_ABI, ZAMM_ABI
from ..constants import COINS_ADDRESS, ZAMM_ADDRESS
from ..pool_key import derive_pool_id
from ..types import PoolId, PoolKey, Reserves

logger = get_logger(__name__)


def _is_rate_limit(error_msg: str) -> bool:
    return (
        "429" in error_msg
        or "Too Many Requests" in error_msg
        or "-32005" in error_msg  # Ethereum rate limit code
        or "limit exceeded" in error_msg.lower()
    )


def _to_reserves(result) -> Reserves:
    return Reserves(reserve0=int(result[0]), reserve1=int(result[1]))


def _amm_contract(web3: Web3, amm_address: str):
    try:
        address = Web3.to_checksum_address(amm_address)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid AMM address: {amm_address}") from e
    return web3.eth.contract(address=address, abi=ZAMM_ABI)


def connect(rpc_url: Optional[str], chain_id: Optional[int] = None) -> Web3:
    """
    Connect to an HTTP(S) RPC endpoint and check which chain it serves.

    Args:
        rpc_url: Endpoint URL (config ``rpc_url``)
        chain_id: Expected chain id; None accepts any chain

    Returns:
        Connected Web3 instance

    Raises:
        ConfigurationError: If rpc_url is missing or not http(s)
        NetworkError: If the endpoint cannot be queried or serves another chain
    """
    if not rpc_url or not rpc_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"Invalid RPC URL: {rpc_url!r}")

    logger.info(f"Connecting to RPC: {rpc_url}")
    web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": 10}))

    # Query the chain directly; is_connected() is unreliable
    try:
        actual_chain_id = web3.eth.chain_id
        block = web3.eth.block_number
    except Exception as e:
        raise NetworkError(f"RPC connection failed: {e}", endpoint=rpc_url) from e

    if chain_id is not None and actual_chain_id != chain_id:
        raise NetworkError(
            f"RPC serves chain {actual_chain_id}, expected {chain_id}",
            endpoint=rpc_url,
        )

    logger.info(f"Connected to chain {actual_chain_id} (block #{block:,})")
    return web3


def fetch_reserves(
    web3: Web3,
    pool_id: PoolId,
    amm_address: str = ZAMM_ADDRESS,
    max_retries: int = 3,
) -> Reserves:
    """
    Fetch reserves of a pool from the ZAMM contract.

    Args:
        web3: Web3 instance connected to the chain
        pool_id: Pool id from derive_pool_id()
        amm_address: ZAMM contract address
        max_retries: Maximum number of attempts on rate-limit errors (default: 3)

    Returns:
        Reserves (zero for a pool with no liquidity)

    Raises:
        NetworkError: If the RPC call fails, or keeps being rate limited
        ValueError: If amm_address is invalid
    """
    amm = _amm_contract(web3, amm_address)

    last_error = None
    for attempt in range(max_retries):
        try:
            return _to_reserves(amm.functions.pools(pool_id).call())
        except Exception as e:
            last_error = e
            if _is_rate_limit(str(e)) and attempt < max_retries - 1:
                # Exponential backoff: 1s, 2s, 4s
                wait_time = 2**attempt
                logger.warning(
                    f"Rate limited reading pool {pool_id:#x}, retrying in {wait_time}s"
                )
                time.sleep(wait_time)
                continue
            raise NetworkError(
                f"Failed to fetch reserves for pool {pool_id:#x}: {e}",
                endpoint=amm_address,
            ) from e

    raise NetworkError(
        f"Failed to fetch reserves for pool {pool_id:#x} after {max_retries} retries: {last_error}",
        endpoint=amm_address,
    ) from last_error


async def fetch_reserves_async(
    web3: Web3,
    pool_id: PoolId,
    amm_address: str = ZAMM_ADDRESS,
    max_retries: int = 3,
) -> Reserves:
    """
    Async version of fetch_reserves().

    Runs the synchronous RPC call in a thread pool to avoid blocking the
    event loop, with exponential backoff on rate-limit errors.
    """
    amm = _amm_contract(web3, amm_address)
    last_error = None

    for attempt in range(max_retries):
        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(
                None, amm.functions.pools(pool_id).call
            )
            return _to_reserves(result)
        except Exception as e:
            last_error = e
            if _is_rate_limit(str(e)) and attempt < max_retries - 1:
                # Exponential backoff with jitter: 2s, 4s, 8s
                wait_time = (2 ** (attempt + 1)) + (attempt * 0.5)
                await asyncio.sleep(wait_time)
                continue
            raise NetworkError(
                f"Failed to fetch reserves for pool {pool_id:#x}: {e}",
                endpoint=amm_address,
            ) from e

    raise NetworkError(
        f"Failed to fetch reserves for pool {pool_id:#x}: {last_error}",
        endpoint=amm_address,
    ) from last_error


def fetch_pool_reserves(
    web3: Web3, key: PoolKey, amm_address: str = ZAMM_ADDRESS
) -> Reserves:
    """Derive the pool id of a key and fetch its reserves."""
    return fetch_reserves(web3, derive_pool_id(key), amm_address)


def is_operator(
    web3: Web3,
    owner: str,
    operator: str = ZAMM_ADDRESS,
    coins_address: str = COINS_ADDRESS,
) -> bool:
    """
    Check whether ``operator`` may move ``owner``'s coins.

    Raises:
        NetworkError: If the RPC call fails
    """
    coins = web3.eth.contract(
        address=Web3.to_checksum_address(coins_address), abi=COINS_ABI
    )
    try:
        return bool(
            coins.functions.isOperator(
                Web3.to_checksum_address(owner), Web3.to_checksum_address(operator)
            ).call()
        )
    except Exception as e:
        raise NetworkError(
            f"Failed to read operator status for {owner}: {e}",
            endpoint=coins_address,
        ) from e
