"""
Minimal ABI fragments for the ZAMM, Coins and single-sided liquidity contracts.

Only the functions the router reads or calls are listed. Signatures used for
calldata encoding are derived from these fragments so the two cannot drift.
"""

from typing import Any, Dict, List, Tuple

from web3 import Web3

POOL_KEY_COMPONENTS = [
    {"internalType": "uint256", "name": "id0", "type": "uint256"},
    {"internalType": "uint256", "name": "id1", "type": "uint256"},
    {"internalType": "address", "name": "token0", "type": "address"},
    {"internalType": "address", "name": "token1", "type": "address"},
    {"internalType": "uint96", "name": "swapFee", "type": "uint96"},
]

_POOL_KEY_INPUT = {
    "components": POOL_KEY_COMPONENTS,
    "internalType": "struct IZAMM.PoolKey",
    "name": "poolKey",
    "type": "tuple",
}

ZAMM_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [{"internalType": "uint256", "name": "poolId", "type": "uint256"}],
        "name": "pools",
        "outputs": [
            {"internalType": "uint112", "name": "reserve0", "type": "uint112"},
            {"internalType": "uint112", "name": "reserve1", "type": "uint112"},
            {"internalType": "uint32", "name": "blockTimestampLast", "type": "uint32"},
            {"internalType": "uint256", "name": "price0CumulativeLast", "type": "uint256"},
            {"internalType": "uint256", "name": "price1CumulativeLast", "type": "uint256"},
            {"internalType": "uint256", "name": "kLast", "type": "uint256"},
            {"internalType": "uint256", "name": "supply", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            _POOL_KEY_INPUT,
            {"internalType": "uint256", "name": "amountIn", "type": "uint256"},
            {"internalType": "uint256", "name": "amountOutMin", "type": "uint256"},
            {"internalType": "bool", "name": "zeroForOne", "type": "bool"},
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "deadline", "type": "uint256"},
        ],
        "name": "swapExactIn",
        "outputs": [{"internalType": "uint256", "name": "amountOut", "type": "uint256"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "token", "type": "address"},
            {"internalType": "uint256", "name": "id", "type": "uint256"},
            {"internalType": "address", "name": "to", "type": "address"},
        ],
        "name": "recoverTransientBalance",
        "outputs": [{"internalType": "uint256", "name": "amount", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "bytes[]", "name": "data", "type": "bytes[]"}],
        "name": "multicall",
        "outputs": [{"internalType": "bytes[]", "name": "", "type": "bytes[]"}],
        "stateMutability": "payable",
        "type": "function",
    },
]

COINS_ABI: List[Dict[str, Any]] = [
    {
        "inputs": [
            {"internalType": "address", "name": "operator", "type": "address"},
            {"internalType": "bool", "name": "approved", "type": "bool"},
        ],
        "name": "setOperator",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "address", "name": "owner", "type": "address"},
            {"internalType": "address", "name": "operator", "type": "address"},
        ],
        "name": "isOperator",
        "outputs": [{"internalType": "bool", "name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
]

SINGLE_LIQUIDITY_ETH_ABI: List[Dict[str, Any]] = [
    {"inputs": [], "name": "InvalidPoolKey", "type": "error"},
    {
        "inputs": [
            _POOL_KEY_INPUT,
            {"internalType": "uint256", "name": "amountOutMin", "type": "uint256"},
            {"internalType": "uint256", "name": "amount0Min", "type": "uint256"},
            {"internalType": "uint256", "name": "amount1Min", "type": "uint256"},
            {"internalType": "address", "name": "to", "type": "address"},
            {"internalType": "uint256", "name": "deadline", "type": "uint256"},
        ],
        "name": "addSingleLiqETH",
        "outputs": [
            {"internalType": "uint256", "name": "amount0", "type": "uint256"},
            {"internalType": "uint256", "name": "amount1", "type": "uint256"},
            {"internalType": "uint256", "name": "liquidity", "type": "uint256"},
        ],
        "stateMutability": "payable",
        "type": "function",
    },
]


def canonical_type(param: Dict[str, Any]) -> str:
    """Canonical ABI type of a parameter, expanding tuples into (t1,t2,...)."""
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param["components"])
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def get_function_abi(abi: List[Dict[str, Any]], name: str) -> Dict[str, Any]:
    """Look up a function fragment by name."""
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == name:
            return entry
    raise KeyError(f"Function '{name}' not found in ABI")


def function_input_types(abi: List[Dict[str, Any]], name: str) -> Tuple[str, ...]:
    """Canonical input types of a function, in declaration order."""
    fn = get_function_abi(abi, name)
    return tuple(canonical_type(p) for p in fn["inputs"])


def function_signature(abi: List[Dict[str, Any]], name: str) -> str:
    """Signature string such as ``recoverTransientBalance(address,uint256,address)``."""
    return f"{name}({','.join(function_input_types(abi, name))})"


def function_selector(abi: List[Dict[str, Any]], name: str) -> bytes:
    """First four bytes of the keccak256 of the function signature."""
    return bytes(Web3.keccak(text=function_signature(abi, name))[:4])
