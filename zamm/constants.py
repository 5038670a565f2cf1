"""
Protocol constants for the ZAMM constant-product AMM.

Every value here must match the deployed contracts bit for bit; a drifted
fee or address makes every derived pool id point at a pool that does not
exist, which reads back as empty reserves.
"""

# Basis-point scale for fees and slippage
FEE_DENOMINATOR = 10000

# 1% pool fee used by every Coinchan pool
DEFAULT_SWAP_FEE_BPS = 100

# 1% quote-to-minimum margin
DEFAULT_SLIPPAGE_BPS = 100

# Time-to-live of a transaction plan (20 minutes)
DEFAULT_DEADLINE_SEC = 20 * 60

# ETH is pool token0 with id 0 and the zero-address sentinel
BASE_ASSET_ID = 0
NATIVE_ASSET_ADDRESS = "0x0000000000000000000000000000000000000000"

# Mainnet deployments
COINS_ADDRESS = "0x0000000000009710cd229bF635c4500029651eE8"
ZAMM_ADDRESS = "0x00000000000008882d72efa6cce4b6a40b24c860"
SINGLE_LIQUIDITY_ETH_ADDRESS = "0x7c1E515F1c7F1c4909206BD92F6A4BFc0138E58b"

MAINNET_CHAIN_ID = 1

# Struct field order of IZAMM.PoolKey
POOL_KEY_ABI_TYPES = ("uint256", "uint256", "address", "address", "uint96")
