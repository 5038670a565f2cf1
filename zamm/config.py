"""
Configuration loading and validation for the ZAMM router.
"""

import os
from typing import Any, Dict, Optional

import yaml

from coinchan.exceptions import ConfigurationError
from coinchan.logging_config import LEVEL_NAMES
from coinchan.utils import bps_to_pct, is_valid_basis_points, pct_to_bps

from .constants import (
    COINS_ADDRESS,
    DEFAULT_DEADLINE_SEC,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_SWAP_FEE_BPS,
    FEE_DENOMINATOR,
    MAINNET_CHAIN_ID,
    SINGLE_LIQUIDITY_ETH_ADDRESS,
    ZAMM_ADDRESS,
)


class ConfigError(ConfigurationError):
    """Raised when config is invalid or missing required fields."""

    pass


class ZammConfig:
    """
    Parsed and validated configuration for quoting and planning swaps.

    Attributes:
        rpc_url: HTTP(S) RPC endpoint (only needed to read reserves or submit)
        chain_id: Chain the contracts are deployed on
        amm_address: ZAMM contract address
        coins_address: Coins contract address
        single_liquidity_address: Single-sided ETH liquidity helper address
        swap_fee_bps: Pool fee tier in basis points
        slippage_bps: Slippage tolerance in basis points
        deadline_sec: Plan time-to-live in seconds
        dry_run: If True, plans are logged but never submitted
        private_key_env: Name of the env var holding the signing key
        log_level: Console log level for the engine loggers
        log_rpc: If True, also log every RPC request
    """

    def __init__(self, config_dict: Dict[str, Any]):
        """
        Parse and validate config from dictionary.

        Args:
            config_dict: Loaded YAML config

        Raises:
            ConfigError: If fields are invalid
        """
        # Network
        self.rpc_url: Optional[str] = self._get_optional(config_dict, "rpc_url", str)
        self.chain_id: int = self._get_optional(
            config_dict, "chain_id", int, MAINNET_CHAIN_ID
        )

        # Contracts
        self.amm_address: str = self._get_optional(
            config_dict, "amm_address", str, ZAMM_ADDRESS
        )
        self.coins_address: str = self._get_optional(
            config_dict, "coins_address", str, COINS_ADDRESS
        )
        self.single_liquidity_address: str = self._get_optional(
            config_dict, "single_liquidity_address", str, SINGLE_LIQUIDITY_ETH_ADDRESS
        )

        # Pricing
        self.swap_fee_bps: int = self._get_bps(
            config_dict, "swap_fee_bps", DEFAULT_SWAP_FEE_BPS
        )
        if self.swap_fee_bps >= FEE_DENOMINATOR:
            raise ConfigError(
                f"swap_fee_bps must be below {FEE_DENOMINATOR}, got {self.swap_fee_bps}"
            )

        # Slippage: bps preferred, legacy percent accepted
        if "slippage_bps" in config_dict:
            self.slippage_bps: int = self._get_bps(
                config_dict, "slippage_bps", DEFAULT_SLIPPAGE_BPS
            )
        elif "slippage_pct" in config_dict:
            pct = config_dict["slippage_pct"]
            if isinstance(pct, bool) or not isinstance(pct, (int, float)):
                raise ConfigError(
                    f"Config field 'slippage_pct' must be a number, got {type(pct).__name__}"
                )
            self.slippage_bps = pct_to_bps(pct)
            if not is_valid_basis_points(self.slippage_bps):
                raise ConfigError(f"slippage_pct out of range: {pct}")
        else:
            self.slippage_bps = DEFAULT_SLIPPAGE_BPS

        # Execution
        self.deadline_sec: int = self._get_optional(
            config_dict, "deadline_sec", int, DEFAULT_DEADLINE_SEC
        )
        if self.deadline_sec <= 0:
            raise ConfigError(f"deadline_sec must be positive, got {self.deadline_sec}")

        self.dry_run: bool = self._get_optional(config_dict, "dry_run", bool, True)
        self.private_key_env: str = self._get_optional(
            config_dict, "private_key_env", str, "COINCHAN_PRIVATE_KEY"
        )

        # Logging
        self.log_level: str = self._get_optional(
            config_dict, "log_level", str, "INFO"
        ).upper()
        if self.log_level not in LEVEL_NAMES:
            raise ConfigError(
                f"log_level must be one of {', '.join(LEVEL_NAMES)}, got {self.log_level}"
            )
        self.log_rpc: bool = self._get_optional(config_dict, "log_rpc", bool, False)

    @staticmethod
    def _get_optional(
        d: Dict, key: str, expected_type: type, default: Any = None
    ) -> Any:
        """Get optional config field with type validation."""
        if key not in d or d[key] is None:
            return default
        val = d[key]
        # bool is an int subclass; keep the two apart
        if expected_type is int and isinstance(val, bool):
            raise ConfigError(f"Config field '{key}' must be int, got bool")
        if not isinstance(val, expected_type):
            raise ConfigError(
                f"Config field '{key}' must be {expected_type.__name__}, got {type(val).__name__}"
            )
        return val

    @classmethod
    def _get_bps(cls, d: Dict, key: str, default: int) -> int:
        """Get a basis-point field, validated to 0-10000."""
        val = cls._get_optional(d, key, int, default)
        if not is_valid_basis_points(val):
            raise ConfigError(f"Config field '{key}' must be in [0, 10000], got {val}")
        return val

    @property
    def slippage_pct(self) -> float:
        """Slippage tolerance as percent (100 bps -> 1.0)."""
        return bps_to_pct(self.slippage_bps)

    @property
    def private_key(self) -> Optional[str]:
        """Signing key read from the environment, if set."""
        return os.environ.get(self.private_key_env) or None


def load_config(config_path: str) -> ZammConfig:
    """
    Load and validate config from YAML file.

    Args:
        config_path: Path to config YAML file

    Returns:
        Validated ZammConfig instance

    Raises:
        ConfigError: If config invalid or file not found
    """
    if not os.path.exists(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {e}") from e

    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise ConfigError("Config file must contain a YAML dictionary")

    return ZammConfig(config_dict)
