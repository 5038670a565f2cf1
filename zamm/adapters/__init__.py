"""
Chain adapters that feed the pricing core.
"""

from .zamm import (
    connect,
    fetch_pool_reserves,
    fetch_reserves,
    fetch_reserves_async,
    is_operator,
)

__all__ = [
    "connect",
    "fetch_reserves",
    "fetch_reserves_async",
    "fetch_pool_reserves",
    "is_operator",
]
