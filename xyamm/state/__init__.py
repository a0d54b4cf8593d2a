"""
State management for xyamm pools
"""

from .balances import BalanceTable
from .pools import Pool, PoolAccounts, PoolKey
from .registry import PoolRegistry

__all__ = [
    "BalanceTable",
    "Pool",
    "PoolAccounts",
    "PoolKey",
    "PoolRegistry",
]
