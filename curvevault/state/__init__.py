"""
State management for curvevault
"""

from .balances import BalanceTable
from .holdings import HoldingsTable
from .nonces import NonceTable
from .pools import Pool, PoolStatus, compute_pool_key, pool_from_dict, pool_to_dict
from .store import PoolStore

__all__ = [
    "BalanceTable",
    "HoldingsTable",
    "NonceTable",
    "Pool",
    "PoolStatus",
    "PoolStore",
    "compute_pool_key",
    "pool_from_dict",
    "pool_to_dict",
]
