"""
State management for streaming pairs
"""

from .balances import ZERO_ADDRESS, BalanceTable
from .pool import PoolState, initial_pool_state, pool_state_from_dict, pool_state_to_dict
from .streams import StreamRecord, StreamRegistry

__all__ = [
    "ZERO_ADDRESS",
    "BalanceTable",
    "PoolState",
    "initial_pool_state",
    "pool_state_from_dict",
    "pool_state_to_dict",
    "StreamRecord",
    "StreamRegistry",
]
