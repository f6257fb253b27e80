"""
Streaming pair core: real-time reserves, settlement, discrete operations
"""

from .realtime import realtime_reserves
from .settlement import (
    settle,
    settle_account,
    apply_flow_change,
    withdraw_entitlements,
    project_account,
)
from .cpmm import (
    MINIMUM_LIQUIDITY,
    compute_liquidity_minted,
    compute_liquidity_burned,
    require_swap_invariant,
)
from .errors import (
    PairError,
    PairGuardError,
    InsufficientLiquidityError,
    ReentrancyError,
    PairInvariantError,
    PairArithmeticError,
    PairOverflowError,
)
from .events import Event, EventLog, PairEvent
from .invariants import INVARIANT_REGISTRY, check_all, check_pair, dust, observe
from .pair import StreamingPair, compute_pair_address

__all__ = [
    "realtime_reserves",
    "settle",
    "settle_account",
    "apply_flow_change",
    "withdraw_entitlements",
    "project_account",
    "MINIMUM_LIQUIDITY",
    "compute_liquidity_minted",
    "compute_liquidity_burned",
    "require_swap_invariant",
    "PairError",
    "PairGuardError",
    "InsufficientLiquidityError",
    "ReentrancyError",
    "PairInvariantError",
    "PairArithmeticError",
    "PairOverflowError",
    "Event",
    "EventLog",
    "PairEvent",
    "INVARIANT_REGISTRY",
    "check_all",
    "check_pair",
    "dust",
    "observe",
    "StreamingPair",
    "compute_pair_address",
]
