"""
Pool state store.

`PoolState` is the settled state of one streaming pair, as of
`block_timestamp_last`. It is immutable; settlement and the discrete
operations produce new instances via `dataclasses.replace()`.

Units/conventions:
- `reserve*` and `total_swapped_funds*` are integer token units.
- `total_flow*` is the aggregate inbound flow rate (token units per second).
- `price*_cumulative_last` are UQ112x112 price integrals over time.
- `payout1_per_flow0_cumulative` is the token1 output owed per unit of token0
  flow rate since pool creation (UQ112x112), and symmetrically for
  `payout0_per_flow1_cumulative`. A depositor's entitlement is its flow rate
  times the accumulator delta since its last settlement.

Round-trip property (tested): `pool_state_from_dict(pool_state_to_dict(s)) == s`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class PoolState:
    """Settled reserves, accumulators and aggregate streaming state."""

    # Tradable reserves
    reserve0: int = 0
    reserve1: int = 0
    block_timestamp_last: int = 0

    # TWAP accumulators
    price0_cumulative_last: int = 0
    price1_cumulative_last: int = 0

    # Streamed input converted to output, owed to depositors, not yet withdrawn
    total_swapped_funds0: int = 0
    total_swapped_funds1: int = 0

    # Aggregate inbound flow rates
    total_flow0: int = 0
    total_flow1: int = 0

    # Per-unit-of-flow payout accumulators
    payout1_per_flow0_cumulative: int = 0
    payout0_per_flow1_cumulative: int = 0

    def __post_init__(self) -> None:
        for name in STATE_VAR_NAMES:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int, got {type(value).__name__}")
            if value < 0:
                raise ValueError(f"{name} must be non-negative: {value}")

    @property
    def has_active_flows(self) -> bool:
        return self.total_flow0 > 0 or self.total_flow1 > 0


STATE_VAR_NAMES: tuple[str, ...] = tuple(PoolState.__dataclass_fields__)


def initial_pool_state(timestamp: int = 0) -> PoolState:
    """Empty pool created at `timestamp`."""
    return PoolState(block_timestamp_last=timestamp)


def pool_state_to_dict(state: PoolState) -> dict[str, int]:
    """Serialize a PoolState to a plain dict."""
    return {name: getattr(state, name) for name in STATE_VAR_NAMES}


def pool_state_from_dict(d: Mapping[str, Any]) -> PoolState:
    """Deserialize a dict to a PoolState. Raises KeyError on missing fields."""
    kwargs: dict[str, int] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        if not isinstance(val, int) or isinstance(val, bool):
            raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
        kwargs[name] = int(val)
    return PoolState(**kwargs)
