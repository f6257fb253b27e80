"""
Real-time reserve calculator.

Projects settled reserves forward over `dt` seconds of streaming input:

- no flow (or dt == 0): reserves unchanged
- one asset streaming at rate r into A: A' = A + r*dt, B' = max(floor(K / A'), 1)
- both assets streaming: A' = floor(sqrt(K * (A + rA*dt) / (B + rB*dt))), B' = floor(K / A')

The two-sided branch is the square-root approximation of continuous
two-sided trading; `kernels.twamm_exact` holds the exact solution it is
measured against. Neither output reserve may exceed its settled value plus
the amount streamed into it, and neither drops below 1: a pool that streamed
its output side down to one unit keeps settling, so flows can still be closed.

Pure: settlement and the projection queries call the same function, so a
query for time t equals what a mutation at t settles to.
"""

from __future__ import annotations

from typing import Tuple

from ..kernels.fixed_point import sqrt_floor
from .errors import PairArithmeticError


def _require_non_negative(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


def realtime_reserves(
    reserve0: int,
    reserve1: int,
    dt: int,
    flow0: int,
    flow1: int,
) -> Tuple[int, int]:
    """
    Reserves after `dt` seconds of inbound flows `flow0`/`flow1` (token units per second).

    Raises:
        PairArithmeticError: if a flow is active against an empty reserve
    """
    for name, v in (
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("dt", dt),
        ("flow0", flow0),
        ("flow1", flow1),
    ):
        _require_non_negative(name, v)

    if dt == 0 or (flow0 == 0 and flow1 == 0):
        return reserve0, reserve1
    if reserve0 == 0 or reserve1 == 0:
        raise PairArithmeticError("cannot stream into a pool with an empty reserve")

    k = reserve0 * reserve1
    in0 = flow0 * dt
    in1 = flow1 * dt

    if flow1 == 0:
        new_reserve0 = reserve0 + in0
        return new_reserve0, max(k // new_reserve0, 1)
    if flow0 == 0:
        new_reserve1 = reserve1 + in1
        return max(k // new_reserve1, 1), new_reserve1

    new_reserve0 = sqrt_floor((k * (reserve0 + in0)) // (reserve1 + in1))
    new_reserve0 = max(min(new_reserve0, reserve0 + in0), 1)
    new_reserve1 = max(min(k // new_reserve0, reserve1 + in1), 1)
    return new_reserve0, new_reserve1
