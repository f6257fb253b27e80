"""
Exact reserves for simultaneous continuous two-sided trading (reference only).

When both assets stream into a constant-product pool at constant rates, the
closed form for reserve0 after the interval is

    a = sqrt(k * inA / inB) * (e**x + c) / (e**x - c)
    x = 2 * sqrt(inA * inB / k)
    c = (sqrt(A * inB) - sqrt(B * inA)) / (sqrt(A * inB) + sqrt(B * inA))

with A, B the reserves at the start and inA, inB the amounts streamed in.
Settlement uses the square-root approximation in `core.realtime`; this module
is the yardstick that approximation is measured against.
"""

from __future__ import annotations

from typing import Tuple

from .fixed_point import WAD, exp_wad, sqrt_floor


def exact_two_sided_reserves(
    reserve0: int,
    reserve1: int,
    amount0_in: int,
    amount1_in: int,
) -> Tuple[int, int]:
    """Return `(reserve0', reserve1')` per the exact hyperbolic solution (rounded down)."""
    for name, v in (
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("amount0_in", amount0_in),
        ("amount1_in", amount1_in),
    ):
        if not isinstance(v, int) or isinstance(v, bool):
            raise TypeError(f"{name} must be an int")
        if v <= 0:
            raise ValueError(f"{name} must be positive: {v}")

    k = reserve0 * reserve1

    s_a = sqrt_floor(reserve0 * amount1_in)
    s_b = sqrt_floor(reserve1 * amount0_in)
    c_num = s_a - s_b
    c_den = s_a + s_b

    x = 2 * sqrt_floor((amount0_in * amount1_in * WAD * WAD) // k)
    e = exp_wad(x)

    root = sqrt_floor((k * amount0_in) // amount1_in)
    numerator = e * c_den + c_num * WAD
    denominator = e * c_den - c_num * WAD

    new_reserve0 = (root * numerator) // denominator
    if new_reserve0 <= 0:
        raise ValueError("exact reserve0 underflowed to zero")
    return new_reserve0, k // new_reserve0


def relative_error(approx: int, exact: int, *, scale: int = 10_000) -> int:
    """ceil(|approx - exact| * scale / exact); the default scale reports basis points."""
    if exact <= 0:
        raise ValueError(f"exact must be positive: {exact}")
    diff = abs(approx - exact)
    return (diff * scale + exact - 1) // exact
