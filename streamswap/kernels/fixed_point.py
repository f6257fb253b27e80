"""
Fixed-point math kernel (integer-only, deterministic).

Every primitive rounds DOWN unless its name ends in `_up`. Callers pick the
direction so that rounding dust stays in the pool and is never paid out.

Conventions:
- `Q112` values are UQ112x112 fixed point (price accumulators, per-flow payouts).
- `WAD` values are 1e18 fixed point (exponent evaluation).
- Reserves must fit in 112 bits and accumulators in 256 bits; the bound checks
  raise `OverflowError` instead of wrapping.
"""

from __future__ import annotations

import math


Q112 = 1 << 112
WAD = 10**18

MAX_UINT112 = (1 << 112) - 1
MAX_UINT256 = (1 << 256) - 1

# floor(ln(2) * 1e18)
LN2_WAD = 693_147_180_559_945_309
# exp_wad(MAX_EXP_WAD) still fits in 256 bits.
MAX_EXP_WAD = 135 * WAD


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_non_negative(name: str, value: int) -> None:
    _require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


def require_uint(name: str, value: int, bits: int = 256) -> int:
    """Return `value` unchanged if it fits in an unsigned `bits`-bit word."""
    _require_int(name, value)
    if value < 0 or value >= (1 << bits):
        raise OverflowError(f"{name} does not fit in uint{bits}: {value}")
    return value


def sqrt_floor(x: int) -> int:
    """floor(sqrt(x)) for a non-negative int (exact, no floating point)."""
    _require_non_negative("x", x)
    return math.isqrt(x)


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with an unbounded intermediate product."""
    _require_non_negative("a", a)
    _require_non_negative("b", b)
    _require_int("denominator", denominator)
    if denominator == 0:
        raise ZeroDivisionError("mul_div denominator is zero")
    if denominator < 0:
        raise ValueError("denominator must be positive")
    return (a * b) // denominator


def mul_div_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator)."""
    _require_non_negative("a", a)
    _require_non_negative("b", b)
    _require_int("denominator", denominator)
    if denominator == 0:
        raise ZeroDivisionError("mul_div_up denominator is zero")
    if denominator < 0:
        raise ValueError("denominator must be positive")
    return (a * b + denominator - 1) // denominator


def encode_price(numerator_reserve: int, denominator_reserve: int) -> int:
    """
    UQ112x112 price `floor(numerator_reserve * 2**112 / denominator_reserve)`.

    `encode_price(reserve1, reserve0)` is the price of token0 in token1.
    """
    return mul_div(numerator_reserve, Q112, denominator_reserve)


def exp_wad(x: int) -> int:
    """
    floor(e**(x / 1e18) * 1e18) for 0 <= x <= MAX_EXP_WAD.

    Range reduction: x = k*ln2 + r with 0 <= r < ln2, then e**r by Taylor
    series (each term floored, so the result never exceeds the true value by
    more than the ln2 truncation) and a final shift by k.
    """
    _require_non_negative("x", x)
    if x > MAX_EXP_WAD:
        raise OverflowError(f"exp_wad input too large: {x}")

    k = x // LN2_WAD
    r = x - k * LN2_WAD

    term = WAD
    total = WAD
    n = 1
    while term:
        term = (term * r) // (WAD * n)
        total += term
        n += 1
    return total << k
