"""
Kernel layer.

Deterministic, integer-only building blocks used by the pool:
- `fixed_point` contains the math primitives (floor sqrt, mul/div, UQ112x112, exp),
- `cpmm_swap` contains the discrete constant-product quote + invariant check,
- `twamm_exact` contains the exact two-sided streaming reference formula.

Every kernel is a pure function over plain Python ints.
"""

from .cpmm_swap import (
    BPS_DENOM,
    compute_fee_total,
    fee_adjusted_k_holds,
    get_amount_in,
    get_amount_out,
)
from .fixed_point import (
    MAX_UINT112,
    MAX_UINT256,
    Q112,
    WAD,
    encode_price,
    exp_wad,
    mul_div,
    mul_div_up,
    require_uint,
    sqrt_floor,
)
from .twamm_exact import exact_two_sided_reserves, relative_error

__all__ = [
    "BPS_DENOM",
    "compute_fee_total",
    "fee_adjusted_k_holds",
    "get_amount_in",
    "get_amount_out",
    "MAX_UINT112",
    "MAX_UINT256",
    "Q112",
    "WAD",
    "encode_price",
    "exp_wad",
    "mul_div",
    "mul_div_up",
    "require_uint",
    "sqrt_floor",
    "exact_two_sided_reserves",
    "relative_error",
]
