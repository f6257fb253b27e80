"""
Discrete constant-product operations: liquidity mint/burn sizing and the
post-swap invariant check.

All inputs are balances and reserves that the caller has already brought
current with settlement; nothing here knows about streams.
"""

from typing import Tuple

from ..kernels.cpmm_swap import fee_adjusted_k_holds
from ..kernels.fixed_point import sqrt_floor
from .errors import InsufficientLiquidityError, PairInvariantError

# Locked to the zero address on the first mint
MINIMUM_LIQUIDITY = 1000


def compute_liquidity_minted(
    amount0: int,
    amount1: int,
    reserve0: int,
    reserve1: int,
    total_supply: int,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> int:
    """
    Liquidity tokens owed for depositing `amount0`/`amount1`.

    First deposit (total_supply == 0):
        liquidity = floor(sqrt(amount0 * amount1)) - minimum_liquidity

    Subsequent deposits:
        liquidity = min(floor(amount0 * total_supply / reserve0),
                        floor(amount1 * total_supply / reserve1))

    Raises:
        InsufficientLiquidityError: if the result is not positive
    """
    if amount0 < 0 or amount1 < 0:
        raise InsufficientLiquidityError(f"negative deposit: ({amount0}, {amount1})")
    if total_supply < 0:
        raise ValueError(f"total_supply must be non-negative: {total_supply}")

    if total_supply == 0:
        liquidity = sqrt_floor(amount0 * amount1) - minimum_liquidity
    else:
        if reserve0 <= 0 or reserve1 <= 0:
            raise InsufficientLiquidityError("cannot add liquidity against an empty reserve")
        liquidity = min(
            (amount0 * total_supply) // reserve0,
            (amount1 * total_supply) // reserve1,
        )
    if liquidity <= 0:
        raise InsufficientLiquidityError("INSUFFICIENT_LIQUIDITY_MINTED")
    return liquidity


def compute_liquidity_burned(
    liquidity: int,
    balance0: int,
    balance1: int,
    total_supply: int,
) -> Tuple[int, int]:
    """Pro-rata share of the tradable balances redeemed by `liquidity` (rounded down)."""
    if liquidity < 0:
        raise ValueError(f"liquidity must be non-negative: {liquidity}")
    if total_supply <= 0 or liquidity > total_supply:
        raise InsufficientLiquidityError(
            f"cannot burn {liquidity} of total supply {total_supply}"
        )
    amount0 = (liquidity * balance0) // total_supply
    amount1 = (liquidity * balance1) // total_supply
    if amount0 <= 0 or amount1 <= 0:
        raise InsufficientLiquidityError("INSUFFICIENT_LIQUIDITY_BURNED")
    return amount0, amount1


def require_swap_invariant(
    *,
    balance0: int,
    balance1: int,
    amount0_in: int,
    amount1_in: int,
    reserve0: int,
    reserve1: int,
    fee_bps: int,
) -> None:
    """Raise PairInvariantError(["K"]) unless the fee-adjusted product did not decrease."""
    if not fee_adjusted_k_holds(
        balance0=balance0,
        balance1=balance1,
        amount0_in=amount0_in,
        amount1_in=amount1_in,
        reserve0=reserve0,
        reserve1=reserve1,
        fee_bps=fee_bps,
    ):
        raise PairInvariantError(["K"])
