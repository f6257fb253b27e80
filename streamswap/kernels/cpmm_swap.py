"""
Constant-product swap kernel.

The pair charges its fee on the gross amount that came in, rounded up, and
prices the trade on what is left (`net_in`). Fees are never paid out; they
stay behind in the reserves.

A swap is accepted when

    (balance0 - fee(amount0_in)) * (balance1 - fee(amount1_in)) >= reserve0 * reserve1

and `get_amount_out` is the largest output for which that still holds. For
fee_bps=30 and inputs divisible by 1000 it reduces to the familiar
`balance * 1000 - amount_in * 3` form.
"""

from __future__ import annotations

from dataclasses import dataclass

from .fixed_point import mul_div, mul_div_up


BPS_DENOM = 10_000


def _check_fee_bps(fee_bps: int) -> None:
    if type(fee_bps) is not int:
        raise TypeError("fee_bps must be an int")
    if fee_bps < 0 or fee_bps >= BPS_DENOM:
        raise ValueError(f"fee_bps out of range [0, {BPS_DENOM}): {fee_bps}")


def _check_amounts(**amounts: int) -> None:
    for label, amount in amounts.items():
        if type(amount) is not int:
            raise TypeError(f"{label} must be an int")
        if amount < 0:
            raise ValueError(f"{label} must be non-negative: {amount}")


def _check_pool(reserve_in: int, reserve_out: int) -> None:
    if not reserve_in or not reserve_out:
        raise ValueError("cannot quote against an empty reserve")


@dataclass(frozen=True)
class SwapQuote:
    amount_in: int
    amount_out: int
    fee_total: int
    net_in: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def compute_fee_total(gross_in: int, fee_bps: int) -> int:
    """Fee owed on `gross_in`, i.e. ceil(gross_in * fee_bps / 10_000)."""
    _check_fee_bps(fee_bps)
    _check_amounts(gross_in=gross_in)
    return mul_div_up(gross_in, fee_bps, BPS_DENOM)


def quote_exact_in(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int) -> SwapQuote:
    """
    Price an exact-in trade and report the reserves it would leave behind.

    ValueError covers empty reserves, a zero input, an input consumed entirely
    by the fee, and a trade too small to release anything.
    """
    _check_amounts(amount_in=amount_in, reserve_in=reserve_in, reserve_out=reserve_out)
    _check_fee_bps(fee_bps)
    _check_pool(reserve_in, reserve_out)
    if not amount_in:
        raise ValueError("amount_in must be positive")

    fee = compute_fee_total(amount_in, fee_bps)
    priced = amount_in - fee
    if not priced:
        raise ValueError("net_in is zero once the fee is taken")

    out = mul_div(reserve_out, priced, reserve_in + priced)
    if not out:
        raise ValueError("amount_out is zero for this input")

    after_in, after_out = reserve_in + amount_in, reserve_out - out
    return SwapQuote(
        amount_in=amount_in,
        amount_out=out,
        fee_total=fee,
        net_in=priced,
        new_reserve_in=after_in,
        new_reserve_out=after_out,
        k_before=reserve_in * reserve_out,
        k_after=after_in * after_out,
    )


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int = 30) -> int:
    """Largest output a pair releases for `amount_in` of the other asset."""
    return quote_exact_in(amount_in, reserve_in, reserve_out, fee_bps).amount_out


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int, fee_bps: int = 30) -> int:
    """
    Smallest gross input whose exact-in quote is at least `amount_out`.

    The net amount is rounded up first, then grossed up for the fee, again
    rounding up.
    """
    _check_amounts(amount_out=amount_out, reserve_in=reserve_in, reserve_out=reserve_out)
    _check_fee_bps(fee_bps)
    _check_pool(reserve_in, reserve_out)
    if not amount_out:
        raise ValueError("amount_out must be positive")
    if amount_out >= reserve_out:
        raise ValueError(f"amount_out {amount_out} would drain a reserve of {reserve_out}")

    needed_net = mul_div_up(reserve_in, amount_out, reserve_out - amount_out)
    gross = mul_div_up(needed_net, BPS_DENOM, BPS_DENOM - fee_bps)

    # floor(gross * (10_000 - fee_bps) / 10_000) >= needed_net by construction
    if get_amount_out(gross, reserve_in, reserve_out, fee_bps) < amount_out:
        raise ValueError("gross input falls short of the requested output")
    return gross


def fee_adjusted_k_holds(
    *,
    balance0: int,
    balance1: int,
    amount0_in: int,
    amount1_in: int,
    reserve0: int,
    reserve1: int,
    fee_bps: int,
) -> bool:
    """True iff the post-swap balances, net of input fees, keep k from decreasing."""
    _check_amounts(
        balance0=balance0,
        balance1=balance1,
        amount0_in=amount0_in,
        amount1_in=amount1_in,
        reserve0=reserve0,
        reserve1=reserve1,
    )
    net0 = balance0 - compute_fee_total(amount0_in, fee_bps)
    net1 = balance1 - compute_fee_total(amount1_in, fee_bps)
    if min(net0, net1) < 0:
        return False
    return net0 * net1 >= reserve0 * reserve1
