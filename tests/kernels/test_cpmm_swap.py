# [TESTER] v1

from __future__ import annotations

import pytest

from streamswap.kernels.cpmm_swap import (
    compute_fee_total,
    fee_adjusted_k_holds,
    get_amount_in,
    get_amount_out,
    quote_exact_in,
)

WAD = 10**18

# (amount_in, reserve_in, reserve_out, expected_out), all 18-decimal
INPUT_PRICE_VECTORS = [
    (1 * WAD, 5 * WAD, 10 * WAD, 1662497915624478906),
    (1 * WAD, 10 * WAD, 5 * WAD, 453305446940074565),
    (2 * WAD, 5 * WAD, 10 * WAD, 2851015155847869602),
    (2 * WAD, 10 * WAD, 5 * WAD, 831248957812239453),
    (1 * WAD, 10 * WAD, 10 * WAD, 906610893880149131),
    (1 * WAD, 100 * WAD, 100 * WAD, 987158034397061298),
    (1 * WAD, 1000 * WAD, 1000 * WAD, 996006981039903216),
]

# (amount_out, reserve0, reserve1, amount_in): input and output are the same asset
OPTIMISTIC_VECTORS = [
    (997000000000000000, 5 * WAD, 10 * WAD, 1 * WAD),
    (997000000000000000, 10 * WAD, 5 * WAD, 1 * WAD),
    (997000000000000000, 5 * WAD, 5 * WAD, 1 * WAD),
    (1 * WAD, 5 * WAD, 5 * WAD, 1003009027081243732),
]


def test_fee_is_ceil_on_gross_input() -> None:
    assert compute_fee_total(WAD, 30) == 3 * 10**15
    assert compute_fee_total(1, 30) == 1
    assert compute_fee_total(0, 30) == 0
    assert compute_fee_total(1003009027081243732, 30) == 3009027081243732


@pytest.mark.parametrize("amount_in, reserve_in, reserve_out, expected", INPUT_PRICE_VECTORS)
def test_get_amount_out_reference_vectors(
    amount_in: int, reserve_in: int, reserve_out: int, expected: int
) -> None:
    assert get_amount_out(amount_in, reserve_in, reserve_out) == expected


@pytest.mark.parametrize("amount_in, reserve_in, reserve_out, expected", INPUT_PRICE_VECTORS)
def test_get_amount_out_is_the_largest_output_passing_the_k_check(
    amount_in: int, reserve_in: int, reserve_out: int, expected: int
) -> None:
    def holds(out: int) -> bool:
        return fee_adjusted_k_holds(
            balance0=reserve_in + amount_in,
            balance1=reserve_out - out,
            amount0_in=amount_in,
            amount1_in=0,
            reserve0=reserve_in,
            reserve1=reserve_out,
            fee_bps=30,
        )

    assert holds(expected)
    assert not holds(expected + 1)


@pytest.mark.parametrize("amount_out, reserve0, reserve1, amount_in", OPTIMISTIC_VECTORS)
def test_optimistic_same_asset_vectors(
    amount_out: int, reserve0: int, reserve1: int, amount_in: int
) -> None:
    def holds(out: int) -> bool:
        balance0 = reserve0 + amount_in - out
        return fee_adjusted_k_holds(
            balance0=balance0,
            balance1=reserve1,
            amount0_in=balance0 - (reserve0 - out),
            amount1_in=0,
            reserve0=reserve0,
            reserve1=reserve1,
            fee_bps=30,
        )

    assert holds(amount_out)
    assert not holds(amount_out + 1)


def test_quote_keeps_k_non_decreasing() -> None:
    q = quote_exact_in(WAD, 5 * WAD, 10 * WAD, 30)
    assert q.fee_total + q.net_in == q.amount_in
    assert q.k_after >= q.k_before
    assert q.new_reserve_in == 6 * WAD


@pytest.mark.parametrize("amount_out", [1, 10**12, WAD, 4 * WAD])
def test_get_amount_in_is_sufficient(amount_out: int) -> None:
    amount_in = get_amount_in(amount_out, 5 * WAD, 5 * WAD)
    assert get_amount_out(amount_in, 5 * WAD, 5 * WAD) >= amount_out


class TestRejections:
    def test_empty_reserve(self) -> None:
        with pytest.raises(ValueError):
            get_amount_out(WAD, 0, WAD)

    def test_zero_output(self) -> None:
        with pytest.raises(ValueError, match="amount_out is zero"):
            get_amount_out(10, WAD, 10)

    def test_input_eaten_by_fee(self) -> None:
        with pytest.raises(ValueError, match="net_in"):
            get_amount_out(1, WAD, WAD)

    def test_drain(self) -> None:
        with pytest.raises(ValueError, match="drain"):
            get_amount_in(5 * WAD, 5 * WAD, 5 * WAD)

    def test_fee_bounds(self) -> None:
        with pytest.raises(ValueError):
            compute_fee_total(WAD, 10_000)
        with pytest.raises(TypeError):
            compute_fee_total(WAD, 30.0)  # type: ignore[arg-type]
