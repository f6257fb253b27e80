# [TESTER] v1

from __future__ import annotations

import pytest

from streamswap.core.cpmm import (
    MINIMUM_LIQUIDITY,
    compute_liquidity_burned,
    compute_liquidity_minted,
    require_swap_invariant,
)
from streamswap.core.errors import InsufficientLiquidityError, PairInvariantError

WAD = 10**18


class TestMinted:
    def test_first_deposit_is_geometric_mean_minus_lock(self) -> None:
        assert compute_liquidity_minted(WAD, 4 * WAD, 0, 0, 0) == 2 * WAD - MINIMUM_LIQUIDITY

    def test_custom_lock(self) -> None:
        assert compute_liquidity_minted(100, 100, 0, 0, 0, minimum_liquidity=1) == 99

    def test_later_deposit_takes_the_smaller_share(self) -> None:
        assert compute_liquidity_minted(WAD, 8 * WAD, WAD, 4 * WAD, 2 * WAD) == 2 * WAD

    @pytest.mark.parametrize(
        "args",
        [
            (1000, 1000, 0, 0, 0),
            (0, WAD, WAD, WAD, WAD),
            (WAD, WAD, 0, WAD, WAD),
            (-1, WAD, WAD, WAD, WAD),
        ],
    )
    def test_rejections(self, args) -> None:
        with pytest.raises(InsufficientLiquidityError):
            compute_liquidity_minted(*args)


class TestBurned:
    def test_pro_rata_rounded_down(self) -> None:
        assert compute_liquidity_burned(1, 10, 21, 3) == (3, 7)

    def test_dust_share_rejected(self) -> None:
        with pytest.raises(InsufficientLiquidityError, match="INSUFFICIENT_LIQUIDITY_BURNED"):
            compute_liquidity_burned(1, 10, 10, 100)

    def test_more_than_supply(self) -> None:
        with pytest.raises(InsufficientLiquidityError):
            compute_liquidity_burned(11, 10, 10, 10)


def test_swap_invariant_names_k() -> None:
    require_swap_invariant(
        balance0=6 * WAD,
        balance1=10 * WAD - 1662497915624478906,
        amount0_in=WAD,
        amount1_in=0,
        reserve0=5 * WAD,
        reserve1=10 * WAD,
        fee_bps=30,
    )
    with pytest.raises(PairInvariantError) as exc_info:
        require_swap_invariant(
            balance0=6 * WAD,
            balance1=10 * WAD - 1662497915624478907,
            amount0_in=WAD,
            amount1_in=0,
            reserve0=5 * WAD,
            reserve1=10 * WAD,
            fee_bps=30,
        )
    assert exc_info.value.violations == ["K"]
