"""
Settlement coordinator (pure half).

All functions here are pure: they take immutable state and return new state.
`StreamingPair` is the only caller that commits the results.

Per-account accrual uses two pool accumulators instead of iterating over
depositors. Over each settled interval the pool converts `swapped1` of
token1 out of the curve for the token0 streamers; every unit of token0 flow
is owed `swapped1 / total_flow0` of it:

    payout1_per_flow0_cumulative += floor(swapped1 * 2**112 / total_flow0)

An account streaming token0 at rate f is owed
`floor(f * (cumulative_now - checkpoint) / 2**112)` since its checkpoint.
Both floors round towards the pool, so the sum of account balances never
exceeds `total_swapped_funds`.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Tuple

from ..kernels.fixed_point import Q112, encode_price, require_uint
from ..state.pool import PoolState
from ..state.streams import StreamRecord
from .errors import PairArithmeticError, PairGuardError, PairOverflowError
from .realtime import realtime_reserves

logger = logging.getLogger(__name__)


def _check_bounds(state: PoolState) -> PoolState:
    try:
        for name in ("reserve0", "reserve1"):
            require_uint(name, getattr(state, name), 112)
        for name in (
            "price0_cumulative_last",
            "price1_cumulative_last",
            "total_swapped_funds0",
            "total_swapped_funds1",
            "payout1_per_flow0_cumulative",
            "payout0_per_flow1_cumulative",
        ):
            require_uint(name, getattr(state, name))
    except OverflowError as exc:
        raise PairOverflowError(str(exc)) from exc
    return state


def settle(state: PoolState, now: int) -> PoolState:
    """
    Materialize streaming effects up to `now`.

    Steps:
    1. dt = now - block_timestamp_last (dt == 0 returns `state` itself)
    2. project reserves with the real-time calculator
    3. credit the swapped output to the per-flow payout accumulators and
       `total_swapped_funds`
    4. advance the TWAP accumulators using the reserves held during the interval

    Raises:
        ValueError: if `now` precedes the last settlement
        PairArithmeticError: if flows are active against an empty reserve
        PairOverflowError: if a reserve or accumulator leaves its range
    """
    if not isinstance(now, int) or isinstance(now, bool):
        raise TypeError("now must be an int")
    if now < state.block_timestamp_last:
        raise ValueError(f"cannot settle backwards: {now} < {state.block_timestamp_last}")

    dt = now - state.block_timestamp_last
    if dt == 0:
        return state

    reserve0, reserve1 = state.reserve0, state.reserve1
    flow0, flow1 = state.total_flow0, state.total_flow1

    price0 = state.price0_cumulative_last
    price1 = state.price1_cumulative_last
    if reserve0 > 0 and reserve1 > 0:
        price0 += encode_price(reserve1, reserve0) * dt
        price1 += encode_price(reserve0, reserve1) * dt

    new_reserve0, new_reserve1 = realtime_reserves(reserve0, reserve1, dt, flow0, flow1)
    swapped0 = reserve0 + flow0 * dt - new_reserve0
    swapped1 = reserve1 + flow1 * dt - new_reserve1
    if swapped0 < 0 or swapped1 < 0:
        raise PairArithmeticError(f"negative swapped output: ({swapped0}, {swapped1})")

    payout1_per_flow0 = state.payout1_per_flow0_cumulative
    payout0_per_flow1 = state.payout0_per_flow1_cumulative
    if flow0 > 0:
        payout1_per_flow0 += (swapped1 * Q112) // flow0
    if flow1 > 0:
        payout0_per_flow1 += (swapped0 * Q112) // flow1

    settled = replace(
        state,
        reserve0=new_reserve0,
        reserve1=new_reserve1,
        block_timestamp_last=now,
        price0_cumulative_last=price0,
        price1_cumulative_last=price1,
        total_swapped_funds0=state.total_swapped_funds0 + swapped0,
        total_swapped_funds1=state.total_swapped_funds1 + swapped1,
        payout1_per_flow0_cumulative=payout1_per_flow0,
        payout0_per_flow1_cumulative=payout0_per_flow1,
    )
    if flow0 or flow1:
        logger.debug(
            "settled dt=%d flows=(%d, %d) reserves (%d, %d) -> (%d, %d) swapped=(%d, %d)",
            dt, flow0, flow1, reserve0, reserve1, new_reserve0, new_reserve1, swapped0, swapped1,
        )
    return _check_bounds(settled)


def settle_account(record: StreamRecord, state: PoolState) -> StreamRecord:
    """
    Bring one account current with a settled pool state.

    `state` must already be settled to (at least) the account's last
    settlement time; the accumulators never decrease, so an account settled
    twice against the same state accrues nothing the second time.
    """
    if state.block_timestamp_last < record.last_settled:
        raise ValueError(
            f"pool state ({state.block_timestamp_last}) is older than the account "
            f"({record.last_settled})"
        )
    delta1 = state.payout1_per_flow0_cumulative - record.payout1_per_flow0_checkpoint
    delta0 = state.payout0_per_flow1_cumulative - record.payout0_per_flow1_checkpoint
    if delta0 < 0 or delta1 < 0:
        raise PairArithmeticError("payout accumulator moved backwards")

    return replace(
        record,
        last_settled=state.block_timestamp_last,
        balance0=record.balance0 + (record.flow_rate1 * delta0) // Q112,
        balance1=record.balance1 + (record.flow_rate0 * delta1) // Q112,
        payout1_per_flow0_checkpoint=state.payout1_per_flow0_cumulative,
        payout0_per_flow1_checkpoint=state.payout0_per_flow1_cumulative,
    )


def apply_flow_change(
    state: PoolState,
    record: StreamRecord,
    asset: int,
    new_rate: int,
) -> Tuple[PoolState, StreamRecord]:
    """
    Replace the account's inbound rate for `asset` (0 or 1) with `new_rate`.

    Both `state` and `record` must already be settled to the same instant;
    the aggregate flow moves by the rate delta only.
    """
    if not isinstance(new_rate, int) or isinstance(new_rate, bool):
        raise TypeError("new_rate must be an int")
    if new_rate < 0:
        raise PairGuardError(f"flow rate must be non-negative: {new_rate}")
    if record.last_settled != state.block_timestamp_last:
        raise ValueError("account must be settled to the pool's timestamp before a rate change")

    old_rate = record.flow_rate(asset)
    delta = new_rate - old_rate
    if asset == 0:
        total = state.total_flow0 + delta
        if total < 0:
            raise PairArithmeticError(f"total_flow0 would become negative: {total}")
        return replace(state, total_flow0=total), replace(record, flow_rate0=new_rate)
    total = state.total_flow1 + delta
    if total < 0:
        raise PairArithmeticError(f"total_flow1 would become negative: {total}")
    return replace(state, total_flow1=total), replace(record, flow_rate1=new_rate)


def withdraw_entitlements(
    state: PoolState,
    record: StreamRecord,
) -> Tuple[PoolState, StreamRecord, Tuple[int, int]]:
    """
    Zero the account's settled balances and release them from `total_swapped_funds`.

    Returns the new state, the new record and `(amount0, amount1)` to pay out.
    """
    amount0, amount1 = record.balance0, record.balance1
    if amount0 > state.total_swapped_funds0 or amount1 > state.total_swapped_funds1:
        raise PairArithmeticError(
            f"entitlement ({amount0}, {amount1}) exceeds swapped funds "
            f"({state.total_swapped_funds0}, {state.total_swapped_funds1})"
        )
    new_state = replace(
        state,
        total_swapped_funds0=state.total_swapped_funds0 - amount0,
        total_swapped_funds1=state.total_swapped_funds1 - amount1,
    )
    return new_state, replace(record, balance0=0, balance1=0), (amount0, amount1)


def project_account(record: StreamRecord, state: PoolState, at: int) -> Tuple[PoolState, StreamRecord]:
    """Settle pool and account to `at` without committing anything."""
    settled = settle(state, at)
    return settled, settle_account(record, settled)
