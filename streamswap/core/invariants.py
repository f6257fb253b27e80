"""Invariant checkers for streaming pairs.

Each function takes a `PairObservation` (pool and accounts settled to one
instant, plus the pair's ledger balances at that instant) and returns True
when the invariant holds; `check_all()` returns the list of violated
invariant IDs (empty = all pass).

These are O(number of accounts) and are meant for tests, tools and the
optional post-operation check, never for settlement itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from ..state.balances import Address
from ..state.pool import PoolState
from ..state.streams import StreamRecord
from .settlement import settle, settle_account

if TYPE_CHECKING:
    from .pair import StreamingPair


@dataclass(frozen=True)
class PairObservation:
    state: PoolState
    ledger0: int
    ledger1: int
    accounts: Dict[Address, StreamRecord]
    dust_tolerance: int

    @property
    def entitlements(self) -> Tuple[int, int]:
        return (
            sum(r.balance0 for r in self.accounts.values()),
            sum(r.balance1 for r in self.accounts.values()),
        )


def observe(pair: "StreamingPair", at: Optional[int] = None) -> PairObservation:
    """Settle a copy of the pair's state and every account to `at` (default: now)."""
    when = pair.chain.timestamp if at is None else at
    state = settle(pair.state, when)
    accounts = {
        account: settle_account(pair.get_stream(account), state)
        for account in pair.accounts()
    }
    return PairObservation(
        state=state,
        ledger0=pair.token0.balance_of(pair.address, when),
        ledger1=pair.token1.balance_of(pair.address, when),
        accounts=accounts,
        dust_tolerance=pair.config.dust_tolerance,
    )


def inv_reserves_backed(o: PairObservation) -> bool:
    s = o.state
    return (
        o.ledger0 >= s.reserve0 + s.total_swapped_funds0
        and o.ledger1 >= s.reserve1 + s.total_swapped_funds1
    )


def inv_entitlements_covered(o: PairObservation) -> bool:
    owed0, owed1 = o.entitlements
    return owed0 <= o.state.total_swapped_funds0 and owed1 <= o.state.total_swapped_funds1


def inv_rounding_dust_bounded(o: PairObservation) -> bool:
    owed0, owed1 = o.entitlements
    return (
        o.state.total_swapped_funds0 - owed0 <= o.dust_tolerance
        and o.state.total_swapped_funds1 - owed1 <= o.dust_tolerance
    )


def inv_flow_totals_consistent(o: PairObservation) -> bool:
    return (
        sum(r.flow_rate0 for r in o.accounts.values()) == o.state.total_flow0
        and sum(r.flow_rate1 for r in o.accounts.values()) == o.state.total_flow1
    )


def inv_registry_sparse(o: PairObservation) -> bool:
    return all(not r.is_empty for r in o.accounts.values())


def inv_streams_need_reserves(o: PairObservation) -> bool:
    if not o.state.has_active_flows:
        return True
    return o.state.reserve0 > 0 and o.state.reserve1 > 0


INVARIANT_REGISTRY: dict[str, Callable[[PairObservation], bool]] = {
    "inv_reserves_backed": inv_reserves_backed,
    "inv_entitlements_covered": inv_entitlements_covered,
    "inv_rounding_dust_bounded": inv_rounding_dust_bounded,
    "inv_flow_totals_consistent": inv_flow_totals_consistent,
    "inv_registry_sparse": inv_registry_sparse,
    "inv_streams_need_reserves": inv_streams_need_reserves,
}


def check_all(observation: PairObservation) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(observation)
    ]


def check_pair(pair: "StreamingPair", at: Optional[int] = None) -> list[str]:
    return check_all(observe(pair, at))


def dust(pair: "StreamingPair", at: Optional[int] = None) -> Tuple[int, int]:
    """`ledger - (reserve + sum of account balances)` per asset, at `at`."""
    o = observe(pair, at)
    owed0, owed1 = o.entitlements
    return (
        o.ledger0 - (o.state.reserve0 + owed0),
        o.ledger1 - (o.state.reserve1 + owed1),
    )
