"""
Streaming constant-product pair.

`StreamingPair` is the imperative shell around the pure settlement and CPMM
kernels. Every mutator follows the same shape:

    with chain.atomic(), self._lock(op):
        state = self._settle()      # bring reserves/accumulators to now
        ...                         # act against the settled reserves
        self._commit(...)           # write state, emit events
        self._pay(...)              # outbound transfers last

The chain frame makes the whole call all-or-nothing; the lock rejects any
re-entry (e.g. from a token transfer hook) until the call returns.

Tradable balance of an asset = pair's ledger balance - total_swapped_funds,
i.e. streamed output owed to depositors is never counted as liquidity.
"""

from __future__ import annotations

import hashlib
import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Iterator, List, Optional, Tuple

from ..config import PairConfig
from ..integration.chain import Chain
from ..integration.ledger import StreamingToken
from ..kernels.fixed_point import require_uint
from ..state.balances import Address, Amount, BalanceTable, ZERO_ADDRESS
from ..state.pool import PoolState, initial_pool_state
from ..state.streams import StreamRecord, StreamRegistry
from .cpmm import compute_liquidity_burned, compute_liquidity_minted, require_swap_invariant
from .errors import (
    InsufficientLiquidityError,
    PairArithmeticError,
    PairGuardError,
    PairInvariantError,
    PairOverflowError,
    ReentrancyError,
)
from .events import Event, EventLog
from .invariants import check_pair
from .settlement import (
    apply_flow_change,
    project_account,
    settle,
    settle_account,
    withdraw_entitlements,
)

logger = logging.getLogger(__name__)


def compute_pair_address(token0: Address, token1: Address) -> Address:
    """
    Deterministic pair address:
        address = H("StreamSwapPair" || token0 || token1)[:20 bytes]
    """
    if token0 >= token1:
        raise ValueError(f"Tokens must be in canonical order: {token0} < {token1}")
    digest = hashlib.sha256(
        b"StreamSwapPair" + token0.encode("utf-8") + token1.encode("utf-8")
    ).hexdigest()
    return "0x" + digest[:40]


class StreamingPair:
    """Two-asset constant-product pool that accepts streamed deposits."""

    def __init__(
        self,
        chain: Chain,
        token_a: StreamingToken,
        token_b: StreamingToken,
        config: Optional[PairConfig] = None,
    ) -> None:
        if token_a.address == token_b.address:
            raise PairGuardError("IDENTICAL_ADDRESSES")
        token0, token1 = sorted((token_a, token_b), key=lambda t: t.address)

        self.chain = chain
        self.token0 = token0
        self.token1 = token1
        self.config = config if config is not None else PairConfig()
        self.address = compute_pair_address(token0.address, token1.address)

        self._state = initial_pool_state(chain.timestamp)
        self._streams = StreamRegistry()
        self._lp = BalanceTable()
        self._events = EventLog()
        self._locked = False

        chain.register(self)
        token0.register_flow_receiver(self.address, self)
        token1.register_flow_receiver(self.address, self)
        logger.info("pair %s created for %s/%s", self.address, token0.symbol, token1.symbol)

    def __repr__(self) -> str:
        return f"StreamingPair({self.token0.symbol}/{self.token1.symbol}, {self.address})"

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> PoolState:
        """Last settled state (may lag the chain clock)."""
        return self._state

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def price0_cumulative_last(self) -> int:
        return self._state.price0_cumulative_last

    @property
    def price1_cumulative_last(self) -> int:
        return self._state.price1_cumulative_last

    def get_reserves(self) -> Tuple[int, int, int]:
        """Settled `(reserve0, reserve1, block_timestamp_last)`."""
        s = self._state
        return s.reserve0, s.reserve1, s.block_timestamp_last

    def get_reserves_at_time(self, timestamp: int) -> Tuple[int, int]:
        s = settle(self._state, timestamp)
        return s.reserve0, s.reserve1

    def get_realtime_reserves(self) -> Tuple[int, int]:
        return self.get_reserves_at_time(self.chain.timestamp)

    def get_user_balances_at_time(self, user: Address, timestamp: int) -> Tuple[int, int]:
        """Swap output owed to `user` at `timestamp` (what a flow deletion then would pay)."""
        _, record = project_account(self._streams.get(user), self._state, timestamp)
        return record.balance0, record.balance1

    def get_realtime_user_balances(self, user: Address) -> Tuple[int, int]:
        return self.get_user_balances_at_time(user, self.chain.timestamp)

    def get_total_swapped_funds_at_time(self, timestamp: int) -> Tuple[int, int]:
        s = settle(self._state, timestamp)
        return s.total_swapped_funds0, s.total_swapped_funds1

    def get_realtime_total_swapped_funds(self) -> Tuple[int, int]:
        return self.get_total_swapped_funds_at_time(self.chain.timestamp)

    def get_stream(self, user: Address) -> StreamRecord:
        """Stored (last settled) record for `user`; empty if unknown."""
        return self._streams.get(user)

    def accounts(self) -> List[Address]:
        return self._streams.accounts()

    # ------------------------------------------------------------------
    # Liquidity token
    # ------------------------------------------------------------------

    @property
    def total_supply(self) -> Amount:
        return self._lp.total

    def balance_of(self, account: Address) -> Amount:
        return self._lp.get(account)

    def transfer(self, sender: Address, to: Address, amount: Amount) -> None:
        """Move liquidity tokens (no settlement needed)."""
        with self.chain.atomic():
            try:
                self._lp.move(sender, to, amount)
            except ValueError as exc:
                raise InsufficientLiquidityError(str(exc)) from exc
            self._emit_transfer(sender, to, amount)

    def _emit_transfer(self, sender: Address, to: Address, amount: Amount) -> None:
        self._events.append(
            Event.TRANSFER, self.chain.timestamp, **{"from": sender, "to": to, "value": amount}
        )

    def _mint_lp(self, to: Address, amount: Amount) -> None:
        self._lp.add(to, amount)
        self._emit_transfer(ZERO_ADDRESS, to, amount)

    def _burn_lp(self, account: Address, amount: Amount) -> None:
        self._lp.subtract(account, amount)
        self._emit_transfer(account, ZERO_ADDRESS, amount)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _lock(self, operation: str) -> Iterator[None]:
        if self._locked:
            raise ReentrancyError(operation)
        self._locked = True
        try:
            yield
        finally:
            self._locked = False

    def _asset_index(self, token: StreamingToken) -> int:
        if token is self.token0:
            return 0
        if token is self.token1:
            return 1
        raise PairGuardError(f"token {token!r} is not part of this pair")

    def _settle(self) -> PoolState:
        self._state = settle(self._state, self.chain.timestamp)
        return self._state

    def _tradable_balances(self, state: PoolState) -> Tuple[int, int]:
        balance0 = self.token0.balance_of(self.address) - state.total_swapped_funds0
        balance1 = self.token1.balance_of(self.address) - state.total_swapped_funds1
        if balance0 < 0 or balance1 < 0:
            raise PairArithmeticError(
                f"ledger balance below owed swapped funds: ({balance0}, {balance1})"
            )
        return balance0, balance1

    def _commit(self, state: PoolState) -> None:
        try:
            require_uint("reserve0", state.reserve0, 112)
            require_uint("reserve1", state.reserve1, 112)
        except OverflowError as exc:
            raise PairOverflowError(f"OVERFLOW: {exc}") from exc
        self._state = state
        self._events.append(
            Event.SYNC, self.chain.timestamp, reserve0=state.reserve0, reserve1=state.reserve1
        )

    def _pay(self, to: Address, amount0: int, amount1: int) -> None:
        if amount0 > 0:
            self.token0.transfer(self.address, to, amount0)
        if amount1 > 0:
            self.token1.transfer(self.address, to, amount1)

    def _post_check(self) -> None:
        if not self.config.check_invariants:
            return
        violations = check_pair(self)
        if violations:
            raise PairInvariantError(violations)

    # ------------------------------------------------------------------
    # Discrete operations
    # ------------------------------------------------------------------

    def mint(self, to: Address, *, sender: Address = ZERO_ADDRESS) -> int:
        """
        Issue liquidity for the tokens sent to the pair since the last update.

        Returns the liquidity minted to `to`. The first mint also locks
        `minimum_liquidity` to the zero address.
        """
        with self.chain.atomic(), self._lock("mint"):
            state = self._settle()
            balance0, balance1 = self._tradable_balances(state)
            amount0 = balance0 - state.reserve0
            amount1 = balance1 - state.reserve1

            total_supply = self._lp.total
            liquidity = compute_liquidity_minted(
                amount0,
                amount1,
                state.reserve0,
                state.reserve1,
                total_supply,
                self.config.minimum_liquidity,
            )
            if total_supply == 0:
                self._mint_lp(ZERO_ADDRESS, self.config.minimum_liquidity)
            self._mint_lp(to, liquidity)

            self._commit(replace(state, reserve0=balance0, reserve1=balance1))
            self._events.append(
                Event.MINT, self.chain.timestamp, sender=sender, amount0=amount0, amount1=amount1
            )
            self._post_check()
        logger.info("mint %d liquidity to %s for (%d, %d)", liquidity, to, amount0, amount1)
        return liquidity

    def burn(self, to: Address, *, sender: Address = ZERO_ADDRESS) -> Tuple[int, int]:
        """Redeem the liquidity tokens held by the pair itself; pays `to`."""
        with self.chain.atomic(), self._lock("burn"):
            state = self._settle()
            balance0, balance1 = self._tradable_balances(state)
            liquidity = self._lp.get(self.address)

            amount0, amount1 = compute_liquidity_burned(
                liquidity, balance0, balance1, self._lp.total
            )
            self._burn_lp(self.address, liquidity)

            self._commit(
                replace(state, reserve0=balance0 - amount0, reserve1=balance1 - amount1)
            )
            self._events.append(
                Event.BURN,
                self.chain.timestamp,
                sender=sender,
                amount0=amount0,
                amount1=amount1,
                to=to,
            )
            self._pay(to, amount0, amount1)
            self._post_check()
        logger.info("burn %d liquidity to %s for (%d, %d)", liquidity, to, amount0, amount1)
        return amount0, amount1

    def swap(
        self,
        amount0_out: int,
        amount1_out: int,
        to: Address,
        data: bytes = b"",
        *,
        sender: Address = ZERO_ADDRESS,
    ) -> Tuple[int, int]:
        """
        Release `amount0_out`/`amount1_out` to `to` against input already sent
        to the pair. The fee-adjusted product is checked against reserves
        settled to the current block.

        `data` is recorded in the Swap event; flash-swap callbacks are not
        supported. Returns the detected `(amount0_in, amount1_in)`.
        """
        for name, v in (("amount0_out", amount0_out), ("amount1_out", amount1_out)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise PairGuardError(f"{name} must be non-negative: {v}")
        if amount0_out == 0 and amount1_out == 0:
            raise PairGuardError("INSUFFICIENT_OUTPUT_AMOUNT")

        with self.chain.atomic(), self._lock("swap"):
            state = self._settle()
            if amount0_out >= state.reserve0 or amount1_out >= state.reserve1:
                raise InsufficientLiquidityError("INSUFFICIENT_LIQUIDITY")
            if to in (self.token0.address, self.token1.address):
                raise PairGuardError("INVALID_TO")

            tradable0, tradable1 = self._tradable_balances(state)
            balance0 = tradable0 - amount0_out
            balance1 = tradable1 - amount1_out
            floor0 = state.reserve0 - amount0_out
            floor1 = state.reserve1 - amount1_out
            amount0_in = balance0 - floor0 if balance0 > floor0 else 0
            amount1_in = balance1 - floor1 if balance1 > floor1 else 0
            if amount0_in == 0 and amount1_in == 0:
                raise PairGuardError("INSUFFICIENT_INPUT_AMOUNT")

            require_swap_invariant(
                balance0=balance0,
                balance1=balance1,
                amount0_in=amount0_in,
                amount1_in=amount1_in,
                reserve0=state.reserve0,
                reserve1=state.reserve1,
                fee_bps=self.config.fee_bps,
            )

            self._commit(replace(state, reserve0=balance0, reserve1=balance1))
            self._events.append(
                Event.SWAP,
                self.chain.timestamp,
                sender=sender,
                amount0_in=amount0_in,
                amount1_in=amount1_in,
                amount0_out=amount0_out,
                amount1_out=amount1_out,
                to=to,
                data=bytes(data),
            )
            self._pay(to, amount0_out, amount1_out)
            self._post_check()
        logger.debug(
            "swap in=(%d, %d) out=(%d, %d) to %s",
            amount0_in, amount1_in, amount0_out, amount1_out, to,
        )
        return amount0_in, amount1_in

    def sync(self) -> Tuple[int, int]:
        """Settle to the current block and emit Sync; balances above reserves are left alone."""
        with self.chain.atomic(), self._lock("sync"):
            state = self._settle()
            self._commit(state)
            self._post_check()
        return state.reserve0, state.reserve1

    def skim(self, to: Address) -> Tuple[int, int]:
        """Send tokens held above `reserve + total_swapped_funds` to `to`."""
        with self.chain.atomic(), self._lock("skim"):
            state = self._settle()
            balance0, balance1 = self._tradable_balances(state)
            excess0 = balance0 - state.reserve0
            excess1 = balance1 - state.reserve1
            if excess0 < 0 or excess1 < 0:
                raise PairArithmeticError(f"reserves exceed tradable balance: ({excess0}, {excess1})")
            self._commit(state)
            self._pay(to, excess0, excess1)
            self._post_check()
        return excess0, excess1

    # ------------------------------------------------------------------
    # Flow lifecycle callbacks (FlowReceiver)
    # ------------------------------------------------------------------

    def _settle_account(self, user: Address, state: PoolState) -> StreamRecord:
        return settle_account(self._streams.get(user), state)

    def _require_ledger_rate(self, token: StreamingToken, sender: Address, expected: int) -> None:
        actual = token.get_flow_rate(sender, self.address)
        if actual != expected:
            raise PairGuardError(
                f"flow rate mismatch for {sender}: ledger={actual} notified={expected}"
            )

    def on_flow_created(self, token: StreamingToken, sender: Address, rate: int) -> None:
        asset = self._asset_index(token)
        with self.chain.atomic(), self._lock("on_flow_created"):
            self._require_ledger_rate(token, sender, rate)
            state = self._settle()
            if state.reserve0 == 0 or state.reserve1 == 0:
                raise InsufficientLiquidityError("cannot stream into a pair without liquidity")
            record = self._settle_account(sender, state)
            if record.flow_rate(asset) != 0:
                raise PairGuardError(f"flow from {sender} already registered")

            state, record = apply_flow_change(state, record, asset, rate)
            self._streams.put(sender, record)
            self._commit(state)
            self._post_check()
        logger.info("flow created: %s -> token%d rate=%d", sender, asset, rate)

    def on_flow_updated(self, token: StreamingToken, sender: Address, new_rate: int) -> None:
        asset = self._asset_index(token)
        with self.chain.atomic(), self._lock("on_flow_updated"):
            self._require_ledger_rate(token, sender, new_rate)
            if new_rate <= 0:
                raise PairGuardError("use flow deletion to stop a stream")
            state = self._settle()
            record = self._settle_account(sender, state)
            if record.flow_rate(asset) == 0:
                raise PairGuardError(f"no flow from {sender} to update")

            state, record = apply_flow_change(state, record, asset, new_rate)
            self._streams.put(sender, record)
            self._commit(state)
            self._post_check()
        logger.info("flow updated: %s -> token%d rate=%d", sender, asset, new_rate)

    def on_flow_deleted(self, token: StreamingToken, sender: Address) -> None:
        """
        Stop accrual for `sender`'s flow of `token` and pay out everything the
        account is owed in both assets.
        """
        asset = self._asset_index(token)
        with self.chain.atomic(), self._lock("on_flow_deleted"):
            self._require_ledger_rate(token, sender, 0)
            state = self._settle()
            record = self._settle_account(sender, state)
            if record.flow_rate(asset) == 0:
                raise PairGuardError(f"no flow from {sender} to delete")

            state, record = apply_flow_change(state, record, asset, 0)
            state, record, (amount0, amount1) = withdraw_entitlements(state, record)
            self._streams.put(sender, record)
            self._commit(state)
            self._pay(sender, amount0, amount1)
            self._post_check()
        logger.info(
            "flow deleted: %s -> token%d, paid out (%d, %d)", sender, asset, amount0, amount1
        )

    # ------------------------------------------------------------------
    # Transaction support
    # ------------------------------------------------------------------

    def snapshot(self) -> Tuple[Any, ...]:
        return (
            self._state,
            self._streams.snapshot(),
            self._lp.snapshot(),
            len(self._events),
        )

    def restore(self, snapshot: Tuple[Any, ...]) -> None:
        state, streams, lp, n_events = snapshot
        self._state = state
        self._streams.restore(streams)
        self._lp.restore(lp)
        self._events.truncate(n_events)
