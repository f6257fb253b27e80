"""
In-memory streaming token ledger.

Each account has a settled balance (a `BalanceTable` entry) plus a net flow
rate. Its real-time balance is

    settled_balance + net_flow * (now - settled_at)

and is re-settled whenever a transfer or a flow change touches the account.

Flow receivers (pairs) are notified synchronously after a flow change has
been applied, inside the same chain transaction: a receiver that raises
reverts the flow change too. Buffer deposits and liquidation of insolvent
senders are not modelled; a sender whose balance would go negative fails the
next operation that settles it.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from ..state.balances import Address, Amount, BalanceTable, ZERO_ADDRESS
from .chain import Chain

logger = logging.getLogger(__name__)

TransferHook = Callable[["StreamingToken", Address, Address, Amount], None]


class FlowReceiver(Protocol):
    def on_flow_created(self, token: "StreamingToken", sender: Address, rate: int) -> None: ...

    def on_flow_updated(self, token: "StreamingToken", sender: Address, new_rate: int) -> None: ...

    def on_flow_deleted(self, token: "StreamingToken", sender: Address) -> None: ...


def compute_token_address(symbol: str) -> Address:
    """Deterministic address for a token symbol."""
    if not isinstance(symbol, str) or not symbol:
        raise ValueError("symbol must be a non-empty string")
    digest = hashlib.sha256(b"StreamingToken" + symbol.encode("utf-8")).hexdigest()
    return "0x" + digest[:40]


class StreamingToken:
    """Fungible token whose holders can also open constant-rate flows."""

    def __init__(self, chain: Chain, symbol: str, address: Optional[Address] = None) -> None:
        self.chain = chain
        self.symbol = symbol
        self.address = address if address is not None else compute_token_address(symbol)
        self._settled = BalanceTable()
        self._settled_at: Dict[Address, int] = {}
        self._net_flow: Dict[Address, int] = {}
        self._flows: Dict[Tuple[Address, Address], int] = {}
        self._receivers: Dict[Address, FlowReceiver] = {}
        self._transfer_hooks: Dict[Address, TransferHook] = {}
        chain.register(self)

    def __repr__(self) -> str:
        return f"StreamingToken({self.symbol!r}, {self.address})"

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def balance_of(self, account: Address, at: Optional[int] = None) -> Amount:
        """Real-time balance at `at` (default: the chain clock)."""
        now = self.chain.timestamp if at is None else at
        settled_at = self._settled_at.get(account, now)
        if now < settled_at:
            raise ValueError(f"cannot read balance before last settlement: {now} < {settled_at}")
        return self._settled.get(account) + self._net_flow.get(account, 0) * (now - settled_at)

    def get_net_flow(self, account: Address) -> int:
        """Inbound minus outbound flow rate of `account`."""
        return self._net_flow.get(account, 0)

    def get_flow_rate(self, sender: Address, receiver: Address) -> int:
        return self._flows.get((sender, receiver), 0)

    @property
    def total_supply(self) -> Amount:
        """Sum of real-time balances (flows only move tokens between accounts)."""
        return self._settled.total + sum(
            rate * (self.chain.timestamp - self._settled_at.get(account, self.chain.timestamp))
            for account, rate in self._net_flow.items()
        )

    def _checkpoint(self, account: Address) -> None:
        now = self.chain.timestamp
        balance = self.balance_of(account, now)
        if balance < 0:
            raise ValueError(f"{self.symbol}: account {account} is insolvent ({balance})")
        self._settled.set(account, balance)
        self._settled_at[account] = now

    # ------------------------------------------------------------------
    # Discrete transfers
    # ------------------------------------------------------------------

    def mint(self, account: Address, amount: Amount) -> None:
        """Faucet: credit `amount` out of thin air."""
        if amount <= 0:
            raise ValueError(f"amount must be positive: {amount}")
        with self.chain.atomic():
            self._checkpoint(account)
            self._settled.add(account, amount)

    def transfer(self, sender: Address, to: Address, amount: Amount) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError("amount must be an int")
        if amount < 0:
            raise ValueError(f"amount must be non-negative: {amount}")
        if to == ZERO_ADDRESS:
            raise ValueError("cannot transfer to the zero address")
        with self.chain.atomic():
            self._checkpoint(sender)
            self._checkpoint(to)
            self._settled.move(sender, to, amount)
            hook = self._transfer_hooks.get(to)
            if hook is not None:
                hook(self, sender, to, amount)

    def register_transfer_hook(self, account: Address, hook: Optional[TransferHook]) -> None:
        """Call `hook(token, sender, to, amount)` after every transfer credited to `account`."""
        if hook is None:
            self._transfer_hooks.pop(account, None)
        else:
            self._transfer_hooks[account] = hook

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def register_flow_receiver(self, account: Address, receiver: FlowReceiver) -> None:
        self._receivers[account] = receiver

    def _set_flow(self, sender: Address, receiver: Address, rate: int) -> None:
        old_rate = self.get_flow_rate(sender, receiver)
        self._checkpoint(sender)
        self._checkpoint(receiver)
        delta = rate - old_rate
        self._net_flow[sender] = self._net_flow.get(sender, 0) - delta
        self._net_flow[receiver] = self._net_flow.get(receiver, 0) + delta
        for account in (sender, receiver):
            if self._net_flow[account] == 0:
                del self._net_flow[account]
        if rate == 0:
            self._flows.pop((sender, receiver), None)
        else:
            self._flows[(sender, receiver)] = rate

    @staticmethod
    def _require_rate(rate: int) -> None:
        if not isinstance(rate, int) or isinstance(rate, bool):
            raise TypeError("flow rate must be an int")
        if rate <= 0:
            raise ValueError(f"flow rate must be positive: {rate}")

    def create_flow(self, sender: Address, receiver: Address, rate: int) -> None:
        self._require_rate(rate)
        if sender == receiver:
            raise ValueError("cannot stream to self")
        with self.chain.atomic():
            if self.get_flow_rate(sender, receiver) != 0:
                raise ValueError(f"flow {sender} -> {receiver} already exists")
            self._set_flow(sender, receiver, rate)
            logger.info("%s flow created %s -> %s rate=%d", self.symbol, sender, receiver, rate)
            target = self._receivers.get(receiver)
            if target is not None:
                target.on_flow_created(self, sender, rate)

    def update_flow(self, sender: Address, receiver: Address, rate: int) -> None:
        self._require_rate(rate)
        with self.chain.atomic():
            if self.get_flow_rate(sender, receiver) == 0:
                raise ValueError(f"flow {sender} -> {receiver} does not exist")
            self._set_flow(sender, receiver, rate)
            logger.info("%s flow updated %s -> %s rate=%d", self.symbol, sender, receiver, rate)
            target = self._receivers.get(receiver)
            if target is not None:
                target.on_flow_updated(self, sender, rate)

    def delete_flow(self, sender: Address, receiver: Address) -> None:
        with self.chain.atomic():
            if self.get_flow_rate(sender, receiver) == 0:
                raise ValueError(f"flow {sender} -> {receiver} does not exist")
            self._set_flow(sender, receiver, 0)
            logger.info("%s flow deleted %s -> %s", self.symbol, sender, receiver)
            target = self._receivers.get(receiver)
            if target is not None:
                target.on_flow_deleted(self, sender)

    # ------------------------------------------------------------------
    # Transaction support
    # ------------------------------------------------------------------

    def snapshot(self) -> Tuple[Any, ...]:
        return (
            self._settled.snapshot(),
            dict(self._settled_at),
            dict(self._net_flow),
            dict(self._flows),
        )

    def restore(self, snapshot: Tuple[Any, ...]) -> None:
        balances, settled_at, net_flow, flows = snapshot
        self._settled.restore(balances)
        self._settled_at = dict(settled_at)
        self._net_flow = dict(net_flow)
        self._flows = dict(flows)
