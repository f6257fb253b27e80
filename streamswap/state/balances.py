"""
Single-asset balance tracking.

Implements BalanceTable[Address] -> Amount for one fungible asset (the pair's
liquidity token, or the static part of a streaming token's ledger).
"""

from typing import Dict


Address = str  # "0x" + 40 hex chars
Amount = int

ZERO_ADDRESS = "0x" + "00" * 20


class BalanceTable:
    """
    Sparse balance table mapping address -> amount.

    Zero balances are omitted. Do not rely on dict iteration order; callers that
    need a stable order should sort the addresses.
    """

    def __init__(self) -> None:
        self._balances: Dict[Address, Amount] = {}
        self._total: Amount = 0

    def get(self, account: Address) -> Amount:
        """Get balance for `account`. Returns 0 if not found."""
        return self._balances.get(account, 0)

    def set(self, account: Address, amount: Amount) -> None:
        """
        Set balance for `account`.

        Raises ValueError for a negative amount; zero removes the entry.
        """
        if amount < 0:
            raise ValueError(f"{account} cannot hold a negative balance ({amount})")
        self._total += amount - self.get(account)
        if amount == 0:
            self._balances.pop(account, None)
        else:
            self._balances[account] = amount

    def add(self, account: Address, delta: int) -> None:
        """
        Add delta to a balance (delta may be negative).

        ValueError if the result would go below zero.
        """
        held = self.get(account)
        if held + delta < 0:
            raise ValueError(f"Insufficient balance for {account}: holds {held}, delta {delta}")
        self.set(account, held + delta)

    def subtract(self, account: Address, delta: Amount) -> None:
        """Subtract a non-negative amount from a balance."""
        if delta < 0:
            raise ValueError(f"subtract expects a non-negative amount, got {delta}")
        self.add(account, -delta)

    def move(self, sender: Address, to: Address, amount: Amount) -> None:
        """Move `amount` from `sender` to `to` (fails without side effects if short)."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative: {amount}")
        self.subtract(sender, amount)
        self.add(to, amount)

    @property
    def total(self) -> Amount:
        """Sum of all balances."""
        return self._total

    def get_all_balances(self) -> Dict[Address, Amount]:
        """Return all non-zero balances."""
        return {a: v for a, v in self._balances.items()}

    def snapshot(self) -> Dict[Address, Amount]:
        return self.get_all_balances()

    def restore(self, snapshot: Dict[Address, Amount]) -> None:
        self._balances = dict(snapshot)
        self._total = sum(self._balances.values())

    def __repr__(self) -> str:
        return f"<BalanceTable holders={len(self._balances)} total={self._total}>"
