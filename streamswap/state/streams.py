"""
Stream registry: per-depositor flow rates and accrued swap output.

A `StreamRecord` exists for every account that streams into the pair or still
has unwithdrawn output. Records never reference pool state; entitlement
accrual is derived from the pool's per-flow payout accumulators and the
checkpoints stored here, so settling one account is O(1) regardless of how
many accounts stream.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List

from .balances import Address


@dataclass(frozen=True)
class StreamRecord:
    """One depositor's streaming position."""

    flow_rate0: int = 0
    flow_rate1: int = 0
    last_settled: int = 0

    # Output owed to this account (token0 accrues from its token1 flow and vice versa)
    balance0: int = 0
    balance1: int = 0

    # Pool accumulator values at `last_settled`
    payout1_per_flow0_checkpoint: int = 0
    payout0_per_flow1_checkpoint: int = 0

    def __post_init__(self) -> None:
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int")
            if value < 0:
                raise ValueError(f"{name} must be non-negative: {value}")

    def flow_rate(self, asset: int) -> int:
        if asset == 0:
            return self.flow_rate0
        if asset == 1:
            return self.flow_rate1
        raise ValueError(f"asset must be 0 or 1: {asset}")

    @property
    def is_streaming(self) -> bool:
        return self.flow_rate0 > 0 or self.flow_rate1 > 0

    @property
    def is_empty(self) -> bool:
        return not self.is_streaming and self.balance0 == 0 and self.balance1 == 0


EMPTY_RECORD = StreamRecord()


class StreamRegistry:
    """
    Mapping address -> StreamRecord with O(1) lookup.

    Empty records are dropped on `put`, so `len(registry)` counts accounts that
    stream or are still owed output.
    """

    def __init__(self) -> None:
        self._records: Dict[Address, StreamRecord] = {}

    def get(self, account: Address) -> StreamRecord:
        return self._records.get(account, EMPTY_RECORD)

    def put(self, account: Address, record: StreamRecord) -> None:
        if record.is_empty:
            self._records.pop(account, None)
        else:
            self._records[account] = record

    def accounts(self) -> List[Address]:
        """All registered accounts, sorted."""
        return sorted(self._records)

    def __iter__(self) -> Iterator[Address]:
        return iter(self.accounts())

    def __contains__(self, account: object) -> bool:
        return account in self._records

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> Dict[Address, StreamRecord]:
        return dict(self._records)

    def restore(self, snapshot: Dict[Address, StreamRecord]) -> None:
        self._records = dict(snapshot)

    def __repr__(self) -> str:
        return f"StreamRegistry({len(self._records)} accounts)"
