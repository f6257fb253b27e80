"""
Pair event log.

Events are appended as operations commit and are rolled back with the rest of
the transaction (`EventLog.truncate`) when an operation fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List


class Event(Enum):
    TRANSFER = "Transfer"
    MINT = "Mint"
    BURN = "Burn"
    SWAP = "Swap"
    SYNC = "Sync"


@dataclass(frozen=True)
class PairEvent:
    event: Event
    timestamp: int
    args: Dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.args[key]

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.event.value, "timestamp": self.timestamp, **self.args}


class EventLog:
    """Append-only list of PairEvents (truncation is reserved for rollback)."""

    def __init__(self) -> None:
        self._events: List[PairEvent] = []

    def append(self, event: Event, timestamp: int, **args: Any) -> PairEvent:
        record = PairEvent(event=event, timestamp=timestamp, args=args)
        self._events.append(record)
        return record

    def tail(self, n: int) -> List[PairEvent]:
        """Last `n` events, oldest first."""
        if n <= 0:
            return []
        return list(self._events[-n:])

    def of(self, event: Event) -> List[PairEvent]:
        return [e for e in self._events if e.event is event]

    def truncate(self, length: int) -> None:
        if length < 0 or length > len(self._events):
            raise ValueError(f"cannot truncate event log of {len(self._events)} to {length}")
        del self._events[length:]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[PairEvent]:
        return iter(list(self._events))

    def __getitem__(self, index: int) -> PairEvent:
        return self._events[index]
