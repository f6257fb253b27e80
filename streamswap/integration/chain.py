"""
Host chain emulation: block clock and all-or-nothing transaction frames.

Participants (token ledgers, pairs) register with the chain and expose
`snapshot()` / `restore(snapshot)`. `Chain.atomic()` snapshots every
participant when the outermost frame opens and restores all of them if
anything inside the frame raises, so a failed call leaves no trace.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Protocol, Tuple

logger = logging.getLogger(__name__)


class Participant(Protocol):
    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...


class Chain:
    """Single-threaded host: one monotonic clock, nested transaction frames."""

    def __init__(self, timestamp: int = 0) -> None:
        if not isinstance(timestamp, int) or isinstance(timestamp, bool) or timestamp < 0:
            raise ValueError(f"timestamp must be a non-negative int: {timestamp!r}")
        self._timestamp = timestamp
        self._participants: List[Participant] = []
        self._depth = 0

    @property
    def timestamp(self) -> int:
        return self._timestamp

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def set_timestamp(self, timestamp: int) -> int:
        if not isinstance(timestamp, int) or isinstance(timestamp, bool):
            raise TypeError("timestamp must be an int")
        if timestamp < self._timestamp:
            raise ValueError(f"time cannot move backwards: {timestamp} < {self._timestamp}")
        if self._depth:
            raise RuntimeError("cannot move the clock inside a transaction")
        self._timestamp = timestamp
        return self._timestamp

    def advance(self, seconds: int) -> int:
        if not isinstance(seconds, int) or isinstance(seconds, bool):
            raise TypeError("seconds must be an int")
        if seconds < 0:
            raise ValueError(f"seconds must be non-negative: {seconds}")
        return self.set_timestamp(self._timestamp + seconds)

    def register(self, participant: Participant) -> None:
        if any(p is participant for p in self._participants):
            return
        self._participants.append(participant)

    @contextmanager
    def atomic(self) -> Iterator["Chain"]:
        """
        Transaction frame. Nested frames join the outermost one; only the
        outermost frame snapshots and restores.
        """
        outermost = self._depth == 0
        snapshots: List[Tuple[Participant, Any]] = []
        if outermost:
            snapshots = [(p, p.snapshot()) for p in self._participants]
        self._depth += 1
        try:
            yield self
        except Exception as exc:
            if outermost:
                for participant, snap in snapshots:
                    participant.restore(snap)
                logger.debug("transaction reverted at t=%d: %r", self._timestamp, exc)
            raise
        finally:
            self._depth -= 1
