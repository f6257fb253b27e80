"""Exception types for streaming pairs.

Every pair mutator runs in one chain transaction; any of these escaping the
mutator means the pair, the token ledgers and the event log were restored to
their state before the call.
"""

from __future__ import annotations


class PairError(Exception):
    """Base class for pair failures."""


class PairGuardError(PairError):
    """Raised when an operation's precondition is not satisfied."""


class InsufficientLiquidityError(PairGuardError):
    """Raised when mint/burn/swap amounts exceed what the reserves allow."""


class ReentrancyError(PairGuardError):
    """Raised when a mutator is entered while another one is in progress."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"LOCKED: {operation} called while the pair is locked")


class PairInvariantError(PairError):
    """Raised when a post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


class PairArithmeticError(PairError, ArithmeticError):
    """Raised when settlement math is undefined (e.g. streaming into an empty reserve)."""


class PairOverflowError(PairArithmeticError):
    """Raised when a reserve exceeds uint112 or an accumulator exceeds uint256."""
