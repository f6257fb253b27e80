"""
Host emulation: block clock, transactions and the streaming token ledger
"""

from .chain import Chain
from .ledger import FlowReceiver, StreamingToken, compute_token_address

__all__ = [
    "Chain",
    "FlowReceiver",
    "StreamingToken",
    "compute_token_address",
]
