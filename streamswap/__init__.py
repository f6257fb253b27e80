"""
streamswap: constant-product pair with streamed deposits
"""

from .config import PairConfig, load_pair_config, pair_config_from_mapping
from .core import StreamingPair
from .integration import Chain, StreamingToken

__version__ = "0.1.0"

__all__ = [
    "PairConfig",
    "load_pair_config",
    "pair_config_from_mapping",
    "StreamingPair",
    "Chain",
    "StreamingToken",
]
