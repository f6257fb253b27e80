from __future__ import annotations

from typing import Callable

import pytest

from streamswap.config import PairConfig
from streamswap.core.pair import StreamingPair
from streamswap.integration.chain import Chain
from streamswap.integration.ledger import StreamingToken

WAD = 10**18
START = 1_700_000_000

WALLET = "0x" + "aa" * 20
OTHER = "0x" + "bb" * 20
ATTACKER = "0x" + "cc" * 20


@pytest.fixture
def chain() -> Chain:
    return Chain(timestamp=START)


@pytest.fixture
def pair(chain: Chain) -> StreamingPair:
    """Fresh pair with invariant re-checks on; WALLET holds 10_000 of each token."""
    token_a = StreamingToken(chain, "TKA")
    token_b = StreamingToken(chain, "TKB")
    p = StreamingPair(chain, token_a, token_b, PairConfig(check_invariants=True))
    p.token0.mint(WALLET, 10_000 * WAD)
    p.token1.mint(WALLET, 10_000 * WAD)
    return p


@pytest.fixture
def add_liquidity(pair: StreamingPair) -> Callable[[int, int], int]:
    def _add(amount0: int, amount1: int) -> int:
        pair.token0.transfer(WALLET, pair.address, amount0)
        pair.token1.transfer(WALLET, pair.address, amount1)
        return pair.mint(WALLET, sender=WALLET)

    return _add
