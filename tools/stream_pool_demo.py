#!/usr/bin/env python3
"""
Offline streaming-pair walkthrough.

Seeds a pair, opens one or two streams and prints one JSON line per step
with the real-time reserves, the streamer's entitlements and the rounding
dust, then deletes the streams and prints the payouts.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from streamswap.config import PairConfig, load_pair_config
from streamswap.core.invariants import check_pair, dust
from streamswap.core.pair import StreamingPair
from streamswap.integration.chain import Chain
from streamswap.integration.ledger import StreamingToken

WAD = 10**18
PROVIDER = "0x" + "11" * 20
STREAMER = "0x" + "22" * 20


def run(
    *,
    reserve0: int,
    reserve1: int,
    flow0: int,
    flow1: int,
    steps: int,
    step_seconds: int,
    config: PairConfig,
) -> list[dict[str, object]]:
    chain = Chain(timestamp=1_700_000_000)
    token_a = StreamingToken(chain, "TKA")
    token_b = StreamingToken(chain, "TKB")
    pair = StreamingPair(chain, token_a, token_b, config)
    token0, token1 = pair.token0, pair.token1

    token0.mint(PROVIDER, reserve0)
    token1.mint(PROVIDER, reserve1)
    token0.transfer(PROVIDER, pair.address, reserve0)
    token1.transfer(PROVIDER, pair.address, reserve1)
    pair.mint(PROVIDER, sender=PROVIDER)

    horizon = steps * step_seconds
    if flow0:
        token0.mint(STREAMER, flow0 * horizon)
        token0.create_flow(STREAMER, pair.address, flow0)
    if flow1:
        token1.mint(STREAMER, flow1 * horizon)
        token1.create_flow(STREAMER, pair.address, flow1)

    rows: list[dict[str, object]] = []
    for step in range(1, steps + 1):
        chain.advance(step_seconds)
        r0, r1 = pair.get_realtime_reserves()
        b0, b1 = pair.get_realtime_user_balances(STREAMER)
        d0, d1 = dust(pair)
        rows.append(
            {
                "step": step,
                "t": chain.timestamp,
                "reserve0": r0,
                "reserve1": r1,
                "entitled0": b0,
                "entitled1": b1,
                "dust0": d0,
                "dust1": d1,
                "violations": check_pair(pair),
            }
        )

    before0 = token0.balance_of(STREAMER)
    before1 = token1.balance_of(STREAMER)
    if flow0:
        token0.delete_flow(STREAMER, pair.address)
    if flow1:
        token1.delete_flow(STREAMER, pair.address)
    rows.append(
        {
            "step": "delete",
            "t": chain.timestamp,
            "paid0": token0.balance_of(STREAMER) - before0,
            "paid1": token1.balance_of(STREAMER) - before1,
            "reserves": list(pair.get_reserves()[:2]),
        }
    )
    return rows


def main() -> int:
    ap = argparse.ArgumentParser(description="Stream into a fresh pair and print real-time state.")
    ap.add_argument("--reserve0", type=int, default=10 * WAD)
    ap.add_argument("--reserve1", type=int, default=10 * WAD)
    ap.add_argument("--flow0", type=int, default=10**9, help="token0 units per second (0 = none)")
    ap.add_argument("--flow1", type=int, default=0, help="token1 units per second (0 = none)")
    ap.add_argument("--steps", type=int, default=10)
    ap.add_argument("--step-seconds", type=int, default=60)
    ap.add_argument("--config", type=str, default="", help="YAML PairConfig")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.flow0 < 0 or args.flow1 < 0:
        ap.error("flow rates must be non-negative")
    if args.flow0 == 0 and args.flow1 == 0:
        ap.error("at least one of --flow0/--flow1 must be positive")

    config = load_pair_config(args.config) if args.config else PairConfig()
    rows = run(
        reserve0=args.reserve0,
        reserve1=args.reserve1,
        flow0=args.flow0,
        flow1=args.flow1,
        steps=args.steps,
        step_seconds=args.step_seconds,
        config=config,
    )
    for row in rows:
        print(json.dumps(row, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
