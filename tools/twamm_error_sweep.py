#!/usr/bin/env python3
"""
Error of the two-sided square-root settlement against the exact solution.

For every (dt, rate0, rate1) in the grid, projects a pool seeded at
(reserve0, reserve1) with `realtime_reserves` and with
`exact_two_sided_reserves`, and reports the relative error of reserve0 in
parts per million. Exits non-zero if any point exceeds `--max-ppm`.
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

from streamswap.core.realtime import realtime_reserves
from streamswap.kernels.twamm_exact import exact_two_sided_reserves, relative_error

logger = logging.getLogger("twamm_error_sweep")

WAD = 10**18


def _parse_ints(raw: str) -> list[int]:
    out = [int(x) for x in raw.split(",") if x.strip()]
    if not out or any(v <= 0 for v in out):
        raise ValueError(f"expected a comma-separated list of positive ints: {raw!r}")
    return out


def sweep(
    *,
    reserve0: int,
    reserve1: int,
    dts: list[int],
    rates0: list[int],
    rates1: list[int],
) -> list[dict[str, int]]:
    rows: list[dict[str, int]] = []
    for dt in dts:
        for rate0 in rates0:
            for rate1 in rates1:
                approx0, approx1 = realtime_reserves(reserve0, reserve1, dt, rate0, rate1)
                exact0, exact1 = exact_two_sided_reserves(reserve0, reserve1, rate0 * dt, rate1 * dt)
                rows.append(
                    {
                        "dt": dt,
                        "rate0": rate0,
                        "rate1": rate1,
                        "approx0": approx0,
                        "exact0": exact0,
                        "err0_ppm": relative_error(approx0, exact0, scale=1_000_000),
                        "err1_ppm": relative_error(approx1, exact1, scale=1_000_000),
                    }
                )
                logger.debug("dt=%d rates=(%d, %d) err0=%d ppm", dt, rate0, rate1, rows[-1]["err0_ppm"])
    return rows


def main() -> int:
    ap = argparse.ArgumentParser(description="Sweep the two-sided approximation error.")
    ap.add_argument("--reserve0", type=int, default=10 * WAD)
    ap.add_argument("--reserve1", type=int, default=10 * WAD)
    ap.add_argument("--dts", type=str, default="1,60,3600,86400")
    ap.add_argument("--rates0", type=str, default="1000000000,500000000")
    ap.add_argument("--rates1", type=str, default="1000000000,500000000")
    ap.add_argument("--max-ppm", type=int, default=100, help="fail above this error (100 ppm = 0.01%%)")
    ap.add_argument("--out", type=str, default="")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        rows = sweep(
            reserve0=args.reserve0,
            reserve1=args.reserve1,
            dts=_parse_ints(args.dts),
            rates0=_parse_ints(args.rates0),
            rates1=_parse_ints(args.rates1),
        )
    except ValueError as exc:
        ap.error(str(exc))

    worst = max(max(r["err0_ppm"], r["err1_ppm"]) for r in rows)
    report = {"points": rows, "worst_ppm": worst, "max_ppm": args.max_ppm}
    payload = json.dumps(report, indent=2, sort_keys=True)
    if args.out:
        out_path = Path(args.out)
        out_path.write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote {out_path}")
    else:
        print(payload)

    if worst > args.max_ppm:
        logger.error("approximation error %d ppm exceeds %d ppm", worst, args.max_ppm)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
