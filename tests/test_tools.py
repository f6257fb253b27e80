from __future__ import annotations

from streamswap.config import PairConfig

WAD = 10**18


def test_stream_pool_demo_pays_what_it_reported() -> None:
    from tools.stream_pool_demo import run

    rows = run(
        reserve0=10 * WAD,
        reserve1=10 * WAD,
        flow0=10**9,
        flow1=5 * 10**8,
        steps=3,
        step_seconds=60,
        config=PairConfig(check_invariants=True),
    )

    *steps, final = rows
    assert [r["step"] for r in steps] == [1, 2, 3]
    assert all(r["violations"] == [] for r in steps)
    assert all(0 <= r["dust0"] <= 100 and 0 <= r["dust1"] <= 100 for r in steps)
    assert final["step"] == "delete"
    assert (final["paid0"], final["paid1"]) == (steps[-1]["entitled0"], steps[-1]["entitled1"])


def test_twamm_error_sweep_reports_each_point() -> None:
    from tools.twamm_error_sweep import sweep

    rows = sweep(
        reserve0=10 * WAD,
        reserve1=10 * WAD,
        dts=[1, 60],
        rates0=[10**9],
        rates1=[10**9, 5 * 10**8],
    )
    assert [(r["dt"], r["rate1"]) for r in rows] == [
        (1, 10**9),
        (1, 5 * 10**8),
        (60, 10**9),
        (60, 5 * 10**8),
    ]
    # equal flows at a 1:1 price leave the reserves where they were
    assert rows[0]["err0_ppm"] == 0 and rows[0]["approx0"] == 10 * WAD
    assert max(r["err0_ppm"] for r in rows) <= 1
