# [TESTER] v1

from __future__ import annotations

import pytest

from streamswap.config import PairConfig, load_pair_config, pair_config_from_mapping


def test_defaults() -> None:
    cfg = PairConfig()
    assert (cfg.fee_bps, cfg.minimum_liquidity, cfg.dust_tolerance) == (30, 1000, 100)
    assert cfg.check_invariants is False


def test_from_mapping() -> None:
    assert pair_config_from_mapping(None) == PairConfig()
    cfg = pair_config_from_mapping({"fee_bps": 5, "check_invariants": True})
    assert cfg == PairConfig(fee_bps=5, check_invariants=True)


@pytest.mark.parametrize(
    "obj, exc",
    [
        ([1, 2], TypeError),
        ({"fee": 30}, ValueError),
        ({"fee_bps": 10_000}, ValueError),
        ({"fee_bps": "30"}, TypeError),
        ({"minimum_liquidity": 0}, ValueError),
        ({"dust_tolerance": -1}, ValueError),
        ({"check_invariants": 1}, TypeError),
    ],
)
def test_rejections(obj, exc) -> None:
    with pytest.raises(exc):
        pair_config_from_mapping(obj)


def test_load_yaml(tmp_path) -> None:
    path = tmp_path / "pair.yaml"
    path.write_text("fee_bps: 25\ndust_tolerance: 10\ncheck_invariants: true\n", encoding="utf-8")
    assert load_pair_config(path) == PairConfig(
        fee_bps=25, dust_tolerance=10, check_invariants=True
    )


def test_load_empty_yaml(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_pair_config(str(path)) == PairConfig()


def test_load_rejects_unknown_keys(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("fee_bps: 30\nflash_swaps: true\n", encoding="utf-8")
    with pytest.raises(ValueError, match="flash_swaps"):
        load_pair_config(path)
