"""
Pair configuration.

A `PairConfig` can be built in code or loaded from YAML:

    fee_bps: 30
    minimum_liquidity: 1000
    dust_tolerance: 100
    check_invariants: true

Unknown keys are rejected (fail-closed).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from .kernels.cpmm_swap import BPS_DENOM


def _require_int(name: str, value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    return value


@dataclass(frozen=True)
class PairConfig:
    """
    fee_bps: swap fee charged on the gross input (basis points).
    minimum_liquidity: liquidity locked to the zero address on the first mint.
    dust_tolerance: largest rounding residual, per asset, the invariant check accepts.
    check_invariants: re-run the invariant registry after every mutator.
    """

    fee_bps: int = 30
    minimum_liquidity: int = 1000
    dust_tolerance: int = 100
    check_invariants: bool = False

    def __post_init__(self) -> None:
        _require_int("fee_bps", self.fee_bps)
        _require_int("minimum_liquidity", self.minimum_liquidity)
        _require_int("dust_tolerance", self.dust_tolerance)
        if not isinstance(self.check_invariants, bool):
            raise TypeError("check_invariants must be a bool")
        if not (0 <= self.fee_bps < BPS_DENOM):
            raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}): {self.fee_bps}")
        if self.minimum_liquidity <= 0:
            raise ValueError(f"minimum_liquidity must be positive: {self.minimum_liquidity}")
        if self.dust_tolerance < 0:
            raise ValueError(f"dust_tolerance must be non-negative: {self.dust_tolerance}")


def pair_config_from_mapping(obj: Any) -> PairConfig:
    if obj is None:
        return PairConfig()
    if not isinstance(obj, Mapping):
        raise TypeError("pair config must be a mapping")
    known = {f.name for f in fields(PairConfig)}
    unknown = sorted(str(k) for k in obj if k not in known)
    if unknown:
        raise ValueError(f"unknown pair config keys: {', '.join(unknown)}")
    return PairConfig(**{str(k): v for k, v in obj.items()})


def load_pair_config(path: Union[str, Path]) -> PairConfig:
    """Load a PairConfig from a YAML file (an empty file yields the defaults)."""
    raw = Path(path).read_text(encoding="utf-8")
    return pair_config_from_mapping(yaml.safe_load(raw))
