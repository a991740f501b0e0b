"""
Vault configuration.

`VaultConfig` is a frozen dataclass; `load_config(path)` reads it from YAML:

    fee_bps: 100
    direct_sum_threshold: 100
    chain_id: curvevault-local
    require_signatures: false
    linear_base_price: 10000000
    linear_slope: 100000
    exponential_base_price: 1000000
    exponential_growth_rate_bps: 500

Every key is optional; unknown keys are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from ..core.curves import (
    DEFAULT_EXPONENTIAL_BASE_PRICE,
    DEFAULT_EXPONENTIAL_GROWTH_RATE_BPS,
    DEFAULT_LINEAR_BASE_PRICE,
    DEFAULT_LINEAR_SLOPE,
    CurveKind,
)
from ..core.errors import ValidationError
from ..core.fees import FEE_BASIS_POINTS
from ..core.integral import EXP_DIRECT_SUM_THRESHOLD
from ..core.math import BPS_SCALE, U64_MAX


@dataclass(frozen=True)
class VaultConfig:
    # Trade fee in basis points, shared by all pools.
    fee_bps: int = FEE_BASIS_POINTS
    # Exponential integrals over at most this many tokens are summed term by term.
    direct_sum_threshold: int = EXP_DIRECT_SUM_THRESHOLD

    # Signature policy: when set, `Vault.execute` requires a BLS signature from
    # the acting identity (see `identity.py`).
    require_signatures: bool = False
    chain_id: str = "curvevault-local"

    # Defaults applied when a pool is created without explicit parameters.
    linear_base_price: int = DEFAULT_LINEAR_BASE_PRICE
    linear_slope: int = DEFAULT_LINEAR_SLOPE
    exponential_base_price: int = DEFAULT_EXPONENTIAL_BASE_PRICE
    exponential_growth_rate_bps: int = DEFAULT_EXPONENTIAL_GROWTH_RATE_BPS

    def __post_init__(self) -> None:
        for f in fields(self):
            v = getattr(self, f.name)
            if f.type in ("bool", bool):
                if not isinstance(v, bool):
                    raise ValidationError(f"{f.name} must be a bool")
            elif f.type in ("str", str):
                if not isinstance(v, str) or not v:
                    raise ValidationError(f"{f.name} must be a non-empty string")
            else:
                if not isinstance(v, int) or isinstance(v, bool):
                    raise ValidationError(f"{f.name} must be an int")
                if not (0 <= v <= U64_MAX):
                    raise ValidationError(f"{f.name} must be in [0, 2^64): {v}")
        if self.fee_bps > BPS_SCALE:
            raise ValidationError(f"fee_bps must be in [0, {BPS_SCALE}]: {self.fee_bps}")

    def curve_defaults(self, kind: CurveKind) -> Tuple[int, int]:
        """`(base_price, curve_param)` defaults for a curve family."""
        if kind is CurveKind.LINEAR:
            return self.linear_base_price, self.linear_slope
        return self.exponential_base_price, self.exponential_growth_rate_bps


_FIELD_NAMES = frozenset(f.name for f in fields(VaultConfig))


def config_from_mapping(obj: Optional[Mapping[str, Any]]) -> VaultConfig:
    if obj is None:
        return VaultConfig()
    if not isinstance(obj, Mapping):
        raise ValidationError("config must be a mapping")
    unknown = sorted(set(obj) - _FIELD_NAMES)
    if unknown:
        raise ValidationError(f"unknown config keys: {', '.join(map(str, unknown))}")
    kwargs: Dict[str, Any] = dict(obj)
    return VaultConfig(**kwargs)


def load_config(path: Union[str, Path]) -> VaultConfig:
    text = Path(path).read_text(encoding="utf-8")
    try:
        obj = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValidationError(f"invalid config YAML: {exc}") from exc
    return config_from_mapping(obj)
