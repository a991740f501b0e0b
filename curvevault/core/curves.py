"""
Bonding-curve families and point pricing.

A pool's curve is a tagged variant: `LinearCurve(slope)` or
`ExponentialCurve(growth_rate_bps)`. Each variant carries exactly the one
parameter its family needs, so there is no shared untyped `curve_param` field
to misread.

Pricing:
    linear:       price(s) = base_price + slope * s                 (saturating)
    exponential:  price(s) = base_price * ((10000 + g) / 10000)^s   (checked)

The linear quote saturates because it is a read-only display value. The
exponential quote fails on overflow instead, since integral costs are built
from it and a silently capped term would corrupt accounting.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from .errors import ValidationError
from .math import (
    BPS_SCALE,
    PRECISION,
    U128_MAX,
    U64_MAX,
    checked_mul,
    fixed_pow,
    narrow_u64,
    saturating_add,
    saturating_mul,
)


class CurveKind(Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


# Defaults, in settlement-asset base units (1e9 per whole unit).
DEFAULT_LINEAR_BASE_PRICE = 10_000_000  # 0.01
DEFAULT_LINEAR_SLOPE = 100_000  # 0.0001 per token
DEFAULT_EXPONENTIAL_BASE_PRICE = 1_000_000  # 0.001
DEFAULT_EXPONENTIAL_GROWTH_RATE_BPS = 500  # 5% per token

CHART_STEPS = 50
CHART_MIN_SUPPLY = 100


def _require_u64(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{name} must be an int")
    if not (0 <= value <= U64_MAX):
        raise ValidationError(f"{name} must be in [0, 2^64): {value}")


@dataclass(frozen=True)
class LinearCurve:
    slope: int

    kind = CurveKind.LINEAR

    def __post_init__(self) -> None:
        _require_u64("slope", self.slope)

    @property
    def param(self) -> int:
        return self.slope


@dataclass(frozen=True)
class ExponentialCurve:
    growth_rate_bps: int

    kind = CurveKind.EXPONENTIAL

    def __post_init__(self) -> None:
        _require_u64("growth_rate_bps", self.growth_rate_bps)

    @property
    def param(self) -> int:
        return self.growth_rate_bps


Curve = Union[LinearCurve, ExponentialCurve]


def make_curve(kind: CurveKind, param: int) -> Curve:
    if kind is CurveKind.LINEAR:
        return LinearCurve(slope=param)
    if kind is CurveKind.EXPONENTIAL:
        return ExponentialCurve(growth_rate_bps=param)
    raise ValidationError(f"unsupported curve kind: {kind!r}")


def resolve_curve(
    kind: CurveKind,
    base_price: Optional[int] = None,
    curve_param: Optional[int] = None,
) -> Tuple[Curve, int]:
    """
    Fill in default parameters for a new pool.

    Returns `(curve, base_price)`.
    """
    if kind is CurveKind.LINEAR:
        bp = DEFAULT_LINEAR_BASE_PRICE if base_price is None else base_price
        param = DEFAULT_LINEAR_SLOPE if curve_param is None else curve_param
    elif kind is CurveKind.EXPONENTIAL:
        bp = DEFAULT_EXPONENTIAL_BASE_PRICE if base_price is None else base_price
        param = DEFAULT_EXPONENTIAL_GROWTH_RATE_BPS if curve_param is None else curve_param
    else:
        raise ValidationError(f"unsupported curve kind: {kind!r}")
    _require_u64("base_price", bp)
    return make_curve(kind, param), bp


def growth_factor_scaled(growth_rate_bps: int, exponent: int) -> int:
    """`r^exponent` scaled by PRECISION, with r = (10000 + g) / 10000."""
    return fixed_pow(BPS_SCALE + growth_rate_bps, BPS_SCALE, exponent)


def linear_price(base_price: int, slope: int, supply: int) -> int:
    return saturating_add(base_price, saturating_mul(slope, supply))


def exponential_price(base_price: int, growth_rate_bps: int, supply: int) -> int:
    factor = growth_factor_scaled(growth_rate_bps, supply)
    return narrow_u64(checked_mul(base_price, factor, limit=U128_MAX) // PRECISION)


def price(curve: Curve, base_price: int, supply: int) -> int:
    """Unit price of the next token at `supply`."""
    if isinstance(curve, LinearCurve):
        return linear_price(base_price, curve.slope, supply)
    if isinstance(curve, ExponentialCurve):
        return exponential_price(base_price, curve.growth_rate_bps, supply)
    raise ValidationError(f"unsupported curve: {curve!r}")


def sample_curve(
    curve: Curve,
    base_price: int,
    current_supply: int,
    steps: int = CHART_STEPS,
) -> List[Tuple[int, int]]:
    """
    Evenly spaced `(supply, price)` points for charting.

    Covers `[0, max(2 * current_supply, 100)]` with `steps + 1` points.
    """
    if steps <= 0:
        raise ValidationError(f"steps must be positive: {steps}")
    max_supply = max(current_supply * 2, CHART_MIN_SUPPLY)
    points = []
    for i in range(steps + 1):
        supply = (i * max_supply) // steps
        points.append((supply, price(curve, base_price, supply)))
    return points
