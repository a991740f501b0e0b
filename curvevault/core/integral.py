"""
Integral cost of moving supply across `[start, end)`.

The cost is the exact sum of unit prices `price(i)` for integer `i` in the
range, computed in integer arithmetic with every step checked.

Linear (arithmetic series):
    cost = base_price * n + slope * (n * (start + end - 1) / 2),   n = end - start

    `n * (start + end - 1)` is the sum of n consecutive integers doubled, so the
    halving is exact.

Exponential, two strategies selected by `n`:
    n <= threshold: direct summation of point prices (each via fixed_pow)
    n >  threshold: geometric series base * (r^end - r^start) / (r - 1),
                    evaluated as base * (R_end - R_start) * 10000 / g / P
                    where R_x = r^x scaled by P.

The threshold trades per-term cost for the closed form's precision near small
ranges; it is a tunable constant.
"""

from __future__ import annotations

from .curves import Curve, ExponentialCurve, LinearCurve, exponential_price, growth_factor_scaled
from .errors import ValidationError
from .math import (
    BPS_SCALE,
    PRECISION,
    U128_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    narrow_u64,
)

EXP_DIRECT_SUM_THRESHOLD = 100


def linear_integral(base_price: int, slope: int, start: int, end: int) -> int:
    amount = checked_sub(end, start)
    if amount == 0:
        return 0
    base_cost = checked_mul(base_price, amount)
    last = checked_sub(end, 1)
    sum_indices = checked_div(checked_mul(amount, checked_add(start, last)), 2)
    slope_cost = checked_mul(sum_indices, slope)
    return checked_add(base_cost, slope_cost)


def exponential_integral_direct(base_price: int, growth_rate_bps: int, start: int, end: int) -> int:
    total = 0
    for i in range(start, end):
        total = checked_add(total, exponential_price(base_price, growth_rate_bps, i), limit=U128_MAX)
    return narrow_u64(total)


def exponential_integral_closed_form(base_price: int, growth_rate_bps: int, start: int, end: int) -> int:
    amount = checked_sub(end, start)
    if growth_rate_bps == 0:
        # r == 1: constant price, the series denominator would be zero.
        return checked_mul(base_price, amount)
    r_end = growth_factor_scaled(growth_rate_bps, end)
    r_start = growth_factor_scaled(growth_rate_bps, start)
    numerator = checked_mul(base_price, checked_sub(r_end, r_start, limit=U128_MAX), limit=U128_MAX)
    scaled = checked_mul(numerator, BPS_SCALE, limit=U128_MAX)
    return narrow_u64(scaled // growth_rate_bps // PRECISION)


def exponential_integral(
    base_price: int,
    growth_rate_bps: int,
    start: int,
    end: int,
    *,
    direct_sum_threshold: int = EXP_DIRECT_SUM_THRESHOLD,
) -> int:
    amount = checked_sub(end, start)
    if amount == 0:
        return 0
    if amount <= direct_sum_threshold:
        return exponential_integral_direct(base_price, growth_rate_bps, start, end)
    return exponential_integral_closed_form(base_price, growth_rate_bps, start, end)


def integral_cost(
    curve: Curve,
    base_price: int,
    start: int,
    end: int,
    *,
    direct_sum_threshold: int = EXP_DIRECT_SUM_THRESHOLD,
) -> int:
    """
    Total cost of moving supply from `start` (inclusive) to `end` (exclusive).

    Raises:
        PoolOverflowError: if `end < start` or any step leaves its range.
    """
    if isinstance(curve, LinearCurve):
        return linear_integral(base_price, curve.slope, start, end)
    if isinstance(curve, ExponentialCurve):
        return exponential_integral(
            base_price,
            curve.growth_rate_bps,
            start,
            end,
            direct_sum_threshold=direct_sum_threshold,
        )
    raise ValidationError(f"unsupported curve: {curve!r}")
