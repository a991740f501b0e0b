from __future__ import annotations

import pytest

from curvevault.core.curves import ExponentialCurve, LinearCurve, price
from curvevault.core.errors import PoolOverflowError
from curvevault.core.integral import (
    EXP_DIRECT_SUM_THRESHOLD,
    exponential_integral,
    exponential_integral_closed_form,
    exponential_integral_direct,
    integral_cost,
    linear_integral,
)
from curvevault.core.math import U64_MAX


def _brute_force(curve, base_price: int, start: int, end: int) -> int:
    return sum(price(curve, base_price, i) for i in range(start, end))


def test_linear_integral_ten_from_zero() -> None:
    assert linear_integral(10_000_000, 100_000, 0, 10) == 104_500_000
    assert linear_integral(10_000_000, 100_000, 0, 1) == 10_000_000


def test_empty_range_costs_nothing() -> None:
    assert integral_cost(LinearCurve(100_000), 10_000_000, 5, 5) == 0
    assert integral_cost(ExponentialCurve(500), 1_000_000, 5, 5) == 0


def test_reversed_range_is_an_overflow() -> None:
    with pytest.raises(PoolOverflowError):
        integral_cost(LinearCurve(1), 1, 10, 9)
    with pytest.raises(PoolOverflowError):
        integral_cost(ExponentialCurve(1), 1, 10, 9)


@pytest.mark.parametrize("start, end", [(0, 1), (0, 37), (3, 4), (11, 250), (999, 1_500)])
def test_linear_integral_matches_sum_of_prices(start, end) -> None:
    curve = LinearCurve(slope=100_000)
    assert integral_cost(curve, 10_000_000, start, end) == _brute_force(curve, 10_000_000, start, end)


@pytest.mark.parametrize("start, a, b", [(0, 1, 1), (0, 10, 5), (7, 13, 29), (1_000, 1, 999)])
def test_linear_integral_is_additive(start, a, b) -> None:
    curve = LinearCurve(slope=3_333)
    left = integral_cost(curve, 17, start, start + a)
    right = integral_cost(curve, 17, start + a, start + a + b)
    assert left + right == integral_cost(curve, 17, start, start + a + b)


def test_linear_integral_overflow() -> None:
    with pytest.raises(PoolOverflowError):
        integral_cost(LinearCurve(U64_MAX), 0, 0, 10)
    with pytest.raises(PoolOverflowError):
        integral_cost(LinearCurve(0), U64_MAX, 0, 2)


class TestExponentialIntegral:
    def test_small_range_is_direct_sum(self):
        assert exponential_integral_direct(1_000_000, 500, 0, 3) == 3_152_500
        assert exponential_integral(1_000_000, 500, 0, 3) == 3_152_500

    def test_closed_form_agrees_on_exact_powers(self):
        assert exponential_integral_closed_form(1_000_000, 500, 0, 3) == 3_152_500

    def test_threshold_selects_strategy(self):
        curve = ExponentialCurve(500)
        at_threshold = integral_cost(curve, 1_000_000, 0, EXP_DIRECT_SUM_THRESHOLD)
        assert at_threshold == _brute_force(curve, 1_000_000, 0, EXP_DIRECT_SUM_THRESHOLD)

        above = integral_cost(curve, 1_000_000, 0, EXP_DIRECT_SUM_THRESHOLD + 1)
        assert above == exponential_integral_closed_form(1_000_000, 500, 0, EXP_DIRECT_SUM_THRESHOLD + 1)

    def test_threshold_is_tunable(self):
        curve = ExponentialCurve(500)
        forced_closed = integral_cost(curve, 1_000_000, 0, 3, direct_sum_threshold=0)
        assert forced_closed == exponential_integral_closed_form(1_000_000, 500, 0, 3)

    @pytest.mark.parametrize("start", [0, 7, 40])
    def test_strategies_diverge_by_less_than_one_part_per_million(self, start):
        end = start + EXP_DIRECT_SUM_THRESHOLD + 1
        direct = exponential_integral_direct(1_000_000, 500, start, end)
        closed = exponential_integral_closed_form(1_000_000, 500, start, end)
        assert abs(direct - closed) * 1_000_000 <= direct

    def test_zero_growth_degenerates_to_flat_cost(self):
        assert exponential_integral(7, 0, 5, 500) == 7 * 495
        assert exponential_integral(7, 0, 5, 55) == 7 * 50

    def test_direct_sum_is_additive(self):
        whole = exponential_integral_direct(1_000_000, 500, 0, 30)
        parts = exponential_integral_direct(1_000_000, 500, 0, 12) + exponential_integral_direct(1_000_000, 500, 12, 30)
        assert whole == parts

    def test_overflow_propagates(self):
        with pytest.raises(PoolOverflowError):
            integral_cost(ExponentialCurve(10_000), U64_MAX // 2, 0, 3)
