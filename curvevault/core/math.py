"""Checked integer arithmetic and fixed-point exponentiation.

Every function is stateless and operates on plain Python ints. Python ints do
not overflow, so the u64/u128 ranges of the on-chain representation are
enforced explicitly: each helper raises `PoolOverflowError` when its result
leaves the range it is checked against.

Rounding is truncating (`//`) everywhere. All inputs are non-negative.
"""

from __future__ import annotations

from .errors import PoolOverflowError

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1

PRECISION: int = 1_000_000_000  # fixed-point scale (1e9)
BPS_SCALE: int = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _check_range(value: int, limit: int, op: str) -> int:
    if value < 0 or value > limit:
        raise PoolOverflowError(f"{op} out of range: {value}")
    return value


# -- Checked helpers ---------------------------------------------------------

def checked_add(a: int, b: int, *, limit: int = U64_MAX) -> int:
    return _check_range(a + b, limit, "add")


def checked_sub(a: int, b: int, *, limit: int = U64_MAX) -> int:
    return _check_range(a - b, limit, "sub")


def checked_mul(a: int, b: int, *, limit: int = U64_MAX) -> int:
    return _check_range(a * b, limit, "mul")


def checked_div(a: int, b: int, *, limit: int = U64_MAX) -> int:
    if b == 0:
        raise PoolOverflowError("division by zero")
    return _check_range(a // b, limit, "div")


def narrow_u64(value: int) -> int:
    """Narrow a wide intermediate to the u64 result type."""
    return _check_range(value, U64_MAX, "narrow")


def saturating_add(a: int, b: int) -> int:
    return min(a + b, U64_MAX)


def saturating_mul(a: int, b: int) -> int:
    return min(a * b, U64_MAX)


# -- Fixed point -------------------------------------------------------------

def fixed_pow(numerator: int, denominator: int, exponent: int) -> int:
    """
    Compute ``(numerator / denominator) ** exponent`` scaled by `PRECISION`.

    Binary exponentiation: the scaled base is squared and rescaled by
    `PRECISION` per bit, and folded into the accumulator on odd bits. Each
    rescale truncates, so the result is biased downward by O(log exponent)
    units in the last place.

    Intermediates are checked against the 128-bit range.

    Raises:
        PoolOverflowError: if any intermediate or the result exceeds 128 bits.
    """
    _require_int("numerator", numerator)
    _require_int("denominator", denominator)
    _require_int("exponent", exponent)
    if denominator <= 0:
        raise PoolOverflowError("denominator must be positive")
    if numerator < 0 or exponent < 0:
        raise PoolOverflowError("fixed_pow requires non-negative inputs")

    base = checked_div(checked_mul(numerator, PRECISION, limit=U128_MAX), denominator, limit=U128_MAX)
    result = PRECISION
    exp = exponent
    while exp > 0:
        if exp & 1:
            result = checked_mul(result, base, limit=U128_MAX) // PRECISION
        exp >>= 1
        if exp > 0:
            base = checked_mul(base, base, limit=U128_MAX) // PRECISION
    return result
