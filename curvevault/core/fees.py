"""
Trade fee split (deterministic, integer-only).

    fee = floor(gross * fee_bps / 10_000)
    net = gross - fee

Floor rounding never charges more than the stated rate; the remainder stays
with `net`.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ValidationError
from .math import BPS_SCALE, U128_MAX, checked_add, checked_mul, narrow_u64

FEE_BASIS_POINTS = 100  # 1%


def _require_fee_bps(fee_bps: int) -> None:
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise ValidationError("fee_bps must be an int")
    if not (0 <= fee_bps <= BPS_SCALE):
        raise ValidationError(f"fee_bps must be in [0, {BPS_SCALE}]: {fee_bps}")


@dataclass(frozen=True)
class FeeSplit:
    fee: int
    net: int

    def __post_init__(self) -> None:
        for name, v in (("fee", self.fee), ("net", self.net)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")

    @property
    def gross(self) -> int:
        return self.fee + self.net


def split_fee(gross: int, fee_bps: int = FEE_BASIS_POINTS) -> FeeSplit:
    """Split `gross` into `(fee, net)` with floor rounding on the fee."""
    _require_fee_bps(fee_bps)
    if not isinstance(gross, int) or isinstance(gross, bool) or gross < 0:
        raise ValidationError(f"gross must be a non-negative int, got {gross}")
    fee = checked_mul(gross, fee_bps, limit=U128_MAX) // BPS_SCALE
    return FeeSplit(fee=fee, net=gross - fee)


def gross_up(amount: int, fee_bps: int = FEE_BASIS_POINTS) -> int:
    """`amount * (10000 + fee_bps) / 10000`: what a payer needs inclusive of fee."""
    _require_fee_bps(fee_bps)
    factor = checked_add(BPS_SCALE, fee_bps)
    return narrow_u64(checked_mul(amount, factor, limit=U128_MAX) // BPS_SCALE)
