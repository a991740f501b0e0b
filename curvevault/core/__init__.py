"""
Core bonding-curve algorithms
"""

from .curves import (
    Curve,
    CurveKind,
    ExponentialCurve,
    LinearCurve,
    price,
    resolve_curve,
    sample_curve,
)
from .errors import (
    InactivePoolError,
    InsufficientReserveError,
    InsufficientSupplyError,
    InvalidCounterpartyError,
    PoolError,
    PoolExistsError,
    PoolNotFoundError,
    PoolOverflowError,
    TransferError,
    UnauthorizedError,
    ValidationError,
)
from .fees import FEE_BASIS_POINTS, FeeSplit, gross_up, split_fee
from .integral import EXP_DIRECT_SUM_THRESHOLD, integral_cost
from .math import PRECISION, fixed_pow

__all__ = [
    "Curve",
    "CurveKind",
    "ExponentialCurve",
    "LinearCurve",
    "price",
    "resolve_curve",
    "sample_curve",
    "InactivePoolError",
    "InsufficientReserveError",
    "InsufficientSupplyError",
    "InvalidCounterpartyError",
    "PoolError",
    "PoolExistsError",
    "PoolNotFoundError",
    "PoolOverflowError",
    "TransferError",
    "UnauthorizedError",
    "ValidationError",
    "FEE_BASIS_POINTS",
    "FeeSplit",
    "gross_up",
    "split_fee",
    "EXP_DIRECT_SUM_THRESHOLD",
    "integral_cost",
    "PRECISION",
    "fixed_pow",
]
