"""
Pool record for a bonding-curve token.

One `Pool` per tradeable identifier. The record is mutable (supply, reserve
and the active flag change in place), but its curve family and identifier are
fixed at construction.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping

from ..core.curves import Curve, CurveKind, ExponentialCurve, LinearCurve, make_curve
from ..core.errors import ValidationError
from ..core.math import U64_MAX
from .canonical import canonical_json_bytes, domain_sep_bytes, encode_str, sha256_hex


# Type aliases
Identity = str  # wallet / signer identity, already verified by the caller
Amount = int  # non-negative settlement-asset base units

MAX_IDENTIFIER_LEN = 32
MAX_DISPLAY_NAME_LEN = 64
MAX_METADATA_URI_LEN = 200

NAMESPACE_LINEAR = "creator_pool"
NAMESPACE_EXPONENTIAL = "stream_pool"

_NAMESPACES = {
    CurveKind.LINEAR: NAMESPACE_LINEAR,
    CurveKind.EXPONENTIAL: NAMESPACE_EXPONENTIAL,
}

# Fields fixed once the record exists.
_IMMUTABLE_FIELDS = frozenset({"curve", "identifier"})


class PoolStatus(Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


def namespace_for(kind: CurveKind) -> str:
    return _NAMESPACES[kind]


def compute_pool_key(namespace: str, identifier: str) -> str:
    """
    Stable record key derived from `(namespace, identifier)`.

    The key doubles as the pool's escrow account in the ledger.
    """
    if namespace not in _NAMESPACES.values():
        raise ValidationError(f"unknown pool namespace: {namespace!r}")
    validate_identifier(identifier)
    return sha256_hex(domain_sep_bytes("pool_key") + encode_str(namespace) + encode_str(identifier))


def _check_len(name: str, value: str, max_len: int, *, allow_empty: bool = True) -> None:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    if not allow_empty and not value:
        raise ValidationError(f"{name} must be non-empty")
    if len(value) > max_len:
        raise ValidationError(f"{name} exceeds maximum length of {max_len} characters")


def validate_identifier(identifier: str) -> None:
    _check_len("identifier", identifier, MAX_IDENTIFIER_LEN, allow_empty=False)


def _check_u64(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{name} must be an int")
    if not (0 <= value <= U64_MAX):
        raise ValidationError(f"{name} must be in [0, 2^64): {value}")


@dataclass(eq=True)
class Pool:
    """
    State of one bonding-curve pool.

    Attributes:
        curve: `LinearCurve(slope)` or `ExponentialCurve(growth_rate_bps)`
        identifier: Stable key (1-32 chars)
        parent_identifier: Owning linear pool (exponential pools only)
        creator_wallet: Fee recipient; the only identity that may toggle `is_active`
        authority: Identity that created the record
        total_supply: Tokens outstanding
        reserve: Settlement-asset units held against the supply
        base_price: Price at supply 0
        is_active: Trading gate
        created_at: Creation timestamp
        metadata_uri: Off-chain metadata location
        display_name: Human-readable name
    """

    curve: Curve
    identifier: str
    creator_wallet: Identity
    authority: Identity
    base_price: Amount
    parent_identifier: str = ""
    total_supply: Amount = 0
    reserve: Amount = 0
    is_active: bool = True
    created_at: int = 0
    metadata_uri: str = ""
    display_name: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.curve, (LinearCurve, ExponentialCurve)):
            raise ValidationError(f"unsupported curve: {self.curve!r}")
        validate_identifier(self.identifier)
        _check_len("parent_identifier", self.parent_identifier, MAX_IDENTIFIER_LEN)
        if isinstance(self.curve, LinearCurve) and self.parent_identifier:
            raise ValidationError("linear pools must not reference a parent pool")
        _check_len("display_name", self.display_name, MAX_DISPLAY_NAME_LEN)
        _check_len("metadata_uri", self.metadata_uri, MAX_METADATA_URI_LEN)
        for name in ("creator_wallet", "authority"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValidationError(f"{name} must be a non-empty string")
        for name in ("base_price", "total_supply", "reserve"):
            _check_u64(name, getattr(self, name))
        object.__setattr__(self, "_sealed", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _IMMUTABLE_FIELDS and getattr(self, "_sealed", False):
            raise AttributeError(f"pool field {name!r} is immutable")
        super().__setattr__(name, value)

    @property
    def kind(self) -> CurveKind:
        return self.curve.kind

    @property
    def curve_param(self) -> int:
        return self.curve.param

    @property
    def namespace(self) -> str:
        return namespace_for(self.curve.kind)

    @property
    def key(self) -> str:
        return compute_pool_key(self.namespace, self.identifier)

    @property
    def status(self) -> PoolStatus:
        return PoolStatus.ACTIVE if self.is_active else PoolStatus.INACTIVE

    def __repr__(self) -> str:
        return (
            f"Pool(identifier={self.identifier!r}, kind={self.kind.value}, "
            f"supply={self.total_supply}, reserve={self.reserve}, "
            f"status={self.status.value})"
        )


POOL_FIELD_NAMES = tuple(f.name for f in fields(Pool))


def pool_to_dict(pool: Pool) -> Dict[str, Any]:
    """Serialize a Pool to a plain dict (JSON-compatible)."""
    out: Dict[str, Any] = {}
    for name in POOL_FIELD_NAMES:
        if name == "curve":
            out[name] = {"kind": pool.kind.value, "param": pool.curve_param}
        else:
            out[name] = getattr(pool, name)
    return out


def pool_from_dict(d: Mapping[str, Any]) -> Pool:
    """Deserialize a dict produced by `pool_to_dict`. Raises KeyError on missing fields."""
    curve_obj = d["curve"]
    if not isinstance(curve_obj, Mapping):
        raise ValidationError("curve must be a mapping")
    try:
        kind = CurveKind(curve_obj["kind"])
    except ValueError as exc:
        raise ValidationError(f"unknown curve kind: {curve_obj['kind']!r}") from exc
    kwargs: Dict[str, Any] = {name: d[name] for name in POOL_FIELD_NAMES if name != "curve"}
    return Pool(curve=make_curve(kind, curve_obj["param"]), **kwargs)


def pool_digest(pool: Pool) -> str:
    """sha256 over the canonical JSON encoding of the record."""
    return sha256_hex(domain_sep_bytes("pool_record") + canonical_json_bytes(pool_to_dict(pool)))
