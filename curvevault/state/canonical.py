"""
Byte encodings used for pool keys, record digests and request signatures.

Everything here is deterministic across processes: JSON is emitted with sorted
keys and no whitespace, strings are length-prefixed, and every hashed message
starts with a `curvevault:<label>:v<n>\\x00` tag so digests from different
contexts never collide.
"""

from __future__ import annotations

import hashlib
import json
import string
from typing import Any

ENCODING_VERSION = 1
DOMAIN_PREFIX = b"curvevault:"

_HEXDIGITS = frozenset(string.hexdigits)


def _check_encodable(obj: Any, path: str = "$") -> None:
    # json.dumps would accept these, but their text form is not stable.
    if isinstance(obj, float):
        raise TypeError(f"{path}: float values cannot be canonically encoded")
    if isinstance(obj, str):
        if any("\ud800" <= ch <= "\udfff" for ch in obj):
            raise TypeError(f"{path}: lone surrogate in string")
    elif isinstance(obj, dict):
        for key, item in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"{path}: mapping key {key!r} is not a str")
            _check_encodable(key, path)
            _check_encodable(item, f"{path}.{key}")
    elif isinstance(obj, (list, tuple)):
        for i, item in enumerate(obj):
            _check_encodable(item, f"{path}[{i}]")


def canonical_json_bytes(value: Any) -> bytes:
    """UTF-8 JSON with sorted keys and compact separators; floats and NaN rejected."""
    _check_encodable(value)
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode(
        "utf-8"
    )


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = ENCODING_VERSION) -> bytes:
    if not isinstance(label, str) or not label:
        raise TypeError("domain label must be a non-empty str")
    if not label.isascii() or "\x00" in label:
        raise ValueError(f"domain label must be ASCII without NUL: {label!r}")
    if isinstance(version, bool) or not isinstance(version, int) or version < 1:
        raise ValueError(f"domain version must be an int >= 1: {version!r}")
    return DOMAIN_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"


def encode_uvarint(value: int) -> bytes:
    """LEB128, seven bits per byte, least significant group first."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"uvarint needs a non-negative int: {value!r}")
    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups[-1] |= 0x80
        groups.append(value & 0x7F)
        value >>= 7
    return bytes(groups)


def encode_str(value: str) -> bytes:
    if not isinstance(value, str):
        raise TypeError("value must be str")
    raw = value.encode("utf-8")
    return encode_uvarint(len(raw)) + raw


def hex_to_bytes_allow_0x(hex_str: str, *, nbytes: int, name: str) -> bytes:
    """Decode exactly `nbytes` bytes of hex; a leading `0x` is optional."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    digits = hex_str.strip()
    if digits[:2] in ("0x", "0X"):
        digits = digits[2:]
    if len(digits) != 2 * nbytes:
        raise ValueError(f"{name} must be {nbytes} bytes, got {len(digits)} hex digits")
    if not _HEXDIGITS.issuperset(digits):
        raise ValueError(f"{name} must be valid hex")
    return bytes.fromhex(digits)
