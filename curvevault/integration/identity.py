"""
Caller identity assertion (BLS12-381, G2Basic).

The engine only compares identity strings. This adapter turns a signed
request into such a string: it verifies a BLS signature over

    SHA256( domain_sep("vault_request:<chain_id>", v1) || canonical_json(request) )

and returns the signer's public key as a lowercase 0x-prefixed hex string.
`request` is the operation mapping without its `signer`/`signature` entries;
its `nonce` is part of the signed payload.
"""

from __future__ import annotations

import hashlib
from typing import Any, Mapping

from ..core.errors import UnauthorizedError
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, hex_to_bytes_allow_0x

try:
    from py_ecc.bls import G2Basic

    _BLS_AVAILABLE = True
except Exception:  # pragma: no cover - optional dependency
    G2Basic = None  # type: ignore[assignment]
    _BLS_AVAILABLE = False

PUBKEY_BYTES = 48
SIGNATURE_BYTES = 96

_SIGNATURE_FIELDS = frozenset({"signer", "signature"})


def bls_available() -> bool:
    return _BLS_AVAILABLE


def signing_payload(request: Mapping[str, Any]) -> bytes:
    body = {k: v for k, v in request.items() if k not in _SIGNATURE_FIELDS}
    return canonical_json_bytes(body)


def request_digest(request: Mapping[str, Any], *, chain_id: str) -> bytes:
    msg = domain_sep_bytes(f"vault_request:{chain_id}") + signing_payload(request)
    return hashlib.sha256(msg).digest()


def normalize_identity(pubkey_hex: str) -> str:
    return "0x" + hex_to_bytes_allow_0x(pubkey_hex, nbytes=PUBKEY_BYTES, name="signer").hex()


def sign_request(private_key: int, request: Mapping[str, Any], *, chain_id: str) -> str:
    """Client-side helper: signature hex for `request` under `private_key`."""
    if not _BLS_AVAILABLE:
        raise ImportError("py_ecc not available. Install with: pip install py-ecc")
    return "0x" + G2Basic.Sign(private_key, request_digest(request, chain_id=chain_id)).hex()


def public_identity(private_key: int) -> str:
    if not _BLS_AVAILABLE:
        raise ImportError("py_ecc not available. Install with: pip install py-ecc")
    return "0x" + G2Basic.SkToPk(private_key).hex()


def verify_identity(
    request: Mapping[str, Any],
    *,
    signer: str,
    signature: str,
    chain_id: str,
) -> str:
    """
    Verify `signature` by `signer` over `request`.

    Returns:
        The verified identity (normalized signer pubkey).

    Raises:
        UnauthorizedError: on any malformed key/signature or failed verification.
    """
    if not _BLS_AVAILABLE:
        raise UnauthorizedError("py_ecc (BLS) not available; cannot verify signatures")
    try:
        pubkey = hex_to_bytes_allow_0x(signer, nbytes=PUBKEY_BYTES, name="signer")
        sig = hex_to_bytes_allow_0x(signature, nbytes=SIGNATURE_BYTES, name="signature")
        digest = request_digest(request, chain_id=chain_id)
    except (TypeError, ValueError) as exc:
        raise UnauthorizedError(str(exc)) from exc

    try:
        ok = bool(G2Basic.Verify(pubkey, digest, sig))
    except Exception as exc:
        raise UnauthorizedError(f"signature verification error: {exc}") from exc
    if not ok:
        raise UnauthorizedError("invalid signature")
    return "0x" + pubkey.hex()
