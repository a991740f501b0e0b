# [TESTER] v1

from __future__ import annotations

import pytest

from curvevault.core.curves import CurveKind
from curvevault.core.errors import UnauthorizedError
from curvevault.integration.config import VaultConfig
from curvevault.integration.identity import request_digest, signing_payload, verify_identity
from curvevault.integration.vault import Vault

CHAIN_ID = "curvevault-test"


def _buy_request(trader: str, nonce: int = 1) -> dict:
    return {"op": "buy", "kind": "linear", "identifier": "chan-1", "trader": trader, "amount": 2, "nonce": nonce}


def test_signing_payload_ignores_signature_fields() -> None:
    req = _buy_request("0xabc")
    signed = dict(req, signer="0xabc", signature="0xdef")
    assert signing_payload(signed) == signing_payload(req)
    assert request_digest(signed, chain_id=CHAIN_ID) == request_digest(req, chain_id=CHAIN_ID)
    assert request_digest(req, chain_id=CHAIN_ID) != request_digest(req, chain_id="other-chain")


def test_bls_identity_roundtrip() -> None:
    pytest.importorskip("py_ecc")
    from py_ecc.bls import G2Basic

    from curvevault.integration.identity import public_identity, sign_request, verify_identity

    # Deterministic keypair from fixed seed.
    sk = G2Basic.KeyGen(b"\x01" * 32)
    pk = public_identity(sk)
    req = _buy_request(pk)
    sig = sign_request(sk, req, chain_id=CHAIN_ID)

    assert verify_identity(req, signer=pk, signature=sig, chain_id=CHAIN_ID) == pk

    tampered = dict(req, amount=3)
    with pytest.raises(UnauthorizedError):
        verify_identity(tampered, signer=pk, signature=sig, chain_id=CHAIN_ID)
    with pytest.raises(UnauthorizedError):
        verify_identity(req, signer=pk, signature=sig, chain_id="other-chain")
    with pytest.raises(UnauthorizedError):
        verify_identity(req, signer="0x1234", signature=sig, chain_id=CHAIN_ID)


def test_vault_requires_matching_signer() -> None:
    pytest.importorskip("py_ecc")
    from py_ecc.bls import G2Basic

    from curvevault.integration.identity import public_identity, sign_request

    sk = G2Basic.KeyGen(b"\x02" * 32)
    pk = public_identity(sk)
    vault = Vault(VaultConfig(require_signatures=True, chain_id=CHAIN_ID))

    create = {
        "op": "create_linear_pool",
        "identifier": "chan-1",
        "creator_wallet": pk,
        "authority": pk,
        "nonce": 1,
    }
    res = vault.execute(dict(create, signer=pk, signature=sign_request(sk, create, chain_id=CHAIN_ID)))
    assert res.ok, res.error

    vault.ledger.deposit(pk, 10**12)
    buy = _buy_request(pk, nonce=2)
    res = vault.execute(dict(buy, signer=pk, signature=sign_request(sk, buy, chain_id=CHAIN_ID)))
    assert res.ok, res.error
    assert res.effects["new_supply"] == 2

    # A valid signature over a request acting for someone else is rejected.
    other = _buy_request("mallory", nonce=3)
    res = vault.execute(dict(other, signer=pk, signature=sign_request(sk, other, chain_id=CHAIN_ID)))
    assert (res.ok, res.code) == (False, "UnauthorizedError")
    assert vault.nonces.get_last(pk) == 2


def _signed(sk: int, request: dict) -> dict:
    from curvevault.integration.identity import public_identity, sign_request

    return dict(request, signer=public_identity(sk), signature=sign_request(sk, request, chain_id=CHAIN_ID))


@pytest.fixture
def signed_vault():
    pytest.importorskip("py_ecc")
    from py_ecc.bls import G2Basic

    from curvevault.integration.identity import public_identity

    sk = G2Basic.KeyGen(b"\x03" * 32)
    pk = public_identity(sk)
    vault = Vault(VaultConfig(require_signatures=True, chain_id=CHAIN_ID))
    create = {"op": "create_linear_pool", "identifier": "chan-1", "creator_wallet": pk, "authority": pk, "nonce": 1}
    assert vault.execute(_signed(sk, create)).ok
    vault.ledger.deposit(pk, 10**12)
    return vault, sk, pk


def test_signed_request_cannot_be_replayed(signed_vault) -> None:
    vault, sk, pk = signed_vault
    buy = _signed(sk, _buy_request(pk, nonce=2))

    assert vault.execute(buy).ok
    balance = vault.ledger.balance_of(pk)
    for _ in range(2):
        res = vault.execute(buy)
        assert (res.ok, res.code) == (False, "UnauthorizedError")

    pool = vault.pool(CurveKind.LINEAR, "chan-1")
    assert pool.total_supply == 2
    assert vault.ledger.balance_of(pk) == balance
    assert vault.nonces.get_last(pk) == 2


def test_signed_sell_replay_does_not_drain_reserve(signed_vault) -> None:
    vault, sk, pk = signed_vault
    assert vault.execute(_signed(sk, dict(_buy_request(pk, nonce=2), amount=10))).ok
    sell = _signed(
        sk, {"op": "sell", "kind": "linear", "identifier": "chan-1", "trader": pk, "amount": 1, "nonce": 3}
    )
    assert vault.execute(sell).ok
    reserve = vault.pool(CurveKind.LINEAR, "chan-1").reserve

    assert not vault.execute(sell).ok
    assert vault.pool(CurveKind.LINEAR, "chan-1").reserve == reserve
    assert vault.holding(CurveKind.LINEAR, "chan-1", pk) == 9


def test_nonce_must_be_next_in_sequence(signed_vault) -> None:
    vault, sk, pk = signed_vault
    for nonce in (0, 1, 3):
        res = vault.execute(_signed(sk, _buy_request(pk, nonce=nonce)))
        assert (res.ok, res.code) == (False, "UnauthorizedError")

    no_nonce = {k: v for k, v in _buy_request(pk).items() if k != "nonce"}
    res = vault.execute(_signed(sk, no_nonce))
    assert res.code == "UnauthorizedError"

    assert vault.execute(_signed(sk, _buy_request(pk, nonce=2))).ok


def test_failed_operation_does_not_consume_nonce(signed_vault) -> None:
    vault, sk, pk = signed_vault
    too_big = {"op": "sell", "kind": "linear", "identifier": "chan-1", "trader": pk, "amount": 5, "nonce": 2}
    res = vault.execute(_signed(sk, too_big))
    assert res.code == "InsufficientSupplyError"
    assert vault.nonces.get_last(pk) == 1

    assert vault.execute(_signed(sk, _buy_request(pk, nonce=2))).ok


def test_unencodable_field_is_unauthorized() -> None:
    req = dict(_buy_request("0x" + "11" * 48), amount=1.5)
    with pytest.raises(UnauthorizedError):
        verify_identity(req, signer="0x" + "11" * 48, signature="0x" + "22" * 96, chain_id=CHAIN_ID)


def test_signed_float_amount_is_reported(signed_vault) -> None:
    vault, _, pk = signed_vault
    req = dict(_buy_request(pk, nonce=2), amount=1.5, signer=pk, signature="0x" + "00" * 96)
    res = vault.execute(req)
    assert (res.ok, res.code) == (False, "UnauthorizedError")
    assert vault.nonces.get_last(pk) == 1
