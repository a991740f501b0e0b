"""
Vault service: imperative shell around the pool engine.

Wires together the pieces a host would normally provide:
- a `PoolStore` for pool records (create-once, read, in-place update),
- an `InMemoryLedger` for the settlement asset,
- an `EventSink`,
- a `HoldingsTable` attributing pool supply to traders,
- optional BLS identity assertion with per-signer nonces for `execute()`.

Every mutating call runs as one transaction: if it raises, ledger balances are
restored to their state before the call (the engine itself never leaves a pool
partially updated).

`execute(op)` accepts a plain mapping, e.g.

    {"op": "buy", "kind": "linear", "identifier": "chan-1", "trader": "alice", "amount": 10}

and returns a `VaultTxResult` instead of raising. When signatures are required the
mapping also carries `signer`, `signature` and `nonce`, where `nonce` must be
exactly one more than the signer's last accepted nonce.
"""

from __future__ import annotations

import logging
from collections import deque
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Callable, Deque, Dict, Iterator, List, Mapping, Optional, Tuple

from ..core.curves import CurveKind, sample_curve
from ..core.engine import PoolStateMachine
from ..core.errors import PoolError, PoolExistsError, PoolNotFoundError, UnauthorizedError, ValidationError
from ..core.types import BuyResult, EventSink, SellResult, TradeKind, TradeRecord
from ..state.holdings import HoldingsTable
from ..state.nonces import NonceTable
from ..state.pools import (
    NAMESPACE_LINEAR,
    Pool,
    namespace_for,
    pool_digest,
    pool_to_dict,
)
from ..state.store import PoolStore
from .config import VaultConfig
from .events import EventLog
from .identity import normalize_identity, verify_identity
from .ledger import InMemoryLedger

logger = logging.getLogger(__name__)

RECENT_TRADES_LIMIT = 20


@dataclass(frozen=True)
class VaultTxResult:
    ok: bool
    effects: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    code: Optional[str] = None


class Vault:
    def __init__(
        self,
        config: VaultConfig = VaultConfig(),
        *,
        ledger: Optional[InMemoryLedger] = None,
        events: Optional[EventSink] = None,
        store: Optional[PoolStore] = None,
    ) -> None:
        self.config = config
        self.ledger = ledger if ledger is not None else InMemoryLedger()
        self.events = events if events is not None else EventLog()
        self.store = store if store is not None else PoolStore()
        self.holdings = HoldingsTable()
        self.nonces = NonceTable()
        self._recent: Dict[str, Deque[TradeRecord]] = {}
        self.machine = PoolStateMachine(
            self.ledger,
            self.events,
            fee_bps=config.fee_bps,
            direct_sum_threshold=config.direct_sum_threshold,
        )

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        snap = self.ledger.snapshot()
        try:
            yield
        except Exception:
            self.ledger.restore(snap)
            raise

    # -- Pool lifecycle ------------------------------------------------------

    def _create(
        self,
        kind: CurveKind,
        identifier: str,
        parent_identifier: str,
        creator_wallet: str,
        authority: str,
        base_price: Optional[int],
        curve_param: Optional[int],
        **descriptive: Any,
    ) -> Pool:
        namespace = namespace_for(kind)
        if self.store.find(namespace, identifier) is not None:
            raise PoolExistsError(f"pool already exists: {namespace}/{identifier}")
        default_bp, default_param = self.config.curve_defaults(kind)
        pool = self.machine.initialize(
            kind,
            identifier,
            parent_identifier,
            creator_wallet,
            authority,
            default_bp if base_price is None else base_price,
            default_param if curve_param is None else curve_param,
            **descriptive,
        )
        self.store.create(pool)
        self.ledger.open_escrow(pool.key)
        return pool

    def create_linear_pool(
        self,
        identifier: str,
        creator_wallet: str,
        authority: str,
        *,
        base_price: Optional[int] = None,
        slope: Optional[int] = None,
        display_name: str = "",
        metadata_uri: str = "",
        created_at: int = 0,
    ) -> Pool:
        return self._create(
            CurveKind.LINEAR,
            identifier,
            "",
            creator_wallet,
            authority,
            base_price,
            slope,
            display_name=display_name,
            metadata_uri=metadata_uri,
            created_at=created_at,
        )

    def create_exponential_pool(
        self,
        identifier: str,
        creator_wallet: str,
        authority: str,
        *,
        parent_identifier: str = "",
        base_price: Optional[int] = None,
        growth_rate_bps: Optional[int] = None,
        display_name: str = "",
        metadata_uri: str = "",
        created_at: int = 0,
    ) -> Pool:
        if parent_identifier and self.store.find(NAMESPACE_LINEAR, parent_identifier) is None:
            raise PoolNotFoundError(f"parent pool not found: {NAMESPACE_LINEAR}/{parent_identifier}")
        return self._create(
            CurveKind.EXPONENTIAL,
            identifier,
            parent_identifier,
            creator_wallet,
            authority,
            base_price,
            growth_rate_bps,
            display_name=display_name,
            metadata_uri=metadata_uri,
            created_at=created_at,
        )

    def pool(self, kind: CurveKind, identifier: str) -> Pool:
        return self.store.lookup(namespace_for(kind), identifier)

    def set_active(self, kind: CurveKind, identifier: str, caller: str, active: bool) -> None:
        pool = self.pool(kind, identifier)
        self.machine.set_active(pool, caller, active)
        self.store.update(pool)

    # -- Trading -------------------------------------------------------------

    def buy(
        self,
        kind: CurveKind,
        identifier: str,
        trader: str,
        amount: int,
        *,
        fee_recipient: Optional[str] = None,
    ) -> BuyResult:
        pool = self.pool(kind, identifier)
        with self._transaction():
            result = self.machine.buy(pool, trader, amount, fee_recipient=fee_recipient)
            self.holdings.credit(pool.key, trader, amount)
        self.store.update(pool)
        self._record_trade(pool, TradeKind.BUY, trader, amount, result.gross_cost, result.fee, result)
        return result

    def sell(
        self,
        kind: CurveKind,
        identifier: str,
        trader: str,
        amount: int,
        *,
        fee_recipient: Optional[str] = None,
    ) -> SellResult:
        """Sell `amount` of the trader's own tokens back to the pool."""
        pool = self.pool(kind, identifier)
        if isinstance(amount, int) and not isinstance(amount, bool):
            self.holdings.require(pool.key, trader, amount)
        with self._transaction():
            result = self.machine.sell(pool, trader, amount, fee_recipient=fee_recipient)
            self.holdings.debit(pool.key, trader, amount)
        self.store.update(pool)
        self._record_trade(pool, TradeKind.SELL, trader, amount, result.gross_refund, result.fee, result)
        return result

    def _record_trade(
        self,
        pool: Pool,
        kind: TradeKind,
        trader: str,
        amount: int,
        gross: int,
        fee: int,
        result: Any,
    ) -> None:
        trades = self._recent.setdefault(pool.key, deque(maxlen=RECENT_TRADES_LIMIT))
        trades.appendleft(
            TradeRecord(
                pool_key=pool.key,
                kind=kind,
                trader=trader,
                amount=amount,
                gross=gross,
                fee=fee,
                new_supply=result.new_supply,
                new_reserve=result.new_reserve,
            )
        )

    # -- Queries -------------------------------------------------------------

    def quote(self, kind: CurveKind, identifier: str, amount: int = 1) -> Dict[str, Any]:
        pool = self.pool(kind, identifier)
        out: Dict[str, Any] = {
            "price": self.machine.quote_price(pool),
            "buy_cost": self.machine.quote_buy_cost(pool, amount),
        }
        if amount <= pool.total_supply:
            out["sell_refund"] = asdict(self.machine.quote_sell_refund(pool, amount))
        return out

    def pool_summary(self, kind: CurveKind, identifier: str) -> Dict[str, Any]:
        pool = self.pool(kind, identifier)
        summary = pool_to_dict(pool)
        summary.update(
            key=pool.key,
            namespace=pool.namespace,
            status=pool.status.value,
            current_price=self.machine.quote_price(pool),
            escrow_balance=self.ledger.balance_of(pool.key),
            digest=pool_digest(pool),
            holders=self.holdings.holder_count(pool.key),
            recent_trades=[_trade_to_dict(t) for t in self._recent.get(pool.key, ())],
        )
        return summary

    def holding(self, kind: CurveKind, identifier: str, trader: str) -> int:
        return self.holdings.get(self.pool(kind, identifier).key, trader)

    def recent_trades(self, kind: CurveKind, identifier: str) -> List[TradeRecord]:
        """Most recent trades first, at most `RECENT_TRADES_LIMIT`."""
        return list(self._recent.get(self.pool(kind, identifier).key, ()))

    def chart(self, kind: CurveKind, identifier: str, steps: int = 50) -> List[Tuple[int, int]]:
        pool = self.pool(kind, identifier)
        return sample_curve(pool.curve, pool.base_price, pool.total_supply, steps)

    # -- Request execution ---------------------------------------------------

    def execute(self, op: Mapping[str, Any]) -> VaultTxResult:
        """Parse and run one operation mapping; never raises on `PoolError`."""
        try:
            if not isinstance(op, Mapping):
                raise ValidationError("operation must be a mapping")
            name = _req_str(op, "op")
            handler = _HANDLERS.get(name)
            if handler is None:
                raise ValidationError(f"unknown op: {name!r}")
            actor_field, fn = handler
            signed: Optional[Tuple[str, int]] = None
            if self.config.require_signatures:
                signed = self._assert_signed(op, actor_field)
            effects = fn(self, op)
            if signed is not None:
                # Consumed only once the operation has committed.
                self.nonces.set_last(*signed)
            return VaultTxResult(ok=True, effects=effects)
        except PoolError as exc:
            logger.warning("op rejected: %s: %s", type(exc).__name__, exc)
            return VaultTxResult(ok=False, error=str(exc), code=type(exc).__name__)

    def _assert_signed(self, op: Mapping[str, Any], actor_field: str) -> Tuple[str, int]:
        """Verify signer, nonce and actor; returns (identity, nonce) to consume."""
        signer = op.get("signer")
        signature = op.get("signature")
        nonce = op.get("nonce")
        if not isinstance(signer, str) or not isinstance(signature, str):
            raise UnauthorizedError("signed request required (signer, signature)")
        if not isinstance(nonce, int) or isinstance(nonce, bool):
            raise UnauthorizedError("signed request requires an integer nonce")
        try:
            signer_key = normalize_identity(signer)
        except (TypeError, ValueError) as exc:
            raise UnauthorizedError(str(exc)) from exc
        expected = self.nonces.expected(signer_key)
        if nonce != expected:
            raise UnauthorizedError(f"nonce invalid: expected {expected}, got {nonce}")

        identity = verify_identity(op, signer=signer, signature=signature, chain_id=self.config.chain_id)
        actor = _req_str(op, actor_field)
        if actor.lower() != identity:
            raise UnauthorizedError(f"{actor_field} does not match the verified signer")
        return identity, nonce


def _trade_to_dict(trade: TradeRecord) -> Dict[str, Any]:
    return dict(asdict(trade), kind=trade.kind.value)


# -- Operation parsing -------------------------------------------------------

def _req_str(op: Mapping[str, Any], name: str) -> str:
    v = op.get(name)
    if not isinstance(v, str) or not v:
        raise ValidationError(f"{name} must be a non-empty string")
    return v


def _opt_str(op: Mapping[str, Any], name: str) -> str:
    v = op.get(name, "")
    if not isinstance(v, str):
        raise ValidationError(f"{name} must be a string")
    return v


def _req_int(op: Mapping[str, Any], name: str) -> int:
    v = op.get(name)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ValidationError(f"{name} must be an int")
    return v


def _opt_int(op: Mapping[str, Any], name: str) -> Optional[int]:
    if op.get(name) is None:
        return None
    return _req_int(op, name)


def _kind(op: Mapping[str, Any]) -> CurveKind:
    raw = _req_str(op, "kind")
    try:
        return CurveKind(raw.lower())
    except ValueError:
        raise ValidationError(f"unknown pool kind: {raw!r}") from None


def _op_create_linear(vault: Vault, op: Mapping[str, Any]) -> Dict[str, Any]:
    pool = vault.create_linear_pool(
        _req_str(op, "identifier"),
        _req_str(op, "creator_wallet"),
        _req_str(op, "authority"),
        base_price=_opt_int(op, "base_price"),
        slope=_opt_int(op, "slope"),
        display_name=_opt_str(op, "display_name"),
        metadata_uri=_opt_str(op, "metadata_uri"),
        created_at=_opt_int(op, "created_at") or 0,
    )
    return vault.pool_summary(pool.kind, pool.identifier)


def _op_create_exponential(vault: Vault, op: Mapping[str, Any]) -> Dict[str, Any]:
    pool = vault.create_exponential_pool(
        _req_str(op, "identifier"),
        _req_str(op, "creator_wallet"),
        _req_str(op, "authority"),
        parent_identifier=_opt_str(op, "parent_identifier"),
        base_price=_opt_int(op, "base_price"),
        growth_rate_bps=_opt_int(op, "growth_rate_bps"),
        display_name=_opt_str(op, "display_name"),
        metadata_uri=_opt_str(op, "metadata_uri"),
        created_at=_opt_int(op, "created_at") or 0,
    )
    return vault.pool_summary(pool.kind, pool.identifier)


def _op_buy(vault: Vault, op: Mapping[str, Any]) -> Dict[str, Any]:
    kind = _kind(op)
    identifier = _req_str(op, "identifier")
    result = vault.buy(
        kind,
        identifier,
        _req_str(op, "trader"),
        _req_int(op, "amount"),
        fee_recipient=op.get("fee_recipient"),
    )
    return dict(asdict(result), pool_key=vault.pool(kind, identifier).key)


def _op_sell(vault: Vault, op: Mapping[str, Any]) -> Dict[str, Any]:
    kind = _kind(op)
    identifier = _req_str(op, "identifier")
    result = vault.sell(
        kind,
        identifier,
        _req_str(op, "trader"),
        _req_int(op, "amount"),
        fee_recipient=op.get("fee_recipient"),
    )
    return dict(asdict(result), pool_key=vault.pool(kind, identifier).key)


def _op_set_active(vault: Vault, op: Mapping[str, Any]) -> Dict[str, Any]:
    kind = _kind(op)
    identifier = _req_str(op, "identifier")
    active = op.get("active")
    if not isinstance(active, bool):
        raise ValidationError("active must be a bool")
    vault.set_active(kind, identifier, _req_str(op, "caller"), active)
    return {"identifier": identifier, "is_active": active}


_HANDLERS: Dict[str, Tuple[str, Callable[[Vault, Mapping[str, Any]], Dict[str, Any]]]] = {
    "create_linear_pool": ("authority", _op_create_linear),
    "create_exponential_pool": ("authority", _op_create_exponential),
    "buy": ("trader", _op_buy),
    "sell": ("trader", _op_sell),
    "set_active": ("caller", _op_set_active),
}
