"""Records, results and collaborator interfaces for the pool engine.

Records are frozen dataclasses emitted to an `EventSink` after a commit.
`Ledger` and `EventSink` are the two capabilities the engine consumes; both
are injected so the engine runs against in-memory fakes in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique


@unique
class Event(Enum):
    POOL_CREATED = "PoolCreated"
    TOKENS_PURCHASED = "TokensPurchased"
    TOKENS_SOLD = "TokensSold"
    STATUS_CHANGED = "StatusChanged"


@unique
class TradeKind(Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class PoolCreated:
    pool_key: str
    namespace: str
    identifier: str
    parent_identifier: str
    creator_wallet: str
    authority: str
    base_price: int
    curve_param: int

    event = Event.POOL_CREATED


@dataclass(frozen=True)
class TradeRecord:
    """Emitted after a committed buy or sell.

    `gross` is the curve integral (cost for a buy, refund for a sell) before
    the fee split.
    """

    pool_key: str
    kind: TradeKind
    trader: str
    amount: int
    gross: int
    fee: int
    new_supply: int
    new_reserve: int

    @property
    def event(self) -> Event:
        return Event.TOKENS_PURCHASED if self.kind is TradeKind.BUY else Event.TOKENS_SOLD


@dataclass(frozen=True)
class StatusChanged:
    pool_key: str
    is_active: bool
    changed_by: str

    event = Event.STATUS_CHANGED


@dataclass(frozen=True)
class BuyResult:
    gross_cost: int
    fee: int
    pool_deposit: int
    new_supply: int
    new_reserve: int

    @property
    def total_paid(self) -> int:
        return self.pool_deposit + self.fee


@dataclass(frozen=True)
class SellResult:
    gross_refund: int
    fee: int
    net_refund: int
    new_supply: int
    new_reserve: int


@dataclass(frozen=True)
class SellQuote:
    gross: int
    fee: int
    net: int


class Ledger:
    """Settlement-asset transfer capability.

    Both methods are atomic: the amount moves in full or `TransferError` is
    raised.
    """

    def transfer(self, payer: str, payee: str, amount: int) -> None:
        """Payer-initiated transfer (buy-side inflows)."""
        raise NotImplementedError

    def debit_credit(self, escrow: str, payee: str, amount: int) -> None:
        """Debit an escrow account held by the engine (sell-side outflows)."""
        raise NotImplementedError


class EventSink:
    """Fire-and-forget sink for records."""

    def emit(self, record: object) -> None:
        raise NotImplementedError
