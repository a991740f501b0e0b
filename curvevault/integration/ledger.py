"""
In-memory settlement ledger.

Implements both transfer modes the engine consumes:
- `transfer(payer, payee, amount)`: payer-initiated (buy-side inflows).
- `debit_credit(escrow, payee, amount)`: direct debit of a pool escrow account
  held by the vault (sell-side outflows).

Escrow accounts are registered with `open_escrow(pool_key)` and cannot
initiate payer transfers. Every call is atomic: it either moves the full
amount or raises `TransferError` without touching any balance.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Set

from ..core.errors import TransferError
from ..core.types import Ledger
from ..state.balances import BalanceTable

logger = logging.getLogger(__name__)


def _require_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise TransferError(f"transfer amount must be a non-negative int, got {amount!r}")


class LedgerSnapshot:
    """Opaque saved ledger state for `InMemoryLedger.restore`."""

    def __init__(self, balances: BalanceTable, escrows: Set[str]) -> None:
        self.balances = balances
        self.escrows = escrows


class InMemoryLedger(Ledger):
    def __init__(self, balances: Optional[BalanceTable] = None, *, escrows: Iterable[str] = ()) -> None:
        self._balances = balances if balances is not None else BalanceTable()
        self._escrows: Set[str] = set(escrows)

    @property
    def balances(self) -> BalanceTable:
        return self._balances

    def balance_of(self, who: str) -> int:
        return self._balances.get(who)

    def deposit(self, who: str, amount: int) -> None:
        """Mint settlement units to `who` (funding wallets in tests and demos)."""
        _require_amount(amount)
        self._balances.add(who, amount)

    def open_escrow(self, key: str) -> None:
        self._escrows.add(key)

    def is_escrow(self, key: str) -> bool:
        return key in self._escrows

    def _move(self, source: str, payee: str, amount: int) -> None:
        available = self._balances.get(source)
        if available < amount:
            raise TransferError(f"insufficient funds: {source} has {available}, needs {amount}")
        self._balances.subtract(source, amount)
        self._balances.add(payee, amount)

    def transfer(self, payer: str, payee: str, amount: int) -> None:
        _require_amount(amount)
        if payer in self._escrows:
            raise TransferError(f"escrow account {payer} cannot initiate a transfer")
        self._move(payer, payee, amount)
        logger.debug("transfer %s -> %s: %d", payer, payee, amount)

    def debit_credit(self, escrow: str, payee: str, amount: int) -> None:
        _require_amount(amount)
        if escrow not in self._escrows:
            raise TransferError(f"{escrow} is not an escrow account")
        self._move(escrow, payee, amount)
        logger.debug("escrow debit %s -> %s: %d", escrow, payee, amount)

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(self._balances.copy(), set(self._escrows))

    def restore(self, snap: LedgerSnapshot) -> None:
        self._balances = snap.balances.copy()
        self._escrows = set(snap.escrows)

    def __repr__(self) -> str:
        return f"InMemoryLedger({len(self._balances)} accounts, {len(self._escrows)} escrows)"
