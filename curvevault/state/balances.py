"""
Settlement-asset balances, one entry per account.

Accounts are wallet identities or pool keys (a pool's escrow account is
addressed by its key). Only non-zero balances are stored.
"""

from typing import Dict, Iterator, Optional, Tuple

from .pools import Amount, Identity


class BalanceTable:
    """
    Sparse map of account -> settlement units.

    `items()` is sorted by account so snapshots and dumps are deterministic.
    """

    def __init__(self, initial: Optional[Dict[Identity, Amount]] = None):
        self._balances: Dict[Identity, Amount] = {}
        for account, units in (initial or {}).items():
            self.set(account, units)

    def get(self, account: Identity) -> Amount:
        return self._balances.get(account, 0)

    def set(self, account: Identity, units: Amount) -> None:
        """
        Overwrite the balance of `account`; zero removes the entry.

        Raises:
            ValueError: If units is negative
        """
        if units < 0:
            raise ValueError(f"negative balance for {account}: {units}")
        if units:
            self._balances[account] = units
        else:
            self._balances.pop(account, None)

    def add(self, account: Identity, delta: Amount) -> None:
        """
        Apply a signed delta.

        Raises:
            ValueError: If the balance would go below zero
        """
        updated = self.get(account) + delta
        if updated < 0:
            raise ValueError(f"{account} would be overdrawn by {-updated}")
        self.set(account, updated)

    def subtract(self, account: Identity, units: Amount) -> None:
        if units < 0:
            raise ValueError(f"subtract needs a non-negative amount: {units}")
        self.add(account, -units)

    def total(self) -> Amount:
        return sum(self._balances.values())

    def items(self) -> Iterator[Tuple[Identity, Amount]]:
        return iter(sorted(self._balances.items()))

    def copy(self) -> "BalanceTable":
        return BalanceTable(dict(self._balances))

    def __len__(self) -> int:
        return len(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} accounts)"
