"""
Token holdings per pool: pool key -> trader -> tokens held.

Pools only record aggregate supply. This table attributes that supply to
the traders who bought it.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from ..core.errors import InsufficientSupplyError
from .balances import BalanceTable
from .pools import Amount, Identity


class HoldingsTable:
    def __init__(self) -> None:
        self._pools: Dict[str, BalanceTable] = {}

    def get(self, pool_key: str, trader: Identity) -> Amount:
        table = self._pools.get(pool_key)
        return table.get(trader) if table is not None else 0

    def credit(self, pool_key: str, trader: Identity, amount: Amount) -> None:
        self._pools.setdefault(pool_key, BalanceTable()).add(trader, amount)

    def debit(self, pool_key: str, trader: Identity, amount: Amount) -> None:
        """
        Remove `amount` tokens from `trader`'s position.

        Raises:
            InsufficientSupplyError: If the trader holds fewer than `amount` tokens
        """
        self.require(pool_key, trader, amount)
        self._pools[pool_key].subtract(trader, amount)

    def require(self, pool_key: str, trader: Identity, amount: Amount) -> None:
        held = self.get(pool_key, trader)
        if amount > held:
            raise InsufficientSupplyError(f"{trader} holds {held} tokens, cannot sell {amount}")

    def holders(self, pool_key: str) -> List[Tuple[Identity, Amount]]:
        table = self._pools.get(pool_key)
        return list(table.items()) if table is not None else []

    def holder_count(self, pool_key: str) -> int:
        table = self._pools.get(pool_key)
        return len(table) if table is not None else 0

    def total(self, pool_key: str) -> Amount:
        table = self._pools.get(pool_key)
        return table.total() if table is not None else 0
