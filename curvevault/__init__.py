"""
curvevault: deterministic bonding-curve token vault.

Public API:
- `PoolStateMachine`: buy / sell / quotes / activity toggle over a `Pool`
- `LinearCurve`, `ExponentialCurve`: curve families
- `Vault`: store + ledger + events wired around the state machine
"""

from .core.curves import CurveKind, ExponentialCurve, LinearCurve
from .core.engine import PoolStateMachine
from .core.types import BuyResult, SellQuote, SellResult, TradeKind, TradeRecord
from .state.pools import Pool, PoolStatus
from .integration.vault import Vault, VaultTxResult

__all__ = [
    "CurveKind",
    "ExponentialCurve",
    "LinearCurve",
    "PoolStateMachine",
    "BuyResult",
    "SellQuote",
    "SellResult",
    "TradeKind",
    "TradeRecord",
    "Pool",
    "PoolStatus",
    "Vault",
    "VaultTxResult",
]
