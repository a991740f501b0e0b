"""
Per-signer request nonces.

Each verified signer identity maps to the last nonce the vault accepted from
it. Signed requests must carry exactly `last + 1`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from .pools import Identity

MAX_NONCE = 0xFFFFFFFF


@dataclass
class NonceTable:
    """Mutable mapping: signer identity -> last accepted nonce (0 if none)."""

    _last: Dict[Identity, int] = field(default_factory=dict)

    def get_last(self, identity: Identity) -> int:
        return self._last.get(identity.lower(), 0)

    def expected(self, identity: Identity) -> int:
        return self.get_last(identity) + 1

    def set_last(self, identity: Identity, last_nonce: int) -> None:
        if not isinstance(last_nonce, int) or isinstance(last_nonce, bool) or last_nonce < 0:
            raise TypeError("last_nonce must be a non-negative int")
        if last_nonce > MAX_NONCE:
            raise TypeError("last_nonce must fit in u32")
        self._last[identity.lower()] = last_nonce

    def get_all(self) -> Mapping[Identity, int]:
        return dict(sorted(self._last.items()))
