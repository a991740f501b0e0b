"""
In-memory pool record store.

Records are addressed by `compute_pool_key(namespace, identifier)`. A key can
be created once; records are never deleted.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from ..core.errors import PoolExistsError, PoolNotFoundError
from .pools import Pool, compute_pool_key


class PoolStore:
    def __init__(self) -> None:
        self._pools: Dict[str, Pool] = {}

    def create(self, pool: Pool) -> str:
        """Insert a new record. Raises PoolExistsError if the key is taken."""
        key = pool.key
        if key in self._pools:
            raise PoolExistsError(f"pool already exists: {pool.namespace}/{pool.identifier}")
        self._pools[key] = pool
        return key

    def get(self, key: str) -> Pool:
        try:
            return self._pools[key]
        except KeyError:
            raise PoolNotFoundError(f"no pool for key {key}") from None

    def find(self, namespace: str, identifier: str) -> Optional[Pool]:
        return self._pools.get(compute_pool_key(namespace, identifier))

    def lookup(self, namespace: str, identifier: str) -> Pool:
        pool = self.find(namespace, identifier)
        if pool is None:
            raise PoolNotFoundError(f"no pool {namespace}/{identifier}")
        return pool

    def update(self, pool: Pool) -> None:
        """Write back a record that already exists (in-place field updates)."""
        key = pool.key
        if key not in self._pools:
            raise PoolNotFoundError(f"no pool for key {key}")
        self._pools[key] = pool

    def keys(self) -> List[str]:
        return sorted(self._pools)

    def __contains__(self, key: object) -> bool:
        return key in self._pools

    def __iter__(self) -> Iterator[Pool]:
        for key in self.keys():
            yield self._pools[key]

    def __len__(self) -> int:
        return len(self._pools)

    def __repr__(self) -> str:
        return f"PoolStore({len(self._pools)} pools)"
