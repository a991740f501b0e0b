"""
Compatibility entry point for the first-generation single-curve initializer.

Early deployments only had linear pools keyed by a video id; this forwards to
`Vault.create_linear_pool` with the default curve parameters.
"""

from __future__ import annotations

from ..state.pools import Pool
from .vault import Vault


def initialize_pool(vault: Vault, youtube_id: str, creator_wallet: str, authority: str) -> Pool:
    return vault.create_linear_pool(youtube_id, creator_wallet, authority)
