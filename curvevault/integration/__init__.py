"""
Host-side adapters: ledger, events, identity, configuration and the vault service.
"""

from .config import VaultConfig, config_from_mapping, load_config
from .events import EventLog, LoggingEventSink
from .ledger import InMemoryLedger
from .vault import Vault, VaultTxResult

__all__ = [
    "VaultConfig",
    "config_from_mapping",
    "load_config",
    "EventLog",
    "LoggingEventSink",
    "InMemoryLedger",
    "Vault",
    "VaultTxResult",
]
