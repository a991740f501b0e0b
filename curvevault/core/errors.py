"""Exception types for the bonding-curve vault.

Every error is fail-fast: the engine never recovers internally, and a raised
error guarantees the pool record was not mutated.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base class for all vault errors."""


class ValidationError(PoolError, ValueError):
    """Raised for zero/negative amounts, length limits and malformed inputs."""


class PoolOverflowError(PoolError, OverflowError):
    """Raised when a checked arithmetic step leaves its integer range."""


class InsufficientSupplyError(PoolError):
    """Raised when a sell exceeds the circulating supply."""


class InsufficientReserveError(PoolError):
    """Raised when the reserve cannot cover a sell's refund plus fee."""


class InactivePoolError(PoolError):
    """Raised when trading is attempted on an inactive pool."""


class UnauthorizedError(PoolError):
    """Raised when a management operation is attempted by a non-creator identity."""


class InvalidCounterpartyError(PoolError):
    """Raised when a supplied fee recipient does not match the pool's creator wallet."""


class TransferError(PoolError):
    """Raised by ledger implementations when a transfer cannot be applied."""


class PoolExistsError(PoolError):
    """Raised when creating a pool whose key is already taken."""


class PoolNotFoundError(PoolError, KeyError):
    """Raised when a pool key has no record."""
