"""Exception hierarchy for the rng-chaos pipeline.

All project errors derive from RngChaosError, which carries a human-readable
message plus an optional context dictionary for structured logging.

Transient entropy failures are deliberately absent from this hierarchy: remote
fetches report failures as FetchOutcome values and never raise.

Example:
--------
>>> from rng_chaos.exceptions import TransactionNotFoundError
>>> try:
...     ledger.require_transaction("missing-id")
... except TransactionNotFoundError as e:
...     print(e.message, e.context)
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "RngChaosError",
    "ConfigError",
    "LedgerError",
    "SnapshotCorruptError",
    "TransactionNotFoundError",
]


class RngChaosError(Exception):
    """Base error for all rng-chaos failures."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in sorted(self.context.items()))
        return f"{self.message} ({details})"


class ConfigError(RngChaosError):
    """Settings file missing, unreadable, or failing validation."""

    pass


class LedgerError(RngChaosError):
    """Error while mutating or persisting the ledger."""

    pass


class SnapshotCorruptError(LedgerError):
    """Persisted snapshot is unparseable and could not be moved aside."""

    pass


class TransactionNotFoundError(LedgerError):
    """Requested transaction id is not present in the ledger."""

    pass
