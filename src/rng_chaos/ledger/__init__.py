"""Hash-chained transaction ledger with JSON persistence.

Example:
    >>> from rng_chaos.ledger import Ledger
    >>> ledger = Ledger()
    >>> len(ledger)
    0
"""

from .chain import build_block, compute_block_hash, validate_chain
from .core import Ledger
from .locks import ReadWriteLock
from .store import corrupt_backup_path, load_snapshot, save_snapshot

__all__ = [
    # Ledger
    "Ledger",
    # Chain
    "compute_block_hash",
    "build_block",
    "validate_chain",
    # Persistence
    "save_snapshot",
    "load_snapshot",
    "corrupt_backup_path",
    # Concurrency
    "ReadWriteLock",
]
