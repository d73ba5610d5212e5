"""Append-only hash-chained ledger.

The Ledger owns the transaction map and the block chain, each behind its
own reader-writer lock. The two locks are never held together across a
blocking call: ``append`` registers the transaction, extends the chain,
releases the chain lock, and only then persists a snapshot under a
separate save lock. A failed save is logged and the append stands. Each
transaction id can be appended only once.

Example:
    >>> ledger = Ledger.load("store.json")
    >>> block = ledger.append(tx)
    >>> ledger.validate_chain()
    True
"""

import logging
from pathlib import Path
import threading
from typing import Dict, List, Optional

from rng_chaos.domain import Block, LedgerSnapshot, Transaction, TransactionSummary, VerificationReport
from rng_chaos.exceptions import LedgerError, TransactionNotFoundError
from rng_chaos.reproduce import reproduce_transaction

from .chain import build_block, validate_chain
from .locks import ReadWriteLock
from .store import load_snapshot, save_snapshot

__all__ = ["Ledger"]

logger = logging.getLogger(__name__)


class Ledger:
    """Transaction store plus block chain.

    Args:
        store_path: Snapshot file written after every append; None keeps
            the ledger in memory only
    """

    def __init__(self, store_path: Optional[Path | str] = None):
        self.store_path = Path(store_path) if store_path is not None else None
        self._txs: Dict[str, Transaction] = {}
        self._chain: List[Block] = []
        self._tx_lock = ReadWriteLock()
        self._chain_lock = ReadWriteLock()
        self._save_lock = threading.Lock()

    @classmethod
    def load(cls, path: Path | str) -> "Ledger":
        """Open the ledger persisted at ``path`` (empty if missing or corrupt).

        Raises:
            SnapshotCorruptError: If a corrupt snapshot cannot be moved aside
        """
        ledger = cls(path)
        snapshot = load_snapshot(path)
        ledger._txs = dict(snapshot.tx_store)
        ledger._chain = list(snapshot.chain)
        return ledger

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def append(self, tx: Transaction) -> Block:
        """Register ``tx`` and anchor its published hash in a new block.

        Raises:
            LedgerError: If a transaction with the same id is already recorded
        """
        with self._tx_lock.write_locked():
            if tx.id in self._txs:
                raise LedgerError("Transaction already recorded", context={"tx_id": tx.id})
            self._txs[tx.id] = tx

        with self._chain_lock.write_locked():
            block = build_block(self._chain, tx.id, tx.published)
            self._chain.append(block)

        if self.store_path is not None:
            try:
                self.save()
            except OSError as e:
                logger.error(f"Failed to save ledger snapshot to {self.store_path}: {e}")
            else:
                logger.info(f"Appended block {block.index} (tx={tx.id}) and saved ledger")
        else:
            logger.debug(f"Appended block {block.index} (tx={tx.id})")
        return block

    def snapshot(self) -> LedgerSnapshot:
        """Copy the current state, transactions stripped of trajectories."""
        with self._tx_lock.read_locked():
            tx_store = {tx_id: tx.stripped() for tx_id, tx in self._txs.items()}
        with self._chain_lock.read_locked():
            chain = list(self._chain)
        return LedgerSnapshot(tx_store=tx_store, chain=chain)

    def save(self, path: Optional[Path | str] = None) -> None:
        """Persist a snapshot atomically.

        Saves are serialized and each one snapshots the state inside the
        lock, so the last write to land always carries the newest state.

        Raises:
            ValueError: If no path is given and the ledger has no store_path
            OSError: If writing fails
        """
        target = Path(path) if path is not None else self.store_path
        if target is None:
            raise ValueError("Ledger has no store_path; pass a path to save()")
        with self._save_lock:
            save_snapshot(target, self.snapshot())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        with self._chain_lock.read_locked():
            return len(self._chain)

    def blocks(self) -> List[Block]:
        with self._chain_lock.read_locked():
            return list(self._chain)

    def find_block(self, tx_id: str) -> Optional[Block]:
        with self._chain_lock.read_locked():
            for block in self._chain:
                if block.tx_id == tx_id:
                    return block
        return None

    def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        with self._tx_lock.read_locked():
            return self._txs.get(tx_id)

    def require_transaction(self, tx_id: str) -> Transaction:
        """Like get_transaction, but raises for unknown ids.

        Raises:
            TransactionNotFoundError: If no transaction has ``tx_id``
        """
        tx = self.get_transaction(tx_id)
        if tx is None:
            raise TransactionNotFoundError("Transaction not found", context={"tx_id": tx_id})
        return tx

    def list_transactions(self) -> List[TransactionSummary]:
        """Summaries of every transaction, oldest first."""
        with self._tx_lock.read_locked():
            txs = list(self._txs.values())
        return [tx.summary() for tx in sorted(txs, key=lambda t: t.created_at)]

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def validate_chain(self) -> bool:
        with self._chain_lock.read_locked():
            return validate_chain(self._chain)

    def verify_transaction(self, tx_id: str) -> VerificationReport:
        """Re-derive ``tx_id`` from its seed and provenance and compare.

        The simulation runs without any lock held.
        """
        chain_valid = self.validate_chain()
        tx = self.get_transaction(tx_id)
        if tx is None:
            return VerificationReport(tx_id=tx_id, tx_found=False, chain_valid=chain_valid)

        rebuilt = reproduce_transaction(tx).commitments
        with self._chain_lock.read_locked():
            anchored = any(block.data_hash == tx.published for block in self._chain)

        report = VerificationReport(
            tx_id=tx_id,
            tx_found=True,
            chain_valid=chain_valid,
            data_hash_match=rebuilt.data_hash == tx.data_hash,
            bits_hash_match=rebuilt.bits_hash == tx.bits_hash,
            published_in_chain=anchored,
        )
        if not report.verified:
            logger.warning(f"Verification failed for tx {tx_id}: {report.model_dump()}")
        return report
