"""JSON snapshot persistence for the ledger.

The snapshot is one document ``{"tx_store": {...}, "chain": [...]}``.
Transactions are written without their trajectories. Writes go to a
temporary file beside the target and are renamed into place.

A snapshot that fails to parse or validate is moved aside to
``<path>.corrupt-YYYYmmdd-HHMMSS`` and loading continues with an empty
ledger. If the bad file cannot be moved, SnapshotCorruptError is raised so
the caller never silently overwrites it.
"""

from datetime import datetime
import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from rng_chaos.domain import LedgerSnapshot
from rng_chaos.exceptions import SnapshotCorruptError
from rng_chaos.utils import read_json, write_json_atomic

__all__ = ["save_snapshot", "load_snapshot", "corrupt_backup_path"]

logger = logging.getLogger(__name__)


def corrupt_backup_path(path: Path, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return path.with_name(f"{path.name}.corrupt-{stamp}")


def save_snapshot(path: Path | str, snapshot: LedgerSnapshot) -> None:
    """Atomically write ``snapshot`` to ``path``.

    Raises:
        OSError: If the write or rename fails
    """
    write_json_atomic(path, snapshot.model_dump_json(indent=2))


def load_snapshot(path: Path | str) -> LedgerSnapshot:
    """Load a snapshot, returning an empty one when the file is missing or corrupt.

    Raises:
        SnapshotCorruptError: If a corrupt file cannot be moved aside
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No ledger snapshot at {path}; starting empty")
        return LedgerSnapshot()

    try:
        snapshot = LedgerSnapshot.model_validate(read_json(path))
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        backup = corrupt_backup_path(path)
        try:
            os.replace(path, backup)
        except OSError as move_err:
            raise SnapshotCorruptError(
                "Corrupt ledger snapshot could not be moved aside",
                context={"path": str(path), "parse_error": str(e), "move_error": str(move_err)},
            ) from e
        logger.error(f"Moved corrupt ledger snapshot {path} to {backup}: {e}")
        return LedgerSnapshot()

    logger.info(f"Loaded ledger snapshot: {len(snapshot.tx_store)} transactions, {len(snapshot.chain)} blocks")
    return snapshot
