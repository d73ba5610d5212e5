"""Block hashing and chain validation.

A block's hash is SHA256 over the colon-joined string
``index:timestamp:tx_id:data_hash:prev_hash``; the genesis block's
``prev_hash`` is empty. These helpers are pure and operate on plain
sequences, leaving locking to the Ledger.
"""

import time
from typing import Optional, Sequence

from rng_chaos.domain import Block
from rng_chaos.utils import sha256_hex

__all__ = ["compute_block_hash", "build_block", "validate_chain"]


def compute_block_hash(index: int, timestamp: int, tx_id: str, data_hash: str, prev_hash: str) -> str:
    return sha256_hex(f"{index}:{timestamp}:{tx_id}:{data_hash}:{prev_hash}".encode("utf-8"))


def build_block(chain: Sequence[Block], tx_id: str, published: str, timestamp: Optional[int] = None) -> Block:
    """Build the block that would extend ``chain`` with one transaction.

    Args:
        chain: Current chain (not modified)
        tx_id: Anchored transaction id
        published: The transaction's published hash
        timestamp: Unix seconds; defaults to now

    Returns:
        Block linked to the last block of ``chain``
    """
    index = len(chain)
    prev_hash = chain[-1].hash if chain else ""
    ts = int(time.time()) if timestamp is None else timestamp
    return Block(
        index=index,
        timestamp=ts,
        tx_id=tx_id,
        data_hash=published,
        prev_hash=prev_hash,
        hash=compute_block_hash(index, ts, tx_id, published, prev_hash),
    )


def validate_chain(chain: Sequence[Block]) -> bool:
    """Check every stored hash and back-link, front to back."""
    for i, block in enumerate(chain):
        expected = compute_block_hash(block.index, block.timestamp, block.tx_id, block.data_hash, block.prev_hash)
        if block.hash != expected:
            return False
        if i > 0 and block.prev_hash != chain[i - 1].hash:
            return False
    return True
