"""Hash commitments recorded on transactions and anchored in the chain.

- data_hash: SHA256(path_digest)
- bits_hash: SHA256(bitstream stored one byte per bit)
- published: SHA256(bits_hash_raw || data_hash_raw || "published-hash-v2")

All three are lowercase hex. ``published`` is the value a Block anchors.
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from rng_chaos.utils import sha256_hex

__all__ = ["PUBLISHED_LABEL", "Commitments", "data_hash", "bits_hash", "published_hash", "commit"]

PUBLISHED_LABEL = b"published-hash-v2"


@dataclass(frozen=True)
class Commitments:
    data_hash: str
    bits_hash: str
    published: str


def data_hash(path_digest: bytes) -> str:
    return sha256_hex(path_digest)


def bits_hash(bits: npt.NDArray[np.uint8]) -> str:
    """Hash the unpacked bitstream, one 0x00/0x01 byte per bit."""
    return sha256_hex(np.ascontiguousarray(bits, dtype=np.uint8).tobytes())


def published_hash(bits_hex: str, data_hex: str) -> str:
    return sha256_hex(bytes.fromhex(bits_hex), bytes.fromhex(data_hex), PUBLISHED_LABEL)


def commit(path_digest: bytes, bits: npt.NDArray[np.uint8]) -> Commitments:
    """Compute all three commitments for one generation."""
    dh = data_hash(path_digest)
    bh = bits_hash(bits)
    return Commitments(data_hash=dh, bits_hash=bh, published=published_hash(bh, dh))
