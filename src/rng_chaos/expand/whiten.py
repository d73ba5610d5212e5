"""Expand a 32-byte path digest into an arbitrary-length bitstream.

Every mode is deterministic in (digest, bit_count, mode) and returns
exactly ``max(bit_count, 0)`` bits, unpacked MSB-first from a byte stream:

- raw:  SHA256(digest || "chaos-expand-v1" || counter_le8) blocks
- lfsr: raw blocks, each XORed with a xorshift32 keystream seeded from the
        block's own first four bytes
- drbg: HMAC-DRBG seeded with the digest
- aes:  AES-256-CTR keystream, key and IV derived from the digest

Bits are returned as a numpy uint8 array holding 0/1 values.
"""

import hashlib
import logging
import math

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
import numpy as np
import numpy.typing as npt

from rng_chaos.domain import WhiteningMode

from .drbg import HmacDrbg

__all__ = [
    "EXPAND_LABEL",
    "FALLBACK_LABEL",
    "AES_KEY_LABEL",
    "AES_IV_LABEL",
    "expand_bits",
    "keystream",
]

logger = logging.getLogger(__name__)

EXPAND_LABEL = b"chaos-expand-v1"
FALLBACK_LABEL = b"chaos-expand-v2"
AES_KEY_LABEL = b"aes-ctr-key-v1"
AES_IV_LABEL = b"aes-ctr-iv-v1"

_LFSR_SEED_MASK = 0xA5A5A5A5
_MASK32 = 0xFFFFFFFF


def _hash_blocks(digest: bytes, n_bytes: int, label: bytes) -> bytes:
    out = bytearray()
    counter = 0
    while len(out) < n_bytes:
        out += hashlib.sha256(digest + label + counter.to_bytes(8, "little")).digest()
        counter += 1
    return bytes(out[:n_bytes])


def _lfsr_block(block: bytes) -> bytes:
    state = int.from_bytes(block[:4], "little") ^ _LFSR_SEED_MASK
    out = bytearray(block)
    for i in range(len(out)):
        state ^= (state << 13) & _MASK32
        state ^= state >> 17
        state ^= (state << 5) & _MASK32
        out[i] ^= state & 0xFF
    return bytes(out)


def _lfsr_blocks(digest: bytes, n_bytes: int) -> bytes:
    out = bytearray()
    counter = 0
    while len(out) < n_bytes:
        block = hashlib.sha256(digest + EXPAND_LABEL + counter.to_bytes(8, "little")).digest()
        out += _lfsr_block(block)
        counter += 1
    return bytes(out[:n_bytes])


def _aes_ctr(digest: bytes, n_bytes: int) -> bytes:
    key = hashlib.sha256(digest + AES_KEY_LABEL).digest()
    iv = hashlib.sha256(digest + AES_IV_LABEL).digest()[:16]
    try:
        encryptor = Cipher(algorithms.AES(key), modes.CTR(iv)).encryptor()
    except (ValueError, UnsupportedAlgorithm) as e:
        logger.warning(f"AES-CTR unavailable ({e}); falling back to hash expansion")
        return _hash_blocks(digest, n_bytes, FALLBACK_LABEL)
    # Encrypting zeros yields the raw keystream
    return encryptor.update(b"\x00" * n_bytes) + encryptor.finalize()


def keystream(digest: bytes, n_bytes: int, mode: WhiteningMode) -> bytes:
    """Byte stream underlying ``expand_bits`` for ``mode``."""
    if n_bytes <= 0:
        return b""
    mode = WhiteningMode.parse(mode)
    if mode is WhiteningMode.RAW:
        return _hash_blocks(digest, n_bytes, EXPAND_LABEL)
    if mode is WhiteningMode.LFSR:
        return _lfsr_blocks(digest, n_bytes)
    if mode is WhiteningMode.DRBG:
        return HmacDrbg(digest).generate(n_bytes)
    return _aes_ctr(digest, n_bytes)


def expand_bits(digest: bytes, bit_count: int, mode: WhiteningMode) -> npt.NDArray[np.uint8]:
    """Expand ``digest`` into ``bit_count`` bits.

    Args:
        digest: 32-byte path digest
        bit_count: Number of bits to produce (non-positive gives an empty array)
        mode: Whitening strategy

    Returns:
        uint8 array of 0/1 values, MSB-first per underlying byte
    """
    if bit_count <= 0:
        return np.zeros(0, dtype=np.uint8)

    stream = keystream(digest, math.ceil(bit_count / 8), mode)
    bits = np.unpackbits(np.frombuffer(stream, dtype=np.uint8))
    return bits[:bit_count].copy()
