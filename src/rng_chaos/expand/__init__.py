"""Digest-to-bitstream expansion and the HMAC-DRBG.

Example:
    >>> from rng_chaos.expand import expand_bits
    >>> from rng_chaos.domain import WhiteningMode
    >>> expand_bits(b"\\x00" * 32, 9, WhiteningMode.RAW).shape
    (9,)
"""

from .drbg import HmacDrbg
from .packing import bits_to_hex, bits_to_text, mask_trailing, pack_bits
from .whiten import AES_IV_LABEL, AES_KEY_LABEL, EXPAND_LABEL, FALLBACK_LABEL, expand_bits, keystream

__all__ = [
    # Expansion
    "expand_bits",
    "keystream",
    "EXPAND_LABEL",
    "FALLBACK_LABEL",
    "AES_KEY_LABEL",
    "AES_IV_LABEL",
    # DRBG
    "HmacDrbg",
    # Packing
    "pack_bits",
    "bits_to_hex",
    "bits_to_text",
    "mask_trailing",
]
