"""Whitening mode selection.

The expander supports four interchangeable strategies. External strings
(including the historical API names ``off``, ``on`` and ``hmac``) are mapped
onto WhiteningMode at the boundary; anything unrecognized, such as the
historical ``hybrid``, becomes DEFAULT_WHITENING.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = ["WhiteningMode", "DEFAULT_WHITENING"]


class WhiteningMode(str, Enum):
    """Digest-to-bitstream strategy."""

    RAW = "raw"
    LFSR = "lfsr"
    DRBG = "drbg"
    AES = "aes"

    @classmethod
    def parse(cls, value: Optional[str]) -> "WhiteningMode":
        """Map a free-form mode string onto a variant, defaulting to AES."""
        if isinstance(value, cls):
            return value
        key = (value or "").strip().lower()
        return _WHITENING_ALIASES.get(key, DEFAULT_WHITENING)


DEFAULT_WHITENING = WhiteningMode.AES

_WHITENING_ALIASES = {
    "raw": WhiteningMode.RAW,
    "off": WhiteningMode.RAW,
    "lfsr": WhiteningMode.LFSR,
    "on": WhiteningMode.LFSR,
    "drbg": WhiteningMode.DRBG,
    "hmac": WhiteningMode.DRBG,
    "aes": WhiteningMode.AES,
    "aes-ctr": WhiteningMode.AES,
}
