"""Bitstream packing and text renderings."""

import numpy as np
import numpy.typing as npt

__all__ = ["pack_bits", "bits_to_hex", "bits_to_text", "mask_trailing"]


def mask_trailing(data: bytes, n_bits: int) -> bytes:
    """Zero the unused low bits of the last byte so ``data`` holds exactly ``n_bits``."""
    keep = n_bits % 8
    if keep == 0 or not data:
        return data
    out = bytearray(data)
    out[-1] &= (0xFF << (8 - keep)) & 0xFF
    return bytes(out)


def pack_bits(bits: npt.ArrayLike) -> bytes:
    """Pack 0/1 values MSB-first; a trailing partial byte is zero-padded."""
    arr = np.asarray(bits, dtype=np.uint8)
    if arr.size == 0:
        return b""
    return np.packbits(arr).tobytes()


def bits_to_hex(bits: npt.ArrayLike) -> str:
    return pack_bits(bits).hex()


def bits_to_text(bits: npt.ArrayLike) -> str:
    """Render bits as a string of ASCII '0'/'1'."""
    arr = np.asarray(bits, dtype=np.uint8)
    return (arr + ord("0")).astype(np.uint8).tobytes().decode("ascii")
