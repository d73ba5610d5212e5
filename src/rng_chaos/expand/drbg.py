"""HMAC-DRBG over HMAC-SHA256.

Follows the NIST SP 800-90A construction without reseed counters or
prediction resistance: output is a deterministic function of the seed
material and the sequence of ``generate`` calls. Successive calls on one
instance continue the stream through the state ratchet; they never repeat
the output of a fresh instance.
"""

import hashlib
import hmac

__all__ = ["HmacDrbg"]

_OUTLEN = 32


def _hmac(key: bytes, data: bytes) -> bytes:
    return hmac.new(key, data, hashlib.sha256).digest()


class HmacDrbg:
    """Deterministic byte generator keyed by seed material."""

    def __init__(self, seed_material: bytes):
        self._key = b"\x00" * _OUTLEN
        self._value = b"\x01" * _OUTLEN
        self.update(seed_material)

    def update(self, data: bytes = b"") -> None:
        """Mix ``data`` into the (K, V) state."""
        self._key = _hmac(self._key, self._value + b"\x00" + data)
        self._value = _hmac(self._key, self._value)
        if data:
            self._key = _hmac(self._key, self._value + b"\x01" + data)
            self._value = _hmac(self._key, self._value)

    def generate(self, n: int) -> bytes:
        """Return ``n`` bytes and ratchet the state forward."""
        if n <= 0:
            return b""
        out = bytearray()
        while len(out) < n:
            self._value = _hmac(self._key, self._value)
            out += self._value
        self.update(b"")
        return bytes(out[:n])
