"""Local entropy sources: operating-system randomness and timing jitter.

Both sources return raw bytes; seed interpretation (first 8 bytes,
little-endian, signed) happens in ``rng_chaos.entropy.derive``.
"""

import hashlib
import secrets
import time

from rng_chaos.utils import int64_to_le

__all__ = ["raw_from_os", "raw_from_jitter"]


def raw_from_os(n: int) -> bytes:
    """Return ``n`` bytes from the operating system CSPRNG."""
    return secrets.token_bytes(n)


def raw_from_jitter(rounds: int) -> bytes:
    """Hash high-resolution timing jitter into a 32-byte digest.

    Each round times a short busy loop and feeds both the elapsed interval
    and the wall clock (nanoseconds, u64 little-endian) into SHA256. This is
    best-effort supplemental noise with no entropy guarantee.

    Args:
        rounds: Number of sampling rounds (values below 1 still yield a digest)

    Returns:
        32-byte SHA256 digest
    """
    hasher = hashlib.sha256()
    for i in range(max(0, rounds)):
        t0 = time.perf_counter_ns()
        spin = 100 + (i % 17)
        acc = 0
        for k in range(spin):
            acc ^= k
        time.sleep(0)
        elapsed = time.perf_counter_ns() - t0
        hasher.update(int64_to_le(elapsed))
        hasher.update(int64_to_le(time.time_ns()))
    return hasher.digest()
