"""Replay generator keyed by a transaction's seeds.

The generator is an HMAC-DRBG seeded with the master seed followed by every
per-URL sub-seed, each as 8 little-endian bytes. It is independent of the
simulation: anyone holding a transaction can extract an unbounded stream
without re-running the particle system.

Example:
    >>> gen = ReplayGenerator.from_seeds(42)
    >>> len(gen.read_bytes(16))
    16
"""

from typing import Literal, Sequence, Union

from rng_chaos.domain import Transaction
from rng_chaos.expand import HmacDrbg, mask_trailing
from rng_chaos.utils import int64_to_le

__all__ = ["ReplayFormat", "seed_material", "ReplayGenerator"]

ReplayFormat = Literal["hex", "raw", "bin"]

_FORMAT_ALIASES = {"hex": "hex", "raw": "raw", "bytes": "raw", "bin": "bin"}


def seed_material(master_seed: int, sub_seeds: Sequence[int] = ()) -> bytes:
    """Concatenate the master seed and sub-seeds as little-endian int64s."""
    return b"".join(int64_to_le(s) for s in (master_seed, *sub_seeds))


class ReplayGenerator:
    """Deterministic byte and bit source for one transaction."""

    def __init__(self, material: bytes):
        self._drbg = HmacDrbg(material)

    @classmethod
    def from_seeds(cls, master_seed: int, sub_seeds: Sequence[int] = ()) -> "ReplayGenerator":
        return cls(seed_material(master_seed, sub_seeds))

    @classmethod
    def from_transaction(cls, tx: Transaction) -> "ReplayGenerator":
        return cls.from_seeds(tx.master_seed, tx.provenance.sub_seeds)

    def read_bytes(self, n: int) -> bytes:
        return self._drbg.generate(n)

    def read_bits(self, n_bits: int) -> bytes:
        """Read ``ceil(n_bits / 8)`` packed bytes holding exactly ``n_bits`` bits.

        Unused low bits of the final byte are zeroed.
        """
        if n_bits <= 0:
            return b""
        return mask_trailing(self.read_bytes((n_bits + 7) // 8), n_bits)

    def render(self, n_bits: int, fmt: str = "hex") -> Union[str, bytes]:
        """Read ``n_bits`` and render them.

        Args:
            n_bits: Number of bits to read
            fmt: ``hex`` (default), ``raw`` (packed bytes) or ``bin`` (text of 0/1)

        Returns:
            str for ``hex``/``bin``, bytes for ``raw``

        Raises:
            ValueError: If fmt is not a known format
        """
        kind = _FORMAT_ALIASES.get((fmt or "hex").strip().lower())
        if kind is None:
            raise ValueError(f"Unknown replay format: {fmt!r}")

        data = self.read_bits(n_bits)
        if kind == "raw":
            return data
        if kind == "hex":
            return data.hex()
        text = "".join(f"{b:08b}" for b in data)
        return text[: max(n_bits, 0)]
