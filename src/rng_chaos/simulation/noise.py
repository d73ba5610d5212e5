"""Deterministic 2-D value noise.

Lattice values come from an integer hash evaluated with int64 wrap-around
arithmetic, so the field is a pure function of its seed. Between lattice
points values are blended with smoothstep-weighted bilinear interpolation.
Output lies in [-1, 1].
"""

import math

from rng_chaos.utils import to_signed64

__all__ = ["ValueNoise"]

_PRIME_X = 374761393
_PRIME_Y = 668265263
_PRIME_SEED = 1274126177
_LOW31 = 0x7FFFFFFF


class ValueNoise:
    """Seeded smooth value-noise field."""

    def __init__(self, seed: int):
        self.seed = to_signed64(seed)

    def _hash(self, ix: int, iy: int) -> int:
        h = to_signed64(ix * _PRIME_X + iy * _PRIME_Y + self.seed * _PRIME_SEED)
        return to_signed64((h ^ (h >> 13)) * _PRIME_SEED)

    def lattice(self, ix: int, iy: int) -> float:
        """Value at integer lattice point (ix, iy), in [-1, 1]."""
        return (self._hash(ix, iy) & _LOW31) / _LOW31 * 2 - 1

    def noise2d(self, x: float, y: float) -> float:
        xi = math.floor(x)
        yi = math.floor(y)
        tx = x - xi
        ty = y - yi

        v00 = self.lattice(xi, yi)
        v10 = self.lattice(xi + 1, yi)
        v01 = self.lattice(xi, yi + 1)
        v11 = self.lattice(xi + 1, yi + 1)

        sx = tx * tx * (3 - 2 * tx)
        sy = ty * ty * (3 - 2 * ty)
        ix0 = v00 + (v10 - v00) * sx
        ix1 = v01 + (v11 - v01) * sx
        return ix0 + (ix1 - ix0) * sy
