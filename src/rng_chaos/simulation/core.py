"""Deterministic chaotic particle simulation.

``run_simulation`` is a pure function of (master seed, SimulationParams).
It returns the full trajectory (for renderers) and a 32-byte path digest:
SHA256 over every mover's (x, y) as little-endian IEEE-754 float64, mover
then coordinate order within a tick, tick after tick. The digest is a
commitment to the whole run and is never used to re-seed the simulation.

Randomness:
-----------
- Movers and per-tick law choices draw from a PCG64 generator keyed by the
  seed (taken modulo 2**64).
- The flow field is a separate ValueNoise keyed by seed XOR NOISE_SCRAMBLE.

Digest accumulation stays single-threaded and in tick order; callers may
run independent simulations in parallel.

Example:
    >>> from rng_chaos.domain import SimulationParams, MotionSpec
    >>> params = SimulationParams(point_count=3, iterations=10, motion=MotionSpec(laws="flow"))
    >>> result = run_simulation(42, params)
    >>> len(result.digest)
    32
"""

import hashlib
import logging
from typing import List

import numpy as np

from rng_chaos.domain import SimulationParams, SimulationResult, SimulationSummary
from rng_chaos.utils import MASK64, to_signed64

from .laws import LAWS, Mover, TickContext
from .noise import ValueNoise

__all__ = ["NOISE_SCRAMBLE", "run_simulation", "simulation_rng"]

logger = logging.getLogger(__name__)

# Golden-ratio constant separating the noise field seed from the mover PRNG seed
NOISE_SCRAMBLE = 0x9E3779B97F4A7C15


def simulation_rng(seed: int) -> np.random.Generator:
    """PRNG driving mover initialization and per-tick random choices."""
    return np.random.Generator(np.random.PCG64(seed & MASK64))


def _spawn_movers(rng: np.random.Generator, count: int, width: float, height: float, speed_scale: float) -> List[Mover]:
    v0 = 2 + speed_scale * 2
    movers = []
    for _ in range(count):
        x = rng.random() * width
        y = rng.random() * height
        vx = (rng.random() * 2 - 1) * v0
        vy = (rng.random() * 2 - 1) * v0
        movers.append(Mover(x=x, y=y, vx=vx, vy=vy))
    return movers


def run_simulation(seed: int, params: SimulationParams) -> SimulationResult:
    """Run the simulation and commit to its trace.

    Args:
        seed: Signed 64-bit master seed
        params: Simulation parameters (normalized before use)

    Returns:
        SimulationResult with normalized params, digest, trajectory and summary
    """
    p = params.normalized()
    motion = p.motion
    width = float(p.canvas_w)
    height = float(p.canvas_h)

    rng = simulation_rng(seed)
    movers = _spawn_movers(rng, p.point_count, width, height, motion.speed_scale)
    field = ValueNoise(to_signed64(seed ^ NOISE_SCRAMBLE))

    sharp = motion.sharpness
    smooth = motion.smoothness
    gain = 0.2 + 0.2 * sharp
    damping = 0.98 + 0.01 * smooth
    max_v = 20.0 * (0.5 + motion.speed_scale)

    laws = motion.laws
    trajectory = np.empty((p.iterations, p.point_count, 2), dtype=np.float64)
    hasher = hashlib.sha256()

    for t in range(p.iterations):
        ctx = TickContext(
            time_off=float(t) * p.step,
            sharpness=sharp,
            smoothness=smooth,
            center_x=width / 2,
            center_y=height / 2,
            field=field,
            rng=rng,
        )
        law = laws[0] if len(laws) == 1 else laws[int(rng.integers(len(laws)))]
        accelerate = LAWS[law]

        frame = trajectory[t]
        for i, mover in enumerate(movers):
            ax, ay = accelerate(mover, ctx)
            mover.advance(ax, ay, gain, damping, max_v, width, height)
            frame[i, 0] = mover.x
            frame[i, 1] = mover.y

        hasher.update(frame.astype("<f8", copy=False).tobytes())

    digest = hasher.digest()
    logger.debug(f"Simulated {p.point_count} point(s) x {p.iterations} tick(s) for seed={seed}")

    summary = SimulationSummary(
        canvas_width=p.canvas_w,
        canvas_height=p.canvas_h,
        iterations=p.iterations,
        point_count=p.point_count,
        step=p.step,
        laws=motion.laws,
        sharpness=sharp,
        smoothness=smooth,
        speed_scale=motion.speed_scale,
        path_digest=digest.hex(),
    )
    return SimulationResult(params=p, digest=digest, trajectory=trajectory, summary=summary)
