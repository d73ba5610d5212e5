"""Acceleration laws for simulated movers.

Each law maps (mover, tick context) to an acceleration (ax, ay). LAWS is
keyed by MotionLaw and covers every variant, so dispatch never falls back
on string matching.

- flow: sample the value-noise field near the mover
- sine: phase-offset trigonometric push
- jerk: rare random impulses, more frequent with higher sharpness
- spiral: radial pull toward the canvas centre plus a tangential swirl
"""

from dataclasses import dataclass
import math
from typing import Callable, Dict, Tuple

import numpy as np

from rng_chaos.domain import MotionLaw

from .noise import ValueNoise

__all__ = ["Mover", "TickContext", "LAWS"]

Accel = Tuple[float, float]


@dataclass
class Mover:
    """Mutable state of one simulated point."""

    x: float
    y: float
    vx: float
    vy: float

    def advance(self, ax: float, ay: float, gain: float, damping: float, max_v: float, width: float, height: float) -> None:
        """Integrate one tick: damped velocity, speed cap, move, reflect."""
        self.vx = (self.vx + ax * gain) * damping
        self.vy = (self.vy + ay * gain) * damping

        vmag = math.hypot(self.vx, self.vy)
        if vmag > max_v:
            scale = max_v / vmag
            self.vx *= scale
            self.vy *= scale

        self.x += self.vx
        self.y += self.vy

        # Reflect off the walls, clamping onto the boundary
        if self.x < 0:
            self.x = 0.0
            self.vx = -self.vx
        if self.y < 0:
            self.y = 0.0
            self.vy = -self.vy
        if self.x > width:
            self.x = width
            self.vx = -self.vx
        if self.y > height:
            self.y = height
            self.vy = -self.vy


@dataclass(frozen=True)
class TickContext:
    """Inputs shared by every mover during one tick."""

    time_off: float
    sharpness: float
    smoothness: float
    center_x: float
    center_y: float
    field: ValueNoise
    rng: np.random.Generator


def _flow(m: Mover, ctx: TickContext) -> Accel:
    strength = 1.0 + ctx.smoothness
    ax = ctx.field.noise2d(m.x * 0.006 + ctx.time_off, m.y * 0.006) * strength
    ay = ctx.field.noise2d(m.y * 0.006 - ctx.time_off, m.x * 0.006) * strength
    return ax, ay


def _sine(m: Mover, ctx: TickContext) -> Accel:
    strength = 0.5 + ctx.smoothness
    return math.sin(ctx.time_off + m.x * 0.01) * strength, math.cos(ctx.time_off + m.y * 0.01) * strength


def _jerk(m: Mover, ctx: TickContext) -> Accel:
    if ctx.rng.random() < 0.02 * (0.5 + ctx.sharpness):
        ang = ctx.rng.random() * 2 * math.pi
        imp = 6.0 * (0.5 + ctx.sharpness)
        return imp * math.cos(ang), imp * math.sin(ang)
    return 0.0, 0.0


def _spiral(m: Mover, ctx: TickContext) -> Accel:
    ang = math.atan2(ctx.center_y - m.y, ctx.center_x - m.x)
    rad = (0.8 + ctx.smoothness) * 1.2
    tan = (0.5 + ctx.sharpness) * 1.2
    ax = rad * math.cos(ang) - tan * math.sin(ang)
    ay = rad * math.sin(ang) + tan * math.cos(ang)
    return ax, ay


LAWS: Dict[MotionLaw, Callable[[Mover, TickContext], Accel]] = {
    MotionLaw.FLOW: _flow,
    MotionLaw.SINE: _sine,
    MotionLaw.JERK: _jerk,
    MotionLaw.SPIRAL: _spiral,
}
