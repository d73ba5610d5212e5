"""Simulation domain models.

This module defines the inputs and outputs of the chaotic particle
simulation:

- MotionLaw: the four acceleration laws
- MotionSpec: eligible laws plus sharpness/smoothness/speed tuning
- SimulationParams: canvas, point count, iteration count, time step
- SimulationSummary: the persisted, trajectory-free description of a run
- SimulationResult: live output (trajectory array + path digest)

Parameters are never rejected for being out of range. ``normalized()``
clamps them to safe values and the simulation only ever sees the normalized
copy, which is also what gets recorded in provenance.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Tuple

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, ConfigDict, Field, field_validator


class MotionLaw(str, Enum):
    """Acceleration law applied to every mover for one tick."""

    FLOW = "flow"
    SINE = "sine"
    JERK = "jerk"
    SPIRAL = "spiral"


ALL_LAWS: Tuple[MotionLaw, ...] = (MotionLaw.FLOW, MotionLaw.SINE, MotionLaw.JERK, MotionLaw.SPIRAL)


def parse_laws(value: Any) -> Tuple[MotionLaw, ...]:
    """Parse a law selection into an ordered tuple of MotionLaw.

    Accepts a single name ("sine"), a comma-separated list ("flow, jerk"),
    "random"/"rand" for all four laws, or an iterable of names/laws.
    Unknown names map to FLOW; an empty selection becomes (FLOW,).

    Example:
        >>> parse_laws("flow,,spiral")
        (<MotionLaw.FLOW: 'flow'>, <MotionLaw.SPIRAL: 'spiral'>)
    """
    if value is None:
        return (MotionLaw.FLOW,)

    if isinstance(value, MotionLaw):
        return (value,)

    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("random", "rand"):
            return ALL_LAWS
        names = [part.strip() for part in text.split(",")]
    else:
        names = [str(item.value if isinstance(item, MotionLaw) else item).strip().lower() for item in value]

    laws = []
    for name in names:
        if not name:
            continue
        try:
            laws.append(MotionLaw(name))
        except ValueError:
            laws.append(MotionLaw.FLOW)

    return tuple(laws) if laws else (MotionLaw.FLOW,)


class MotionSpec(BaseModel):
    """Motion tuning for the simulation.

    Attributes:
        laws: Laws eligible each tick (one is drawn per tick when several)
        sharpness: Impulse/tangential strength, clamped to [0, 2]
        smoothness: Damping/field strength, clamped to [0, 2]
        speed_scale: Initial and maximum speed multiplier, clamped to >= 0
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    laws: Tuple[MotionLaw, ...] = Field(default=(MotionLaw.FLOW,))
    sharpness: float = 1.0
    smoothness: float = 1.0
    speed_scale: float = 1.0

    @field_validator("laws", mode="before")
    @classmethod
    def parse_law_selection(cls, v: Any) -> Tuple[MotionLaw, ...]:
        return parse_laws(v)

    @property
    def law_label(self) -> str:
        """Comma-joined law names, as accepted back by ``parse_laws``."""
        return ",".join(law.value for law in self.laws)


class SimulationParams(BaseModel):
    """Complete simulation input (besides the seed)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    point_count: int = 20
    iterations: int = 6000
    canvas_w: int = 1024
    canvas_h: int = 1024
    step: float = 0.01
    pixel_width: int = 4
    motion: MotionSpec = Field(default_factory=MotionSpec)

    def normalized(self) -> "SimulationParams":
        """Return a copy with every parameter clamped into its safe range."""
        motion = self.motion.model_copy(
            update={
                "sharpness": _clamp(self.motion.sharpness, 0.0, 2.0),
                "smoothness": _clamp(self.motion.smoothness, 0.0, 2.0),
                "speed_scale": max(0.0, _finite(self.motion.speed_scale, 1.0)),
            }
        )
        step = _finite(self.step, 0.01)
        return self.model_copy(
            update={
                "point_count": max(0, self.point_count),
                "iterations": max(0, self.iterations),
                "canvas_w": max(1, self.canvas_w),
                "canvas_h": max(1, self.canvas_h),
                "step": step if step > 0 else 0.01,
                "pixel_width": max(1, self.pixel_width),
                "motion": motion,
            }
        )


class SimulationSummary(BaseModel):
    """Trajectory-free description of a finished run (persisted)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    canvas_width: int
    canvas_height: int
    iterations: int
    point_count: int
    step: float
    laws: Tuple[MotionLaw, ...]
    sharpness: float
    smoothness: float
    speed_scale: float
    path_digest: str = Field(..., description="Hex SHA256 commitment over the full coordinate trace")


class SimulationResult(BaseModel):
    """Live simulation output.

    Attributes:
        params: The normalized parameters actually simulated
        digest: 32-byte path digest
        trajectory: float64 array of shape (iterations, point_count, 2)
        summary: Persistable summary
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    params: SimulationParams
    digest: bytes
    trajectory: np.ndarray = Field(repr=False)
    summary: SimulationSummary

    def point_paths(self) -> list[npt.NDArray[np.float64]]:
        """Per-point (iterations, 2) coordinate sequences, for renderers."""
        return [self.trajectory[:, i, :] for i in range(self.trajectory.shape[1])]


def _finite(value: float, default: float) -> float:
    return value if np.isfinite(value) else default


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, _finite(value, lo)))
