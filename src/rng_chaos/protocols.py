"""Protocol definitions for collaborators outside this package.

Statistical test batteries and image renderers live elsewhere; the pipeline
only needs their structural interfaces. Any object with matching attributes
satisfies these protocols without importing from rng_chaos.
"""

from typing import Mapping, Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt

__all__ = ["DEFAULT_SIGNIFICANCE", "TestOutcome", "StatisticsEngine", "Renderer"]

DEFAULT_SIGNIFICANCE = 0.01


class TestOutcome(Protocol):
    """Result of one statistical test.

    Attributes:
        p_value: Test p-value in [0, 1]
        passed: Whether p_value met the engine's significance level
    """

    p_value: float
    passed: bool


@runtime_checkable
class StatisticsEngine(Protocol):
    """Battery of randomness tests over an unpacked bitstream.

    Attributes:
        significance: Pass threshold for p-values (conventionally 0.01)
    """

    significance: float

    def analyze(self, bits: npt.NDArray[np.uint8]) -> Mapping[str, TestOutcome]:
        """Run every test in the battery, keyed by test name."""
        ...


@runtime_checkable
class Renderer(Protocol):
    """Turns a simulation trajectory into an image."""

    def render(self, trajectory: npt.NDArray[np.float64], canvas_w: int, canvas_h: int) -> bytes:
        """Render a (iterations, points, 2) trajectory to encoded image bytes."""
        ...
