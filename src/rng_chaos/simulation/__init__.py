"""Chaotic particle simulation with a path-digest commitment.

Example:
    >>> from rng_chaos.simulation import run_simulation
    >>> from rng_chaos.domain import SimulationParams
    >>> digest = run_simulation(7, SimulationParams(point_count=2, iterations=5)).digest
"""

from .core import NOISE_SCRAMBLE, run_simulation, simulation_rng
from .laws import LAWS, Mover, TickContext
from .noise import ValueNoise

__all__ = [
    "run_simulation",
    "simulation_rng",
    "NOISE_SCRAMBLE",
    "ValueNoise",
    "Mover",
    "TickContext",
    "LAWS",
]
