"""Re-derive a transaction's outputs from its recorded seed and provenance.

Used both to hand back the original bitstream and to verify that stored
commitments still match what the simulation produces.
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from rng_chaos.commitments import Commitments, commit
from rng_chaos.domain import SimulationResult, Transaction
from rng_chaos.expand import expand_bits
from rng_chaos.simulation import run_simulation

__all__ = ["Reproduction", "reproduce_transaction"]


@dataclass(frozen=True)
class Reproduction:
    simulation: SimulationResult
    bits: npt.NDArray[np.uint8]
    commitments: Commitments


def reproduce_transaction(tx: Transaction) -> Reproduction:
    """Re-run simulation and expansion for ``tx``."""
    provenance = tx.provenance
    sim = run_simulation(tx.master_seed, provenance.simulation_params())
    bits = expand_bits(sim.digest, tx.requested_bit_count, provenance.whitening)
    return Reproduction(simulation=sim, bits=bits, commitments=commit(sim.digest, bits))
