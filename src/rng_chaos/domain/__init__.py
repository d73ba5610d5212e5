"""Domain models for the rng-chaos pipeline.

Pydantic models are organized by pipeline stage and re-exported here.

Package Structure:
-----------------
- entropy: EntropyMode, EntropySpec, FetchOutcome, SeedDerivation
- simulation: MotionLaw, MotionSpec, SimulationParams, SimulationSummary, SimulationResult
- whitening: WhiteningMode
- ledger: Provenance, Transaction, Block, LedgerSnapshot, VerificationReport

Design Principles:
------------------
1. **Immutability**: models use frozen=True
2. **Strict Validation**: models use extra="forbid"
3. **Closed Modes**: mode strings become Enums at the boundary, never in the core

Example:
--------
>>> from rng_chaos.domain import EntropySpec, SimulationParams, WhiteningMode
>>> spec = EntropySpec.reproduce(42)
>>> params = SimulationParams(point_count=3, iterations=10)
>>> WhiteningMode.parse("hmac")
<WhiteningMode.DRBG: 'drbg'>
"""

from rng_chaos.domain.entropy import INT64_MAX, INT64_MIN, EntropyMode, EntropySpec, FetchOutcome, SeedDerivation
from rng_chaos.domain.ledger import Block, LedgerSnapshot, Provenance, Transaction, TransactionSummary, VerificationReport
from rng_chaos.domain.simulation import (
    ALL_LAWS,
    MotionLaw,
    MotionSpec,
    SimulationParams,
    SimulationResult,
    SimulationSummary,
    parse_laws,
)
from rng_chaos.domain.whitening import DEFAULT_WHITENING, WhiteningMode

__all__ = [
    # Entropy
    "INT64_MIN",
    "INT64_MAX",
    "EntropyMode",
    "EntropySpec",
    "FetchOutcome",
    "SeedDerivation",
    # Simulation
    "ALL_LAWS",
    "MotionLaw",
    "MotionSpec",
    "SimulationParams",
    "SimulationResult",
    "SimulationSummary",
    "parse_laws",
    # Whitening
    "DEFAULT_WHITENING",
    "WhiteningMode",
    # Ledger
    "Provenance",
    "Transaction",
    "TransactionSummary",
    "Block",
    "LedgerSnapshot",
    "VerificationReport",
]
