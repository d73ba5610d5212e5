"""rng-chaos-ledger: verifiable random bits from a chaotic particle simulation.

A master seed drives a deterministic particle simulation; the SHA-256 of its
whole trajectory (the path digest) is expanded into a bitstream, and the
resulting commitments are anchored in a hash-chained ledger so anyone can
re-run and verify a generation later.

Package Structure:
-----------------
- domain: Pydantic models and closed mode enums
- entropy: Seed derivation from OS, timing jitter and HTTP sources
- simulation: Chaotic particle system and path digest
- expand: Digest-to-bits whitening and HMAC-DRBG
- ledger: Hash-chained store with atomic JSON snapshots
- replay: DRBG replay keyed by a transaction's seeds
- pipeline: End-to-end generation and transaction read-side
- config: TOML + environment settings
"""

__version__ = "0.1.0"

from rng_chaos.exceptions import (
    ConfigError,
    LedgerError,
    RngChaosError,
    SnapshotCorruptError,
    TransactionNotFoundError,
)
from rng_chaos.ledger import Ledger
from rng_chaos.pipeline import GenerateRequest, GenerationResult, generate, generate_many
from rng_chaos.replay import ReplayGenerator

__all__ = [
    "__version__",
    # Pipeline
    "GenerateRequest",
    "GenerationResult",
    "generate",
    "generate_many",
    # Ledger
    "Ledger",
    "ReplayGenerator",
    # Exceptions
    "RngChaosError",
    "ConfigError",
    "LedgerError",
    "SnapshotCorruptError",
    "TransactionNotFoundError",
]
