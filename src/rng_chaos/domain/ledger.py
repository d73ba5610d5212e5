"""Ledger domain models: transactions, blocks, verification reports.

Model Hierarchy:
---------------
- Provenance: everything needed to replay a generation exactly
- Transaction: one generation, its commitments and provenance
- TransactionSummary: listing view of a Transaction
- Block: one hash-chained anchor per Transaction
- LedgerSnapshot: the JSON persistence document
- VerificationReport: independent re-derivation results

Transactions and Blocks are immutable once built. A Transaction carries its
simulation trajectory only while live in memory: the field is excluded from
serialization, so every persisted or listed copy is already stripped.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .entropy import INT64_MAX, INT64_MIN, EntropySpec
from .simulation import MotionSpec, SimulationParams, SimulationSummary
from .whitening import WhiteningMode

__all__ = [
    "Provenance",
    "Transaction",
    "TransactionSummary",
    "Block",
    "LedgerSnapshot",
    "VerificationReport",
]


class Provenance(BaseModel):
    """Recorded generation parameters.

    Attributes:
        entropy: Entropy request as submitted
        entropy_tag: Provenance tag produced by seed derivation
        motion: Normalized motion spec
        iterations, point_count, pixel_width, canvas_w, canvas_h, step:
            Normalized simulation parameters
        whitening: Whitening strategy used for the bitstream
        sub_seeds: Per-URL sub-seeds (MIX mode), in URL order
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entropy: EntropySpec
    entropy_tag: str
    motion: MotionSpec
    iterations: int
    point_count: int
    pixel_width: int
    canvas_w: int
    canvas_h: int
    step: float
    whitening: WhiteningMode
    sub_seeds: List[int] = Field(default_factory=list)

    @field_validator("whitening", mode="before")
    @classmethod
    def parse_whitening(cls, v):
        return WhiteningMode.parse(v)

    def simulation_params(self) -> SimulationParams:
        """Rebuild the SimulationParams this provenance records."""
        return SimulationParams(
            point_count=self.point_count,
            iterations=self.iterations,
            canvas_w=self.canvas_w,
            canvas_h=self.canvas_h,
            step=self.step,
            pixel_width=self.pixel_width,
            motion=self.motion,
        )


class Transaction(BaseModel):
    """One recorded generation.

    Hashes are lowercase hex:
        data_hash = SHA256(path_digest)
        bits_hash = SHA256(bitstream, one byte per bit)
        published = SHA256(bits_hash_raw || data_hash_raw || "published-hash-v2")
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    id: str
    created_at: datetime
    requested_bit_count: int = Field(..., ge=0)
    master_seed: int = Field(..., ge=INT64_MIN, le=INT64_MAX)
    simulation_summary: SimulationSummary
    data_hash: str
    bits_hash: str
    published: str
    provenance: Provenance
    trajectory: Optional[np.ndarray] = Field(default=None, exclude=True, repr=False)

    def stripped(self) -> "Transaction":
        """Copy without the live trajectory."""
        if self.trajectory is None:
            return self
        return self.model_copy(update={"trajectory": None})

    def summary(self) -> "TransactionSummary":
        return TransactionSummary(
            id=self.id,
            created_at=self.created_at,
            requested_bit_count=self.requested_bit_count,
            master_seed=self.master_seed,
            data_hash=self.data_hash,
            bits_hash=self.bits_hash,
            published=self.published,
            provenance=self.provenance,
        )


class TransactionSummary(BaseModel):
    """Listing view of a transaction (no simulation summary or trajectory)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    created_at: datetime
    requested_bit_count: int
    master_seed: int
    data_hash: str
    bits_hash: str
    published: str
    provenance: Provenance


class Block(BaseModel):
    """Hash-chained anchor for one transaction.

    ``hash`` is SHA256 over "index:timestamp:tx_id:data_hash:prev_hash";
    ``data_hash`` is the anchored transaction's ``published`` hash.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    index: int = Field(..., ge=0)
    timestamp: int
    tx_id: str
    data_hash: str
    prev_hash: str
    hash: str


class LedgerSnapshot(BaseModel):
    """Persisted ledger state."""

    model_config = ConfigDict(extra="forbid")

    tx_store: Dict[str, Transaction] = Field(default_factory=dict)
    chain: List[Block] = Field(default_factory=list)


class VerificationReport(BaseModel):
    """Independent checks for one transaction.

    The three transaction checks are reported separately so a caller can
    tell "simulation output changed" apart from "never anchored".
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tx_id: str
    tx_found: bool
    chain_valid: bool
    data_hash_match: bool = False
    bits_hash_match: bool = False
    published_in_chain: bool = False

    @property
    def verified(self) -> bool:
        return self.tx_found and self.data_hash_match and self.bits_hash_match and self.published_in_chain
