"""High-level generation pipeline.

Orchestrates the stages for one request:
    1. Derive the master seed from the requested entropy source
    2. Run the chaotic simulation and take its path digest
    3. Expand the digest into the requested number of bits
    4. Commit (data_hash, bits_hash, published) and anchor in the ledger

Plus the read-side operations built on a recorded transaction: reproducing
its bits, the replay parameter set, DRBG extraction and hand-off to an
external statistics engine.

Example:
    >>> from rng_chaos.ledger import Ledger
    >>> from rng_chaos.domain import EntropySpec
    >>> ledger = Ledger()
    >>> req = GenerateRequest(bit_count=64, entropy=EntropySpec.reproduce(42))
    >>> result = generate(req, ledger)
    >>> ledger.verify_transaction(result.transaction.id).verified
    True
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Union
from urllib.parse import urlencode
import uuid

import httpx
import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, ConfigDict, Field, field_validator

from rng_chaos.commitments import commit
from rng_chaos.config import Settings
from rng_chaos.domain import (
    Block,
    EntropySpec,
    MotionSpec,
    Provenance,
    SimulationParams,
    Transaction,
    WhiteningMode,
)
from rng_chaos.entropy import derive_seed
from rng_chaos.expand import expand_bits
from rng_chaos.ledger import Ledger
from rng_chaos.protocols import StatisticsEngine, TestOutcome
from rng_chaos.replay import ReplayGenerator
from rng_chaos.reproduce import reproduce_transaction
from rng_chaos.simulation import run_simulation
from rng_chaos.utils import time_block

__all__ = [
    "GenerateRequest",
    "GenerationResult",
    "normalize_bit_count",
    "request_from_settings",
    "generate",
    "generate_many",
    "reproduce_bits",
    "replay_hint",
    "extract_replay",
    "analyze_transaction",
]

logger = logging.getLogger(__name__)


# ============================================================================
# Request / Result
# ============================================================================


class GenerateRequest(BaseModel):
    """One generation request.

    ``bit_count=None`` (or a negative count) means the configured default.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    bit_count: Optional[int] = None
    canvas_w: int = 1024
    canvas_h: int = 1024
    iterations: int = 6000
    point_count: int = 20
    pixel_width: int = 4
    step: float = 0.01
    motion: MotionSpec = Field(default_factory=lambda: MotionSpec(laws="random"))
    entropy: EntropySpec = Field(default_factory=EntropySpec)
    whitening: WhiteningMode = WhiteningMode.AES

    @field_validator("whitening", mode="before")
    @classmethod
    def parse_whitening(cls, v):
        return WhiteningMode.parse(v)

    def simulation_params(self) -> SimulationParams:
        return SimulationParams(
            point_count=self.point_count,
            iterations=self.iterations,
            canvas_w=self.canvas_w,
            canvas_h=self.canvas_h,
            step=self.step,
            pixel_width=self.pixel_width,
            motion=self.motion,
        ).normalized()


@dataclass(frozen=True)
class GenerationResult:
    transaction: Transaction
    block: Block
    bits: npt.NDArray[np.uint8]


def normalize_bit_count(count: Optional[int], default: int, maximum: int) -> int:
    """Missing or negative counts become ``default``; large ones are capped at ``maximum``."""
    if count is None or count < 0:
        count = default
    return min(count, maximum)


def request_from_settings(settings: Settings, **overrides: Any) -> GenerateRequest:
    """Build a request from configured defaults, then apply ``overrides``.

    Args:
        settings: Loaded settings
        **overrides: GenerateRequest field values taking precedence

    Raises:
        pydantic.ValidationError: If an override names an unknown field
    """
    gen = settings.generation
    fields: Dict[str, Any] = {
        "bit_count": gen.bit_count,
        "canvas_w": gen.canvas_w,
        "canvas_h": gen.canvas_h,
        "iterations": gen.iterations,
        "point_count": gen.point_count,
        "pixel_width": gen.pixel_width,
        "step": gen.step,
        "motion": MotionSpec(
            laws=gen.motion_law,
            sharpness=gen.sharpness,
            smoothness=gen.smoothness,
            speed_scale=gen.speed_scale,
        ),
        "entropy": EntropySpec(mode=settings.entropy.default_mode, urls=list(settings.entropy.default_urls)),
        "whitening": gen.whitening,
    }
    fields.update(overrides)
    return GenerateRequest(**fields)


# ============================================================================
# Generation
# ============================================================================


def generate(
    request: GenerateRequest,
    ledger: Ledger,
    *,
    client: Optional[httpx.Client] = None,
    settings: Optional[Settings] = None,
) -> GenerationResult:
    """Run the full pipeline for one request and record it in ``ledger``.

    Args:
        request: Generation parameters
        ledger: Ledger receiving the transaction and block
        client: Shared HTTP client for remote entropy (left open)
        settings: Limits and entropy tuning; defaults to Settings()

    Returns:
        GenerationResult with the transaction, its block and the bits
    """
    settings = settings or Settings()
    bit_count = normalize_bit_count(request.bit_count, settings.generation.bit_count, settings.generation.max_bit_count)

    with time_block("seed derivation", logger):
        derivation = derive_seed(
            request.entropy,
            client=client,
            timeout_s=settings.entropy.timeout_s,
            jitter_rounds=settings.entropy.jitter_rounds,
            mix_jitter_rounds=settings.entropy.mix_jitter_rounds,
        )

    params = request.simulation_params()
    with time_block("simulation", logger):
        sim = run_simulation(derivation.seed, params)

    with time_block("expansion", logger):
        bits = expand_bits(sim.digest, bit_count, request.whitening)

    commitments = commit(sim.digest, bits)
    provenance = Provenance(
        entropy=request.entropy,
        entropy_tag=derivation.tag,
        motion=params.motion,
        iterations=params.iterations,
        point_count=params.point_count,
        pixel_width=params.pixel_width,
        canvas_w=params.canvas_w,
        canvas_h=params.canvas_h,
        step=params.step,
        whitening=request.whitening,
        sub_seeds=list(derivation.sub_seeds),
    )
    tx = Transaction(
        id=str(uuid.uuid4()),
        created_at=datetime.now(timezone.utc),
        requested_bit_count=bit_count,
        master_seed=derivation.seed,
        simulation_summary=sim.summary,
        data_hash=commitments.data_hash,
        bits_hash=commitments.bits_hash,
        published=commitments.published,
        provenance=provenance,
        trajectory=sim.trajectory,
    )
    block = ledger.append(tx)
    logger.info(f"Generated tx {tx.id} seed={tx.master_seed} bits={bit_count} whitening={request.whitening.value}")
    return GenerationResult(transaction=tx, block=block, bits=bits)


def generate_many(
    requests: Sequence[GenerateRequest],
    ledger: Ledger,
    *,
    max_workers: Optional[int] = None,
    client: Optional[httpx.Client] = None,
    settings: Optional[Settings] = None,
) -> List[GenerationResult]:
    """Run independent requests concurrently; results follow request order."""
    settings = settings or Settings()
    workers = max_workers or settings.workers.max_workers
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(generate, req, ledger, client=client, settings=settings) for req in requests]
        return [f.result() for f in futures]


# ============================================================================
# Transaction read-side
# ============================================================================


def reproduce_bits(tx: Transaction) -> npt.NDArray[np.uint8]:
    """Regenerate the transaction's original bitstream."""
    return reproduce_transaction(tx).bits


def replay_hint(tx: Transaction) -> Dict[str, Any]:
    """Parameter set that regenerates ``tx`` through ``generate``.

    The ``query`` entry renders the same parameters as a URL query string.
    """
    p = tx.provenance
    hint: Dict[str, Any] = {
        "entropy": "repro",
        "seed": tx.master_seed,
        "law": p.motion.law_label,
        "sharp": p.motion.sharpness,
        "smooth": p.motion.smoothness,
        "speed": p.motion.speed_scale,
        "iter": p.iterations,
        "points": p.point_count,
        "w": p.canvas_w,
        "h": p.canvas_h,
        "px": p.pixel_width,
        "step": p.step,
        "whiten": p.whitening.value,
        "count": tx.requested_bit_count,
    }
    if p.entropy.urls:
        hint["http"] = ",".join(p.entropy.urls)
    hint["query"] = urlencode(hint, safe=",")
    return hint


def extract_replay(
    ledger: Ledger,
    tx_id: str,
    n_bits: Optional[int] = None,
    fmt: str = "hex",
) -> Union[str, bytes]:
    """Read DRBG replay output for a recorded transaction.

    Args:
        ledger: Ledger holding the transaction
        tx_id: Transaction id
        n_bits: Bits to read; missing or non-positive means the recorded count
        fmt: ``hex``, ``raw`` or ``bin``

    Raises:
        TransactionNotFoundError: If ``tx_id`` is unknown
        ValueError: If ``fmt`` is unknown
    """
    tx = ledger.require_transaction(tx_id)
    if n_bits is None or n_bits <= 0:
        n_bits = tx.requested_bit_count
    return ReplayGenerator.from_transaction(tx).render(n_bits, fmt)


def analyze_transaction(
    ledger: Ledger,
    tx_id: str,
    engine: StatisticsEngine,
    source: Literal["reproduce", "replay"] = "reproduce",
    n_bits: Optional[int] = None,
) -> Mapping[str, TestOutcome]:
    """Hand a transaction's bits to a statistics engine.

    Args:
        ledger: Ledger holding the transaction
        tx_id: Transaction id
        engine: Test battery
        source: ``reproduce`` for the original bitstream, ``replay`` for DRBG output
        n_bits: Replay length; defaults to the recorded count

    Raises:
        TransactionNotFoundError: If ``tx_id`` is unknown
        ValueError: If ``source`` is unknown
    """
    tx = ledger.require_transaction(tx_id)
    if source == "reproduce":
        bits = reproduce_bits(tx)
    elif source == "replay":
        count = n_bits if n_bits and n_bits > 0 else tx.requested_bit_count
        packed = ReplayGenerator.from_transaction(tx).read_bits(count)
        bits = np.unpackbits(np.frombuffer(packed, dtype=np.uint8))[:count]
    else:
        raise ValueError(f"Unknown bit source: {source!r}")

    logger.info(f"Analyzing {bits.size} bits of tx {tx_id} from {source}")
    return engine.analyze(bits)
