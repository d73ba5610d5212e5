"""Entropy domain models.

Model Hierarchy:
---------------
- EntropyMode: closed set of seed sources
- EntropySpec: caller's request (mode, reproduction seed, remote URLs)
- FetchOutcome: result of one remote entropy fetch (never an exception)
- SeedDerivation: master seed, provenance tag, per-URL sub-seeds

Mode strings from the outside world are mapped onto EntropyMode by
``EntropyMode.parse`` before they reach any derivation code; unknown values
become the explicit default ``MIX``.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "INT64_MIN",
    "INT64_MAX",
    "EntropyMode",
    "EntropySpec",
    "FetchKind",
    "FetchOutcome",
    "SeedDerivation",
]

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


class EntropyMode(str, Enum):
    """Seed source selection."""

    REPRO = "repro"
    OS = "os"
    JITTER = "jitter"
    HTTP = "http"
    MIX = "mix"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EntropyMode":
        """Map a free-form mode string onto a variant, defaulting to MIX."""
        if isinstance(value, cls):
            return value
        key = (value or "").strip().lower()
        return _ENTROPY_ALIASES.get(key, cls.MIX)


_ENTROPY_ALIASES = {
    "repro": EntropyMode.REPRO,
    "reproduce": EntropyMode.REPRO,
    "os": EntropyMode.OS,
    "jitter": EntropyMode.JITTER,
    "http": EntropyMode.HTTP,
    "remote": EntropyMode.HTTP,
    "mix": EntropyMode.MIX,
    "mixed": EntropyMode.MIX,
}


class EntropySpec(BaseModel):
    """Requested entropy source.

    Attributes:
        mode: Seed source
        seed64: Master seed to reproduce (only read when mode is REPRO)
        urls: Remote entropy endpoints, consulted in list order
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: EntropyMode = Field(default=EntropyMode.MIX)
    seed64: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)
    urls: List[str] = Field(default_factory=list)

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, v):
        return EntropyMode.parse(v)

    @classmethod
    def reproduce(cls, seed64: int) -> "EntropySpec":
        """Spec that replays an existing master seed."""
        return cls(mode=EntropyMode.REPRO, seed64=seed64)


FetchKind = Literal["hex", "int", "text", "headers", "error"]


class FetchOutcome(BaseModel):
    """Outcome of fetching one remote entropy endpoint.

    ``kind`` records which interpretation of the response was used, so a
    degraded source stays visible to callers and tests. ``material`` holds
    the bytes contributed: decoded bytes for ``hex``/``int``, a SHA256
    digest for ``text``, the raw header/status blob for ``headers``, and
    nothing for ``error``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str
    kind: FetchKind
    material: bytes = b""
    error: Optional[str] = None

    @property
    def direct(self) -> bool:
        """True when the body decoded straight into seed bytes."""
        return self.kind in ("hex", "int")

    @property
    def failed(self) -> bool:
        return self.kind == "error"


class SeedDerivation(BaseModel):
    """Result of resolving an EntropySpec.

    Attributes:
        seed: Signed 64-bit master seed
        tag: Human-readable provenance tag ("mode:mix http=... per_seeds=...")
        sub_seeds: One int64 per consulted URL in MIX mode, in URL order
        fetches: Every remote fetch outcome, in the order performed
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    seed: int = Field(..., ge=INT64_MIN, le=INT64_MAX)
    tag: str
    sub_seeds: List[int] = Field(default_factory=list)
    fetches: List[FetchOutcome] = Field(default_factory=list)

    @property
    def degraded(self) -> int:
        """Number of remote fetches that failed."""
        return sum(1 for f in self.fetches if f.failed)
