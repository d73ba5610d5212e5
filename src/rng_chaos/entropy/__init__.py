"""Seed derivation from heterogeneous entropy sources.

Provides local sources (OS randomness, timing jitter), Result-style remote
HTTP fetching, and ``derive_seed`` which turns an EntropySpec into a master
seed, provenance tag and per-URL sub-seeds.

Example:
    >>> from rng_chaos.domain import EntropySpec
    >>> from rng_chaos.entropy import derive_seed
    >>> derive_seed(EntropySpec.reproduce(42)).seed
    42
"""

from .derive import MIX_LABEL, derive_seed, seed_from_material, urls_fingerprint
from .remote import DEFAULT_TIMEOUT_S, fetch_entropy, open_client, raw_from_http
from .sources import raw_from_jitter, raw_from_os

__all__ = [
    # Derivation
    "derive_seed",
    "seed_from_material",
    "urls_fingerprint",
    "MIX_LABEL",
    # Remote
    "DEFAULT_TIMEOUT_S",
    "fetch_entropy",
    "raw_from_http",
    "open_client",
    # Local
    "raw_from_os",
    "raw_from_jitter",
]
