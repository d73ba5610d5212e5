"""Master seed derivation from an EntropySpec.

``derive_seed`` resolves every entropy mode into a signed 64-bit master
seed, a provenance tag, and (MIX mode only) one sub-seed per URL. Only
REPRO is deterministic; every other mode generates a seed once and the
resulting Transaction stores that seed as its sole reproducibility key.

Tags:
-----
- mode:repro seed=<seed>
- mode:os
- mode:jitter
- mode:http:<hex16>[ degraded=<n>]
- mode:mix http=<hex16>[ per_seeds=a,b][ degraded=<n>]

where <hex16> is the first 16 hex characters of SHA256 over the
concatenated URLs and <n> counts failed fetches.
"""

import hashlib
import logging
from typing import List, Optional, Sequence

import httpx

from rng_chaos.domain import EntropyMode, EntropySpec, FetchOutcome, SeedDerivation
from rng_chaos.utils import le_to_int64

from .remote import DEFAULT_TIMEOUT_S, open_client, raw_from_http
from .sources import raw_from_jitter, raw_from_os

__all__ = ["MIX_LABEL", "derive_seed", "seed_from_material", "urls_fingerprint"]

logger = logging.getLogger(__name__)

MIX_LABEL = b"seed-mix-v1"
MIX_OS_BYTES = 32


def seed_from_material(material: bytes) -> int:
    """Interpret the first 8 bytes of ``material`` as a signed LE seed.

    Material shorter than 8 bytes is padded with OS randomness.
    """
    if len(material) < 8:
        material = material + raw_from_os(8)
    return le_to_int64(material)


def urls_fingerprint(urls: Sequence[str]) -> str:
    """Short, stable identifier for a URL list (first 16 hex of SHA256)."""
    hasher = hashlib.sha256()
    for url in urls:
        hasher.update(url.encode("utf-8"))
    return hasher.hexdigest()[:16]


def derive_seed(
    spec: EntropySpec,
    *,
    client: Optional[httpx.Client] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    jitter_rounds: int = 32,
    mix_jitter_rounds: int = 48,
) -> SeedDerivation:
    """Resolve an entropy spec into a master seed.

    In MIX mode blank or whitespace-only URLs are dropped before fetching,
    so they contribute no sub-seed. A URL list recorded with blank entries
    therefore yields fewer sub-seeds (and different replay keying) than an
    implementation that emits one sub-seed per listed entry.

    Args:
        spec: Requested entropy source
        client: Optional HTTP client for remote modes (left open)
        timeout_s: Per-request timeout when no client is supplied
        jitter_rounds: Sampling rounds for JITTER mode
        mix_jitter_rounds: Sampling rounds for the jitter share of MIX mode

    Returns:
        SeedDerivation with seed, tag, sub-seeds and fetch outcomes
    """
    mode = spec.mode

    if mode is EntropyMode.REPRO:
        return SeedDerivation(seed=spec.seed64, tag=f"mode:repro seed={spec.seed64}")

    if mode is EntropyMode.OS:
        return SeedDerivation(seed=le_to_int64(raw_from_os(8)), tag="mode:os")

    if mode is EntropyMode.JITTER:
        return SeedDerivation(seed=le_to_int64(raw_from_jitter(jitter_rounds)), tag="mode:jitter")

    if mode is EntropyMode.HTTP:
        material, fetches = raw_from_http(spec.urls, client=client, timeout_s=timeout_s)
        tag = _with_degraded(f"mode:http:{urls_fingerprint(spec.urls)}", fetches)
        return SeedDerivation(seed=seed_from_material(material), tag=tag, fetches=fetches)

    return _derive_mixed(spec.urls, client=client, timeout_s=timeout_s, jitter_rounds=mix_jitter_rounds)


def _derive_mixed(
    urls: Sequence[str],
    *,
    client: Optional[httpx.Client],
    timeout_s: float,
    jitter_rounds: int,
) -> SeedDerivation:
    """MIX mode: OS + jitter + every URL, plus one sub-seed per URL."""
    hasher = hashlib.sha256()
    hasher.update(raw_from_os(MIX_OS_BYTES))
    hasher.update(raw_from_jitter(jitter_rounds))

    sub_seeds: List[int] = []
    fetches: List[FetchOutcome] = []

    active = [url for url in urls if url.strip()]
    if active:
        owned = client is None
        http = open_client(timeout_s) if owned else client
        try:
            for url in active:
                material, outcomes = raw_from_http([url], client=http)
                fetches.extend(outcomes)
                hasher.update(material)
                sub_seeds.append(seed_from_material(material))
        finally:
            if owned:
                http.close()

    mixed = hasher.digest()
    seed = le_to_int64(hashlib.sha256(mixed + MIX_LABEL).digest())

    tag = f"mode:mix http={urls_fingerprint(urls)}"
    if sub_seeds:
        tag += " per_seeds=" + ",".join(str(s) for s in sub_seeds)
    tag = _with_degraded(tag, fetches)

    logger.debug(f"Derived mixed seed from {len(active)} remote source(s)")
    return SeedDerivation(seed=seed, tag=tag, sub_seeds=sub_seeds, fetches=fetches)


def _with_degraded(tag: str, fetches: Sequence[FetchOutcome]) -> str:
    failed = sum(1 for f in fetches if f.failed)
    if failed:
        logger.warning(f"{failed} of {len(fetches)} entropy fetch(es) failed; continuing with partial material")
        return f"{tag} degraded={failed}"
    return tag
