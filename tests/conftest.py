"""Pytest configuration and shared fixtures for rng_chaos tests.

Provides:
- Small, fast simulation parameters and generation requests
- In-memory and file-backed ledgers
- httpx clients backed by MockTransport for remote entropy
- TOML configuration writers
"""

from pathlib import Path
from typing import Callable, Dict, Union

import httpx
import pytest

# ============================================================================
# Simulation / Generation
# ============================================================================


@pytest.fixture
def small_params():
    """Three points, ten ticks, flow law."""
    from rng_chaos.domain import MotionSpec, SimulationParams

    return SimulationParams(point_count=3, iterations=10, motion=MotionSpec(laws="flow"))


@pytest.fixture
def make_request() -> Callable:
    """Factory for cheap reproducible GenerateRequests."""
    from rng_chaos.domain import EntropySpec, MotionSpec
    from rng_chaos.pipeline import GenerateRequest

    def _make(seed: int = 42, bit_count: int = 64, whitening: str = "raw", laws: str = "flow", **kwargs) -> GenerateRequest:
        fields = {
            "bit_count": bit_count,
            "point_count": 3,
            "iterations": 10,
            "motion": MotionSpec(laws=laws),
            "entropy": EntropySpec.reproduce(seed),
            "whitening": whitening,
        }
        fields.update(kwargs)
        return GenerateRequest(**fields)

    return _make


@pytest.fixture
def settings():
    """Default settings, isolated from RNG_CHAOS_* environment variables."""
    from rng_chaos.config import Settings

    return Settings()


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch):
    """Strip RNG_CHAOS_* variables so host environment never leaks into tests."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("RNG_CHAOS_"):
            monkeypatch.delenv(key, raising=False)


# ============================================================================
# Ledger
# ============================================================================


@pytest.fixture
def ledger():
    """In-memory ledger (no persistence)."""
    from rng_chaos.ledger import Ledger

    return Ledger()


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "store.json"


@pytest.fixture
def file_ledger(store_path: Path):
    """Ledger persisting to a temporary store.json."""
    from rng_chaos.ledger import Ledger

    return Ledger.load(store_path)


# ============================================================================
# Remote entropy
# ============================================================================


@pytest.fixture
def mock_client():
    """Build an httpx.Client answering from a {url: body | exception | Response} map.

    Unmapped URLs get a connection error.
    """
    clients = []

    def _build(routes: Dict[str, Union[str, Exception, httpx.Response]]) -> httpx.Client:
        def handler(request: httpx.Request) -> httpx.Response:
            answer = routes.get(str(request.url))
            if answer is None:
                raise httpx.ConnectError("unreachable", request=request)
            if isinstance(answer, Exception):
                raise answer
            if isinstance(answer, httpx.Response):
                return answer
            return httpx.Response(200, text=answer)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _build

    for client in clients:
        client.close()


# ============================================================================
# Configuration
# ============================================================================


@pytest.fixture
def write_toml(tmp_path: Path) -> Callable[[str], Path]:
    """Write TOML text to a temporary rng_chaos.toml and return its path."""

    def _write(text: str) -> Path:
        path = tmp_path / "rng_chaos.toml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
