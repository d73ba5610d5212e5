"""Foundation utilities for the rng-chaos pipeline.

Provides reusable primitives for hashing, fixed-width integer encoding,
JSON persistence, timing, and logging. As the bottom layer, this package
must not import any other project packages.

Key Functions:
--------------
- sha256_hex: Deterministic hashing
- int64_to_le, le_to_int64, to_signed64: Two's-complement seed encoding
- read_json, write_json_atomic: Snapshot persistence
- time_block, configure_logging: Observability
"""

from __future__ import annotations

from contextlib import contextmanager, suppress
import hashlib
import json
import logging
import os
from pathlib import Path
import tempfile
import time
from typing import Any, Iterator

__all__ = [
    "MASK64",
    "sha256_hex",
    "to_signed64",
    "int64_to_le",
    "le_to_int64",
    "read_json",
    "write_json_atomic",
    "time_block",
    "configure_logging",
]

MASK64 = 0xFFFFFFFFFFFFFFFF


# ============================================================================
# Hashing
# ============================================================================


def sha256_hex(*parts: bytes) -> str:
    """SHA256 hex digest over the concatenation of ``parts``."""
    hasher = hashlib.sha256()
    for part in parts:
        hasher.update(part)
    return hasher.hexdigest()


# ============================================================================
# Fixed-width integer encoding
# ============================================================================


def to_signed64(value: int) -> int:
    """Reinterpret the low 64 bits of ``value`` as a signed integer."""
    value &= MASK64
    return value - (1 << 64) if value >= (1 << 63) else value


def int64_to_le(value: int) -> bytes:
    """Encode an int64 (signed or unsigned view) as 8 little-endian bytes."""
    return (value & MASK64).to_bytes(8, "little")


def le_to_int64(data: bytes) -> int:
    """Decode the first 8 little-endian bytes of ``data`` as a signed int64.

    Raises:
        ValueError: If fewer than 8 bytes are supplied
    """
    if len(data) < 8:
        raise ValueError(f"need at least 8 bytes, got {len(data)}")
    return int.from_bytes(data[:8], "little", signed=True)


# ============================================================================
# JSON I/O
# ============================================================================


def read_json(path: Path | str) -> Any:
    """Read a JSON file.

    Raises:
        FileNotFoundError: If file does not exist
        JSONDecodeError: If file contains invalid JSON
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json_atomic(path: Path | str, payload: str) -> None:
    """Write already-serialized JSON to ``path`` via temp file and rename.

    Each call writes its own uniquely named temporary file beside the
    target, so the final ``os.replace`` never crosses filesystems and
    concurrent writers never share a temp file. A crash mid-write leaves the
    previous file untouched.

    Args:
        path: Target file path
        payload: JSON text to write

    Raises:
        OSError: If the write or rename fails
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f"{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


# ============================================================================
# Timing
# ============================================================================


@contextmanager
def time_block(label: str, logger: logging.Logger | None = None) -> Iterator[None]:
    """Context manager that logs how long a block took.

    Example:
        with time_block("simulation", logger):
            run_simulation(seed, params)
        # "simulation completed in 1.23s"
    """
    start_time = time.perf_counter()

    try:
        yield
    finally:
        elapsed = time.perf_counter() - start_time
        message = f"{label} completed in {elapsed:.2f}s"

        if logger is not None:
            logger.info(message)
        else:
            logging.getLogger(__name__).debug(message)


# ============================================================================
# Logging Configuration
# ============================================================================


def configure_logging(level: str = "INFO", structured: bool = False) -> None:
    """Configure root logger with standardized format.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Emit one JSON object per line

    Raises:
        ValueError: If level is not a known logging level
    """
    numeric_level = getattr(logging, level.upper(), None)

    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(numeric_level)

    if structured:
        formatter = logging.Formatter(
            '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"name": "%(name)s", "message": "%(message)s"}'
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
