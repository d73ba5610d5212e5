"""Configuration module for the rng-chaos pipeline.

Load and validate TOML configuration with pydantic-settings and environment
overrides. As a Layer 1 module, may import: domain, exceptions, utils.

Environment variables use the ``RNG_CHAOS_`` prefix and ``__`` for nesting
and take precedence over TOML values:

    RNG_CHAOS_LEDGER__STORE_PATH=/var/lib/rng-chaos/store.json
    RNG_CHAOS_GENERATION__WHITENING=drbg

Example:
--------
>>> from rng_chaos.config import load_settings
>>> settings = load_settings("rng_chaos.toml")
>>> settings.generation.whitening
<WhiteningMode.AES: 'aes'>
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List

try:
    import tomllib
except ImportError:  # Python < 3.11
    import tomli as tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from rng_chaos.domain import EntropyMode, WhiteningMode
from rng_chaos.exceptions import ConfigError
from rng_chaos.utils import configure_logging

__all__ = [
    "ENV_PREFIX",
    "Settings",
    "LedgerConfig",
    "EntropyConfig",
    "GenerationConfig",
    "WorkersConfig",
    "LoggingConfig",
    "load_settings",
    "setup_logging",
]

ENV_PREFIX = "RNG_CHAOS_"

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Models
# ============================================================================


class LedgerConfig(BaseModel):
    """Ledger persistence configuration."""

    model_config = ConfigDict(extra="forbid")

    store_path: Path = Field(default=Path("store.json"))

    @field_validator("store_path", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        """Expand environment variables and user home in paths."""
        if isinstance(v, str):
            return Path(os.path.expandvars(os.path.expanduser(v)))
        return v


class EntropyConfig(BaseModel):
    """Seed derivation defaults."""

    model_config = ConfigDict(extra="forbid")

    default_mode: EntropyMode = Field(default=EntropyMode.MIX)
    default_urls: List[str] = Field(default_factory=list)
    timeout_s: float = Field(default=3.0, gt=0, le=30)
    jitter_rounds: int = Field(default=32, ge=1)
    mix_jitter_rounds: int = Field(default=48, ge=1)

    @field_validator("default_mode", mode="before")
    @classmethod
    def parse_mode(cls, v: Any) -> EntropyMode:
        return EntropyMode.parse(v)


class GenerationConfig(BaseModel):
    """Default generation parameters for requests that omit them."""

    model_config = ConfigDict(extra="forbid")

    bit_count: int = Field(default=1_000_000, ge=0)
    max_bit_count: int = Field(default=50_000_000, ge=1)
    canvas_w: int = Field(default=1024, ge=1)
    canvas_h: int = Field(default=1024, ge=1)
    iterations: int = Field(default=6000, ge=0)
    point_count: int = Field(default=20, ge=0)
    pixel_width: int = Field(default=4, ge=1)
    step: float = Field(default=0.01, gt=0)
    motion_law: str = Field(default="random")
    sharpness: float = Field(default=1.0, ge=0, le=2)
    smoothness: float = Field(default=1.0, ge=0, le=2)
    speed_scale: float = Field(default=1.0, ge=0)
    whitening: WhiteningMode = Field(default=WhiteningMode.AES)

    @field_validator("whitening", mode="before")
    @classmethod
    def parse_whitening(cls, v: Any) -> WhiteningMode:
        return WhiteningMode.parse(v)


class WorkersConfig(BaseModel):
    """Thread pool sizing for batch generation and verification."""

    model_config = ConfigDict(extra="forbid")

    max_workers: int = Field(default=4, ge=1, le=64)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: str = Field(default="INFO")
    structured: bool = Field(default=False)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got '{v}'")
        return v_upper


class Settings(BaseSettings):
    """Complete pipeline settings."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="forbid",
    )

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    entropy: EntropyConfig = Field(default_factory=EntropyConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    workers: WorkersConfig = Field(default_factory=WorkersConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment first so it overrides values loaded from TOML (passed as init kwargs)
        return env_settings, init_settings, dotenv_settings, file_secret_settings


# ============================================================================
# Loading Functions
# ============================================================================


def setup_logging(settings: Settings) -> None:
    """Apply the ``[logging]`` section to the root logger."""
    configure_logging(settings.logging.level, structured=settings.logging.structured)


def load_settings(toml_path: Path | str | None = None, *, apply_logging: bool = False) -> Settings:
    """Load and validate settings from TOML and environment.

    Args:
        toml_path: Path to TOML configuration file (optional)
        apply_logging: Also configure the root logger from ``settings.logging``

    Returns:
        Validated Settings object

    Raises:
        ConfigError: If the file is missing, is not valid TOML, or fails validation
    """
    config_dict: dict[str, Any] = {}

    if toml_path is not None:
        toml_path = Path(toml_path)
        if not toml_path.exists():
            raise ConfigError("Configuration file not found", {"path": str(toml_path)})

        try:
            with open(toml_path, "rb") as f:
                config_dict = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML: {e}", {"path": str(toml_path)}) from e

    try:
        settings = Settings(**config_dict)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", {"path": str(toml_path)}) from e

    if apply_logging:
        setup_logging(settings)

    logger.debug(f"Settings loaded (store={settings.ledger.store_path}, whitening={settings.generation.whitening.value})")
    return settings
