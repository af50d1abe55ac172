# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for cache, detection, normalization and logging
settings. Cross-field rules are checked in ``validate_config_consistency``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Inference cache ===
    cache_enabled: bool = True
    cache_ttl_seconds: int = 24 * 60 * 60
    fingerprint_sample_rows: int = 10

    # === Header detection ===
    header_detector: Literal["heuristic", "llm"] = "heuristic"
    inference_sample_rows: int = 20
    inference_timeout_seconds: float | None = 60.0
    min_header_confidence: float = 0.3

    # === LLM provider (header_detector=llm) ===
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.0
    llm_max_tokens: int = 1024
    openai_api_key: str = ""

    # === Processed-file metadata ===
    metadata_enabled: bool = False
    metadata_root: Path = Path("~/.rentroll/metadata")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_ttl_seconds", "fingerprint_sample_rows", "inference_sample_rows")
    @classmethod
    def validate_positive(cls, v: int) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("min_header_confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:  # noqa: N805
        if not 0.0 <= v <= 1.0:
            raise ValueError("min_header_confidence must be within [0, 1]")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.header_detector == "llm" and not self.openai_api_key:
            errors.append("HEADER_DETECTOR=llm requires OPENAI_API_KEY")

        if (
            self.inference_timeout_seconds is not None
            and self.inference_timeout_seconds <= 0
        ):
            errors.append("INFERENCE_TIMEOUT_SECONDS must be > 0 when set")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
