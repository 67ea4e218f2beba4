# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for extraction, OCR, cache, analysis policy
and logging settings. Every component also accepts ``settings=None``
and falls back to the defaults declared here.
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

    # === Processing ===
    max_concurrent_pages: int = 4
    fast_mode_enabled: bool = True
    fast_mode_page_threshold: int = 5
    quick_pages: int = 3
    fallback_enabled: bool = True
    fallback_min_chars: int = 100
    processing_timeout_seconds: float = 120.0

    # === Scan detection ===
    scan_detection_policy: Literal["per_page", "total"] = "per_page"
    scan_chars_threshold: int = 100

    # === OCR ===
    ocr_enabled: bool = True
    ocr_dpi: int = 300
    ocr_language: str = "eng"
    ocr_preprocess: bool = True
    ocr_timeout_seconds: float = 60.0
    ocr_page_timeout_seconds: float = 30.0

    # === Legacy DOC conversion ===
    doc_converter: Literal["antiword", "catdoc", "none"] = "antiword"
    doc_converter_timeout_seconds: float = 30.0

    # === Cache ===
    cache_enabled: bool = True
    cache_backend: Literal["json", "sqlite", "memory"] = "json"
    cache_root: Path = Path("~/.clincerta/cache")
    cache_max_size: int = 50
    cache_max_age_seconds: int = 24 * 60 * 60
    cache_cleanup_interval_seconds: int = 60 * 60
    cache_compression_enabled: bool = True
    cache_compression_threshold: int = 100_000

    # === Golden thread policy ===
    golden_thread_policy: Literal["connections", "actions_interventions"] = "connections"
    golden_thread_pass_score: int = 70
    golden_thread_min_sections: int = 5
    golden_thread_partial_score: int = 50
    connection_strength_threshold: float = 0.5

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "max_concurrent_pages",
        "quick_pages",
        "ocr_dpi",
        "cache_max_size",
        "cache_cleanup_interval_seconds",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator(
        "processing_timeout_seconds",
        "ocr_timeout_seconds",
        "ocr_page_timeout_seconds",
        "doc_converter_timeout_seconds",
    )
    @classmethod
    def validate_timeout(cls, v: float, info) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("connection_strength_threshold")
    @classmethod
    def validate_strength(cls, v: float) -> float:  # noqa: N805
        if not 0.0 <= v <= 1.0:
            raise ValueError("connection_strength_threshold must be within [0, 1]")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.quick_pages > self.fast_mode_page_threshold:
            errors.append("QUICK_PAGES must be <= FAST_MODE_PAGE_THRESHOLD")

        if self.golden_thread_partial_score > self.golden_thread_pass_score:
            errors.append(
                "GOLDEN_THREAD_PARTIAL_SCORE must be <= GOLDEN_THREAD_PASS_SCORE"
            )

        if self.cache_max_age_seconds < 1:
            errors.append("CACHE_MAX_AGE_SECONDS must be >= 1")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def cache_max_age_ms(self) -> int:
        return self.cache_max_age_seconds * 1000
