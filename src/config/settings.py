# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings of the
sequencing engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


_KNOWN_EXPORT_FORMATS = {"json", "graphml"}


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Engine ===
    default_effort_weight: float = 1.0
    max_components_per_project: int = 0  # 0 = unlimited

    # === Export ===
    export_formats: str = "json"
    export_dir: Path = Path("./output")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("default_effort_weight")
    @classmethod
    def validate_default_weight(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("default_effort_weight must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.max_components_per_project < 0:
            errors.append("MAX_COMPONENTS_PER_PROJECT must be >= 0 (0 = unlimited)")

        unknown = set(self.export_formats_list) - _KNOWN_EXPORT_FORMATS
        if unknown:
            errors.append(
                f"EXPORT_FORMATS contains unsupported formats: {sorted(unknown)}"
            )

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def export_formats_list(self) -> list[str]:
        """Parse comma-separated export formats."""
        return [f.strip() for f in self.export_formats.split(",") if f.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-project config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
