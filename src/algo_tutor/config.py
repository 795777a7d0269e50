"""Tunable scheduling parameters and application settings.

Uses Pydantic Settings so every threshold can be overridden from the
environment or a .env file, e.g. ``ALGO_TUTOR_TUNING__SLOW_RATIO=2.0``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from algo_tutor.models import Difficulty

DEFAULT_DB_PATH = str(Path.home() / ".algo_tutor" / "tutor.db")
DEFAULT_CATALOG_PATH = str(Path(__file__).parent / "content" / "catalog.json")


class Tuning(BaseModel):
    """Numeric knobs of the scheduler, mastery tracker and skill graph."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # ========================================
    # Time baselines
    # ========================================
    baseline_seconds: dict[Difficulty, float] = Field(
        default_factory=lambda: {
            Difficulty.EASY: 600.0,
            Difficulty.MEDIUM: 1500.0,
            Difficulty.HARD: 2700.0,
        },
        description="Expected solve time per difficulty",
    )
    slow_ratio: float = Field(
        default=1.5, gt=0,
        description="Solves at or above baseline * slow_ratio count as slow",
    )

    # ========================================
    # Ease factor
    # ========================================
    default_ease: float = Field(default=2.5, gt=0)
    ease_min: float = Field(default=1.3, gt=0)
    ease_max: float = Field(default=5.0, gt=0)
    reset_ease_penalty: float = Field(default=0.20, ge=0)
    struggle_ease_penalty: float = Field(default=0.15, ge=0)
    speed_ease_bonus: float = Field(default=0.15, ge=0)

    # ========================================
    # Intervals (whole days)
    # ========================================
    reset_interval: int = Field(default=1, ge=1)
    grit_interval: int = Field(default=2, ge=1)
    clean_interval: int = Field(default=4, ge=1)
    shrink_factor: float = Field(default=0.7, gt=0, lt=1)
    growth_factor: float = Field(default=1.5, gt=1)
    max_interval: int = Field(default=180, ge=1)

    # ========================================
    # Mastery and unlocking
    # ========================================
    unlock_threshold: float = Field(default=0.70, ge=0, le=1)
    stabilization_count: int = Field(
        default=3, ge=1,
        description="Repetitions after which a problem counts as fully learned",
    )
    ease_baseline: float = Field(
        default=2.5, gt=0,
        description="Ease at or above which a stabilized problem contributes 1.0",
    )
    ease_floor_weight: float = Field(
        default=0.6, ge=0, le=1,
        description="Share of a problem's contribution that does not depend on ease",
    )
    difficulty_weights: dict[Difficulty, float] = Field(
        default_factory=lambda: {
            Difficulty.EASY: 0.8,
            Difficulty.MEDIUM: 1.2,
            Difficulty.HARD: 1.5,
        },
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "Tuning":
        if not self.ease_min <= self.default_ease <= self.ease_max:
            raise ValueError("default_ease must lie within [ease_min, ease_max]")
        if self.ease_baseline <= self.ease_min:
            raise ValueError("ease_baseline must exceed ease_min")
        if self.growth_factor * self.shrink_factor <= 1:
            raise ValueError("growth_factor must exceed 1 / shrink_factor")
        for name in ("reset_interval", "grit_interval", "clean_interval"):
            if getattr(self, name) > self.max_interval:
                raise ValueError(f"{name} must not exceed max_interval")
        for table in ("baseline_seconds", "difficulty_weights"):
            values = getattr(self, table)
            missing = set(Difficulty) - set(values)
            if missing:
                raise ValueError(f"{table} is missing {sorted(d.value for d in missing)}")
            if any(v <= 0 for v in values.values()):
                raise ValueError(f"{table} values must be positive")
        return self

    def baseline_for(self, difficulty: Difficulty) -> float:
        return self.baseline_seconds[difficulty]

    def weight_for(self, difficulty: Difficulty) -> float:
        return self.difficulty_weights[difficulty]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ALGO_TUTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    db_path: str = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    catalog_path: str = Field(
        default=DEFAULT_CATALOG_PATH,
        description="Problem catalog (.json or .yaml)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="WARNING")
    tuning: Tuning = Field(default_factory=Tuning)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
