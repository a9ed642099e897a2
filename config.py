"""
Configuration settings for the prep-forecast engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Minimum loguru level for CLI output",
    )

    # ========================================
    # Forecast Calibration
    # ========================================
    forecast_calibration_path: str | None = Field(
        default=None,
        description="JSON file replacing the built-in cohort tables (rank anchors, brackets)",
    )
    forecast_score_floor: float = Field(
        default=0,
        description="Lowest mark any score estimate may report",
    )
    forecast_scenario_delta: float = Field(
        default=30,
        description="Marks between most-likely and the best/worst case",
    )
    forecast_confidence_width: float = Field(
        default=25,
        description="Half-width of the score confidence range in marks",
    )
    forecast_default_prior_score: float = Field(
        default=320,
        description="Conservative prior official score when the profile has none",
    )

    def get_forecast_config(self) -> dict[str, float | str | None]:
        """Get forecast calibration settings as a dictionary."""
        return {
            "calibration_path": self.forecast_calibration_path,
            "score_floor": self.forecast_score_floor,
            "scenario_delta": self.forecast_scenario_delta,
            "confidence_width": self.forecast_confidence_width,
            "default_prior_score": self.forecast_default_prior_score,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
