"""Centralised core settings loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_BAND_BOUNDARIES: tuple[float, float, float, float] = (0.20, 0.45, 0.65, 0.85)


class Settings(BaseSettings):
    """Tunable parameters of the fusion / classification / co-regulation core.

    Values are read from environment variables first, then from a *.env* file
    located at the project root.  Every variable lives in the flat
    ``COREGULATION_`` namespace (stripped automatically by
    *pydantic-settings*).
    """

    model_config = SettingsConfigDict(
        env_prefix="COREGULATION_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Band classification ───────────────────────────────────
    default_band_boundaries: tuple[float, float, float, float] = DEFAULT_BAND_BOUNDARIES
    smoothing_capacity: int = 5  # Tier A ring-buffer size
    smoothing_horizon_seconds: float | None = 10.0  # Tier A wall-clock horizon
    sustain_seconds: float = 20.0  # Tier B sustain duration

    # ── Co-regulation scan ────────────────────────────────────
    grid_step_seconds: float = 1.0
    window_seconds: float = 30.0
    stride_seconds: float = 5.0
    max_lag_seconds: float = 10.0
    correlation_threshold: float = 0.7
    lag_epsilon_seconds: float = 1.0  # |lag| within this → simultaneous
    caregiver_high_arousal: float = 0.5

    # ── Logging ───────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()
