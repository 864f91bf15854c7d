"""
Central configuration for the potential plot client.
All core constants and environment-driven settings live here.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    # ── Computation Service ─────────────────────────────────────────
    API_BASE_URL: str = "http://localhost:8080/api"
    REQUEST_TIMEOUT: Optional[float] = Field(default=None, gt=0)  # None = no deadline
    MAX_CONCURRENT_REQUESTS: int = Field(default=8, ge=1)

    # ── Rendering ───────────────────────────────────────────────────
    PLOT_HEIGHT: int = 600
    EXPORT_FORMAT: str = "png"
    EXPORT_SCALE: int = 2
    EXPORT_WIDTH: int = 1200
    EXPORT_HEIGHT: int = 800
    EXPORT_FILENAME: str = "quantum_plot"
    MODEBAR_BUTTONS_TO_REMOVE: list[str] = ["lasso2d", "select2d"]

    # ── Default Grid ────────────────────────────────────────────────
    DEFAULT_R_MIN: float = 0.0
    DEFAULT_R_MAX: float = 15.0
    DEFAULT_N_GRID: int = 20

    # ── Logging ─────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    @field_validator("API_BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton instance
settings = Settings()
