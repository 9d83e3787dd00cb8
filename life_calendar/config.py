"""
Life Calendar — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for the storage adapters and the entry point.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from life_calendar/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_STORAGE_BACKENDS = ("sqlite", "memory")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Storage backend: "sqlite" | "memory"
    STORAGE_BACKEND: str = "sqlite"

    # SQLite (only used when STORAGE_BACKEND=sqlite)
    DATABASE_PATH: str = "data/life_calendar.db"

    # Key under which the calendar payload is persisted
    STORAGE_KEY: str = "life-calendar-storage"

    # Life expectancy (years) for a fresh or cleared calendar
    DEFAULT_LIFE_EXPECTANCY: int = 80

    LOG_LEVEL: str = "WARNING"

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def parse_backend(cls, v: str) -> str:
        return str(v).strip().lower()

    @field_validator("DEFAULT_LIFE_EXPECTANCY", mode="before")
    @classmethod
    def parse_expectancy(cls, v: str | int) -> int:
        return int(v)

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return str(v).strip().upper() or "WARNING"


def _load_settings() -> Settings:
    """Load settings from environment, validating values."""
    backend = os.getenv("STORAGE_BACKEND", "sqlite")
    expectancy = os.getenv("DEFAULT_LIFE_EXPECTANCY", "80")

    if backend.strip().lower() not in _STORAGE_BACKENDS:
        print(
            f"ERROR: STORAGE_BACKEND must be one of {', '.join(_STORAGE_BACKENDS)}",
            file=sys.stderr,
        )
        sys.exit(1)

    if not expectancy.strip().isdigit() or not 50 <= int(expectancy) <= 120:
        print("ERROR: DEFAULT_LIFE_EXPECTANCY must be an integer between 50 and 120", file=sys.stderr)
        sys.exit(1)

    return Settings(
        STORAGE_BACKEND=backend,
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/life_calendar.db"),
        STORAGE_KEY=os.getenv("STORAGE_KEY", "life-calendar-storage"),
        DEFAULT_LIFE_EXPECTANCY=expectancy,
        LOG_LEVEL=os.getenv("LOG_LEVEL", "WARNING"),
    )


# Singleton — imported by all other modules as:
#   from life_calendar.config import settings
settings = _load_settings()
