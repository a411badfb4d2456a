"""
House Cup — Centralized configuration.

Loads household settings from .env and validates them.
Every date computation depends on HOUSEHOLD_TIMEZONE and WEEK_START_DAY.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Household
    HOUSEHOLD_ID: str = "household-1"
    HOUSEHOLD_TIMEZONE: str = "America/New_York"   # IANA name
    WEEK_START_DAY: int = 0                        # 0 = Sunday ... 6 = Saturday
    COMPETITOR_IDS: list[str] = ["competitor-a", "competitor-b"]

    # Challenge
    DEFAULT_PRIZE: str = "Sleep-in weekend"

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("HOUSEHOLD_TIMEZONE")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown IANA timezone {v!r}") from exc
        return v

    @field_validator("WEEK_START_DAY", mode="before")
    @classmethod
    def parse_week_start(cls, v: str | int) -> int:
        day = int(v)
        if not 0 <= day <= 6:
            raise ValueError(f"must be 0-6, got {day}")
        return day

    @field_validator("COMPETITOR_IDS", mode="before")
    @classmethod
    def parse_competitor_ids(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [cid.strip() for cid in v.split(",") if cid.strip()]
        return []

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            HOUSEHOLD_ID=os.getenv("HOUSEHOLD_ID", "household-1"),
            HOUSEHOLD_TIMEZONE=os.getenv("HOUSEHOLD_TIMEZONE", "America/New_York"),
            WEEK_START_DAY=os.getenv("WEEK_START_DAY", "0"),
            COMPETITOR_IDS=os.getenv("COMPETITOR_IDS", "competitor-a,competitor-b"),
            DEFAULT_PRIZE=os.getenv("DEFAULT_PRIZE", "Sleep-in weekend"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid settings in .env:\n{exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
