"""
config.py

Application settings. Values come from `MATH_PRACTICE_*` environment
variables or a local `.env` file, loaded through pydantic-settings.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "MATH_PRACTICE_"
PROJECT_ROOT = Path(__file__).resolve().parents[1]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseSettings):
    """Runtime configuration for the practice API."""

    log_level: str = Field("INFO", description="Root logging level.")
    store_path: Optional[Path] = Field(
        None,
        description="JSON file for learner progress; in-memory when unset.",
    )
    default_grade: str = Field("3", description="Grade assigned to new learners.")
    question_seed: Optional[int] = Field(
        None,
        description="Seed for the question RNG; fixed seeds make runs reproducible.",
    )
    max_generation_attempts: int = Field(
        10,
        ge=1,
        description="Server-side retries when a generated id is excluded.",
    )
    token_poll_interval_sec: int = Field(
        30,
        ge=1,
        description="How often clients reconcile their local token balance.",
    )
    debug: bool = Field(False, description="Flask debug mode.")

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Root logger setup for the web app and CLI entry points."""

    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )
