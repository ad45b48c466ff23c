"""
Environment-driven defaults using pydantic-settings.

Environment variables (prefix: MATHQUEST_):
    MATHQUEST_NEGATIVE_POINTS_ENABLED   - deduct points on wrong answers (default: true)
    MATHQUEST_TIMER_ENABLED             - show a countdown per problem (default: false)
    MATHQUEST_TIMER_DURATION            - countdown length in seconds (default: 30)
    MATHQUEST_AUTO_CLOSE_MODAL          - close result messages automatically (default: true)
    MATHQUEST_DISPLAY_PROBLEMS_IN_TILES - print questions on board tiles (default: true)
    MATHQUEST_MAX_ROUNDS                - rounds per game (default: 10)
    MATHQUEST_SEED                      - RNG seed for reproducible games (default: unset)
    MATHQUEST_LOG_LEVEL                 - logging level for the CLI (default: INFO)
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mathquest.config import MAX_ROUNDS


class GameSettings(BaseSettings):
    """Default game options loaded from the environment or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="MATHQUEST_",
    )

    negative_points_enabled: bool = Field(
        default=True,
        description="Deduct the problem's points on a wrong answer or timeout.",
    )
    timer_enabled: bool = Field(default=False, description="Run a countdown per problem.")
    timer_duration: int = Field(default=30, ge=1, description="Countdown length in seconds.")
    auto_close_modal: bool = Field(default=True)
    display_problems_in_tiles: bool = Field(default=True)
    max_rounds: int = Field(default=MAX_ROUNDS, ge=1)
    seed: Optional[int] = Field(default=None, description="RNG seed for reproducible games.")
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept any level name the logging module knows, case-insensitively."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_game_settings() -> GameSettings:
    """Return cached game settings instance."""
    return GameSettings()
