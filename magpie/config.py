"""
Engine settings.

Read from environment variables prefixed with MAGPIE_, e.g.
MAGPIE_SHUFFLE_SEED=42 makes every shuffle reproducible.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MAGPIE_")

    log_level: str = Field(default="INFO")

    # Seed for the shuffle random source; unset means a fresh seed per run
    shuffle_seed: int | None = None

    # Safety bound on passes through any single phase; unset means no bound
    max_phase_iterations: int | None = Field(default=None, ge=1)

    # Player count used when the CLI is not told one
    default_players: int | None = Field(default=None, ge=1)


@lru_cache
def get_settings() -> EngineSettings:
    return EngineSettings()
