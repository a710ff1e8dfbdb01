# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application configuration loaded from environment variables."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings.

    Every field can be overridden through an environment variable of the
    same name (case-insensitive) or a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Storage
    data_dir: Path = Path("data")

    # Logging
    log_level: str = "INFO"

    # CORS origins for the frontend dev server
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Seed datasets written when a collection file is missing or empty
    seed_contact_count: int = Field(12000, ge=0)
    seed_task_count: int = Field(0, ge=0)

    # Simulated backend instability
    simulate_faults: bool = True
    min_delay_ms: int = Field(100, ge=0)
    max_delay_ms: int = Field(400, ge=0)
    read_failure_rate: float = Field(0.05, ge=0.0, le=1.0)
    write_failure_rate: float = Field(0.12, ge=0.0, le=1.0)

    # Client retry envelope
    retry_attempts: int = Field(3, ge=1)
    retry_base_delay: float = Field(0.2, ge=0.0)
    retry_jitter: float = Field(0.2, ge=0.0)

    # Listing
    default_page_size: int = Field(50, ge=1)


settings = Settings()
