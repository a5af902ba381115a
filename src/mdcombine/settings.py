"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the mdcombine command line.

    Values are read from ``MDCOMBINE_``-prefixed environment variables and
    from a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="MDCOMBINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Collection
    max_workers: int | None = Field(default=None, ge=1)  # None: logical processor count
    encoding: str = "utf-8"

    # Resolution
    max_resolution_passes: int = Field(default=10, ge=1)
    max_content_length: int | None = Field(default=10_000_000, ge=1)  # None: unbounded
