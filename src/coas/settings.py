"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the ``coas-lint`` command.

    Values are read from ``COAS_``-prefixed environment variables and from a
    ``.env`` file in the working directory.  Command-line flags win.
    """

    model_config = SettingsConfigDict(
        env_prefix="COAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"

    # Custom extension rules ({customExtensions: [...]}, YAML or JSON)
    rules_file: Path | None = None

    # Report
    output_format: str = "text"  # text | json
    lint_all: bool = False  # also lint files without an openapi/swagger marker
