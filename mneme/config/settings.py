"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables (prefix ``MNEME_``) and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Knowledge base location
    data_dir: Path = Path(".mneme")
    tags_file: str = "tags.json"

    # Interactive search
    search_default_limit: int = 20

    # Context injection
    injection_min_prompt_length: int = 10
    injection_max_prompt_length: int = 4000
    injection_relevance_floor: int = 10
    injection_max_results: int = 3
    injection_types: list[str] = ["session", "decision"]
    injection_skip_prefixes: list[str] = ["/mneme"]
    injection_approved_floor: int = 2
    injection_approved_max_results: int = 5

    # Logging
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="MNEME_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def tags_path(self) -> Path:
        """Location of the alias dictionary file."""
        return self.data_dir / self.tags_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
