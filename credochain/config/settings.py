"""
Application settings - pydantic-settings configuration.

This module defines application configuration using pydantic-settings
for environment variable loading with validation and defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database configuration (unset = in-memory registry, lost on restart)
    database_url: str | None = None
    pool_min_size: int = 2  # Minimum connections in pool
    pool_max_size: int = 10  # Maximum connections in pool

    # Bootstrap: owner of a freshly deployed registry (Hardhat account #0)
    deployer_address: str = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
