"""
Configuration settings for memstore.

Uses Pydantic Settings to load environment variables for logging, pagination
limits, and the defaults of the contention scenarios.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Pagination
    page_size_default: int = Field(10, alias="PAGE_SIZE_DEFAULT", ge=1)
    page_size_max: int = Field(100, alias="PAGE_SIZE_MAX", ge=1)

    # Contention scenario defaults
    scenario_workers: int = Field(8, alias="SCENARIO_WORKERS", ge=1)
    scenario_operations: int = Field(50, alias="SCENARIO_OPERATIONS", ge=1)
    results_dir: str = Field("results", alias="RESULTS_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
