"""
Configuration management for pharma_kg.

Uses pydantic-settings for environment variable loading and validation.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PHARMA_KG_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Dynamic updates
    update_confidence_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Minimum confidence for a runtime knowledge update to be applied",
    )

    # Traversal limits
    default_max_depth: int = Field(default=2, ge=0, description="Default related-entity depth")
    default_max_results: int = Field(default=20, ge=0, description="Default related-entity limit")
    default_min_strength: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Default minimum edge strength for traversals",
    )
    path_max_depth: int = Field(default=5, ge=0, description="Default shortest-path hop limit")

    # Query enhancement
    related_search_limit: int = Field(
        default=5,
        ge=0,
        description="Related entities suggested as follow-up searches",
    )
    max_competitor_strategies: int = Field(
        default=10,
        ge=0,
        description="Maximum competitor-substituted strategies per fan-out",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )


# Global settings instance
settings = Settings()
