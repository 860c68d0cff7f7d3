"""Application configuration.

Uses pydantic-settings for environment variable support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables.
    Example: NAME_BATCH_SIZE, PARENT_POLICY, LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = Field(default="ifc_model_tree", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )

    # =========================================================================
    # Model Tree
    # =========================================================================
    name_batch_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Number of property fetches run concurrently per chunk",
    )
    parent_policy: Literal["first", "innermost"] = Field(
        default="first",
        description="Parent chosen when a spatial group is listed by several containers",
    )
    type_group_stride: int = Field(
        default=1000,
        ge=10,
        description="Id stride reserved per spatial node for type group headers",
    )

    # =========================================================================
    # IFC Files
    # =========================================================================
    ifc_max_file_size_mb: int = Field(
        default=500,
        ge=10,
        le=2000,
        description="Maximum IFC file size in MB",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("parent_policy", mode="before")
    @classmethod
    def normalize_parent_policy(cls, v: str) -> str:
        """Accept policy names in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def ifc_max_file_size_bytes(self) -> int:
        """Maximum IFC file size in bytes."""
        return self.ifc_max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
