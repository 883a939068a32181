"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Defaults for the four persisted entities live here too, so a fresh
store and a reset store are guaranteed to agree on what "default" means.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CATEGORIES = (
    "Food",
    "Transport",
    "Utilities",
    "Entertainment",
    "Salary",
    "Healthcare",
    "Shopping",
)


class TrackerSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Every variable is prefixed with FINANCE_TRACKER_.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage backend
    storage_backend: Literal["memory", "json_file"] = Field(
        default="json_file",
        description="Durable store implementation to use"
    )
    storage_path: str = Field(
        default="finance_tracker_state.json",
        description="Path of the JSON document used by the json_file backend"
    )
    key_prefix: str = Field(
        default="finance.",
        description="Prefix shared by every key this tracker owns"
    )
    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a durable write before giving up"
    )

    # Entity defaults
    default_budget: Decimal = Field(
        default=Decimal("2000"),
        description="Monthly budget installed when none is persisted"
    )
    default_currency: str = Field(
        default="MYR",
        min_length=1,
        description="Display currency installed when none is persisted"
    )
    default_categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES),
        description="Category seed installed when none is persisted"
    )

    # Error policies
    decode_failure_policy: Literal["fail", "fallback"] = Field(
        default="fail",
        description="What to do when a persisted value cannot be decoded"
    )
    reset_clears_entire_store: bool = Field(
        default=False,
        description="Whether reset wipes foreign keys in the durable store too"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )
    log_format: Literal["json", "console"] = Field(
        default="json",
        description="Renderer for structured logs"
    )

    @field_validator('default_categories')
    @classmethod
    def dedupe_categories(cls, v: list[str]) -> list[str]:
        """Drop blanks and repeats while keeping first-seen order."""
        seen: list[str] = []
        for name in v:
            name = name.strip()
            if name and name not in seen:
                seen.append(name)
        return seen

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    def storage_key(self, name: str) -> str:
        """Full durable key for one of the tracker's entities."""
        return f"{self.key_prefix}{name}"


@lru_cache()
def get_settings() -> TrackerSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return TrackerSettings()
