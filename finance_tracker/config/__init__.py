"""Configuration package."""

from finance_tracker.config.settings import (
    DEFAULT_CATEGORIES,
    TrackerSettings,
    get_settings,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "TrackerSettings",
    "get_settings",
]
