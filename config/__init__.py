"""Configuration module."""

from config.settings import (
    EGX_INDICES,
    CriteriaDefaults,
    MarketIndex,
    Settings,
    get_settings,
)

__all__ = ["EGX_INDICES", "CriteriaDefaults", "MarketIndex", "Settings", "get_settings"]
