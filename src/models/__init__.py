"""Data models for the EGX screener."""

from src.models.criteria import ScreeningCriteria, WindowRange
from src.models.provider import ProviderPayload, RawCitation, RawStock
from src.models.stock import (
    PLACEHOLDER_TITLE,
    PLACEHOLDER_URI,
    Citation,
    ScreeningResult,
    StockRecord,
    WatchlistEntry,
)

__all__ = [
    # Provider models
    "ProviderPayload",
    "RawCitation",
    "RawStock",
    # Screening models
    "PLACEHOLDER_TITLE",
    "PLACEHOLDER_URI",
    "Citation",
    "ScreeningResult",
    "StockRecord",
    "WatchlistEntry",
    # Criteria models
    "ScreeningCriteria",
    "WindowRange",
]
