"""
Screening data ingestion.

Fetches index constituents from the data provider and normalizes them.
"""

from src.ingest.screening import (
    DataProvider,
    FetchOutcome,
    FetchState,
    ScreeningSession,
    build_screening_result,
    extract_sources,
)

__all__ = [
    "DataProvider",
    "FetchOutcome",
    "FetchState",
    "ScreeningSession",
    "build_screening_result",
    "extract_sources",
]
