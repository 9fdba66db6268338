"""
Criteria filtering module.

Applies performance windows and view flags to screening results.
"""

from src.filters.criteria import (
    FilterResult,
    check_one_month,
    check_range,
    check_undervalued,
    check_watchlist,
    count_undervalued,
    filter_stocks,
    passes_criteria,
    screen_stocks,
    watchlist_view,
)

__all__ = [
    "FilterResult",
    "check_one_month",
    "check_range",
    "check_undervalued",
    "check_watchlist",
    "count_undervalued",
    "filter_stocks",
    "passes_criteria",
    "screen_stocks",
    "watchlist_view",
]
