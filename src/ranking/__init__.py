"""
Sorting module.

Orders screening results by record fields or derived upside.
"""

from src.ranking.sorter import (
    SortDirection,
    SortKey,
    SortState,
    SortToggle,
    next_sort_state,
    sort_stocks,
    sort_value,
    upside_value,
)

__all__ = [
    "SortDirection",
    "SortKey",
    "SortState",
    "SortToggle",
    "next_sort_state",
    "sort_stocks",
    "sort_value",
    "upside_value",
]
