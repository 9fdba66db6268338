"""
Sorting module for screening results.

Orders filtered records by any record field or by the derived upside.
Records without a fair value get an upside of negative infinity, so they
land last when sorting descending and first when sorting ascending.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from src.models.stock import StockRecord


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class SortKey(str, Enum):
    """Sortable record fields plus the derived upside."""

    SYMBOL = "symbol"
    NAME = "name"
    CURRENT_PRICE = "current_price"
    CHANGE_6M = "change_6m"
    CHANGE_1M = "change_1m"
    CHANGE_1W = "change_1w"
    PE_RATIO = "pe_ratio"
    FAIR_VALUE = "fair_value"
    SECTOR = "sector"
    LAST_UPDATED = "last_updated"
    UPSIDE = "upside"

    @property
    def is_text(self) -> bool:
        return self in {SortKey.SYMBOL, SortKey.NAME, SortKey.SECTOR}


@dataclass(frozen=True)
class SortState:
    """Active sort column and direction."""

    key: SortKey
    direction: SortDirection = SortDirection.DESC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


# -----------------------------------------------------------------------------
# Toggle state machine
# -----------------------------------------------------------------------------


def next_sort_state(
    current: Optional[SortState],
    key: Union[SortKey, str],
) -> SortState:
    """
    Transition for a "sort by key" request.

    The first request on a key sorts descending, repeating it while
    descending flips to ascending, and anything else starts over at
    descending on the requested key.

    Args:
        current: Active sort, or None when unsorted
        key: Requested sort key

    Returns:
        New SortState
    """
    key = SortKey(key)
    if current is not None and current.key is key and current.direction is SortDirection.DESC:
        return SortState(key=key, direction=SortDirection.ASC)
    return SortState(key=key, direction=SortDirection.DESC)


class SortToggle:
    """Holds the sort state for one session."""

    def __init__(self, state: Optional[SortState] = None):
        self.state = state

    def select(self, key: Union[SortKey, str]) -> SortState:
        self.state = next_sort_state(self.state, key)
        return self.state

    def clear(self) -> None:
        self.state = None

    def apply(self, stocks: Sequence[StockRecord]) -> list[StockRecord]:
        return sort_stocks(stocks, self.state)


# -----------------------------------------------------------------------------
# Value extraction and sorting
# -----------------------------------------------------------------------------


def upside_value(stock: StockRecord) -> float:
    """Upside as a sort value; negative infinity when unavailable."""
    upside = stock.upside
    if upside is None:
        return -math.inf
    return upside


def sort_value(stock: StockRecord, key: SortKey) -> Union[float, str]:
    """
    Extract the comparable value for a key.

    Missing or NaN numbers sort as 0 and missing text as "".
    """
    if key is SortKey.UPSIDE:
        return upside_value(stock)
    if key is SortKey.LAST_UPDATED:
        return stock.last_updated.timestamp()

    value = getattr(stock, key.value)
    if key.is_text:
        return value or ""
    if value is None or math.isnan(value):
        return 0.0
    return value


def sort_stocks(
    stocks: Sequence[StockRecord],
    state: Optional[SortState],
) -> list[StockRecord]:
    """
    Order records for display.

    Ties keep their input order in both directions. With no state the
    input order is returned unchanged.

    Args:
        stocks: Filtered records
        state: Active sort, or None

    Returns:
        New ordered list
    """
    if state is None:
        return list(stocks)

    return sorted(
        stocks,
        key=lambda stock: sort_value(stock, state.key),
        reverse=state.descending,
    )
