"""
Criteria filtering for screening results.

A record passes when every enabled predicate holds. The 6-month and 1-week
windows are closed ranges. The 1-month window is either a floor or, in
absolute mode, an OR of "gained at least min" and "lost at least max", which
is meant to catch large moves in both directions.

All functions are pure and total: NaN values fail their predicate instead
of raising.
"""

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Optional, Sequence

from src.models.criteria import ScreeningCriteria, WindowRange
from src.models.stock import StockRecord


@dataclass
class FilterResult:
    """Result of filtering one screening result."""

    passed: list[StockRecord]
    total_input: int

    @property
    def pass_count(self) -> int:
        return len(self.passed)

    @property
    def pass_rate(self) -> float:
        if self.total_input == 0:
            return 0.0
        return self.pass_count / self.total_input

    def get_passed_symbols(self) -> list[str]:
        """Return symbols that passed, in input order."""
        return [stock.symbol for stock in self.passed]

    def is_match(self, symbol: str) -> bool:
        """Whether a symbol is part of the filtered set."""
        return any(stock.symbol == symbol for stock in self.passed)


# -----------------------------------------------------------------------------
# Individual predicates (pure, stateless)
# -----------------------------------------------------------------------------


def check_range(change: float, window: WindowRange) -> bool:
    """
    Closed-range test used by the 6-month and 1-week windows.

    Args:
        change: Percentage change for the window
        window: Window bounds

    Returns:
        True if the window is disabled or min <= change <= max
    """
    if not window.enabled:
        return True
    return window.min_change <= change <= window.max_change


def check_one_month(change: float, window: WindowRange, use_absolute: bool) -> bool:
    """
    1-month test.

    Floor mode ignores max entirely. Absolute mode passes a gain of at least
    min OR a loss of at least max; it is not a bounded range.

    Args:
        change: 1-month percentage change
        window: 1-month bounds
        use_absolute: Whether absolute mode is on

    Returns:
        True if the record passes the 1-month window
    """
    if not window.enabled:
        return True
    if use_absolute:
        return change >= window.min_change or change <= window.max_change
    return change >= window.min_change


def check_undervalued(stock: StockRecord) -> bool:
    """Fair value present, non-zero and strictly above the current price."""
    return stock.is_undervalued


def check_watchlist(symbol: str, watchlist: AbstractSet[str]) -> bool:
    return symbol in watchlist


# -----------------------------------------------------------------------------
# Main filter functions
# -----------------------------------------------------------------------------


def passes_criteria(
    stock: StockRecord,
    criteria: ScreeningCriteria,
    watchlist_only: bool = False,
    watchlist: AbstractSet[str] = frozenset(),
) -> bool:
    """
    Apply all predicates to a single record.

    Args:
        stock: Record to test
        criteria: Filter configuration
        watchlist_only: Keep only saved symbols
        watchlist: Saved symbols

    Returns:
        True if every enabled predicate holds
    """
    if not check_range(stock.change_6m, criteria.six_month):
        return False
    if not check_one_month(stock.change_1m, criteria.one_month, criteria.use_absolute_1m):
        return False
    if not check_range(stock.change_1w, criteria.one_week):
        return False
    if criteria.undervalued_only and not check_undervalued(stock):
        return False
    if watchlist_only and not check_watchlist(stock.symbol, watchlist):
        return False
    return True


def filter_stocks(
    stocks: Sequence[StockRecord],
    criteria: ScreeningCriteria,
    watchlist_only: Optional[bool] = None,
    watchlist: AbstractSet[str] = frozenset(),
) -> list[StockRecord]:
    """
    Filter records by criteria, preserving input order.

    Args:
        stocks: Records in provider order
        criteria: Filter configuration (not modified)
        watchlist_only: Overrides criteria.watchlist_only when given
        watchlist: Saved symbols for the watchlist predicate

    Returns:
        Records that pass every enabled predicate
    """
    if watchlist_only is None:
        watchlist_only = criteria.watchlist_only

    return [
        stock
        for stock in stocks
        if passes_criteria(stock, criteria, watchlist_only, watchlist)
    ]


def screen_stocks(
    stocks: Sequence[StockRecord],
    criteria: ScreeningCriteria,
    watchlist_only: Optional[bool] = None,
    watchlist: AbstractSet[str] = frozenset(),
) -> FilterResult:
    """Filter records and keep the input size for match reporting."""
    passed = filter_stocks(stocks, criteria, watchlist_only, watchlist)
    return FilterResult(passed=passed, total_input=len(stocks))


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def watchlist_view(
    stocks: Iterable[StockRecord],
    watchlist: AbstractSet[str],
) -> list[StockRecord]:
    """Saved records of the current result, in provider order."""
    return [stock for stock in stocks if stock.symbol in watchlist]


def count_undervalued(stocks: Iterable[StockRecord]) -> int:
    return sum(1 for stock in stocks if stock.is_undervalued)
