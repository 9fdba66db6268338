"""Tests for criteria filtering."""

import math

import pytest

from src.filters.criteria import (
    FilterResult,
    check_one_month,
    check_range,
    check_undervalued,
    count_undervalued,
    filter_stocks,
    passes_criteria,
    screen_stocks,
    watchlist_view,
)
from src.models.criteria import ScreeningCriteria, WindowRange

from tests.conftest import make_stock


@pytest.fixture
def one_month_window() -> WindowRange:
    return WindowRange(enabled=True, min_change=5, max_change=-5)


class TestCheckRange:
    """Tests for the closed-range windows (6m, 1w)."""

    def test_inside_range(self):
        """Should pass values inside the range."""
        window = WindowRange(enabled=True, min_change=10, max_change=150)
        assert check_range(20.0, window) is True

    def test_bounds_are_inclusive(self):
        """Should pass values equal to either bound."""
        window = WindowRange(enabled=True, min_change=10, max_change=150)
        assert check_range(10.0, window) is True
        assert check_range(150.0, window) is True

    def test_outside_range(self):
        """Should fail values below min or above max."""
        window = WindowRange(enabled=True, min_change=10, max_change=150)
        assert check_range(9.99, window) is False
        assert check_range(150.01, window) is False

    def test_disabled_is_vacuously_true(self):
        """Should pass anything when disabled."""
        window = WindowRange(enabled=False, min_change=10, max_change=150)
        assert check_range(-99.0, window) is True

    def test_nan_fails(self):
        """Should fail malformed values instead of raising."""
        window = WindowRange(enabled=True, min_change=-100, max_change=100)
        assert check_range(math.nan, window) is False


class TestCheckOneMonth:
    """Tests for the 1-month window and its two modes."""

    def test_strong_gain_passes_both_modes(self, one_month_window):
        """A 7% gain clears the floor in either mode."""
        assert check_one_month(7.0, one_month_window, use_absolute=False) is True
        assert check_one_month(7.0, one_month_window, use_absolute=True) is True

    def test_sharp_loss_passes_only_absolute(self, one_month_window):
        """An 8% loss is caught only in absolute mode."""
        assert check_one_month(-8.0, one_month_window, use_absolute=False) is False
        assert check_one_month(-8.0, one_month_window, use_absolute=True) is True

    def test_small_move_fails_both_modes(self, one_month_window):
        """A 2% move is neither a strong gain nor a strong loss."""
        assert check_one_month(2.0, one_month_window, use_absolute=False) is False
        assert check_one_month(2.0, one_month_window, use_absolute=True) is False

    def test_floor_mode_ignores_max(self):
        """Floor mode should not cap gains at max."""
        window = WindowRange(enabled=True, min_change=5, max_change=10)
        assert check_one_month(500.0, window, use_absolute=False) is True

    def test_absolute_mode_is_or_not_range(self):
        """With min below max, absolute mode passes everything (OR, not AND)."""
        window = WindowRange(enabled=True, min_change=0, max_change=10)
        assert check_one_month(-50.0, window, use_absolute=True) is True
        assert check_one_month(50.0, window, use_absolute=True) is True

    def test_disabled_is_vacuously_true(self):
        """Should pass anything when disabled."""
        window = WindowRange(enabled=False, min_change=5, max_change=-5)
        assert check_one_month(0.0, window, use_absolute=True) is True

    def test_nan_fails_absolute_mode(self, one_month_window):
        """NaN fails both sides of the OR."""
        assert check_one_month(math.nan, one_month_window, use_absolute=True) is False


class TestCheckUndervalued:
    """Tests for the undervalued view flag."""

    def test_fair_value_above_price(self):
        assert check_undervalued(make_stock(current_price=50, fair_value=60)) is True

    def test_fair_value_equal_to_price(self):
        """Should require strictly greater."""
        assert check_undervalued(make_stock(current_price=50, fair_value=50)) is False

    def test_zero_fair_value_is_unavailable(self):
        assert check_undervalued(make_stock(current_price=50, fair_value=0)) is False

    def test_missing_fair_value(self):
        assert check_undervalued(make_stock(current_price=50, fair_value=None)) is False

    def test_nan_fair_value(self):
        assert check_undervalued(make_stock(current_price=50, fair_value=math.nan)) is False


class TestPassesCriteria:
    """Tests for AND-composition of predicates."""

    def test_all_windows_must_hold(self, scenario_criteria):
        """Should fail when any single enabled window fails."""
        stock = make_stock(change_6m=20, change_1m=1)
        assert passes_criteria(stock, scenario_criteria) is False

    def test_one_week_checked_when_enabled(self, scenario_criteria):
        scenario_criteria.one_week.enabled = True
        stock = make_stock(change_6m=20, change_1m=8, change_1w=25)
        assert passes_criteria(stock, scenario_criteria) is False

    def test_undervalued_flag(self, scenario_criteria):
        scenario_criteria.undervalued_only = True
        stock = make_stock(change_6m=20, change_1m=8, current_price=10, fair_value=9)
        assert passes_criteria(stock, scenario_criteria) is False

    def test_watchlist_flag(self):
        criteria = ScreeningCriteria.disabled()
        stock = make_stock("COMI")
        assert passes_criteria(stock, criteria, watchlist_only=True, watchlist=frozenset()) is False
        assert passes_criteria(stock, criteria, watchlist_only=True, watchlist={"COMI"}) is True


class TestFilterStocks:
    """Tests for batch filtering."""

    def test_disabled_criteria_returns_input_unchanged(self):
        """Should keep every record, in order, when nothing is enabled."""
        stocks = [make_stock(s, change_6m=v) for s, v in [("A", -50), ("B", 300), ("C", 0)]]

        result = filter_stocks(stocks, ScreeningCriteria.disabled())

        assert result == stocks

    def test_preserves_relative_order(self, scenario_criteria):
        stocks = [
            make_stock("Z", change_6m=50, change_1m=9),
            make_stock("X", change_6m=1, change_1m=9),
            make_stock("A", change_6m=30, change_1m=-9),
        ]

        result = filter_stocks(stocks, scenario_criteria)

        assert [s.symbol for s in result] == ["Z", "A"]

    def test_uses_criteria_watchlist_flag_by_default(self):
        criteria = ScreeningCriteria.disabled()
        criteria.watchlist_only = True
        stocks = [make_stock("COMI"), make_stock("ABUK")]

        result = filter_stocks(stocks, criteria, watchlist={"ABUK"})

        assert [s.symbol for s in result] == ["ABUK"]

    def test_explicit_watchlist_flag_overrides_criteria(self):
        criteria = ScreeningCriteria.disabled()
        criteria.watchlist_only = True
        stocks = [make_stock("COMI"), make_stock("ABUK")]

        result = filter_stocks(stocks, criteria, watchlist_only=False, watchlist={"ABUK"})

        assert len(result) == 2

    def test_does_not_mutate_criteria(self, scenario_criteria):
        before = scenario_criteria.model_dump()
        filter_stocks([make_stock(change_6m=20)], scenario_criteria)
        assert scenario_criteria.model_dump() == before

    def test_malformed_record_is_excluded_not_raised(self, scenario_criteria):
        stocks = [make_stock("BAD", change_6m=math.nan, change_1m=9), make_stock("OK", change_6m=20, change_1m=9)]

        result = filter_stocks(stocks, scenario_criteria)

        assert [s.symbol for s in result] == ["OK"]

    def test_empty_input(self, scenario_criteria):
        assert filter_stocks([], scenario_criteria) == []


class TestScreenStocks:
    """Tests for FilterResult reporting."""

    def test_counts_and_matches(self, comi, abuk, scenario_criteria):
        result = screen_stocks([comi, abuk], scenario_criteria)

        assert isinstance(result, FilterResult)
        assert result.pass_count == 1
        assert result.total_input == 2
        assert result.pass_rate == 0.5
        assert result.get_passed_symbols() == ["COMI"]
        assert result.is_match("COMI") is True
        assert result.is_match("ABUK") is False

    def test_empty_pass_rate(self, scenario_criteria):
        assert screen_stocks([], scenario_criteria).pass_rate == 0.0


class TestHelpers:
    """Tests for watchlist view and counters."""

    def test_watchlist_view_keeps_provider_order(self, comi, abuk):
        result = watchlist_view([comi, abuk], {"ABUK", "COMI", "SWDY"})
        assert [s.symbol for s in result] == ["COMI", "ABUK"]

    def test_count_undervalued(self, comi, abuk):
        assert count_undervalued([comi, abuk]) == 1
