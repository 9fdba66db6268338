"""
Screening criteria models.

Criteria are owned by the caller and may be changed freely between
evaluations; the filter functions only read them.
"""

from pydantic import BaseModel, Field

from config.settings import CriteriaDefaults


class WindowRange(BaseModel):
    """Bounds for one performance window, in percent."""

    enabled: bool = True
    min_change: float
    max_change: float


def _default_six_month() -> WindowRange:
    return WindowRange(
        enabled=CriteriaDefaults.ENABLED_6M,
        min_change=CriteriaDefaults.MIN_6M,
        max_change=CriteriaDefaults.MAX_6M,
    )


def _default_one_month() -> WindowRange:
    return WindowRange(
        enabled=CriteriaDefaults.ENABLED_1M,
        min_change=CriteriaDefaults.MIN_1M,
        max_change=CriteriaDefaults.MAX_1M,
    )


def _default_one_week() -> WindowRange:
    return WindowRange(
        enabled=CriteriaDefaults.ENABLED_1W,
        min_change=CriteriaDefaults.MIN_1W,
        max_change=CriteriaDefaults.MAX_1W,
    )


class ScreeningCriteria(BaseModel):
    """Filter configuration applied to a screening result."""

    six_month: WindowRange = Field(default_factory=_default_six_month)
    one_month: WindowRange = Field(default_factory=_default_one_month)
    one_week: WindowRange = Field(default_factory=_default_one_week)

    # 1-month bounds catch big moves either way instead of a range
    use_absolute_1m: bool = CriteriaDefaults.USE_ABSOLUTE_1M

    undervalued_only: bool = False
    watchlist_only: bool = False

    @classmethod
    def disabled(cls) -> "ScreeningCriteria":
        """Criteria with every predicate switched off."""
        criteria = cls()
        criteria.six_month.enabled = False
        criteria.one_month.enabled = False
        criteria.one_week.enabled = False
        return criteria
