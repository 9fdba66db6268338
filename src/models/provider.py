"""
Data models for raw screening responses from the data provider.

These models represent the provider payload before normalization. Absent
numbers become 0 (or None for the optional ones) and unparseable numbers
become NaN, so a sloppy payload never fails validation and instead fails
the screening predicates later on.
"""

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def coerce_number(value: Any) -> float:
    """Best-effort numeric conversion; NaN for anything unusable."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip().rstrip("%").replace(",", "")
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RawStock(BaseModel):
    """A single stock entry as returned by the provider."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    symbol: str = ""
    name: str = ""
    current_price: float = Field(default=0.0, alias="currentPrice")
    change_6m: float = Field(default=0.0, alias="change6m")
    change_1m: float = Field(default=0.0, alias="change1m")
    change_1w: float = Field(default=0.0, alias="change1w")
    pe_ratio: Optional[float] = Field(default=None, alias="peRatio")
    fair_value: Optional[float] = Field(default=None, alias="fairValue")
    sector: Optional[str] = None

    @field_validator("symbol", "name", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str:
        return _optional_text(v) or ""

    @field_validator("sector", mode="before")
    @classmethod
    def blank_sector_is_missing(cls, v: Any) -> Optional[str]:
        return _optional_text(v)

    @field_validator("current_price", "change_6m", "change_1m", "change_1w", mode="before")
    @classmethod
    def parse_number(cls, v: Any) -> float:
        return coerce_number(v)

    @field_validator("pe_ratio", "fair_value", mode="before")
    @classmethod
    def parse_optional_number(cls, v: Any) -> Optional[float]:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return coerce_number(v)


class RawCitation(BaseModel):
    """A grounding chunk reduced to its optional web title and URI."""

    title: Optional[str] = None
    uri: Optional[str] = None

    @field_validator("title", "uri", mode="before")
    @classmethod
    def blank_is_missing(cls, v: Any) -> Optional[str]:
        if not isinstance(v, str):
            return None
        return _optional_text(v)

    @property
    def is_empty(self) -> bool:
        return self.title is None and self.uri is None


class ProviderPayload(BaseModel):
    """Parsed provider answer for one index query."""

    stocks: list[RawStock] = Field(default_factory=list)
    analysis: str = ""
    citations: list[RawCitation] = Field(default_factory=list)
