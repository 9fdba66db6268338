"""
Normalized screening models.

A ScreeningResult is built once per successful fetch and never mutated;
the next successful fetch replaces it wholesale.
"""

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.provider import RawCitation, RawStock

PLACEHOLDER_TITLE = "Market Source"
PLACEHOLDER_URI = "#"


def _is_present(value: Optional[float]) -> bool:
    """Absent, zero and NaN all mean unavailable."""
    return value is not None and not math.isnan(value) and value != 0


class StockRecord(BaseModel):
    """One instrument snapshot within a screening result."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(min_length=1)
    name: str = ""
    current_price: float
    change_6m: float = 0.0
    change_1m: float = 0.0
    change_1w: float = 0.0
    pe_ratio: Optional[float] = None
    fair_value: Optional[float] = None
    sector: Optional[str] = None
    last_updated: datetime

    @classmethod
    def from_raw(cls, raw: RawStock, received_at: datetime) -> "StockRecord":
        """Stamp a provider record with its receipt time."""
        return cls(
            symbol=raw.symbol,
            name=raw.name,
            current_price=raw.current_price,
            change_6m=raw.change_6m,
            change_1m=raw.change_1m,
            change_1w=raw.change_1w,
            pe_ratio=raw.pe_ratio,
            fair_value=raw.fair_value,
            sector=raw.sector,
            last_updated=received_at,
        )

    @property
    def has_fair_value(self) -> bool:
        return _is_present(self.fair_value)

    @property
    def has_pe_ratio(self) -> bool:
        return _is_present(self.pe_ratio) and self.pe_ratio > 0

    @property
    def is_undervalued(self) -> bool:
        """Fair value is known and above the current price."""
        return self.has_fair_value and self.fair_value > self.current_price

    @property
    def upside(self) -> Optional[float]:
        """
        Fractional gap between fair value and current price.

        None when there is no fair value or no usable price.
        """
        if not self.has_fair_value:
            return None
        if math.isnan(self.current_price) or self.current_price <= 0:
            return None
        return (self.fair_value - self.current_price) / self.current_price


class Citation(BaseModel):
    """A source the provider grounded its answer on."""

    model_config = ConfigDict(frozen=True)

    title: str = PLACEHOLDER_TITLE
    uri: str = PLACEHOLDER_URI

    @classmethod
    def from_raw(cls, raw: RawCitation) -> Optional["Citation"]:
        """Fill missing fields with placeholders; None if nothing is usable."""
        if raw.is_empty:
            return None
        return cls(
            title=raw.title or PLACEHOLDER_TITLE,
            uri=raw.uri or PLACEHOLDER_URI,
        )


class ScreeningResult(BaseModel):
    """Outcome of one successful fetch."""

    model_config = ConfigDict(frozen=True)

    index: str
    all_stocks: tuple[StockRecord, ...]
    analysis: str = ""
    sources: tuple[Citation, ...] = ()
    fetched_at: datetime

    @property
    def count(self) -> int:
        return len(self.all_stocks)

    @property
    def symbols(self) -> list[str]:
        return [stock.symbol for stock in self.all_stocks]

    def get(self, symbol: str) -> Optional[StockRecord]:
        """Return the first record with this symbol, if any."""
        wanted = symbol.strip().upper()
        for stock in self.all_stocks:
            if stock.symbol.upper() == wanted:
                return stock
        return None


class WatchlistEntry(BaseModel):
    """A saved symbol as persisted in the watchlist table."""

    symbol: str = Field(min_length=1)
    name: str = ""
    price_at_save: float

    @classmethod
    def from_stock(cls, stock: StockRecord) -> "WatchlistEntry":
        return cls(symbol=stock.symbol, name=stock.name, price_at_save=stock.current_price)

    def to_row(self) -> dict:
        """Column mapping for the watchlist table."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price_at_save": None if math.isnan(self.price_at_save) else self.price_at_save,
        }
