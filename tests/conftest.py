"""Pytest configuration and fixtures."""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from src.errors import PersistenceError
from src.models.criteria import ScreeningCriteria, WindowRange
from src.models.provider import ProviderPayload, RawCitation, RawStock
from src.models.stock import StockRecord, WatchlistEntry

FIXED_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_stock(symbol: str = "TEST", **overrides: Any) -> StockRecord:
    """Build a StockRecord with neutral defaults."""
    fields = {
        "symbol": symbol,
        "name": f"{symbol} Holding",
        "current_price": 10.0,
        "change_6m": 0.0,
        "change_1m": 0.0,
        "change_1w": 0.0,
        "last_updated": FIXED_TIME,
    }
    fields.update(overrides)
    return StockRecord(**fields)


def gemini_response(
    body: Any,
    chunks: Optional[list] = None,
) -> dict:
    """Wrap a JSON body the way generateContent returns it."""
    text = body if isinstance(body, str) else json.dumps(body)
    candidate: dict = {"content": {"role": "model", "parts": [{"text": text}]}}
    if chunks is not None:
        candidate["groundingMetadata"] = {"groundingChunks": chunks}
    return {"candidates": [candidate]}


class FakeProvider:
    """Data provider that replays queued payloads or exceptions."""

    def __init__(self, responses: Optional[list] = None):
        self.responses = list(responses or [])
        self.calls: list[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def query(self, index: str) -> ProviderPayload:
        self.calls.append(index)
        if self.gate is not None:
            await self.gate.wait()
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class FakeStore:
    """In-memory watchlist table."""

    def __init__(self, symbols: tuple[str, ...] = ()):
        self.rows: dict[str, WatchlistEntry] = {
            symbol: WatchlistEntry(symbol=symbol, price_at_save=1.0) for symbol in symbols
        }
        self.fail_reads = False
        self.fail_writes = False
        self.inserted: list[WatchlistEntry] = []
        self.deleted: list[str] = []

    async def fetch_symbols(self) -> list[str]:
        if self.fail_reads:
            raise PersistenceError("store unreachable")
        return list(self.rows)

    async def insert(self, entry: WatchlistEntry) -> None:
        if self.fail_writes:
            raise PersistenceError("insert rejected")
        self.rows[entry.symbol] = entry
        self.inserted.append(entry)

    async def delete(self, symbol: str) -> None:
        if self.fail_writes:
            raise PersistenceError("delete rejected")
        self.rows.pop(symbol, None)
        self.deleted.append(symbol)


@pytest.fixture
def comi() -> StockRecord:
    """Undervalued bank with a sharp 1-month drop."""
    return make_stock(
        "COMI",
        name="Commercial International Bank",
        current_price=50.0,
        change_6m=20.0,
        change_1m=-8.0,
        change_1w=1.0,
        fair_value=60.0,
    )


@pytest.fixture
def abuk() -> StockRecord:
    """Fertilizer stock below the 6-month floor, no fair value."""
    return make_stock(
        "ABUK",
        name="Abu Qir Fertilizers",
        current_price=10.0,
        change_6m=5.0,
        change_1m=3.0,
        change_1w=1.0,
        fair_value=0.0,
    )


@pytest.fixture
def scenario_criteria() -> ScreeningCriteria:
    """6m 10..150, 1m absolute 5/-5, 1w off."""
    return ScreeningCriteria(
        six_month=WindowRange(enabled=True, min_change=10, max_change=150),
        one_month=WindowRange(enabled=True, min_change=5, max_change=-5),
        one_week=WindowRange(enabled=False, min_change=-10, max_change=10),
        use_absolute_1m=True,
    )


@pytest.fixture
def scenario_payload() -> ProviderPayload:
    """Provider payload holding COMI and ABUK."""
    return ProviderPayload(
        stocks=[
            RawStock.model_validate(
                {
                    "symbol": "COMI",
                    "name": "Commercial International Bank",
                    "currentPrice": 50,
                    "change6m": 20,
                    "change1m": -8,
                    "change1w": 1,
                    "peRatio": 6.5,
                    "fairValue": 60,
                    "sector": "Banks",
                }
            ),
            RawStock.model_validate(
                {
                    "symbol": "ABUK",
                    "name": "Abu Qir Fertilizers",
                    "currentPrice": 10,
                    "change6m": 5,
                    "change1m": 3,
                    "change1w": 1,
                    "fairValue": 0,
                }
            ),
        ],
        analysis="Banks lead the index while fertilizers lag.",
        citations=[
            RawCitation(title="EGX market report", uri="https://example.com/egx"),
            RawCitation(),
        ],
    )


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()
