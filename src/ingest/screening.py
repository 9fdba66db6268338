"""
Screening fetch orchestration.

ScreeningSession keeps at most one provider request in flight, validates and
normalizes what comes back, and holds the last good result. A failed fetch
records the error and leaves the previous result untouched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol

from src.errors import EmptyResultError, FetchError, ProviderError
from src.models.provider import ProviderPayload, RawCitation
from src.models.stock import Citation, ScreeningResult, StockRecord

logger = logging.getLogger(__name__)


class DataProvider(Protocol):
    """Anything that can answer an index query."""

    async def query(self, index: str) -> ProviderPayload:
        ...


class FetchState(str, Enum):
    """Fetch gate."""

    IDLE = "idle"
    FETCHING = "fetching"


@dataclass
class FetchOutcome:
    """Result of one fetch attempt."""

    index: str
    result: Optional[ScreeningResult] = None
    error: Optional[FetchError] = None

    @property
    def is_success(self) -> bool:
        return self.result is not None and self.error is None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Normalization
# -----------------------------------------------------------------------------


def extract_sources(citations: list[RawCitation]) -> tuple[Citation, ...]:
    """Turn raw citations into display sources, dropping empty ones."""
    sources = []
    for raw in citations:
        citation = Citation.from_raw(raw)
        if citation is None:
            continue
        sources.append(citation)

    dropped = len(citations) - len(sources)
    if dropped:
        logger.debug("Dropped %d citations without title or URI", dropped)
    return tuple(sources)


def build_screening_result(
    index: str,
    payload: ProviderPayload,
    received_at: datetime,
) -> ScreeningResult:
    """
    Validate and normalize a provider payload.

    Every record is stamped with the receipt time. Records without a symbol
    are skipped.

    Args:
        index: Index the payload answers
        payload: Parsed provider payload
        received_at: Receipt timestamp

    Returns:
        ScreeningResult

    Raises:
        EmptyResultError: If no usable records remain
    """
    stocks = []
    for raw in payload.stocks:
        if not raw.symbol:
            logger.warning("Skipping %s record without a symbol: %r", index, raw.name)
            continue
        stocks.append(StockRecord.from_raw(raw, received_at))

    if not stocks:
        raise EmptyResultError(f"No stock data returned for {index}")

    return ScreeningResult(
        index=index,
        all_stocks=tuple(stocks),
        analysis=payload.analysis,
        sources=extract_sources(payload.citations),
        fetched_at=received_at,
    )


# -----------------------------------------------------------------------------
# Session
# -----------------------------------------------------------------------------


class ScreeningSession:
    """
    Single-flight fetch orchestrator.

    State moves Idle -> Fetching -> Idle. While Fetching, further fetch
    requests are ignored: they are neither queued nor do they cancel the
    running request.
    """

    def __init__(
        self,
        provider: DataProvider,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.provider = provider
        self._clock = clock
        self.state = FetchState.IDLE
        self.index: Optional[str] = None
        self.data: Optional[ScreeningResult] = None
        self.error: Optional[FetchError] = None

    @property
    def is_loading(self) -> bool:
        return self.state is FetchState.FETCHING

    @property
    def has_data(self) -> bool:
        return self.data is not None

    async def fetch(self, index: str) -> Optional[FetchOutcome]:
        """
        Fetch and validate a screening result for an index.

        Args:
            index: Index identifier

        Returns:
            FetchOutcome, or None if a fetch was already in flight
        """
        if self.state is FetchState.FETCHING:
            logger.info("Ignoring fetch for %s; %s is still in flight", index, self.index)
            return None

        self.state = FetchState.FETCHING
        self.index = index
        self.error = None
        logger.info("Fetching screening data for %s", index)

        try:
            payload = await self.provider.query(index)
            result = build_screening_result(index, payload, self._clock())
            self.data = result
        except FetchError as e:
            logger.warning("Fetch for %s failed: %s", index, e)
            self.error = e
            return FetchOutcome(index=index, error=e)
        except Exception as e:
            logger.exception("Unexpected provider failure for %s", index)
            error = ProviderError(f"Unexpected provider failure: {e}")
            self.error = error
            return FetchOutcome(index=index, error=error)
        finally:
            self.state = FetchState.IDLE

        logger.info("Fetched %d stocks for %s", result.count, index)
        return FetchOutcome(index=index, result=result)

    async def refresh(self) -> Optional[FetchOutcome]:
        """Re-fetch the most recently requested index."""
        if self.index is None:
            raise ValueError("No index has been fetched yet")
        return await self.fetch(self.index)
