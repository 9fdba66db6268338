"""
Watchlist synchronization against the remote store.

The local mirror is a set of symbols loaded once from the store. Toggles are
remote-first: the mirror changes only after the store confirms the write, so
a failed toggle leaves membership exactly as it was.
"""

import logging
from typing import Optional, Protocol

from src.errors import PersistenceError, ToggleInProgressError, UnconfiguredError
from src.models.stock import StockRecord, WatchlistEntry

logger = logging.getLogger(__name__)


class WatchlistStore(Protocol):
    """Operations the watchlist table must support."""

    async def fetch_symbols(self) -> list[str]:
        ...

    async def insert(self, entry: WatchlistEntry) -> None:
        ...

    async def delete(self, symbol: str) -> None:
        ...


class WatchlistSynchronizer:
    """
    Local mirror of saved symbols.

    Without a store the synchronizer is degraded: membership is always empty
    and every toggle raises UnconfiguredError without touching anything.
    """

    def __init__(self, store: Optional[WatchlistStore]):
        self.store = store
        self._symbols: set[str] = set()
        self._pending: set[str] = set()
        if store is None:
            logger.info("Watchlist store not configured; watchlist is unavailable")

    @property
    def is_configured(self) -> bool:
        return self.store is not None

    def membership(self) -> frozenset[str]:
        """Snapshot of saved symbols."""
        return frozenset(self._symbols)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def is_pending(self, symbol: str) -> bool:
        """Whether a toggle for this symbol is in flight."""
        return symbol in self._pending

    async def load(self, strict: bool = False) -> frozenset[str]:
        """
        Replace the mirror with the full remote symbol set.

        A failed load is logged and keeps the current mirror.

        Args:
            strict: Re-raise a failed load instead of keeping the mirror

        Returns:
            Membership after the load

        Raises:
            PersistenceError: If strict and the store read fails
        """
        if self.store is None:
            return self.membership()

        try:
            symbols = await self.store.fetch_symbols()
        except PersistenceError as e:
            logger.error("Error fetching watchlist: %s", e)
            if strict:
                raise
            return self.membership()

        self._symbols = set(symbols)
        logger.info("Loaded %d watchlist symbols", len(self._symbols))
        return self.membership()

    async def toggle(self, stock: StockRecord) -> bool:
        """
        Save or remove a record's symbol.

        The remote insert (symbol, name, current price) or delete runs first;
        the mirror is updated only once it succeeds.

        Args:
            stock: Record whose symbol to toggle

        Returns:
            True if the symbol is now saved, False if it was removed

        Raises:
            UnconfiguredError: If no store is configured
            ToggleInProgressError: If this symbol is already being toggled
            PersistenceError: If the store rejects the write
        """
        if self.store is None:
            raise UnconfiguredError("Watchlist store is not configured")

        symbol = stock.symbol
        if symbol in self._pending:
            raise ToggleInProgressError(f"A watchlist update for {symbol} is already in progress")

        self._pending.add(symbol)
        try:
            if symbol in self._symbols:
                await self.store.delete(symbol)
                self._symbols.discard(symbol)
                saved = False
            else:
                await self.store.insert(WatchlistEntry.from_stock(stock))
                self._symbols.add(symbol)
                saved = True
        except PersistenceError as e:
            logger.warning("Watchlist update for %s failed: %s", symbol, e)
            raise
        finally:
            self._pending.discard(symbol)

        logger.info("Watchlist %s: %s", "add" if saved else "remove", symbol)
        return saved
