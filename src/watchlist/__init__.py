"""Watchlist synchronization."""

from src.watchlist.synchronizer import WatchlistStore, WatchlistSynchronizer

__all__ = ["WatchlistStore", "WatchlistSynchronizer"]
