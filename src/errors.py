"""
Exception hierarchy for the screener.

Every failure is local to the operation that raised it. Fetch errors are kept
as session state next to the last good result; watchlist errors are raised
from toggle() and never touch screening data.
"""


class ScreenerError(Exception):
    """Base exception for screener errors."""

    pass


class ConfigurationError(ScreenerError):
    """Raised when a required credential is missing."""

    pass


class FetchError(ScreenerError):
    """Base exception for a failed screening fetch."""

    pass


class ProviderError(FetchError):
    """Raised on transport or parse failures talking to the data provider."""

    pass


class EmptyResultError(FetchError):
    """Raised when the provider answers with no stock records."""

    pass


class WatchlistError(ScreenerError):
    """Base exception for watchlist toggle failures."""

    pass


class PersistenceError(WatchlistError):
    """Raised when the watchlist store is unreachable or rejects a write."""

    pass


class UnconfiguredError(WatchlistError):
    """Raised when the watchlist store is not configured."""

    pass


class ToggleInProgressError(WatchlistError):
    """Raised when a symbol is toggled while its previous toggle is in flight."""

    pass
