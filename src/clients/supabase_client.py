"""
Supabase watchlist store.

Talks to the PostgREST interface of a Supabase project over httpx. The
table needs the columns symbol (primary key), name and price_at_save.
"""

import logging
from typing import Any, Optional

import httpx

from config.settings import Settings
from src.errors import PersistenceError
from src.models.stock import WatchlistEntry

logger = logging.getLogger(__name__)


class SupabaseWatchlistStore:
    """Async watchlist table client."""

    def __init__(
        self,
        url: str,
        api_key: str,
        table: str = "watchlist",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> Optional["SupabaseWatchlistStore"]:
        """Build a store, or None when Supabase is not configured."""
        if not settings.watchlist_configured:
            logger.warning(
                "Supabase credentials not found; set SUPABASE_URL and SUPABASE_ANON_KEY "
                "to enable the watchlist"
            )
            return None
        return cls(
            url=settings.supabase_url,
            api_key=settings.supabase_anon_key,
            table=settings.watchlist_table,
            timeout=settings.store_timeout_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "SupabaseWatchlistStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def endpoint(self) -> str:
        return f"{self.url}/rest/v1/{self.table}"

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        if not self._client:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

        request_headers = self._headers()
        if headers:
            request_headers.update(headers)

        try:
            response = await self._client.request(
                method,
                self.endpoint,
                params=params,
                json=json,
                headers=request_headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"Watchlist {method} rejected (HTTP {e.response.status_code}): "
                f"{_error_message(e.response)}"
            ) from e
        except httpx.HTTPError as e:
            raise PersistenceError(f"Watchlist store unreachable: {e}") from e
        return response

    # -------------------------------------------------------------------------
    # Table operations
    # -------------------------------------------------------------------------

    async def fetch_symbols(self) -> list[str]:
        """Select every saved symbol."""
        response = await self._request("GET", params={"select": "symbol"})
        try:
            rows = response.json()
        except ValueError as e:
            raise PersistenceError("Watchlist store returned a non-JSON body") from e

        if not isinstance(rows, list):
            raise PersistenceError("Watchlist store returned an unexpected payload")
        return [
            str(row["symbol"])
            for row in rows
            if isinstance(row, dict) and row.get("symbol")
        ]

    async def insert(self, entry: WatchlistEntry) -> None:
        """Insert one row."""
        await self._request(
            "POST",
            json=[entry.to_row()],
            headers={"Prefer": "return=minimal"},
        )

    async def delete(self, symbol: str) -> None:
        """Delete the row keyed by symbol."""
        await self._request("DELETE", params={"symbol": f"eq.{symbol}"})


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text[:200]
