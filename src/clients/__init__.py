"""API clients for external services."""

from src.clients.gemini_client import GeminiClient, parse_generate_response
from src.clients.supabase_client import SupabaseWatchlistStore

__all__ = [
    "GeminiClient",
    "parse_generate_response",
    "SupabaseWatchlistStore",
]
