"""
Configuration settings for the EGX screener.

Uses pydantic-settings for environment variable loading and validation.
Missing credentials never fail here: the screening session refuses to start
without a Gemini key, and the watchlist degrades when Supabase is absent.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Data provider (Gemini with Google Search grounding)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-3-pro-preview"
    provider_timeout_seconds: float = 60.0

    # Watchlist store (Supabase PostgREST)
    supabase_url: str = ""
    supabase_anon_key: str = ""
    watchlist_table: str = "watchlist"
    store_timeout_seconds: float = 15.0

    # Screening
    default_index: str = "EGX33"

    # Logging
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def provider_configured(self) -> bool:
        return bool(self.gemini_api_key.strip())

    @property
    def watchlist_configured(self) -> bool:
        """True when both the store URL and its key are present."""
        return bool(self.supabase_url.strip() and self.supabase_anon_key.strip())


class CriteriaDefaults:
    """Default screening windows, in percent."""

    # 6-month momentum range
    ENABLED_6M = True
    MIN_6M = 10.0
    MAX_6M = 150.0

    # 1-month: a gain of at least MIN or a loss of at least MAX
    ENABLED_1M = True
    MIN_1M = 5.0
    MAX_1M = -5.0
    USE_ABSOLUTE_1M = True

    # 1-week range, off by default
    ENABLED_1W = False
    MIN_1W = -10.0
    MAX_1W = 10.0


@dataclass(frozen=True)
class MarketIndex:
    """An Egyptian Exchange index the provider can be asked about."""

    id: str
    name: str
    description: str


EGX_INDICES: dict[str, MarketIndex] = {
    index.id: index
    for index in (
        MarketIndex("EGX30", "EGX 30", "Main Market Index"),
        MarketIndex("EGX70", "EGX 70 EWI", "SMEs Index"),
        MarketIndex("EGX100", "EGX 100 EWI", "Broader Market"),
        MarketIndex("EGX33", "EGX 33 Shariah", "Shariah Compliant"),
    )
}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
