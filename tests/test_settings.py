"""Tests for settings and index configuration."""

import pytest

from config.settings import EGX_INDICES, Settings

ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "DEFAULT_INDEX",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Tests for environment loading."""

    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)

        assert settings.gemini_model == "gemini-3-pro-preview"
        assert settings.default_index == "EGX33"
        assert settings.watchlist_table == "watchlist"
        assert settings.provider_configured is False
        assert settings.watchlist_configured is False

    def test_reads_environment(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "key-123")
        clean_env.setenv("SUPABASE_URL", "https://proj.supabase.co")
        clean_env.setenv("SUPABASE_ANON_KEY", "anon")

        settings = Settings(_env_file=None)

        assert settings.gemini_api_key == "key-123"
        assert settings.provider_configured is True
        assert settings.watchlist_configured is True

    def test_watchlist_needs_both_credentials(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://proj.supabase.co")

        assert Settings(_env_file=None).watchlist_configured is False

    def test_blank_key_is_unconfigured(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "   ")

        assert Settings(_env_file=None).provider_configured is False


class TestIndices:
    """Tests for the supported index table."""

    def test_all_indices_present(self):
        assert list(EGX_INDICES) == ["EGX30", "EGX70", "EGX100", "EGX33"]

    def test_index_metadata(self):
        assert EGX_INDICES["EGX33"].name == "EGX 33 Shariah"
        assert EGX_INDICES["EGX70"].description == "SMEs Index"
