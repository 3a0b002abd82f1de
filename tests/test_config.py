"""Tests for config.py — Settings, series mappings and language codes."""

import pytest

import wizdomsubs.config as config_module
from wizdomsubs.config import (
    SeriesIdentifierMapping,
    Settings,
    get_settings,
    reload_settings,
    to_three_letter,
)


@pytest.fixture(autouse=True)
def restore_settings_singleton(monkeypatch):
    """reload_settings() swaps the module-level instance; put the old one back."""
    monkeypatch.setattr(config_module, "_settings", config_module._settings)


def test_default_settings(settings):
    """Test default settings values."""
    assert settings.port == 5780
    assert settings.wizdom_api_base == "https://wizdom.xyz/api"
    assert settings.user_agent == "WizdomSubsDownloader/1.0"
    assert settings.request_timeout == 30
    assert settings.overwrite_existing is False
    assert settings.get_preferred_languages() == ["he", "he-IL"]
    assert settings.get_default_language() == "he"


def test_env_prefix(monkeypatch):
    """Test that WIZDOMSUBS_ prefix works."""
    monkeypatch.setenv("WIZDOMSUBS_PORT", "8080")
    monkeypatch.setenv("WIZDOMSUBS_OVERWRITE_EXISTING", "true")
    settings = reload_settings()
    assert settings.port == 8080
    assert settings.overwrite_existing is True
    assert get_settings() is settings


def test_reload_with_overrides():
    settings = reload_settings({"request_timeout": "5", "overwrite_existing": "yes", "unknown": "x"})
    assert settings.request_timeout == 5
    assert settings.overwrite_existing is True
    assert not hasattr(settings, "unknown")


def test_default_language_fallback():
    settings = Settings(_env_file=None, preferred_languages=" , ")
    assert settings.get_default_language() == "he"


def test_safe_config():
    """Test that safe config hides API keys."""
    settings = Settings(_env_file=None, jellyfin_api_key="secret")
    safe = settings.get_safe_config()
    assert safe["jellyfin_api_key"] == "***configured***"
    assert safe["jellyfin_url"] == ""


class TestSeriesIdentifierMapping:

    def test_parse_basic(self):
        mapping = SeriesIdentifierMapping.parse("Doctor Who:tt0436992\nThe Office:tt0386676")
        assert mapping.get("Doctor Who") == "tt0436992"
        assert mapping.get("The Office") == "tt0386676"
        assert len(mapping) == 2

    def test_case_insensitive_lookup(self):
        mapping = SeriesIdentifierMapping.parse("Doctor Who:tt0436992")
        assert mapping.get("doctor who") == "tt0436992"
        assert "DOCTOR WHO" in mapping

    def test_colon_in_name(self):
        mapping = SeriesIdentifierMapping.parse("Star Trek: Picard:tt8806524")
        assert mapping.get("Star Trek: Picard") == "tt8806524"

    def test_blank_and_malformed_lines_skipped(self):
        blob = "\n   \nno colon here\n:tt123\nName:\n  Valid : tt1 \n"
        mapping = SeriesIdentifierMapping.parse(blob)
        assert list(mapping) == [("Valid", "tt1")]

    def test_first_entry_wins(self):
        mapping = SeriesIdentifierMapping.parse("Show:tt1\nshow:tt2")
        assert mapping.get("SHOW") == "tt1"

    @pytest.mark.parametrize("name", [None, "", "Unknown"])
    def test_missing_names(self, name):
        mapping = SeriesIdentifierMapping.parse("Show:tt1")
        assert mapping.get(name) is None

    def test_settings_helper(self):
        settings = Settings(_env_file=None, series_imdb_mappings="Show:tt1")
        assert settings.get_series_mappings().get("show") == "tt1"


@pytest.mark.parametrize("code,expected", [
    ("he", "heb"),
    ("he-IL", "heb"),
    ("EN", "eng"),
    ("heb", "heb"),
    ("xx", "xx"),
])
def test_to_three_letter(code, expected):
    assert to_three_letter(code) == expected


def test_singleton_restored_between_tests():
    """Runs after the reload tests; the singleton they replaced is not visible here."""
    assert config_module._settings is None or config_module._settings.port != 8080
