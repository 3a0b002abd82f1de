"""Centralized configuration using Pydantic Settings.

All settings can be overridden via environment variables with the WIZDOMSUBS_
prefix, or via a .env file. Example: WIZDOMSUBS_PORT=8080

Components never read the module-level singleton themselves: the app factory
resolves a Settings instance once and hands it to each component.
"""

from collections.abc import Iterator
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """WizdomSubs application settings."""

    # General
    port: int = 5780
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"
    log_file: str = ""  # Empty = console only

    # Wizdom catalog
    wizdom_api_base: str = "https://wizdom.xyz/api"
    user_agent: str = "WizdomSubsDownloader/1.0"
    request_timeout: int = 30  # Seconds, 0 = no session timeout

    # Subtitle preferences
    preferred_languages: str = "he,he-IL"  # CSV, first entry is the default
    overwrite_existing: bool = False

    # Manual series mappings for episodes whose series is not in the library.
    # Format: one "Series Name:tt1234567" per line
    series_imdb_mappings: str = ""

    # Jellyfin/Emby (optional): library lookups for series IMDb ids
    jellyfin_url: str = ""
    jellyfin_api_key: str = ""

    model_config = {
        "env_prefix": "WIZDOMSUBS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def get_preferred_languages(self) -> list[str]:
        """Preferred language codes in configured order."""
        return [lang.strip() for lang in self.preferred_languages.split(",") if lang.strip()]

    def get_default_language(self) -> str:
        """Language tag used when a request does not name one."""
        languages = self.get_preferred_languages()
        return languages[0] if languages else "he"

    def get_series_mappings(self) -> "SeriesIdentifierMapping":
        return SeriesIdentifierMapping.parse(self.series_imdb_mappings)

    def get_safe_config(self) -> dict:
        """Get config dict without sensitive values (API keys)."""
        data = self.model_dump()
        for key in list(data.keys()):
            if "api_key" in key or "key" in key.split("_"):
                if data[key]:
                    data[key] = "***configured***"
                else:
                    data[key] = ""
        return data


class SeriesIdentifierMapping:
    """Ordered, case-insensitive series name -> IMDb id table.

    Parsed from a newline-delimited blob of "name:id" lines. The split happens
    on the last colon, so "Star Trek: Picard:tt8806524" maps the full title.
    Blank and malformed lines are skipped; the first occurrence of a name wins.
    """

    def __init__(self, pairs: list[tuple[str, str]] | None = None):
        self._entries: dict[str, tuple[str, str]] = {}
        for name, external_id in pairs or []:
            key = name.casefold()
            if key not in self._entries:
                self._entries[key] = (name, external_id)

    @classmethod
    def parse(cls, blob: str) -> "SeriesIdentifierMapping":
        pairs = []
        for line in (blob or "").splitlines():
            line = line.strip()
            if ":" not in line:
                continue
            name, external_id = line.rsplit(":", 1)
            name = name.strip()
            external_id = external_id.strip()
            if not name or not external_id:
                continue
            pairs.append((name, external_id))
        return cls(pairs)

    def get(self, name: str | None) -> str | None:
        if not isinstance(name, str) or not name:
            return None
        entry = self._entries.get(name.strip().casefold())
        return entry[1] if entry else None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)


# ISO 639-1 -> ISO 639-2/B, for hosts that label subtitles with 3-letter codes
_THREE_LETTER_CODES = {
    "he": "heb",
    "en": "eng",
    "ar": "ara",
    "ru": "rus",
    "fr": "fre",
    "de": "ger",
    "es": "spa",
    "it": "ita",
    "pt": "por",
    "nl": "dut",
    "pl": "pol",
    "ja": "jpn",
    "zh": "chi",
    "ko": "kor",
}


def to_three_letter(lang_code: str) -> str:
    """Map "he" or "he-IL" to "heb". Unknown or 3-letter codes pass through."""
    base = lang_code.strip().split("-")[0].lower()
    return _THREE_LETTER_CODES.get(base, lang_code.strip())


# Singleton settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the singleton Settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings(overrides: dict = None) -> Settings:
    """Force reload settings from environment/file, with optional overrides.

    The previous instance is replaced wholesale; components already holding
    it keep a consistent (if stale) view until they are rebuilt.
    """
    global _settings
    base = Settings()

    if overrides:
        base_data = base.model_dump()
        update = {}
        for key, value in overrides.items():
            if key not in base_data:
                continue
            # Convert string values to the correct field type
            expected_type = type(base_data[key])
            try:
                if expected_type is bool:
                    update[key] = value.lower() in ("true", "1", "yes") if isinstance(value, str) else bool(value)
                elif expected_type is int:
                    update[key] = int(value)
                else:
                    update[key] = str(value)
            except (ValueError, TypeError):
                continue  # Skip invalid values

        _settings = base.model_copy(update=update) if update else base
    else:
        _settings = base

    return _settings
