"""Jellyfin/Emby library backend.

Works for both Jellyfin and Emby since they share the same API
(X-MediaBrowser-Token). Used to find the series-level IMDb id of an episode
and to look up library items for the download endpoint.
"""

import logging
import os

import requests

from wizdomsubs.mediaserver.base import LibraryIndex, LibraryItem, LibrarySeries

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 15


class JellyfinLibrary(LibraryIndex):
    """Jellyfin/Emby REST API backend."""

    name = "jellyfin"
    display_name = "Jellyfin / Emby"

    def __init__(self, **config):
        super().__init__(**config)
        url = config.get("url", "http://localhost:8096")
        self.url = url.rstrip("/")
        self.api_key = config.get("api_key", "")
        self.session = config.get("session") or requests.Session()
        self.session.headers["X-MediaBrowser-Token"] = self.api_key

    def _get(self, path, params=None, timeout=REQUEST_TIMEOUT):
        """Single GET; returns parsed JSON or None on any failure."""
        url = f"{self.url}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=timeout)
            resp.raise_for_status()
            return resp.json()
        except requests.ConnectionError as e:
            logger.warning("Jellyfin GET %s failed: %s", path, e)
        except requests.Timeout:
            logger.warning("Jellyfin GET %s timed out", path)
        except Exception as e:
            logger.error("Jellyfin unexpected error on GET %s: %s", path, e)
        return None

    def _items(self, **params) -> list[dict]:
        result = self._get("/Items", params={"Recursive": True, **params})
        if not result:
            return []
        return result.get("Items") or []

    @staticmethod
    def _to_series(item: dict) -> LibrarySeries:
        provider_ids = item.get("ProviderIds") or {}
        return LibrarySeries(
            series_id=item.get("Id", ""),
            name=item.get("Name", ""),
            external_id=provider_ids.get("Imdb") or None,
        )

    def health_check(self) -> tuple[bool, str]:
        result = self._get("/System/Info/Public")
        if result is not None:
            server_name = result.get("ServerName", "Unknown")
            version = result.get("Version", "?")
            return True, f"{server_name} v{version}"
        return False, f"Cannot connect to Jellyfin at {self.url}"

    def find_series_by_path(self, path: str) -> LibrarySeries | None:
        """Find the episode at path, then load its parent series.

        Jellyfin has no direct path-to-item lookup, so we search by filename
        and match the returned paths.
        """
        filename = os.path.basename(path)
        stem = os.path.splitext(filename)[0]

        episodes = self._items(
            searchTerm=stem,
            IncludeItemTypes="Episode",
            Fields="Path",
            Limit=20,
        )
        episode = next((item for item in episodes if item.get("Path") == path), None)
        if episode is None:
            episode = next(
                (item for item in episodes if os.path.basename(item.get("Path", "")) == filename),
                None,
            )
        if episode is None or not episode.get("SeriesId"):
            return None

        series = self._items(Ids=episode["SeriesId"], Fields="ProviderIds")
        if not series:
            return None
        return self._to_series(series[0])

    def find_series_by_name(self, name: str) -> LibrarySeries | None:
        # searchTerm is fuzzy; keep the first exact (case-insensitive) match
        wanted = name.strip().casefold()
        for item in self._items(searchTerm=name, IncludeItemTypes="Series", Fields="ProviderIds", Limit=10):
            if item.get("Name", "").strip().casefold() == wanted:
                return self._to_series(item)
        return None

    def get_item(self, item_id: str) -> LibraryItem | None:
        items = self._items(Ids=item_id, Fields="Path,ProviderIds")
        if not items:
            return None
        item = items[0]
        is_episode = item.get("Type") == "Episode"
        return LibraryItem(
            item_id=item.get("Id", item_id),
            path=item.get("Path", ""),
            item_type="episode" if is_episode else "movie",
            season=item.get("ParentIndexNumber") if is_episode else None,
            episode=item.get("IndexNumber") if is_episode else None,
            series_name=item.get("SeriesName") if is_episode else None,
            external_id=(item.get("ProviderIds") or {}).get("Imdb") or None,
        )
