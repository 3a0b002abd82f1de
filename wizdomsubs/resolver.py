"""Series-level IMDb id resolution for episodes.

Hosts usually hand us the episode's own IMDb id (e.g. tt2313681), but Wizdom
indexes series by the series id (e.g. tt2017109). Resolution walks a fixed
list of tiers and stops at the first one that produces an id:

  1. library: series owning the episode file
  2. library: series by exact name
  3. manual SeriesIdentifierMapping from configuration
  4. the episode's own id, as a low-confidence fallback

Movies skip all of this; their own id already identifies them.
"""

import logging
from typing import Callable

from wizdomsubs.config import SeriesIdentifierMapping
from wizdomsubs.mediaserver.base import LibraryIndex, LibrarySeries
from wizdomsubs.providers.base import MediaKind

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _series_id(series: LibrarySeries | None) -> str | None:
    return _clean(series.external_id) if series is not None else None


class IdentifierResolver:
    """Resolve the catalog id to query for a movie or episode."""

    def __init__(self, library: LibraryIndex, mappings: SeriesIdentifierMapping | None = None):
        self.library = library
        self.mappings = mappings or SeriesIdentifierMapping()

    # ─── Tiers: (input) -> id | None ─────────────────────────────────────────

    def _library_lookup(self, label: str, lookup: Callable[[str], LibrarySeries | None], key: str) -> str | None:
        """Run one library lookup; a failing backend counts as no match."""
        try:
            return _series_id(lookup(key))
        except Exception as e:
            logger.debug("WizdomSubs: library lookup by %s (%r) failed: %s", label, key, e)
            return None

    def by_library_path(self, media_path: str | None) -> str | None:
        if not _clean(media_path):
            return None
        return self._library_lookup("path", self.library.find_series_by_path, media_path)

    def by_library_name(self, series_name: str | None) -> str | None:
        name = _clean(series_name)
        if not name:
            return None
        return self._library_lookup("name", self.library.find_series_by_name, name)

    def by_mapping(self, series_name: str | None) -> str | None:
        return _clean(self.mappings.get(series_name))

    # ─── Chain ───────────────────────────────────────────────────────────────

    def resolve(
        self,
        media_kind: MediaKind,
        own_external_id: str,
        series_name: str | None = None,
        media_path: str | None = None,
    ) -> str:
        """Return the id to query Wizdom with. Never raises."""
        if media_kind != MediaKind.EPISODE:
            return own_external_id

        tiers = (
            ("library path", self.by_library_path, media_path),
            ("library name", self.by_library_name, series_name),
            ("series mapping", self.by_mapping, series_name),
        )
        for label, tier, value in tiers:
            resolved = tier(value)
            if resolved:
                logger.info(
                    "WizdomSubs: Found series IMDb via %s for '%s' -> %s (replacing %s)",
                    label, series_name, resolved, own_external_id,
                )
                return resolved

        logger.warning(
            "WizdomSubs: No series IMDb found for '%s', using episode IMDb which may not work: %s",
            series_name, own_external_id,
        )
        return own_external_id
