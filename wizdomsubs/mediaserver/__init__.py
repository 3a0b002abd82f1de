"""Media library backends.

create_library() picks the backend from settings: Jellyfin/Emby when a URL is
configured, otherwise a NullLibrary that never matches.
"""

import logging

from wizdomsubs.mediaserver.base import LibraryIndex, LibraryItem, LibrarySeries, NullLibrary

logger = logging.getLogger(__name__)


def create_library(settings) -> LibraryIndex:
    if settings.jellyfin_url:
        from wizdomsubs.mediaserver.jellyfin import JellyfinLibrary
        logger.info("Using Jellyfin library at %s", settings.jellyfin_url)
        return JellyfinLibrary(url=settings.jellyfin_url, api_key=settings.jellyfin_api_key)
    logger.info("No media library configured, series lookups use manual mappings only")
    return NullLibrary()


__all__ = ["LibraryIndex", "LibraryItem", "LibrarySeries", "NullLibrary", "create_library"]
