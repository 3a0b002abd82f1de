"""Abstract base class for media library backends and shared data models.

The subtitle pipeline only needs three lookups from the library: the series
that owns an episode file, a series by name, and an item by id. Each returns
None when nothing matches; backends may raise on transport errors and callers
are expected to treat that as "not found".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class LibrarySeries:
    """A series known to the media library."""

    series_id: str
    name: str
    external_id: str | None = None  # IMDb id, if the library has one


@dataclass
class LibraryItem:
    """A movie or episode known to the media library."""

    item_id: str
    path: str
    item_type: str = "movie"  # "episode" or "movie"
    season: int | None = None
    episode: int | None = None
    series_name: str | None = None
    external_id: str | None = None

    @property
    def is_episode(self) -> bool:
        return self.item_type == "episode"


class LibraryIndex(ABC):
    """Abstract base class for library backends.

    Class-level attributes:
        name: Unique backend identifier (lowercase, e.g. "jellyfin")
        display_name: Human-readable name
    """

    name: str = "unknown"
    display_name: str = "Unknown"

    def __init__(self, **config):
        self.config = config

    @abstractmethod
    def find_series_by_path(self, path: str) -> LibrarySeries | None:
        """Series owning the episode file at path."""
        ...

    @abstractmethod
    def find_series_by_name(self, name: str) -> LibrarySeries | None:
        """First series whose name matches exactly."""
        ...

    @abstractmethod
    def get_item(self, item_id: str) -> LibraryItem | None:
        ...

    def health_check(self) -> tuple[bool, str]:
        return True, "OK"


class NullLibrary(LibraryIndex):
    """Used when no media server is configured. Knows nothing."""

    name = "none"
    display_name = "No library"

    def find_series_by_path(self, path: str) -> LibrarySeries | None:
        return None

    def find_series_by_name(self, name: str) -> LibrarySeries | None:
        return None

    def get_item(self, item_id: str) -> LibraryItem | None:
        return None

    def health_check(self) -> tuple[bool, str]:
        return True, "Not configured"
