"""Abstract base class for subtitle providers and shared data models.

A provider answers two questions: which subtitles exist for an IMDb id
(search), and what are the bytes of one of them (fetch). Ranking, identifier
resolution and file placement live outside the provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum

from wizdomsubs.cancellation import CancellationToken


class MediaKind(StrEnum):
    EPISODE = "episode"
    MOVIE = "movie"


class SubtitleFormat(StrEnum):
    SRT = "srt"


@dataclass
class SearchCriteria:
    """Describes what we're searching for.

    season/episode are only meaningful for episodes; movies are always
    queried as season 0, episode 0. series_name and media_path feed the
    identifier resolver, reference_filename only feeds ranking.
    """

    external_id: str = ""  # e.g. "tt1234567"
    media_kind: MediaKind = MediaKind.MOVIE
    season: int | None = None
    episode: int | None = None
    reference_filename: str | None = None

    # Resolver inputs (episodes)
    series_name: str | None = None
    media_path: str | None = None

    @property
    def is_episode(self) -> bool:
        return self.media_kind == MediaKind.EPISODE

    @property
    def has_episode_numbers(self) -> bool:
        return self.season is not None and self.episode is not None

    @property
    def display_name(self) -> str:
        if self.is_episode and self.has_episode_numbers:
            return f"{self.series_name or self.external_id} S{self.season:02d}E{self.episode:02d}"
        return self.external_id


@dataclass
class CandidateSubtitle:
    """One subtitle release returned by the catalog."""

    subtitle_id: int
    name: str | None = None
    language: str = ""
    format: SubtitleFormat = SubtitleFormat.SRT

    @property
    def handle(self) -> str:
        """Externally visible id: format-language-numeric id."""
        return f"{self.format.value}-{self.language}-{self.subtitle_id}"

    @property
    def display_name(self) -> str:
        return self.name or f"Wizdom Subtitle #{self.subtitle_id}"


@dataclass
class SubtitlePayload:
    """Downloaded subtitle bytes. Owned by the caller after return."""

    format: str
    language: str
    content: bytes = field(repr=False)
    # The catalog exposes neither flag
    forced: bool = False
    hearing_impaired: bool = False


class SubtitleProvider(ABC):
    """Abstract base class for subtitle providers.

    Providers are context managers that handle initialization/cleanup.
    """

    name: str = "unknown"

    def __init__(self, **config):
        self.config = config
        self._initialized = False

    def __enter__(self):
        self.initialize()
        self._initialized = True
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.terminate()
        self._initialized = False
        return False

    def initialize(self):
        """Set up sessions. Stateless providers inherit this no-op."""

    def terminate(self):
        """Release sessions. Stateless providers inherit this no-op."""

    @abstractmethod
    def search(
        self,
        external_id: str,
        season: int,
        episode: int,
        language: str,
        cancel_token: CancellationToken | None = None,
    ) -> list[CandidateSubtitle]:
        """Query the catalog.

        Returns:
            Candidates in catalog order; an empty list on any failure
            other than cancellation.
        """
        ...

    @abstractmethod
    def fetch(self, subtitle_id: int, cancel_token: CancellationToken | None = None) -> bytes:
        """Download and extract one subtitle.

        Raises:
            NotFoundError: archive holds no usable entry
            TransportError: network or decompression failure
            OperationCancelledError: cancel_token fired
        """
        ...

    def health_check(self) -> tuple[bool, str]:
        """Check if the provider is reachable.

        Returns:
            (is_healthy, message)
        """
        return True, "OK"
