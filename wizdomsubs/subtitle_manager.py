"""Search, select and download orchestration.

The SubtitleManager ties the pieces together for both host adapters (HTTP
routes and the host subtitle-provider):

    search           resolver -> catalog -> optional similarity ranking
    download_to_file search -> best candidate -> fetch -> placement
    download_by_handle handle -> fetch -> payload

Usage:
    manager = SubtitleManager(settings, WizdomProvider.from_settings(settings), resolver)
    candidates = manager.search(SearchCriteria(external_id="tt0133093"))
    payload = manager.download_by_handle(candidates[0].handle)
"""

import logging
import os
from dataclasses import dataclass

from wizdomsubs.cancellation import CancellationToken
from wizdomsubs.config import Settings
from wizdomsubs.error_handler import HandleFormatError, NotFoundError, UnresolvedIdentifierError
from wizdomsubs.placement import PlacementResult, place_subtitle
from wizdomsubs.providers.base import (
    CandidateSubtitle,
    SearchCriteria,
    SubtitlePayload,
    SubtitleProvider,
)
from wizdomsubs.ranking import rank_by_similarity
from wizdomsubs.resolver import IdentifierResolver

logger = logging.getLogger(__name__)


# ─── Candidate handles ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class CandidateHandle:
    format: str
    language: str
    subtitle_id: int

    def __str__(self) -> str:
        return build_handle(self.format, self.language, self.subtitle_id)


def build_handle(fmt: str, language: str, subtitle_id: int) -> str:
    return f"{fmt}-{language}-{subtitle_id}"


def parse_handle(handle: str) -> CandidateHandle:
    """Parse "srt-heb-12345".

    Raises:
        HandleFormatError: not exactly three non-empty hyphen-separated
            segments, or the last segment is not a non-negative integer
    """
    if not isinstance(handle, str):
        raise HandleFormatError(repr(handle))
    parts = handle.strip().split("-")
    if len(parts) != 3 or not all(parts):
        raise HandleFormatError(handle)
    fmt, language, raw_id = parts
    if not (raw_id.isascii() and raw_id.isdigit()):
        raise HandleFormatError(handle)
    return CandidateHandle(format=fmt, language=language, subtitle_id=int(raw_id))


def _base_language(language: str) -> str:
    """Drop a region suffix ("he-IL" -> "he"); handles use "-" as separator."""
    return language.strip().split("-")[0]


# ─── Orchestrator ────────────────────────────────────────────────────────────


class SubtitleManager:
    """Single implementation behind every host-facing adapter."""

    def __init__(self, settings: Settings, provider: SubtitleProvider, resolver: IdentifierResolver):
        self.settings = settings
        self.provider = provider
        self.resolver = resolver

    def _query_numbers(self, criteria: SearchCriteria) -> tuple[int, int] | None:
        """Season/episode to send; movies are always 0/0."""
        if not criteria.is_episode:
            return 0, 0
        if not criteria.has_episode_numbers:
            logger.warning(
                "WizdomSubs: Missing season/episode numbers for episode %s (S:%s E:%s)",
                criteria.media_path or criteria.external_id, criteria.season, criteria.episode,
            )
            return None
        return criteria.season, criteria.episode

    def _resolve(self, criteria: SearchCriteria) -> str:
        external_id = self.resolver.resolve(
            criteria.media_kind,
            criteria.external_id,
            series_name=criteria.series_name,
            media_path=criteria.media_path,
        )
        return (external_id or "").strip()

    def _search_resolved(
        self,
        external_id: str,
        criteria: SearchCriteria,
        language: str,
        cancel_token: CancellationToken | None,
    ) -> list[CandidateSubtitle]:
        numbers = self._query_numbers(criteria)
        if numbers is None:
            return []
        season, episode = numbers

        logger.info("WizdomSubs: Final IMDb ID: %s for %s", external_id, criteria.series_name or external_id)
        candidates = self.provider.search(external_id, season, episode, language, cancel_token)

        if criteria.reference_filename and criteria.reference_filename.strip():
            base_name = os.path.splitext(os.path.basename(criteria.reference_filename))[0]
            candidates = rank_by_similarity(base_name, candidates, label=lambda c: c.name)

        logger.info("WizdomSubs: Returning %d results for %s", len(candidates), criteria.display_name)
        return candidates

    def search(
        self,
        criteria: SearchCriteria,
        language: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[CandidateSubtitle]:
        """Resolve, query and rank. An empty list is a normal outcome."""
        language = _base_language(language or self.settings.get_default_language())

        external_id = self._resolve(criteria)
        if not external_id:
            logger.warning(
                "WizdomSubs: Missing IMDb ID for %s at %s", criteria.media_kind, criteria.media_path,
            )
            return []
        return self._search_resolved(external_id, criteria, language, cancel_token)

    def download_to_file(
        self,
        criteria: SearchCriteria,
        video_path: str,
        language: str | None = None,
        overwrite: bool | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> PlacementResult:
        """Search, take the best candidate, fetch it and save it beside the video.

        Raises:
            UnresolvedIdentifierError: no IMDb id to search with
            NotFoundError: no candidates, or the archive was empty
            TransportError: the chosen candidate could not be downloaded
            PlacementError: the file could not be written
        """
        language = _base_language(language or self.settings.get_default_language())
        if overwrite is None:
            overwrite = self.settings.overwrite_existing

        external_id = self._resolve(criteria)
        if not external_id:
            raise UnresolvedIdentifierError(
                "No IMDb id available for this item",
                context={"series_name": criteria.series_name, "media_path": criteria.media_path},
            )

        candidates = self._search_resolved(external_id, criteria, language, cancel_token)
        if not candidates:
            raise NotFoundError(
                "No subtitles found",
                context={"imdb_id": external_id, "season": criteria.season, "episode": criteria.episode},
            )

        best = candidates[0]
        logger.info("WizdomSubs: downloading best candidate #%s (%s)", best.subtitle_id, best.display_name)
        content = self.provider.fetch(best.subtitle_id, cancel_token)

        result = place_subtitle(video_path, content, language, overwrite, extension=best.format.value)
        logger.info("Saved Wizdom SRT for %s at %s", video_path, result.path)
        return result

    def download_by_handle(
        self,
        handle: str,
        cancel_token: CancellationToken | None = None,
    ) -> SubtitlePayload:
        """Fetch a previously seen candidate. Format and language come from the handle."""
        parsed = parse_handle(handle)
        content = self.provider.fetch(parsed.subtitle_id, cancel_token)
        return SubtitlePayload(format=parsed.format, language=parsed.language, content=content)


__all__ = [
    "CandidateHandle",
    "SubtitleManager",
    "build_handle",
    "parse_handle",
]
