"""Subtitle-provider adapter for media-server hosts.

Hosts that drive subtitle search through a provider interface (search with a
request object, download by id) get WizdomSubtitleProvider. It carries no
logic of its own: requests are translated into SearchCriteria and handed to
the shared SubtitleManager.
"""

import io
import logging
from dataclasses import dataclass, field

from wizdomsubs.cancellation import CancellationToken
from wizdomsubs.config import to_three_letter
from wizdomsubs.error_handler import InputError
from wizdomsubs.providers.base import MediaKind, SearchCriteria
from wizdomsubs.subtitle_manager import SubtitleManager

logger = logging.getLogger(__name__)


@dataclass
class SubtitleSearchRequest:
    """What a host knows about the item it wants subtitles for."""

    content_type: MediaKind = MediaKind.MOVIE
    media_path: str | None = None
    language: str | None = None  # 3-letter, e.g. "heb"
    series_name: str | None = None
    provider_ids: dict[str, str] = field(default_factory=dict)
    parent_index_number: int | None = None  # season
    index_number: int | None = None  # episode

    def get_provider_id(self, name: str) -> str | None:
        value = (self.provider_ids or {}).get(name)
        return value.strip() if isinstance(value, str) and value.strip() else None


@dataclass
class RemoteSubtitleInfo:
    id: str
    name: str
    provider_name: str
    three_letter_iso_language_name: str
    format: str = "srt"
    is_hash_match: bool = False
    comment: str = ""


@dataclass
class SubtitleResponse:
    format: str
    language: str
    stream: io.BytesIO = field(repr=False)
    is_forced: bool = False
    is_hearing_impaired: bool = False


class WizdomSubtitleProvider:
    """Wizdom exposed through the host's subtitle-provider contract."""

    name = "WizdomSubs"
    supported_media_types = (MediaKind.EPISODE, MediaKind.MOVIE)

    def __init__(self, manager: SubtitleManager):
        self.manager = manager

    def search(
        self,
        request: SubtitleSearchRequest,
        cancel_token: CancellationToken | None = None,
    ) -> list[RemoteSubtitleInfo]:
        logger.info(
            "WizdomSubs: Search request for %s, Path: %s, Language: %s, SeriesName: %s",
            request.content_type, request.media_path, request.language, request.series_name,
        )
        for key, value in (request.provider_ids or {}).items():
            logger.debug("WizdomSubs: Provider ID - %s: %s", key, value)

        imdb = request.get_provider_id("Imdb")
        if not imdb:
            logger.warning(
                "WizdomSubs: Missing IMDb ID for %s at %s", request.content_type, request.media_path,
            )
            return []

        language = (request.language or "").strip()
        if not language:
            language = to_three_letter(self.manager.settings.get_default_language())

        criteria = SearchCriteria(
            external_id=imdb,
            media_kind=MediaKind(request.content_type),
            season=request.parent_index_number,
            episode=request.index_number,
            reference_filename=request.media_path,
            series_name=request.series_name,
            media_path=request.media_path,
        )
        candidates = self.manager.search(criteria, language=language, cancel_token=cancel_token)

        return [
            RemoteSubtitleInfo(
                id=c.handle,
                name=c.display_name,
                provider_name=self.name,
                three_letter_iso_language_name=c.language,
                format=c.format.value,
                comment=f"Wizdom ID: {c.subtitle_id}",
            )
            for c in candidates
        ]

    def get_subtitles(self, handle: str, cancel_token: CancellationToken | None = None) -> SubtitleResponse:
        if not isinstance(handle, str) or not handle.strip():
            raise InputError("Missing id", context={"handle": handle})

        payload = self.manager.download_by_handle(handle, cancel_token)
        return SubtitleResponse(
            format=payload.format,
            language=payload.language,
            stream=io.BytesIO(payload.content),
            is_forced=payload.forced,
            is_hearing_impaired=payload.hearing_impaired,
        )
