"""Wizdom subtitle provider — Hebrew subtitles keyed by IMDb id.

Wizdom exposes a small JSON search API and serves each subtitle as a ZIP
archive. Series are indexed by the series-level IMDb id, with the episode
selected through season/episode numbers; movies use season=0&episode=0.

Endpoints:
  GET {base}/search?action=by_id&imdb={id}&season={s}&episode={e}
      -> [{"id": 123, "versioname": "Release.Name"}, ...]
  GET {base}/files/sub/{id}
      -> ZIP archive with (usually) one .srt entry
"""

import io
import json
import logging
import zipfile
import zlib

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from wizdomsubs.cancellation import CancellationToken, ensure_token
from wizdomsubs.error_handler import (
    NoSubtitleInArchiveError,
    OperationCancelledError,
    TransportError,
)
from wizdomsubs.providers.base import CandidateSubtitle, SubtitleProvider
from wizdomsubs.providers.http_session import create_session

logger = logging.getLogger(__name__)

API_BASE = "https://wizdom.xyz/api"
SUBTITLE_EXTENSION = ".srt"

_CHUNK_SIZE = 16 * 1024

# Errors zipfile raises on corrupt or unsupported members
_ARCHIVE_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError)


class WizdomSub(BaseModel):
    """One search result row. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")

    id: int
    versioname: str | None = None


def parse_search_response(body: bytes) -> list[WizdomSub]:
    """Deserialize a search body permissively.

    Anything that is not a JSON array yields no results; array members that
    fail validation are skipped individually.
    """
    try:
        data = json.loads(body) if body else None
    except ValueError as e:
        logger.warning("WizdomSubs: search response is not JSON: %s", e)
        return []

    if not isinstance(data, list):
        if data is not None:
            logger.warning("WizdomSubs: unexpected search response type %s", type(data).__name__)
        return []

    subs = []
    for entry in data:
        try:
            subs.append(WizdomSub.model_validate(entry))
        except ValidationError as e:
            logger.debug("WizdomSubs: skipping invalid search entry %r: %s", entry, e)
    return subs


def extract_subtitle_entry(archive_content: bytes) -> tuple[str, bytes]:
    """Pick the subtitle out of a Wizdom ZIP archive.

    Prefers the first entry ending in .srt (any case), otherwise the first
    entry of any kind. Directory entries are ignored.

    Returns:
        (entry name, decompressed content)

    Raises:
        NoSubtitleInArchiveError: archive has no file entries
        zipfile.BadZipFile (and other _ARCHIVE_ERRORS): unreadable archive
    """
    with zipfile.ZipFile(io.BytesIO(archive_content)) as zf:
        entries = [info for info in zf.infolist() if not info.is_dir()]
        if not entries:
            raise NoSubtitleInArchiveError()

        entry = next(
            (info for info in entries if info.filename.lower().endswith(SUBTITLE_EXTENSION)),
            entries[0],
        )
        return entry.filename, zf.read(entry)


class WizdomProvider(SubtitleProvider):
    """Wizdom catalog client and archive fetcher."""

    name = "wizdom"

    def __init__(
        self,
        api_base: str = API_BASE,
        timeout: int = 30,
        user_agent: str = "WizdomSubsDownloader/1.0",
        session: requests.Session | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session

    @classmethod
    def from_settings(cls, settings) -> "WizdomProvider":
        return cls(
            api_base=settings.wizdom_api_base,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
        )

    def initialize(self):
        if self.session is None:
            self.session = create_session(timeout=self.timeout, user_agent=self.user_agent)

    def terminate(self):
        if self.session:
            self.session.close()
            self.session = None

    def health_check(self) -> tuple[bool, str]:
        self.initialize()
        try:
            resp = self.session.get(f"{self.api_base}/search?action=by_id&imdb=tt0000000&season=0&episode=0")
            if resp.status_code < 500:
                return True, "OK"
            return False, f"HTTP {resp.status_code}"
        except requests.RequestException as e:
            return False, str(e)

    # ─── Transport ───────────────────────────────────────────────────────────

    def _get_bytes(self, url: str, cancel_token: CancellationToken | None) -> bytes:
        """GET url and buffer the whole body, honoring cancellation.

        The response is closed from the cancelling thread, which breaks a
        blocked read; any error seen after a cancel is reported as a cancel.
        """
        token = ensure_token(cancel_token)
        token.raise_if_cancelled()
        self.initialize()

        try:
            resp = self.session.get(url, stream=True)
        except Exception as e:
            if token.cancelled:
                raise OperationCancelledError() from e
            raise

        unregister = token.register(resp.close)
        try:
            if not 200 <= resp.status_code < 300:
                raise TransportError(
                    f"HTTP {resp.status_code} from Wizdom",
                    context={"url": url, "status": resp.status_code},
                )
            chunks = []
            for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
                token.raise_if_cancelled()
                chunks.append(chunk)
            token.raise_if_cancelled()
            return b"".join(chunks)
        except Exception as e:
            if token.cancelled and not isinstance(e, OperationCancelledError):
                raise OperationCancelledError() from e
            raise
        finally:
            unregister()
            resp.close()

    # ─── Catalog ─────────────────────────────────────────────────────────────

    def search(
        self,
        external_id: str,
        season: int,
        episode: int,
        language: str,
        cancel_token: CancellationToken | None = None,
    ) -> list[CandidateSubtitle]:
        # Wizdom always expects season and episode, even for movies (0/0)
        url = f"{self.api_base}/search?action=by_id&imdb={external_id}&season={season}&episode={episode}"
        logger.info("WizdomSubs: API URL: %s", url)

        try:
            body = self._get_bytes(url, cancel_token)
        except OperationCancelledError:
            logger.info("WizdomSubs: search cancelled for %s S%sE%s", external_id, season, episode)
            raise
        except (TransportError, requests.RequestException) as e:
            logger.error("WizdomSubs: HTTP error searching for %s S%sE%s: %s", external_id, season, episode, e)
            return []
        except Exception as e:
            logger.error(
                "WizdomSubs: Unexpected error searching for %s S%sE%s: %s",
                external_id, season, episode, e, exc_info=True,
            )
            return []

        subs = parse_search_response(body)
        logger.debug("WizdomSubs: Found %d subtitles from API", len(subs))

        return [
            CandidateSubtitle(subtitle_id=sub.id, name=sub.versioname, language=language)
            for sub in subs
        ]

    # ─── Archive ─────────────────────────────────────────────────────────────

    def fetch(self, subtitle_id: int, cancel_token: CancellationToken | None = None) -> bytes:
        url = f"{self.api_base}/files/sub/{subtitle_id}"
        context = {"operation": "fetch", "subtitle_id": subtitle_id}

        try:
            archive_content = self._get_bytes(url, cancel_token)
        except OperationCancelledError:
            logger.info("WizdomSubs: download cancelled for %s", subtitle_id)
            raise
        except TransportError as e:
            logger.error("Wizdom subtitle download failed for %s: %s", subtitle_id, e)
            e.context.update(context)
            raise
        except requests.RequestException as e:
            logger.error("Wizdom subtitle download failed for %s: %s", subtitle_id, e)
            raise TransportError(f"Wizdom subtitle download failed for {subtitle_id}", context=context) from e

        ensure_token(cancel_token).raise_if_cancelled()

        try:
            entry_name, content = extract_subtitle_entry(archive_content)
        except NoSubtitleInArchiveError:
            logger.info("WizdomSubs: archive for %s has no entries", subtitle_id)
            raise
        except _ARCHIVE_ERRORS as e:
            logger.error("Wizdom subtitle archive unreadable for %s: %s", subtitle_id, e)
            raise TransportError(f"Wizdom subtitle archive unreadable for {subtitle_id}", context=context) from e

        logger.info("WizdomSubs: downloaded %s from #%s (%d bytes)", entry_name, subtitle_id, len(content))
        return content
