"""Tests for subtitle_manager.py — handles and search/download orchestration."""

import json
from unittest.mock import ANY

import pytest

from conftest import make_response, make_zip
from wizdomsubs.error_handler import (
    HandleFormatError,
    NotFoundError,
    TransportError,
    UnresolvedIdentifierError,
)
from wizdomsubs.mediaserver.base import LibrarySeries, NullLibrary
from wizdomsubs.providers.base import CandidateSubtitle, MediaKind, SearchCriteria
from wizdomsubs.resolver import IdentifierResolver
from wizdomsubs.subtitle_manager import SubtitleManager, build_handle, parse_handle


# ─── Handles ─────────────────────────────────────────────────────────────────


def test_parse_handle():
    parsed = parse_handle("srt-heb-12345")
    assert (parsed.format, parsed.language, parsed.subtitle_id) == ("srt", "heb", 12345)
    assert str(parsed) == "srt-heb-12345"
    assert build_handle("srt", "he", 7) == "srt-he-7"


@pytest.mark.parametrize("handle", [
    "", "srt-heb", "srt--5", "srt-heb-abc", "srt-heb-5-x", "srt-heb--5",
    "srt-heb-²", "srt-heb-٣",  # non-ASCII digits
    None,
])
def test_parse_handle_rejects_malformed(handle):
    with pytest.raises(HandleFormatError):
        parse_handle(handle)


# ─── search ──────────────────────────────────────────────────────────────────


def test_search_movie_uses_zero_numbers(manager, provider):
    provider.search.return_value = [CandidateSubtitle(subtitle_id=1, name="A", language="he")]

    results = manager.search(SearchCriteria(external_id="tt0133093"))

    provider.search.assert_called_once_with("tt0133093", 0, 0, "he", None)
    assert [c.subtitle_id for c in results] == [1]


def test_search_strips_language_region(manager, provider):
    manager.search(SearchCriteria(external_id="tt1"), language="he-IL")
    assert provider.search.call_args[0][3] == "he"


def test_search_episode_without_numbers_returns_empty(manager, provider):
    criteria = SearchCriteria(external_id="tt1", media_kind=MediaKind.EPISODE, season=1)
    assert manager.search(criteria) == []
    provider.search.assert_not_called()


def test_search_blank_id_returns_empty(manager, provider):
    assert manager.search(SearchCriteria(external_id="  ")) == []
    provider.search.assert_not_called()


def test_search_episode_uses_resolved_series_id(settings, provider, library):
    library.find_series_by_name.return_value = LibrarySeries("9", "Show", "tt2017109")
    manager = SubtitleManager(settings, provider, IdentifierResolver(library))
    criteria = SearchCriteria(
        external_id="tt2313681", media_kind=MediaKind.EPISODE, season=2, episode=5, series_name="Show",
    )

    manager.search(criteria)

    provider.search.assert_called_once_with("tt2017109", 2, 5, "he", None)


def test_search_ranks_by_reference_filename(settings, wizdom, mock_session):
    """Catalog order WEB, HDTV; the HDTV file name pulls id 11 to the front."""
    body = json.dumps([
        {"id": 10, "versioname": "Show.S01E02.WEB"},
        {"id": 11, "versioname": "Show.S01E02.HDTV"},
    ]).encode()
    mock_session.get.return_value = make_response(200, body)
    manager = SubtitleManager(settings, wizdom, IdentifierResolver(NullLibrary()))
    criteria = SearchCriteria(
        external_id="tt1234567",
        media_kind=MediaKind.EPISODE,
        season=1,
        episode=2,
        reference_filename="/tv/Show/Show.S01E02.HDTV.mkv",
    )

    results = manager.search(criteria)

    assert [c.subtitle_id for c in results] == [11, 10]
    assert mock_session.get.call_args[0][0].endswith("imdb=tt1234567&season=1&episode=2")


def test_search_empty_catalog(settings, wizdom, mock_session):
    mock_session.get.return_value = make_response(200, b"[]")
    manager = SubtitleManager(settings, wizdom, IdentifierResolver(NullLibrary()))
    assert manager.search(SearchCriteria(external_id="tt1234567")) == []


# ─── download_by_handle ──────────────────────────────────────────────────────


def test_download_by_handle_falls_back_to_first_entry(settings, wizdom, mock_session):
    mock_session.get.return_value = make_response(200, make_zip([("notes.txt", b"plain text")]))
    manager = SubtitleManager(settings, wizdom, IdentifierResolver(NullLibrary()))

    payload = manager.download_by_handle("srt-heb-99")

    assert payload.content == b"plain text"
    assert payload.format == "srt"
    assert payload.language == "heb"
    assert payload.forced is False
    assert mock_session.get.call_args[0][0].endswith("/files/sub/99")


def test_download_by_handle_malformed(manager, provider):
    with pytest.raises(HandleFormatError):
        manager.download_by_handle("srt-heb")
    provider.fetch.assert_not_called()


# ─── download_to_file ────────────────────────────────────────────────────────


@pytest.fixture
def video(tmp_path):
    path = tmp_path / "Show.S01E02.HDTV.mkv"
    path.write_bytes(b"")
    return str(path)


def test_download_to_file_saves_best(manager, provider, video, tmp_path):
    provider.search.return_value = [
        CandidateSubtitle(subtitle_id=10, name="Show.S01E02.WEB", language="he"),
        CandidateSubtitle(subtitle_id=11, name="Show.S01E02.HDTV", language="he"),
    ]
    provider.fetch.return_value = b"subtitle"
    criteria = SearchCriteria(
        external_id="tt1", media_kind=MediaKind.EPISODE, season=1, episode=2, reference_filename=video,
    )

    result = manager.download_to_file(criteria, video)

    provider.fetch.assert_called_once_with(11, None)
    assert result.path == str(tmp_path / "Show.S01E02.HDTV.he.srt")
    assert (tmp_path / "Show.S01E02.HDTV.he.srt").read_bytes() == b"subtitle"


def test_download_to_file_respects_overwrite_setting(settings, provider, library, video, tmp_path):
    settings = settings.model_copy(update={"overwrite_existing": True})
    manager = SubtitleManager(settings, provider, IdentifierResolver(library))
    (tmp_path / "Show.S01E02.HDTV.he.srt").write_bytes(b"old")
    provider.search.return_value = [CandidateSubtitle(subtitle_id=1, language="he")]
    provider.fetch.return_value = b"new"

    result = manager.download_to_file(SearchCriteria(external_id="tt1"), video)

    assert result.overwritten is True
    assert (tmp_path / "Show.S01E02.HDTV.he.srt").read_bytes() == b"new"


def test_download_to_file_language_override(manager, provider, video, tmp_path):
    provider.search.return_value = [CandidateSubtitle(subtitle_id=1, language="en")]
    provider.fetch.return_value = b"x"

    result = manager.download_to_file(SearchCriteria(external_id="tt1"), video, language="en")

    provider.search.assert_called_once_with("tt1", 0, 0, "en", ANY)
    assert result.path.endswith("Show.S01E02.HDTV.en.srt")


def test_download_to_file_no_candidates(manager, video):
    with pytest.raises(NotFoundError) as exc_info:
        manager.download_to_file(SearchCriteria(external_id="tt1"), video)
    assert str(exc_info.value) == "No subtitles found"


def test_download_to_file_blank_id(manager, provider, video):
    with pytest.raises(UnresolvedIdentifierError):
        manager.download_to_file(SearchCriteria(external_id=""), video)
    provider.search.assert_not_called()


def test_download_to_file_transport_error_propagates(manager, provider, video, tmp_path):
    provider.search.return_value = [CandidateSubtitle(subtitle_id=1, language="he")]
    provider.fetch.side_effect = TransportError()

    with pytest.raises(TransportError):
        manager.download_to_file(SearchCriteria(external_id="tt1"), video)
    assert not (tmp_path / "Show.S01E02.HDTV.he.srt").exists()
