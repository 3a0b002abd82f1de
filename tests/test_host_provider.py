"""Tests for host_provider.py — the host subtitle-provider adapter."""

import pytest

from wizdomsubs.error_handler import InputError
from wizdomsubs.host_provider import SubtitleSearchRequest, WizdomSubtitleProvider
from wizdomsubs.providers.base import CandidateSubtitle, MediaKind


@pytest.fixture
def host(manager):
    return WizdomSubtitleProvider(manager)


def test_identity(host):
    assert host.name == "WizdomSubs"
    assert set(host.supported_media_types) == {MediaKind.EPISODE, MediaKind.MOVIE}


def test_search_maps_candidates(host, provider):
    provider.search.return_value = [
        CandidateSubtitle(subtitle_id=5, name="Movie.2020.BluRay", language="heb"),
        CandidateSubtitle(subtitle_id=6, name=None, language="heb"),
    ]
    request = SubtitleSearchRequest(
        content_type=MediaKind.MOVIE,
        media_path="/movies/Movie.2020.BluRay.mkv",
        provider_ids={"Imdb": "tt0133093"},
    )

    results = host.search(request)

    provider.search.assert_called_once_with("tt0133093", 0, 0, "heb", None)
    assert [r.id for r in results] == ["srt-heb-5", "srt-heb-6"]
    first, second = results
    assert first.name == "Movie.2020.BluRay"
    assert second.name == "Wizdom Subtitle #6"
    assert first.provider_name == "WizdomSubs"
    assert first.three_letter_iso_language_name == "heb"
    assert first.format == "srt"
    assert first.is_hash_match is False
    assert first.comment == "Wizdom ID: 5"


def test_search_uses_request_language(host, provider):
    request = SubtitleSearchRequest(language="eng", provider_ids={"Imdb": "tt1"})
    host.search(request)
    assert provider.search.call_args[0][3] == "eng"


def test_search_episode(host, provider):
    request = SubtitleSearchRequest(
        content_type=MediaKind.EPISODE,
        provider_ids={"Imdb": "tt2017109"},
        parent_index_number=3,
        index_number=4,
    )
    host.search(request)
    provider.search.assert_called_once_with("tt2017109", 3, 4, "heb", None)


def test_search_missing_imdb(host, provider):
    assert host.search(SubtitleSearchRequest(provider_ids={"Tmdb": "603"})) == []
    provider.search.assert_not_called()


def test_search_episode_missing_numbers(host, provider):
    request = SubtitleSearchRequest(
        content_type=MediaKind.EPISODE, provider_ids={"Imdb": "tt1"}, parent_index_number=1,
    )
    assert host.search(request) == []
    provider.search.assert_not_called()


def test_get_subtitles(host, provider):
    provider.fetch.return_value = b"1\n00:00:01,000 --> 00:00:02,000\nShalom\n"

    response = host.get_subtitles("srt-heb-42")

    provider.fetch.assert_called_once_with(42, None)
    assert response.format == "srt"
    assert response.language == "heb"
    assert response.stream.read().endswith(b"Shalom\n")
    assert response.is_forced is False
    assert response.is_hearing_impaired is False


@pytest.mark.parametrize("handle", ["", "   ", None])
def test_get_subtitles_blank_handle(host, handle):
    with pytest.raises(InputError):
        host.get_subtitles(handle)
