"""Tests for ranking.py — edit distance and similarity ordering."""

from wizdomsubs.providers.base import CandidateSubtitle
from wizdomsubs.ranking import levenshtein_distance, rank_by_similarity


def test_distance_basics():
    assert levenshtein_distance("", "") == 0
    assert levenshtein_distance("abc", "") == 3
    assert levenshtein_distance("", "abcd") == 4
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("flaw", "lawn") == 2


def test_distance_is_case_sensitive():
    assert levenshtein_distance("ABC", "abc") == 3


def test_distance_is_symmetric():
    assert levenshtein_distance("Show.S01E02", "Show.S01E03.720p") == levenshtein_distance(
        "Show.S01E03.720p", "Show.S01E02"
    )


def test_rank_orders_by_distance():
    ranked = rank_by_similarity("Show.S01E02.1080p", ["Other", "Show.S01E02.720p", "Show.S01E02.1080p"])
    assert ranked == ["Show.S01E02.1080p", "Show.S01E02.720p", "Other"]


def test_rank_is_stable_for_ties():
    candidates = [CandidateSubtitle(subtitle_id=i, name=name) for i, name in enumerate(["abd", "abe", "abf"])]
    ranked = rank_by_similarity("abc", candidates, label=lambda c: c.name)
    assert [c.subtitle_id for c in ranked] == [0, 1, 2]


def test_rank_treats_missing_label_as_empty():
    candidates = [CandidateSubtitle(subtitle_id=1, name=None), CandidateSubtitle(subtitle_id=2, name="x")]
    ranked = rank_by_similarity("x", candidates, label=lambda c: c.name)
    assert [c.subtitle_id for c in ranked] == [2, 1]


def test_rank_empty():
    assert rank_by_similarity("anything", []) == []
