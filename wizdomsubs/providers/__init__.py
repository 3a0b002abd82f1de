"""Subtitle provider system.

Usage:
    from wizdomsubs.providers import WizdomProvider

    with WizdomProvider() as provider:
        candidates = provider.search("tt0944947", 1, 2, "he")
        if candidates:
            content = provider.fetch(candidates[0].subtitle_id)
"""

from wizdomsubs.providers.base import (
    CandidateSubtitle,
    MediaKind,
    SearchCriteria,
    SubtitleFormat,
    SubtitlePayload,
    SubtitleProvider,
)
from wizdomsubs.providers.wizdom import WizdomProvider

__all__ = [
    "CandidateSubtitle",
    "MediaKind",
    "SearchCriteria",
    "SubtitleFormat",
    "SubtitlePayload",
    "SubtitleProvider",
    "WizdomProvider",
]
