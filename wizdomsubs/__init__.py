"""WizdomSubs — find, rank and download Wizdom subtitles for movies and episodes."""

from wizdomsubs.version import __version__

__all__ = ["__version__"]
