"""Write downloaded subtitles next to their video as sidecar files.

Naming: <video stem>.<lang>.<ext>, e.g. movie.he.srt. When that name is taken
and overwriting is off, the lowest free numbered slot is used:
movie.he.2.srt, movie.he.3.srt, ...

Slots are claimed with an exclusive create, so two concurrent writers for the
same video can never pick the same name. A failed write removes the file it
claimed; the caller never sees a path to a partial subtitle.
"""

import logging
import os
import tempfile
from dataclasses import dataclass

from wizdomsubs.error_handler import PlacementError

logger = logging.getLogger(__name__)

# Upper bound on numbered slots, guards against a directory we cannot list
MAX_SLOTS = 1000


@dataclass
class PlacementResult:
    path: str
    overwritten: bool = False


def subtitle_path(video_path: str, language: str, extension: str = "srt", slot: int = 1) -> str:
    """Sidecar path for a video. Slot 1 is the unnumbered base name."""
    directory = os.path.dirname(os.path.abspath(video_path))
    stem = os.path.splitext(os.path.basename(video_path))[0]
    if slot <= 1:
        name = f"{stem}.{language}.{extension}"
    else:
        name = f"{stem}.{language}.{slot}.{extension}"
    return os.path.join(directory, name)


def _write_exclusive(path: str, content: bytes) -> None:
    """Create path (must not exist) and write content, or leave nothing behind."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0), 0o644)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        try:
            os.unlink(path)
        except OSError:
            pass
        raise


def _write_replace(path: str, content: bytes) -> None:
    """Write to a temp file in the same directory, then swap it in atomically."""
    directory = os.path.dirname(path)
    fd, tmp_path = tempfile.mkstemp(prefix=".wizdomsubs-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def place_subtitle(
    video_path: str,
    content: bytes,
    language: str,
    overwrite: bool,
    extension: str = "srt",
) -> PlacementResult:
    """Save subtitle bytes beside video_path.

    Args:
        video_path: Path of the video the subtitle belongs to
        content: Subtitle bytes, written verbatim
        language: Language segment of the file name (e.g. "he")
        overwrite: Replace an existing base-name file instead of numbering
        extension: Subtitle extension without the dot

    Returns:
        PlacementResult with the absolute path written

    Raises:
        PlacementError: directory missing, permission denied, disk full, or
            no free numbered slot, or a blank video_path
    """
    if not isinstance(video_path, str) or not video_path.strip():
        raise PlacementError("No video path to place the subtitle next to", context={"video_path": video_path})

    base_path = subtitle_path(video_path, language, extension)

    if overwrite:
        existed = os.path.exists(base_path)
        try:
            _write_replace(base_path, content)
        except OSError as e:
            logger.error("Failed to write subtitle to %s: %s", base_path, e)
            raise PlacementError(
                f"Cannot write subtitle file: {e}", context={"path": base_path}
            ) from e
        logger.info("Saved subtitle: %s (%d bytes, overwrite)", base_path, len(content))
        return PlacementResult(path=base_path, overwritten=existed)

    for slot in range(1, MAX_SLOTS + 1):
        path = subtitle_path(video_path, language, extension, slot)
        try:
            _write_exclusive(path, content)
        except FileExistsError:
            continue
        except OSError as e:
            logger.error("Failed to write subtitle to %s: %s", path, e)
            raise PlacementError(
                f"Cannot write subtitle file: {e}", context={"path": path}
            ) from e
        logger.info("Saved subtitle: %s (%d bytes)", path, len(content))
        return PlacementResult(path=path)

    raise PlacementError(
        f"No free subtitle name next to {video_path} after {MAX_SLOTS} attempts",
        context={"video_path": video_path},
    )
