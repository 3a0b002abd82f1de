"""Wizdom routes — /WizdomSubs/Search, /WizdomSubs/DownloadToItemFolder, /WizdomSubs/Subtitles/<handle>.

Thin HTTP adapter over SubtitleManager. Request validation happens here;
everything else raises WizdomSubsError subtypes that the global error
handlers turn into structured JSON with the matching status code.
"""

import io
import logging

from flask import Blueprint, current_app, jsonify, request, send_file

from wizdomsubs.error_handler import InputError, NotFoundError
from wizdomsubs.providers.base import MediaKind, SearchCriteria

bp = Blueprint("wizdom", __name__, url_prefix="/WizdomSubs")
logger = logging.getLogger(__name__)


def _optional_int(data: dict, key: str) -> int | None:
    """Read an optional non-negative integer; bools, negatives and non-numeric strings are rejected."""
    value = data.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InputError(f"{key} must be an integer", context={key: value})
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InputError(f"{key} must be an integer", context={key: value}) from None
    if number < 0:
        raise InputError(f"{key} must not be negative", context={key: value})
    return number


def _optional_bool(data: dict, key: str) -> bool | None:
    """Read an optional flag; "true"/"false" strings are coerced, other types rejected."""
    value = data.get(key)
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no", ""):
            return False
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise InputError(f"{key} must be a boolean", context={key: value})


def _optional_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@bp.route("/Search", methods=["POST"])
def search():
    """Search Wizdom for subtitles of a movie or episode.
    ---
    post:
      tags:
        - Wizdom
      summary: Search subtitles
      description: |
        Resolves the series IMDb id for episodes, queries Wizdom and, when a
        filename is given, orders results by similarity to it.
      requestBody:
        required: true
        content:
          application/json:
            schema:
              type: object
              required: [imdb_id]
              properties:
                imdb_id:
                  type: string
                season:
                  type: integer
                episode:
                  type: integer
                filename:
                  type: string
                series_name:
                  type: string
                language:
                  type: string
      responses:
        200:
          description: Candidate subtitles (possibly empty)
          content:
            application/json:
              schema:
                type: object
                properties:
                  subtitles:
                    type: array
                    items:
                      type: object
                      properties:
                        id:
                          type: integer
                        name:
                          type: string
                        handle:
                          type: string
        400:
          description: Missing imdb_id or invalid numbers
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    imdb_id = _optional_str(data, "imdb_id")
    if not imdb_id:
        return jsonify({"error": "imdb_id is required"}), 400

    season = _optional_int(data, "season")
    episode = _optional_int(data, "episode")
    is_episode = season is not None or episode is not None

    criteria = SearchCriteria(
        external_id=imdb_id,
        media_kind=MediaKind.EPISODE if is_episode else MediaKind.MOVIE,
        season=season,
        episode=episode,
        reference_filename=_optional_str(data, "filename"),
        series_name=_optional_str(data, "series_name"),
    )

    manager = current_app.subtitle_manager
    candidates = manager.search(criteria, language=_optional_str(data, "language"))

    return jsonify({
        "subtitles": [
            {"id": c.subtitle_id, "name": c.name, "handle": c.handle}
            for c in candidates
        ],
    })


@bp.route("/DownloadToItemFolder", methods=["POST"])
def download_to_item_folder():
    """Download the best match and save it next to a library item.
    ---
    post:
      tags:
        - Wizdom
      summary: Download subtitle into the item's folder
      requestBody:
        required: true
        content:
          application/json:
            schema:
              type: object
              required: [item_id, imdb_id]
              properties:
                item_id:
                  type: string
                imdb_id:
                  type: string
                season:
                  type: integer
                episode:
                  type: integer
                filename:
                  type: string
                language_code:
                  type: string
                overwrite_existing:
                  type: boolean
      responses:
        200:
          description: Subtitle saved
          content:
            application/json:
              schema:
                type: object
                properties:
                  path:
                    type: string
        400:
          description: Missing item_id or imdb_id, or the item has no file
        404:
          description: Unknown item or no subtitles found
        500:
          description: Subtitle file could not be written
        502:
          description: Download from Wizdom failed
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    item_id = _optional_str(data, "item_id")
    if not item_id:
        return jsonify({"error": "item_id is required"}), 400
    imdb_id = _optional_str(data, "imdb_id")
    if not imdb_id:
        return jsonify({"error": "imdb_id is required"}), 400

    item = current_app.library.get_item(item_id)
    if item is None:
        raise NotFoundError(f"Item {item_id} not found", context={"item_id": item_id})
    if not (item.path or "").strip():
        raise InputError(
            f"Item {item_id} has no file path", context={"item_id": item_id, "item_type": item.item_type},
        )

    season = _optional_int(data, "season")
    episode = _optional_int(data, "episode")
    if item.is_episode:
        season = season if season is not None else item.season
        episode = episode if episode is not None else item.episode
    is_episode = item.is_episode or season is not None or episode is not None

    criteria = SearchCriteria(
        external_id=imdb_id,
        media_kind=MediaKind.EPISODE if is_episode else MediaKind.MOVIE,
        season=season,
        episode=episode,
        reference_filename=_optional_str(data, "filename"),
        series_name=item.series_name,
        media_path=item.path,
    )

    overwrite = _optional_bool(data, "overwrite_existing")
    manager = current_app.subtitle_manager
    result = manager.download_to_file(
        criteria,
        item.path,
        language=_optional_str(data, "language_code"),
        overwrite=overwrite,
    )

    logger.info("Saved Wizdom SRT for item %s at %s", item_id, result.path)
    return jsonify({"path": result.path})


@bp.route("/Subtitles/<handle>", methods=["GET"])
def get_subtitle(handle):
    """Download one subtitle by the handle a search returned.
    ---
    get:
      tags:
        - Wizdom
      summary: Download subtitle by handle
      parameters:
        - in: path
          name: handle
          required: true
          schema:
            type: string
          description: Handle of the form srt-<language>-<id>
      responses:
        200:
          description: Subtitle file
          content:
            application/x-subrip:
              schema:
                type: string
                format: binary
        400:
          description: Malformed handle
        404:
          description: Archive holds no subtitle
        502:
          description: Download from Wizdom failed
    """
    manager = current_app.subtitle_manager
    payload = manager.download_by_handle(handle)

    return send_file(
        io.BytesIO(payload.content),
        mimetype="application/x-subrip",
        as_attachment=True,
        download_name=f"{handle}.{payload.format}",
    )
