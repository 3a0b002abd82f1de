"""Centralized error handling with structured JSON error responses.

Custom exception hierarchy with error codes, HTTP status mapping,
and troubleshooting hints. All WizdomSubsError subtypes are automatically
caught by Flask error handlers and returned as structured JSON.

Categories:
  InputError      — bad request data or a malformed handle, never retried
  NotFoundError   — nothing to fetch; an expected outcome, not a failure
  TransportError  — network, HTTP status or decompression failure
  PlacementError  — filesystem failure while writing a subtitle
  OperationCancelledError — the caller's cancellation token fired
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Optional

from flask import jsonify, g

logger = logging.getLogger(__name__)


# ─── Exception Hierarchy ─────────────────────────────────────────────────────


class WizdomSubsError(Exception):
    """Base exception for all WizdomSubs application errors.

    Attributes:
        code: Machine-readable error code (e.g. "INPUT_001")
        http_status: HTTP status code to return
        context: Additional context data for debugging
        troubleshooting: Human-readable hint for resolving the issue
    """

    code: str = "WIZDOM_000"
    http_status: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        context: Optional[dict] = None,
        troubleshooting: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.context = context or {}
        self.troubleshooting = troubleshooting


class InputError(WizdomSubsError):
    """Missing or invalid request data."""

    code = "INPUT_001"
    http_status = 400


class HandleFormatError(InputError):
    """Subtitle handle is not of the form format-language-id."""

    code = "INPUT_002"
    http_status = 400

    def __init__(self, handle: str = "", **kwargs: object) -> None:
        super().__init__(
            f"Invalid subtitle id format: {handle!r}",
            troubleshooting="Use a handle returned by a search, e.g. 'srt-heb-12345'.",
            context={"handle": handle},
            **kwargs,  # type: ignore[arg-type]
        )


class UnresolvedIdentifierError(InputError):
    """No usable IMDb id could be determined for the request."""

    code = "INPUT_003"
    http_status = 400


class NotFoundError(WizdomSubsError):
    """No candidates, no archive entry, or unknown library item."""

    code = "NOTFOUND_001"
    http_status = 404


class NoSubtitleInArchiveError(NotFoundError):
    """Downloaded archive has no entries."""

    code = "NOTFOUND_002"
    http_status = 404

    def __init__(self, message: str = "No SRT found in archive", **kwargs: object) -> None:
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class TransportError(WizdomSubsError):
    """Network failure, non-success status, or unreadable archive."""

    code = "TRANSPORT_001"
    http_status = 502

    def __init__(self, message: str = "Download failed", **kwargs: object) -> None:
        kwargs.setdefault("troubleshooting", "Check that wizdom.xyz is reachable from this host.")
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PlacementError(WizdomSubsError):
    """Writing the subtitle next to the video failed."""

    code = "PLACE_001"
    http_status = 500

    def __init__(self, message: str, **kwargs: object) -> None:
        kwargs.setdefault("troubleshooting", "Check write permissions and free space in the media folder.")
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class OperationCancelledError(WizdomSubsError):
    """The operation was cancelled by its caller."""

    code = "CANCEL_001"
    http_status = 499

    def __init__(self, message: str = "Operation cancelled", **kwargs: object) -> None:
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ─── Structured Error Response Builder ───────────────────────────────────────


def _build_error_response(error: WizdomSubsError) -> dict:
    """Build a structured JSON error response from a WizdomSubsError."""
    response: dict = {
        "error": str(error),
        "code": error.code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    request_id = getattr(g, "request_id", None)
    if request_id:
        response["request_id"] = request_id

    if error.context:
        response["context"] = error.context

    if error.troubleshooting:
        response["troubleshooting"] = error.troubleshooting

    return response


# ─── Flask Error Handler Registration ────────────────────────────────────────


def register_error_handlers(app: object) -> None:
    """Register global error handlers on a Flask app.

    Call this once during app setup to install:
    - WizdomSubsError handler (structured JSON)
    - Generic Exception handler (500 with logging)
    - before_request hook for request IDs
    """
    from flask import Flask
    flask_app: Flask = app  # type: ignore[assignment]

    @flask_app.before_request
    def _set_request_id() -> None:
        """Assign a unique request ID to every incoming request."""
        g.request_id = str(uuid.uuid4())[:8]

    @flask_app.errorhandler(WizdomSubsError)
    def _handle_wizdom_error(error: WizdomSubsError):  # type: ignore[return]
        """Return structured JSON for known application errors."""
        # Not-found is a normal outcome and stays out of the warning stream
        log = logger.info if isinstance(error, NotFoundError) else logger.warning
        log(
            "[%s] %s: %s (request_id=%s)",
            error.code,
            error.__class__.__name__,
            error,
            getattr(g, "request_id", "?"),
        )
        return jsonify(_build_error_response(error)), error.http_status

    @flask_app.errorhandler(Exception)
    def _handle_generic_error(error: Exception):  # type: ignore[return]
        """Catch-all: log full traceback, return generic 500."""
        # Don't intercept HTTPException (404, 405, etc.), Flask renders those
        from werkzeug.exceptions import HTTPException
        if isinstance(error, HTTPException):
            return error

        request_id = getattr(g, "request_id", "?")
        logger.exception(
            "Unhandled exception (request_id=%s): %s", request_id, error
        )
        return jsonify({
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 500
