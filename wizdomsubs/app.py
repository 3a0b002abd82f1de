"""Application factory for the WizdomSubs Flask API server.

Uses the Flask Application Factory pattern: create_app() builds and
configures the application, wires the subtitle pipeline and registers
blueprints.
"""

import os
import logging

from flask import Flask

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class StructuredJSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging (ELK, Loki, etc.)."""

    def format(self, record: logging.LogRecord) -> str:
        import json as _json
        from flask import g as _g

        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = getattr(_g, "request_id", None) if _has_app_context() else None
        if request_id:
            entry["request_id"] = request_id

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }

        return _json.dumps(entry, default=str)


def _has_app_context() -> bool:
    """Check if Flask application context is active (avoids import cycle)."""
    try:
        from flask import has_app_context
        return has_app_context()
    except Exception:
        return False


def _setup_logging(settings) -> None:
    """Configure the root logger and an optional rotating file handler."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    root = logging.getLogger()

    # Determine formatter
    use_json = getattr(settings, "log_format", "text").lower() == "json"
    if use_json:
        formatter: logging.Formatter = StructuredJSONFormatter()
        for handler in root.handlers:
            handler.setFormatter(formatter)
    else:
        formatter = logging.Formatter(LOG_FORMAT)

    # File handler
    log_file = settings.log_file
    if not log_file:
        return
    try:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        from logging.handlers import RotatingFileHandler
        fh = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)
    except Exception as e:
        logging.getLogger(__name__).warning("Could not set up log file %s: %s", log_file, e)


def create_app(settings=None, library=None, provider=None, testing=False):
    """Create and configure the Flask application.

    Args:
        settings: Settings instance; defaults to the environment-backed singleton.
        library: LibraryIndex to use instead of the configured backend.
        provider: SubtitleProvider to use instead of a WizdomProvider.
        testing: If True, skip logging setup (pytest owns the handlers).

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)
    app.config["TESTING"] = testing

    # Load config
    if settings is None:
        from wizdomsubs.config import get_settings
        settings = get_settings()

    # Set up logging
    if not testing:
        _setup_logging(settings)

    logger = logging.getLogger(__name__)

    # Register structured error handlers (WizdomSubsError -> JSON, generic 500)
    from wizdomsubs.error_handler import register_error_handlers
    register_error_handlers(app)

    # ---- Subtitle pipeline ----
    if library is None:
        from wizdomsubs.mediaserver import create_library
        library = create_library(settings)

    if provider is None:
        from wizdomsubs.providers import WizdomProvider
        provider = WizdomProvider.from_settings(settings)
    provider.initialize()

    from wizdomsubs.resolver import IdentifierResolver
    from wizdomsubs.subtitle_manager import SubtitleManager
    resolver = IdentifierResolver(library, settings.get_series_mappings())

    app.settings = settings
    app.library = library
    app.subtitle_manager = SubtitleManager(settings, provider, resolver)

    # Register all route blueprints
    from wizdomsubs.routes import register_blueprints
    register_blueprints(app)

    # Register OpenAPI spec (must be after register_blueprints)
    from wizdomsubs.openapi import create_spec, register_all_paths
    app.api_spec = register_all_paths(app, create_spec())

    # Register Swagger UI blueprint
    from flask_swagger_ui import get_swaggerui_blueprint
    swagger_bp = get_swaggerui_blueprint(
        "/api/docs",
        "/api/v1/openapi.json",
        config={"app_name": "WizdomSubs API", "layout": "BaseLayout"},
    )
    app.register_blueprint(swagger_bp)

    logger.info("WizdomSubs ready (Wizdom API: %s)", settings.wizdom_api_base)
    return app


if __name__ == "__main__":
    from wizdomsubs.config import get_settings
    app = create_app()
    app.run(host="0.0.0.0", port=get_settings().port, debug=True)
