"""System routes — /health, /config, /openapi.json."""

import logging

from flask import Blueprint, current_app, jsonify

from wizdomsubs.version import __version__

bp = Blueprint("system", __name__, url_prefix="/api/v1")
logger = logging.getLogger(__name__)


@bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.
    ---
    get:
      tags:
        - System
      summary: Basic health check
      description: Returns overall health status, version, and connectivity of Wizdom and the media library.
      responses:
        200:
          description: System is healthy
          content:
            application/json:
              schema:
                type: object
                properties:
                  status:
                    type: string
                    enum: [healthy, unhealthy]
                  version:
                    type: string
                  services:
                    type: object
                    additionalProperties:
                      type: string
        503:
          description: Wizdom is unreachable
    """
    manager = current_app.subtitle_manager
    service_status = {}

    try:
        healthy, message = manager.provider.health_check()
    except Exception as e:
        logger.warning("Wizdom health check failed: %s", e)
        healthy, message = False, "error"
    service_status["wizdom"] = message if healthy else f"unhealthy: {message}"

    try:
        lib_healthy, lib_message = current_app.library.health_check()
        service_status["library"] = lib_message if lib_healthy else f"unhealthy: {lib_message}"
    except Exception:
        service_status["library"] = "error"

    status_code = 200 if healthy else 503
    return jsonify({
        "status": "healthy" if healthy else "unhealthy",
        "version": __version__,
        "services": service_status,
    }), status_code


@bp.route("/config", methods=["GET"])
def get_config():
    """Get current configuration (API keys masked).
    ---
    get:
      tags:
        - System
      summary: Get configuration
      responses:
        200:
          description: Current settings with secrets masked
          content:
            application/json:
              schema:
                type: object
                additionalProperties: true
    """
    return jsonify(current_app.settings.get_safe_config())


@bp.route("/openapi.json", methods=["GET"])
def openapi_spec():
    """Serve the OpenAPI 3.0.3 specification as JSON."""
    return jsonify(current_app.api_spec.to_dict())
