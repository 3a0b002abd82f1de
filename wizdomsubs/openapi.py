"""OpenAPI specification for the WizdomSubs API.

Builds an APISpec per application and registers every Flask view function
that carries a YAML docstring.
"""

import logging

from apispec import APISpec
from apispec_webframeworks.flask import FlaskPlugin

from wizdomsubs.version import __version__

logger = logging.getLogger(__name__)


def create_spec() -> APISpec:
    return APISpec(
        title="WizdomSubs API",
        version=__version__,
        openapi_version="3.0.3",
        info={
            "description": "Hebrew subtitle search and download backed by wizdom.xyz",
        },
        plugins=[FlaskPlugin()],
    )


def register_all_paths(app, spec: APISpec) -> APISpec:
    """Register all Flask view functions with YAML docstrings into the APISpec.

    Must be called AFTER register_blueprints() so all views are discoverable.
    Skips views without ``---`` markers or that fail parsing.
    """
    registered = 0
    skipped = 0

    with app.test_request_context():
        for name, view_func in app.view_functions.items():
            # Skip static file serving
            if name == "static":
                continue

            # Only process views with YAML docstrings (contain '---')
            docstring = getattr(view_func, "__doc__", None) or ""
            if "---" not in docstring:
                skipped += 1
                continue

            try:
                spec.path(view=view_func)
                registered += 1
            except Exception as exc:
                logger.debug("Skipped OpenAPI path for %s: %s", name, exc)
                skipped += 1

    logger.info("OpenAPI: registered %d paths, skipped %d views", registered, skipped)
    return spec
