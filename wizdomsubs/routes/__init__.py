"""Routes package — Blueprint registration for all API endpoints.

Each blueprint module defines a `bp` variable. This module provides
register_blueprints() which imports and registers both blueprints.
"""


def register_blueprints(app):
    """Import and register all API blueprints on the Flask app."""
    from wizdomsubs.routes.system import bp as system_bp
    from wizdomsubs.routes.wizdom import bp as wizdom_bp

    for blueprint in [
        wizdom_bp,
        system_bp,
    ]:
        app.register_blueprint(blueprint)
