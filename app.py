"""
APSF - annular point spread function surrogate service.
Flask application factory.

Serves the REST API for fitting and evaluating APSF surrogates via
registered ApsfService instances.

Usage:
    python app.py              # Development server on http://localhost:5000
    flask run                  # Same, via Flask CLI
"""

from flask import Flask, jsonify

from apsf import __version__
from apsf.services import ServiceRegistry
from apsf.services.annular import AnnularService


def create_registry():
    """Build and populate the service registry."""
    registry = ServiceRegistry()
    registry.register(AnnularService())
    return registry


def create_app():
    """Application factory for the APSF Flask app."""
    app = Flask(__name__)

    # Build service registry
    registry = create_registry()

    # Create and register API blueprint (shared + service-owned routes)
    from api.routes import create_api_blueprint
    api = create_api_blueprint(registry)
    app.register_blueprint(api)

    @app.route("/")
    def root():
        return jsonify({"name": "apsf", "version": __version__,
                        "services": registry.list_all()})

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, host="127.0.0.1", port=5000)
