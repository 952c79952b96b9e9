"""
Flask API routes for APSF surrogate fitting.

Shared endpoints:
  GET  /api/services               - list registered services
  GET  /api/constants              - engine constants
  GET  /api/simulations            - list bundled simulation sets
  GET  /api/simulations/<id>       - get a single simulation set

Service-owned endpoints are mounted by each live service
(e.g. POST /api/annular/fit, POST /api/annular/predict).
"""

from flask import Blueprint, jsonify

from apsf import constants
from data.simulations import get_all_simulations, get_simulation_by_id


def create_api_blueprint(registry):
    """Build the API blueprint: shared routes plus every live service's routes."""
    api = Blueprint("api", __name__, url_prefix="/api")

    @api.route("/services", methods=["GET"])
    def list_services():
        """Return metadata of all registered services."""
        return jsonify(registry.list_all())

    @api.route("/constants", methods=["GET"])
    def get_constants():
        """Return the constants used by the engine."""
        return jsonify({
            "REF_PRESSURE_MBAR": constants.REF_PRESSURE_MBAR,
            "FIRST_START": list(constants.FIRST_START),
            "START_SIGNS": list(constants.START_SIGNS),
            "MAXIT": constants.MAXIT,
            "DEFAULT_NSTART": constants.DEFAULT_NSTART,
            "CONSISTENCY_KEYS": list(constants.CONSISTENCY_KEYS),
        })

    @api.route("/simulations", methods=["GET"])
    def list_simulations():
        """Return id, name and run count of every bundled simulation set."""
        return jsonify([
            {
                "id": sim["id"],
                "name": sim["name"],
                "press_dep": sim["press_dep"],
                "n_runs": len(sim["histograms"]),
            }
            for sim in get_all_simulations()
        ])

    @api.route("/simulations/<simulation_id>", methods=["GET"])
    def get_simulation(simulation_id):
        """Return a single simulation set by id."""
        sim = get_simulation_by_id(simulation_id)
        if sim is None:
            return jsonify({"error": "Simulation not found"}), 404
        return jsonify(sim)

    for service in registry.live():
        service.register_routes(api)

    return api
