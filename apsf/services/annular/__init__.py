"""
Annular Service: fit and predict annular APSF surrogates over HTTP.

Endpoints:
    POST /api/annular/fit      - histograms -> fitted model
    POST /api/annular/predict  - radii + fitted model -> cumulative, density or psf

Fit request JSON:
    histograms: [{bin_brks, bin_mid, bin_phtw, metadata}, ...]
      OR
    simulation_id: str (bundled set from data.simulations)
    press: bool (default: the set's press_dep, else false)
    norm: bool (default true)
    nstart: int (default 10, capped at 200)
    seed: int (optional, for reproducible fits)

Predict request JSON:
    r: [float, ...]
    fit: fitted model dict (output of /fit)
    kind: "cumulative" | "density" | "psf" (default "psf")
    press: float (mbar, required for pressure-dependent fits)

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import logging

from flask import jsonify, request

from apsf.constants import DEFAULT_NSTART
from apsf.engine import FitConfig
from apsf.fit import fit_annular
from apsf.histogram import Histogram
from apsf.predict import predict_annular_traced
from apsf.services import ApsfService
from data.simulations import get_simulation_by_id

log = logging.getLogger(__name__)

# Upper bound on random starts for a single HTTP request
MAX_REQUEST_NSTART = 200


class AnnularService(ApsfService):

    id = "annular"
    name = "Annular APSF"
    description = "Exponential surrogate of the cumulative annular PSF"
    geometry = "annular"
    status = "live"

    def validate(self, config):
        """Validate a fit request payload."""
        if not config:
            raise ValueError("Request body must be JSON")

        press_default = False
        histograms = config.get("histograms")
        if histograms is None and config.get("simulation_id"):
            sim = get_simulation_by_id(config["simulation_id"])
            if sim is None:
                raise ValueError("Unknown simulation '{}'".format(config["simulation_id"]))
            histograms = sim["histograms"]
            press_default = sim["press_dep"]
        if not histograms or not isinstance(histograms, list):
            raise ValueError("At least one histogram required")

        try:
            nstart = int(config.get("nstart", DEFAULT_NSTART))
            seed = config.get("seed")
            seed = None if seed is None else int(seed)
        except (TypeError, ValueError):
            raise ValueError("nstart and seed must be integers")

        press = config.get("press", press_default)
        norm = config.get("norm", True)
        for key, value in (("press", press), ("norm", norm)):
            if not isinstance(value, bool):
                raise ValueError("{} must be true or false".format(key))

        return {
            "histograms": [Histogram.from_dict(h) for h in histograms],
            "config": FitConfig(
                press=press,
                norm=norm,
                nstart=min(nstart, MAX_REQUEST_NSTART),
                seed=seed,
            ),
        }

    def compute(self, config):
        """Fit the annular model and return its dict form."""
        fit = fit_annular(config["histograms"], config=config["config"])
        result = fit.to_dict()
        result["config"] = config["config"].to_dict()
        return result

    def predict(self, data):
        """Validate a predict payload and evaluate the model."""
        if not data:
            raise ValueError("Request body must be JSON")
        if "r" not in data or "fit" not in data:
            raise ValueError("r and fit are required")
        r = data["r"]
        if not isinstance(r, list):
            r = [r]
        try:
            r = [float(v) for v in r]
        except (TypeError, ValueError):
            raise ValueError("r must be numeric")
        press = data.get("press")
        return predict_annular_traced(
            r, data["fit"], kind=data.get("kind", "psf"), press=press).to_dict()

    def register_routes(self, bp):
        """Mount annular API endpoints."""
        service = self

        @bp.route("/annular/fit", methods=["POST"])
        def annular_fit():
            """Fit an annular surrogate to simulation histograms."""
            data = request.get_json(silent=True)
            try:
                config = service.validate(data)
                result = service.compute(config)
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            return jsonify(result)

        @bp.route("/annular/predict", methods=["POST"])
        def annular_predict():
            """Evaluate a fitted annular surrogate at requested radii."""
            data = request.get_json(silent=True)
            try:
                result = service.predict(data)
            except ValueError as e:
                return jsonify({"error": str(e)}), 400
            return jsonify(result)
