"""
Bundled synthetic annular APSF simulation sets.

These stand in for backward Monte-Carlo output when exercising the fit
engine, the API and the diagnostic scripts. Each histogram is generated by
binning a known cumulative field

    F(r) = c1' - (c2' e^(c3' r) + c4' e^(c5' r) + c6' e^(c7' r))

(see apsf.model). The field is truncated at the last edge (30 km) and
fits normally normalize each run, so a fit reproduces the normalized
cumulative shape of the data; it does not return the generating
coefficients (c1 becomes 1 and the amplitudes rescale).

SIMULATION SETS:
  continental : aerosol-dominated scatter, one run at 1013.25 mbar
  rayleigh    : molecular scatter, runs at 1013.25, 900, 800 and 700 mbar
                sharing extinction and sensor geometry

Each entry contains:
  id: unique identifier
  name: display name
  press_dep: whether the set is meant for a pressure-dependent fit
  coefficients: generating c1..c6
  histograms: list of Histogram.to_dict() records

IMPORTANT: No unicode characters (Windows charmap constraint).
"""

import numpy as np

from apsf.constants import REF_PRESSURE_MBAR
from apsf.model import physical_coefficients

# Radius grid shared by every bundled run: 0 to 30 km in 0.5 km bins
BIN_BRKS = np.linspace(0.0, 30.0, 61)

# Sensor geometry shared by every bundled run
SENSOR = {
    "res": 0.5,
    "snsznt": 0.0,
    "snsfov": 0.0,
    "snspos": [0.0, 0.0, 1.0],
}

CONTINENTAL_COEFFICIENTS = {
    "c1": 0.18, "c2": 0.02, "c3": -2.5, "c4": 0.55, "c5": -0.6, "c6": -0.08,
}

RAYLEIGH_COEFFICIENTS = {
    "c1": 0.09, "c2": 0.03, "c3": -1.4, "c4": 0.7, "c5": -0.3, "c6": -0.05,
}

RAYLEIGH_PRESSURES = (1013.25, 900.0, 800.0, 700.0)


def cumulative_field(r, coefficients, press=REF_PRESSURE_MBAR):
    """Generating cumulative field at radii r for surface pressure press (mbar)."""
    c1, c2, c3, c4, c5, c6, c7 = physical_coefficients(
        coefficients, press / REF_PRESSURE_MBAR)
    r = np.asarray(r, dtype=float)
    return c1 - (c2 * np.exp(c3 * r) + c4 * np.exp(c5 * r) + c6 * np.exp(c7 * r))


def make_histogram(coefficients, press=REF_PRESSURE_MBAR, ext=0.1,
                   bin_brks=BIN_BRKS):
    """Bin the generating field into one annular histogram dict."""
    bin_brks = np.asarray(bin_brks, dtype=float)
    cum = cumulative_field(bin_brks, coefficients, press)
    metadata = dict(SENSOR)
    metadata["press"] = float(press)
    metadata["ext"] = float(ext)
    return {
        "bin_brks": bin_brks.tolist(),
        "bin_mid": ((bin_brks[1:] + bin_brks[:-1]) / 2.0).tolist(),
        "bin_phtw": np.diff(cum).tolist(),
        "metadata": metadata,
    }


def _build_simulations():
    return [
        {
            "id": "continental",
            "name": "Continental aerosol (1013.25 mbar)",
            "press_dep": False,
            "coefficients": dict(CONTINENTAL_COEFFICIENTS),
            "histograms": [make_histogram(CONTINENTAL_COEFFICIENTS, ext=0.25)],
        },
        {
            "id": "rayleigh",
            "name": "Rayleigh (700 to 1013.25 mbar)",
            "press_dep": True,
            "coefficients": dict(RAYLEIGH_COEFFICIENTS),
            "histograms": [make_histogram(RAYLEIGH_COEFFICIENTS, press=p, ext=0.1)
                           for p in RAYLEIGH_PRESSURES],
        },
    ]


def get_all_simulations():
    """Return all bundled simulation sets."""
    return _build_simulations()


def get_simulation_by_id(simulation_id):
    """Look up a simulation set by its unique id. Returns dict or None."""
    for sim in _build_simulations():
        if sim["id"] == simulation_id:
            return sim
    return None
