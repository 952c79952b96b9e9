"""
Fitted annular model record and its coefficient contract.

The optimizer works on five raw parameters; downstream consumers see six
named coefficients:

    c1 = finf  (total diffuse transmittance, 1 if normalized)
    c2 = x1    (pressure-scaled amplitude)
    c3 = x2    (pressure-scaled rate)
    c4 = x3    (split of the remaining amplitude)
    c5 = x4    (first pressure-independent rate)
    c6 = x5    (second pressure-independent rate)

At prediction time they are expanded with p = press / 1013.25 into the
seven physical coefficients of

    F(r) = c1' - (c2' e^(c3' r) + c4' e^(c5' r) + c6' e^(c7' r))

where c2' + c4' + c6' = c1' for every p, so F(0) = 0.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

from collections import OrderedDict
from types import MappingProxyType

import numpy as np

from apsf.constants import REF_PRESSURE_MBAR

COEFFICIENT_NAMES = ("c1", "c2", "c3", "c4", "c5", "c6")


def expand_coefficients(x, finf):
    """Relabel optimizer output x (5 values) and finf as c1..c6."""
    values = [float(finf)] + [float(v) for v in x]
    if len(values) != len(COEFFICIENT_NAMES):
        raise ValueError("expected 5 raw parameters, got {}".format(len(values) - 1))
    return OrderedDict(zip(COEFFICIENT_NAMES, values))


def physical_coefficients(coefficients, press=1.0):
    """
    Expand c1..c6 into the physical (c1', ..., c7') for pressure predictor p.

    Parameters
    ----------
    coefficients : mapping
        c1..c6 as produced by expand_coefficients().
    press : float or numpy.ndarray
        press / 1013.25.

    Returns
    -------
    tuple of 7
    """
    c1 = coefficients["c1"]
    c2 = coefficients["c2"] / press
    c3 = coefficients["c3"] / press
    c4 = (c1 - c2) * coefficients["c4"]
    c5 = coefficients["c5"]
    c6 = (c1 - c2) * (1.0 - coefficients["c4"])
    c7 = coefficients["c6"]
    return c1, c2, c3, c4, c5, c6, c7


class FittedModel:
    """
    Immutable record of an annular fit.

    Created once by fit_annular() and passed by reference into any number
    of predict_annular() calls. Attributes cannot be reassigned after
    construction; coefficients is a read-only mapping and mare_seq and
    warnings are tuples.

    Parameters
    ----------
    coefficients : mapping
        c1..c6.
    mare : float
        Minimum mean absolute relative error reached.
    rmse : float
        Root mean square error of the best fit.
    mare_seq : sequence of float
        MARE of every start, sorted descending.
    convergence : int
        Minimizer status of the best run. 0 = converged; non-zero means
        the iteration budget ran out or the minimizer gave up. Callers
        must inspect it; it is never raised.
    press_dep : bool
        Whether the coefficients c2, c3 scale with pressure.
    press_rng : tuple of 2 float
        (min, max) surface pressure in mbar spanned by the fitted data.
    type : str
        Geometry family tag ("annular").
    nstart : int
        Number of random starts used.
    warnings : sequence of str
        Non-fatal diagnostics raised while fitting.

    Raises
    ------
    ValueError
        If press_dep is not a boolean.
    """

    def __init__(self, coefficients, mare, rmse, mare_seq, convergence,
                 press_dep=False, press_rng=(REF_PRESSURE_MBAR, REF_PRESSURE_MBAR),
                 type="annular", nstart=0, warnings=None):
        # strict: JSON strings such as "false" are rejected
        if not isinstance(press_dep, (bool, np.bool_)):
            raise ValueError(
                "press_dep must be a boolean, got {!r}".format(press_dep))
        fields = {
            "type": type,
            "coefficients": MappingProxyType(OrderedDict(
                (name, float(coefficients[name])) for name in COEFFICIENT_NAMES)),
            "mare": float(mare),
            "rmse": float(rmse),
            "mare_seq": tuple(float(v) for v in mare_seq),
            "convergence": int(convergence),
            "press_dep": bool(press_dep),
            "press_rng": (float(press_rng[0]), float(press_rng[1])),
            "nstart": int(nstart),
            "warnings": tuple(warnings or ()),
        }
        for name, value in fields.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError("FittedModel is immutable; cannot set '{}'".format(name))

    def __delattr__(self, name):
        raise AttributeError("FittedModel is immutable; cannot delete '{}'".format(name))

    @property
    def converged(self):
        return self.convergence == 0

    def physical(self, press=REF_PRESSURE_MBAR):
        """Physical coefficients (c1', ..., c7') at surface pressure press (mbar)."""
        return physical_coefficients(self.coefficients, press / REF_PRESSURE_MBAR)

    def to_dict(self):
        """Serialize for JSON responses."""
        return {
            "type": self.type,
            "coefficients": dict(self.coefficients),
            "mare": self.mare,
            "rmse": self.rmse,
            "mare_seq": list(self.mare_seq),
            "convergence": self.convergence,
            "press_dep": self.press_dep,
            "press_rng": list(self.press_rng),
            "nstart": self.nstart,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data):
        """Rebuild a model from to_dict() output."""
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            raise ValueError("fit must be a dict")
        coefficients = data.get("coefficients")
        if not isinstance(coefficients, dict):
            raise ValueError("fit is missing 'coefficients'")
        for name in COEFFICIENT_NAMES:
            if name not in coefficients:
                raise ValueError("fit coefficients are missing '{}'".format(name))
        try:
            return cls(
                coefficients=coefficients,
                mare=data.get("mare", float("nan")),
                rmse=data.get("rmse", float("nan")),
                mare_seq=data.get("mare_seq", []),
                convergence=data.get("convergence", 0),
                press_dep=data.get("press_dep", False),
                press_rng=data.get("press_rng", (REF_PRESSURE_MBAR, REF_PRESSURE_MBAR)),
                type=data.get("type", "annular"),
                nstart=data.get("nstart", 0),
                warnings=data.get("warnings"),
            )
        except (TypeError, IndexError) as e:
            raise ValueError("invalid fit: {}".format(e))

    def __repr__(self):
        coefs = ", ".join("{}={:.6g}".format(k, v) for k, v in self.coefficients.items())
        return "FittedModel(type={!r}, {}, mare={:.4g}, press_dep={})".format(
            self.type, coefs, self.mare, self.press_dep)
