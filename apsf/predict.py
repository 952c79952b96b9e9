"""
Prediction from a fitted annular model.

predict_annular() evaluates a FittedModel at requested radii as one of:

    cumulative - cumulative PSF F(r), closed form
    density    - areal derivative dF/dA = F'(r) / (2 pi r), numeric F'
    psf        - PSF per annulus, trapezoidal quadrature of the density
                 over consecutive radii (len(r) - 1 values)

Models tagged with another geometry family (e.g. "sectorial") are handed
to the evaluator registered for that tag with a full-circle azimuthal
span, so callers can use one entry point for every family.

Pressure policy: a pressure-dependent model requires press; a request
outside the fitted pressure range (inclusive) is extrapolated and flagged
with exactly one warning per call.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import logging
import math

import numpy as np

from apsf.constants import FULL_CIRCLE, REF_PRESSURE_MBAR
from apsf.errors import (
    MissingParameterError,
    UnsupportedGeometryError,
    UnsupportedKindError,
)
from apsf.model import FittedModel, physical_coefficients
from apsf.numderiv import annulus_quadrature, central_gradient

log = logging.getLogger(__name__)

KINDS = ("cumulative", "density", "psf")

# Names accepted for each kind
KIND_ALIASES = {
    "cumulative": "cumulative",
    "cpsf": "cumulative",
    "cumpsf": "cumulative",
    "density": "density",
    "dpsf": "density",
    "psf": "psf",
}


class Prediction:
    """Predicted values plus the non-fatal diagnostics of the call."""

    def __init__(self, values, kind, warnings=None):
        self.values = values
        self.kind = kind
        self.warnings = list(warnings or [])

    def to_dict(self):
        """Serialize; non-finite values become None (JSON has no NaN)."""
        return {
            "kind": self.kind,
            "values": [float(v) if math.isfinite(v) else None
                       for v in np.asarray(self.values, dtype=float).tolist()],
            "warnings": list(self.warnings),
        }


class GeometryRegistry:
    """
    Lookup of prediction evaluators for non-annular geometry families.

    An evaluator is called as

        evaluator(r, a=2*pi, fit=fit, kind=kind, tpred=tpred) -> array

    where a is the azimuthal span of the sector.
    """

    def __init__(self):
        self._evaluators = {}

    def register(self, tag, evaluator):
        if tag == "annular":
            raise ValueError("'annular' is evaluated by predict_annular itself")
        self._evaluators[tag] = evaluator

    def unregister(self, tag):
        self._evaluators.pop(tag, None)

    def get(self, tag):
        return self._evaluators.get(tag)

    def tags(self):
        return sorted(self._evaluators)


GEOMETRIES = GeometryRegistry()


def register_geometry(tag, evaluator):
    """Register the evaluator used for models whose type is `tag`."""
    GEOMETRIES.register(tag, evaluator)


# ---------------------------------------------------------------------------
# Evaluators (press already normalized by the reference pressure)
# ---------------------------------------------------------------------------

def pred_annular_cum(r, press, fit):
    """Cumulative PSF at r. NaN (numeric breakdown) is reported as 0."""
    c1, c2, c3, c4, c5, c6, c7 = physical_coefficients(fit.coefficients, press)
    r = np.asarray(r, dtype=float)
    with np.errstate(over="ignore", invalid="ignore"):
        res = c1 - (c2 * np.exp(c3 * r) + c4 * np.exp(c5 * r) + c6 * np.exp(c7 * r))
    res = np.array(res, dtype=float, ndmin=1)
    res[np.isnan(res)] = 0.0
    return res


def pred_annular_den(r, press, fit):
    """
    Areal density dF/dA at r.

    Not finite at r = 0 (division by 2 pi r); callers needing the origin
    must handle it, as pred_annular_psf() does.
    """
    r = np.asarray(r, dtype=float)
    grad = central_gradient(lambda x: pred_annular_cum(x, press, fit), r)
    with np.errstate(divide="ignore", invalid="ignore"):
        return grad / (2.0 * math.pi * r)


def pred_annular_psf(r, press, fit):
    """
    PSF integrated over each annulus [r[i], r[i+1]]; r must be sorted.

    If r[0] == 0 the first annulus is the disk around the origin, where
    the density estimate degenerates; its value is taken directly from
    the cumulative field at r[1].
    """
    r = np.asarray(r, dtype=float)
    den = pred_annular_den(r, press, fit)
    with np.errstate(invalid="ignore"):
        psf = annulus_quadrature(r, den)
    if len(r) > 1 and r[0] == 0:
        p1 = press[1] if np.ndim(press) else press
        psf[0] = pred_annular_cum(r[1], p1, fit)[0]
    return psf


_EVALUATORS = {
    "cumulative": pred_annular_cum,
    "density": pred_annular_den,
    "psf": pred_annular_psf,
}


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _resolve_kind(kind):
    resolved = KIND_ALIASES.get(kind) if isinstance(kind, str) else None
    if resolved is None:
        raise UnsupportedKindError(
            "kind must be one of 'cumulative', 'density' or 'psf', got {!r}".format(kind))
    return resolved


def _resolve_pressure(fit, press, warnings):
    """Apply the pressure policy; returns press normalized by 1013.25."""
    if press is None:
        if fit.press_dep:
            raise MissingParameterError(
                "'press' not specified for model fitted with pressure dependency")
        press = REF_PRESSURE_MBAR

    press = np.asarray(press, dtype=float)
    if fit.press_dep:
        lo, hi = fit.press_rng
        if np.any((press < lo) | (press > hi)):
            msg = "Requested pressure beyond model domain of {} to {} mbar".format(lo, hi)
            warnings.append(msg)
            log.warning(msg)

    press = press / REF_PRESSURE_MBAR
    return float(press) if press.ndim == 0 else press


def predict_annular_traced(r, fit, kind="psf", press=None, tpred=None):
    """
    Evaluate a fitted model and return the values with their diagnostics.

    Parameters
    ----------
    r : float or array-like
        Radii (km). Sorted ascending for kind 'psf'.
    fit : FittedModel or dict
        Model from fit_annular(), or its to_dict() form.
    kind : str
        'cumulative', 'density' or 'psf' (aliases 'cpsf', 'cumpsf', 'dpsf').
    press : float or array-like, optional
        Surface pressure in mbar. Required for pressure-dependent models.
    tpred : optional
        Third predictor, forwarded to non-annular geometry evaluators.

    Returns
    -------
    Prediction

    Raises
    ------
    UnsupportedKindError, MissingParameterError, UnsupportedGeometryError
    """
    fit = FittedModel.from_dict(fit)
    kind = _resolve_kind(kind)
    warnings = []

    if fit.type != "annular":
        evaluator = GEOMETRIES.get(fit.type)
        if evaluator is None:
            raise UnsupportedGeometryError(
                "no evaluator registered for model type {!r}".format(fit.type))
        values = evaluator(r, a=FULL_CIRCLE, fit=fit, kind=kind, tpred=tpred)
        return Prediction(np.asarray(values, dtype=float), kind, warnings)

    press = _resolve_pressure(fit, press, warnings)
    r = np.atleast_1d(np.asarray(r, dtype=float))

    if kind == "psf":
        order = np.argsort(r, kind="stable")
        r = r[order]
        if np.ndim(press) and np.size(press) == len(r):
            press = press[order]

    values = _EVALUATORS[kind](r, press, fit)
    return Prediction(values, kind, warnings)


def predict_annular(r, fit, kind="psf", press=None, tpred=None, warnings=None):
    """
    Evaluate a fitted model; see predict_annular_traced() for the arguments.

    Non-fatal diagnostics (pressure extrapolation) are appended to the
    `warnings` list when one is supplied.

    Returns
    -------
    numpy.ndarray
    """
    pred = predict_annular_traced(r, fit, kind=kind, press=press, tpred=tpred)
    if warnings is not None:
        warnings.extend(pred.warnings)
    return pred.values
