"""
Annular APSF fit: histograms -> FittedModel.

Pipeline:
    histograms -> normalize (copies) -> consistency check (pressure mode)
               -> cumulative integrals (r = 0 dropped, stacked)
               -> multi-start Nelder-Mead on the MARE of the decomposition
               -> coefficient expansion -> FittedModel

If several histograms are passed with press=True they must be simulations
of the same scatter at different surface pressures; normalization is then
forced on. Without press only the first histogram is fitted.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import logging

import numpy as np

from apsf.constants import REF_PRESSURE_MBAR
from apsf.engine import FitConfig, compute_fit_metrics
from apsf.histogram import (
    Histogram,
    check_consistency,
    normalize_histograms,
    pressures,
    stack_cumulative,
)
from apsf.model import FittedModel, expand_coefficients
from apsf.objective import annular_estimate, annular_objective
from apsf.optimizer import multistart_minimize, nelder_mead

log = logging.getLogger(__name__)

SINGLE_HISTOGRAM_WARNING = (
    "multiple histograms expected for a pressure-dependent fit but only one "
    "was supplied; fitting it alone")
FIRST_ONLY_WARNING = (
    "{} histograms supplied but pressure dependence is disabled; only the "
    "first histogram is used")


def _prepare(psfl, config, warnings):
    """Apply the histogram-count policy and normalization. Returns copies."""
    if isinstance(psfl, (Histogram, dict)):
        psfl = [psfl]
    hists = [Histogram.from_dict(h) for h in psfl]
    if not hists:
        raise ValueError("at least one histogram is required")

    norm = config.norm
    if config.press:
        if len(hists) == 1:
            warnings.append(SINGLE_HISTOGRAM_WARNING)
        else:
            if not norm:
                log.info("normalization forced on for a pressure-dependent fit")
            norm = True
            check_consistency(hists)
    elif len(hists) > 1:
        warnings.append(FIRST_ONLY_WARNING.format(len(hists)))
        hists = hists[:1]

    return normalize_histograms(hists, norm)


def fit_annular(psfl, press=False, norm=True, nstart=10, seed=None,
                maxit=None, minimizer=nelder_mead, config=None):
    """
    Fit the exponential decomposition to the cumulative annular PSF.

    Parameters
    ----------
    psfl : list of Histogram or dict
        Simulation histograms. More than one only makes sense with press.
    press : bool
        Fit pressure dependence across the histograms (each must carry
        metadata['press'] in mbar).
    norm : bool
        Normalize each histogram to unit total weight.
    nstart : int
        Number of random starts after the fixed first start.
    seed : int or None
        Seed of the random starts. Fix it for reproducible fits.
    maxit : int, optional
        Iteration cap per run (default apsf.constants.MAXIT).
    minimizer : callable
        Derivative-free minimizer, see apsf.optimizer.
    config : FitConfig, optional
        Overrides press, norm, nstart, seed and maxit when given.

    Returns
    -------
    FittedModel

    Raises
    ------
    ConfigurationError
        Pressure mode with histograms differing in res, ext, snsznt,
        snsfov or snspos.
    MissingParameterError
        Pressure mode with a histogram lacking metadata['press'].
    """
    if config is None:
        kwargs = {} if maxit is None else {"maxit": maxit}
        config = FitConfig(press=press, norm=norm, nstart=nstart, seed=seed,
                           **kwargs)

    warnings = []
    hists = _prepare(psfl, config, warnings)
    for w in warnings:
        log.warning(w)

    r, ftot, p = stack_cumulative(hists, press=config.press)
    finf = float(np.max(ftot))

    result = multistart_minimize(
        annular_objective,
        args=(ftot, r, finf, p),
        nstart=config.nstart,
        rng=config.rng(),
        maxit=config.maxit,
        minimizer=minimizer,
    )
    if not result.converged:
        log.info("best start did not converge (status %d)", result.status)

    est = annular_estimate(result.x, r, finf, p)
    metrics = compute_fit_metrics(est, ftot)

    if config.press:
        press_mbar = pressures(hists)
        press_rng = (min(press_mbar), max(press_mbar))
    else:
        press_rng = (REF_PRESSURE_MBAR, REF_PRESSURE_MBAR)

    fit = FittedModel(
        coefficients=expand_coefficients(result.x, finf),
        mare=result.fun,
        rmse=metrics["rmse"],
        mare_seq=result.values,
        convergence=result.status,
        press_dep=config.press,
        press_rng=press_rng,
        nstart=config.nstart,
        warnings=warnings,
    )
    log.info("annular fit: mare=%.4g rmse=%.4g n_obs=%d starts=%d",
             fit.mare, fit.rmse, metrics["n_obs"], config.nstart + 1)
    return fit
