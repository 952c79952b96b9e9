"""
Shared fit infrastructure: configuration and fit-quality metrics.

ARCHITECTURE RULE: This module holds ONLY configuration and the metric
functions every fitting path shares. The model itself lives in
apsf.objective, the search in apsf.optimizer, orchestration in apsf.fit.

This module provides:
    FitConfig           - Parameters of one annular fit
    mare                - Mean absolute relative error (the fit objective)
    rmse                - Root mean square error (reported alongside)
    compute_fit_metrics - Both metrics for an estimate/observation pair

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import numpy as np

from apsf.constants import DEFAULT_NSTART, MAX_NSTART, MAXIT


class FitConfig:
    """
    Parameters of one annular fit.

    Parameters
    ----------
    press : bool
        Fit a pressure-dependent model across the supplied histograms.
    norm : bool
        Normalize every histogram to unit total weight before fitting.
        Forced on when several histograms are fitted with pressure.
    nstart : int
        Number of random starts in addition to the fixed first start.
        Clamped to [0, 1000].
    maxit : int
        Iteration and function evaluation cap of each minimizer run.
    seed : int or None
        Seed of the random start generator. Results are reproducible only
        with a fixed seed; None draws fresh entropy.
    """

    def __init__(self, press=False, norm=True, nstart=DEFAULT_NSTART,
                 maxit=MAXIT, seed=None):
        self.press = bool(press)
        self.norm = bool(norm)
        # Enforce bounds on nstart
        self.nstart = max(0, min(int(nstart), MAX_NSTART))
        self.maxit = max(1, int(maxit))
        self.seed = None if seed is None else int(seed)

    def rng(self):
        """Random generator for the optimizer starts."""
        return np.random.default_rng(self.seed)

    def to_dict(self):
        """Serialize config for inclusion in verbose output."""
        return {
            "press": self.press,
            "norm": self.norm,
            "nstart": self.nstart,
            "maxit": self.maxit,
            "seed": self.seed,
        }


def mare(estimate, observed):
    """
    Mean absolute relative error |est - obs| / obs.

    Samples where the ratio is undefined (obs == 0, NaN) are ignored. If
    no sample is usable the error is +inf.
    """
    estimate = np.asarray(estimate, dtype=float)
    observed = np.asarray(observed, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = np.abs(estimate - observed) / observed
    # obs == 0 gives inf or nan; both are excluded, overflow in est is not
    usable = (observed != 0) & ~np.isnan(ratio)
    if not np.any(usable):
        return float("inf")
    return float(np.mean(ratio[usable]))


def rmse(estimate, observed):
    """Root mean square error over samples where the residual is defined."""
    resid = np.asarray(estimate, dtype=float) - np.asarray(observed, dtype=float)
    resid = resid[~np.isnan(resid)]
    if len(resid) == 0:
        return float("nan")
    return float(np.sqrt(np.mean(resid * resid)))


def compute_fit_metrics(estimate, observed):
    """
    Fit quality of a model estimate against observed cumulative values.

    Returns
    -------
    dict
        {'mare': float, 'rmse': float, 'n_obs': int}
    """
    return {
        "mare": mare(estimate, observed),
        "rmse": rmse(estimate, observed),
        "n_obs": int(len(np.asarray(observed))),
    }
