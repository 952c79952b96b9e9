"""
Multi-start derivative-free minimization.

The objective surface of the exponential decomposition is smooth but not
convex, so a single Nelder-Mead run easily stalls in a poor basin. The
optimizer runs one fixed start plus `nstart` random starts and keeps the
best. Random starts are U[0,1]^5 multiplied by the sign pattern
(+, -, +, -, -): amplitudes positive, rates negative.

The minimizer is injected. Any callable with the signature

    minimizer(fun, x0, args, maxit) -> object with .x, .fun, .status

works; `nelder_mead` (scipy) is the default.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import logging

import numpy as np
from scipy.optimize import minimize

from apsf.constants import FIRST_START, START_SIGNS, MAXIT

log = logging.getLogger(__name__)


def nelder_mead(fun, x0, args=(), maxit=MAXIT):
    """Single Nelder-Mead run capped at `maxit` iterations and evaluations."""
    return minimize(fun, x0, args=args, method="Nelder-Mead",
                    options={"maxiter": maxit, "maxfev": maxit})


class MultiStartResult:
    """
    Outcome of a multi-start search.

    Parameters
    ----------
    x : numpy.ndarray
        Parameters of the best run.
    fun : float
        Objective value of the best run.
    status : int
        Minimizer status of the best run (0 = converged).
    values : list of float
        Minimum reached by every run, sorted descending.
    """

    def __init__(self, x, fun, status, values):
        self.x = x
        self.fun = fun
        self.status = status
        self.values = values

    @property
    def converged(self):
        return self.status == 0


def random_starts(nstart, rng, signs=START_SIGNS):
    """`nstart` starting points drawn U[0,1] and sign-patterned."""
    signs = np.asarray(signs, dtype=float)
    return [rng.uniform(0.0, 1.0, len(signs)) * signs for _ in range(nstart)]


def multistart_minimize(objective, args=(), nstart=10, rng=None,
                        maxit=MAXIT, minimizer=nelder_mead,
                        first_start=FIRST_START):
    """
    Minimize `objective` from the fixed first start and `nstart` random starts.

    Parameters
    ----------
    objective : callable
        objective(x, *args) -> float.
    args : tuple
        Extra arguments for the objective.
    nstart : int
        Number of random starts after the fixed one.
    rng : numpy.random.Generator, optional
        Source of the random starts. Pass a seeded generator for
        reproducible results.
    maxit : int
        Iteration cap of each run. Hitting it is reported in status.
    minimizer : callable
        See module docstring.
    first_start : sequence of float
        Deterministic first start.

    Returns
    -------
    MultiStartResult
    """
    if rng is None:
        rng = np.random.default_rng()

    starts = [np.asarray(first_start, dtype=float)]
    starts.extend(random_starts(nstart, rng, START_SIGNS))

    best = None
    best_value = np.inf
    values = []
    for i, x0 in enumerate(starts):
        res = minimizer(objective, x0, args, maxit)
        value = float(res.fun)
        if np.isnan(value):
            value = np.inf
        values.append(value)
        log.debug("start %d/%d: value=%.6g status=%s", i, len(starts) - 1,
                  value, res.status)
        # strict improvement keeps the earliest of tied runs
        if best is None or value < best_value:
            best = res
            best_value = value

    return MultiStartResult(
        x=np.asarray(best.x, dtype=float),
        fun=best_value,
        status=int(best.status),
        values=sorted(values, reverse=True),
    )
