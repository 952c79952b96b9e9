"""
Exponential decomposition of the cumulative annular PSF.

The cumulative integral F(r) of the diffuse PSF rises from 0 at r = 0 to
the total diffuse transmittance finf. It is modelled as finf minus three
decaying exponentials whose amplitudes sum to finf:

    xp1 = x1 / p
    xp2 = x2 / p
    F(r) = finf - ( xp1 * exp(xp2 * r)
                  + (finf - xp1) * x3       * exp(x4 * r)
                  + (finf - xp1) * (1 - x3) * exp(x5 * r) )

with p = press / 1013.25. The first term scales with pressure (molecular
scattering); the other two share the remaining amplitude and are pressure
independent (aerosol-like scattering). finf is fixed to the largest
observed cumulative value and is not optimized.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import numpy as np

from apsf.engine import mare


def annular_estimate(x, r, finf, press=1.0):
    """
    Evaluate the decomposition for raw parameters x at radii r.

    Parameters
    ----------
    x : sequence of 5 float
        Raw parameters (x1..x5).
    r : array-like
        Radii (km).
    finf : float
        Asymptotic cumulative value.
    press : float or array-like
        Pressure predictor press / 1013.25, scalar or one per radius.

    Returns
    -------
    numpy.ndarray
    """
    x1, x2, x3, x4, x5 = x
    r = np.asarray(r, dtype=float)
    press = np.asarray(press, dtype=float)
    xp1 = x1 / press
    xp2 = x2 / press
    rest = finf - xp1
    with np.errstate(over="ignore", invalid="ignore"):
        return finf - (xp1 * np.exp(xp2 * r)
                       + rest * x3 * np.exp(x4 * r)
                       + rest * (1.0 - x3) * np.exp(x5 * r))


def annular_objective(x, ftot, r, finf, press=1.0):
    """MARE of the decomposition against observed cumulative values ftot."""
    return mare(annular_estimate(x, r, finf, press), ftot)
