"""
Numeric differentiation and annulus quadrature.

The cumulative field F(r) of a fitted model is available in closed form,
its radial derivative is taken numerically here. central_gradient() is an
element-wise central difference refined by Richardson extrapolation:

    D(h)  = (f(x + h) - f(x - h)) / (2 h)
    h_k   = h_0 / ratio^k,  k = 0 .. levels-1
    A_m   = (4^m A_(m-1)(h_(k+1)) - A_(m-1)(h_k)) / (4^m - 1)

The initial step is h_0 = |step * x|, or eps where |x| < zero_tol.

IMPORTANT: No unicode characters allowed (Windows charmap constraint).
"""

import math

import numpy as np

# Default threshold below which x is treated as zero for step sizing
ZERO_TOL = math.sqrt(np.finfo(float).eps / 7e-7)


def central_gradient(func, x, step=1e-4, eps=1e-4, zero_tol=ZERO_TOL,
                     levels=4, ratio=2.0):
    """
    Derivative of a vectorized function at every element of x.

    Parameters
    ----------
    func : callable
        func(x_array) -> array of the same shape, element i depending only
        on x_array[i].
    x : array-like
        Evaluation points.
    step : float
        Relative initial step.
    eps : float
        Absolute initial step used where |x| < zero_tol.
    zero_tol : float
        Threshold for the absolute step.
    levels : int
        Number of step halvings for Richardson extrapolation. 1 gives a
        plain central difference.
    ratio : float
        Step reduction factor between levels.

    Returns
    -------
    numpy.ndarray
    """
    x = np.asarray(x, dtype=float)
    if levels < 1:
        raise ValueError("levels must be >= 1")
    h = np.abs(step * x) + eps * (np.abs(x) < zero_tol)

    estimates = []
    for _ in range(levels):
        estimates.append((np.asarray(func(x + h)) - np.asarray(func(x - h))) / (2.0 * h))
        h = h / ratio

    for m in range(1, levels):
        w = 4.0 ** m
        estimates = [(w * estimates[i + 1] - estimates[i]) / (w - 1.0)
                     for i in range(len(estimates) - 1)]
    return estimates[0]


def annulus_quadrature(r, density):
    """
    Trapezoidal integral of an areal density over each annulus.

    Returns pi * (r[i+1]^2 - r[i]^2) * (den[i+1] + den[i]) / 2, one value
    per radius interval (length len(r) - 1).
    """
    r = np.asarray(r, dtype=float)
    density = np.asarray(density, dtype=float)
    return math.pi * np.diff(r * r) * (density[1:] + density[:-1]) / 2.0
