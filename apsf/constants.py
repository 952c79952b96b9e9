"""
Constants shared by the APSF fitting and prediction engine.

IMPORTANT: No unicode characters allowed in this file (Windows charmap constraint).
"""

import math

# Reference surface pressure (standard atmosphere)
REF_PRESSURE_MBAR = 1013.25  # mbar

# Deterministic first start of the multi-start optimizer.
# Order: (c2, c3, c4, c5, c6) = fast amplitude, fast rate, slow split,
# first slow rate, second slow rate.
FIRST_START = (0.05, -0.14, 0.23, -0.32, -0.05)

# Sign pattern applied to U[0,1] random starts: rates are decays.
START_SIGNS = (1.0, -1.0, 1.0, -1.0, -1.0)

# Iteration (and function evaluation) cap for a single minimizer run
MAXIT = 1000000

# Number of random starts used when the caller does not say
DEFAULT_NSTART = 10

# Bounds on the number of random starts
MAX_NSTART = 1000

# Metadata keys that must agree across a pressure-dependent simulation set
CONSISTENCY_KEYS = ("res", "ext", "snsznt", "snsfov", "snspos")

# Metadata key carrying the surface pressure of a simulation (mbar)
PRESSURE_KEY = "press"

# Full-circle azimuthal span handed to non-annular geometry evaluators
FULL_CIRCLE = 2.0 * math.pi
